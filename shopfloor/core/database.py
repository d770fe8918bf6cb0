from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from shopfloor.config import Settings, get_settings
from shopfloor.core.logging import get_logger
from shopfloor.schemas.common import Partition

logger = get_logger(__name__)


class PartitionConfigError(RuntimeError):
    """Raised when a partition's database cannot be resolved from settings."""


# One pooled engine per partition, created on first use
_engines: dict[Partition, AsyncEngine] = {}


def _split_server(settings: Settings) -> tuple[str, int | None]:
    """
    Split DB_SERVER into host and port.

    SQL Server tooling accepts "host,port"; an explicit DB_PORT wins.
    """
    host, _, raw_port = settings.db_server.partition(",")
    port = settings.db_port
    if port is None and raw_port.strip():
        try:
            port = int(raw_port)
        except ValueError:
            port = None
    return host.strip(), port


def resolve_database_name(partition: Partition, settings: Settings) -> str:
    """
    Resolve the database name for a partition.

    KOL falls back to DB_NAME and AHM to DB_NAME + "2" so single-name
    deployments keep working. Both partitions resolving to the same
    database is a misconfiguration.
    """
    kol = settings.db_name_kol or settings.db_name
    ahm = settings.db_name_ahm or (f"{settings.db_name}2" if settings.db_name else "")

    name = kol if partition is Partition.KOL else ahm
    if not name:
        raise PartitionConfigError(f"No database name configured for {partition.value}")
    if kol == ahm:
        raise PartitionConfigError(
            f"KOL and AHM databases cannot be the same (both: {kol}). "
            "Configure DB_NAME_KOL and DB_NAME_AHM with different values."
        )
    return name


def build_url(partition: Partition, settings: Settings) -> URL:
    """Build the SQLAlchemy URL for a partition."""
    host, port = _split_server(settings)
    return URL.create(
        "mssql+aioodbc",
        username=settings.db_user or None,
        password=settings.db_password or None,
        host=host,
        port=port,
        database=resolve_database_name(partition, settings),
        query={
            "driver": settings.db_odbc_driver,
            "Encrypt": "yes",
            "TrustServerCertificate": "yes",
        },
    )


def get_engine(partition: Partition) -> AsyncEngine:
    """Return the cached engine for a partition, creating it if needed."""
    engine = _engines.get(partition)
    if engine is not None:
        return engine

    settings = get_settings()
    url = build_url(partition, settings)
    engine = create_async_engine(
        url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=0,
        pool_recycle=1800,
    )
    _engines[partition] = engine
    logger.bind(partition=partition.value, database=url.database, host=url.host).info(
        "database_engine_created"
    )
    return engine


async def dispose_engines() -> None:
    """Close every partition pool (called on shutdown)."""
    for partition, engine in list(_engines.items()):
        await engine.dispose()
        logger.bind(partition=partition.value).info("database_engine_disposed")
    _engines.clear()
