"""Stored procedure invocation against a partition database."""

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.types import TypeEngine

from shopfloor.core.database import get_engine
from shopfloor.core.logging import get_logger
from shopfloor.schemas.common import Partition

logger = get_logger(__name__)

# Schema-qualified identifiers only (e.g. dbo.Production_Start_Manu)
_PROCEDURE_NAME = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)?$")
_PARAM_NAME = re.compile(r"^[A-Za-z_]\w*$")

Row = dict[str, Any]


def pick(row: Row, *names: str) -> Any | None:
    """
    Return the first non-null value among candidate column names.

    Column casing differs between procedures and deployments, so names
    are compared case-insensitively.
    """
    lowered = {column.lower(): value for column, value in row.items()}
    for name in names:
        value = lowered.get(name.lower())
        if value is not None:
            return value
    return None


@dataclass
class ProcedureResult:
    """Rows and metadata returned by one procedure call."""

    rows: list[Row] = field(default_factory=list)
    rows_affected: int = -1
    return_value: int | None = None


def build_exec_statement(
    procedure: str,
    params: Mapping[str, Any],
    types: Mapping[str, TypeEngine[Any]] | None = None,
) -> TextClause:
    """
    Build an `EXEC` statement with one bound parameter per named input.

    Names are interpolated into SQL, so both the procedure and every
    parameter name must be plain identifiers. Values are always bound.

    Raises:
        ValueError: If the procedure or a parameter name is not an identifier
    """
    if not _PROCEDURE_NAME.match(procedure):
        raise ValueError(f"Invalid procedure name: {procedure!r}")
    for name in params:
        if not _PARAM_NAME.match(name):
            raise ValueError(f"Invalid parameter name: {name!r}")

    assignments = ", ".join(f"@{name} = :{name}" for name in params)
    statement = text(f"EXEC {procedure} {assignments}".rstrip())
    typed = [bindparam(name, type_=sql_type) for name, sql_type in (types or {}).items() if name in params]
    if typed:
        statement = statement.bindparams(*typed)
    return statement


class BaseProcedureInvoker(ABC):
    """Executes named database operations on a partition."""

    @abstractmethod
    async def execute(
        self,
        partition: Partition,
        procedure: str,
        params: Mapping[str, Any],
        types: Mapping[str, TypeEngine[Any]] | None = None,
    ) -> ProcedureResult:
        """
        Execute a stored procedure and collect its first result set.

        Args:
            partition: Database partition to run against
            procedure: Schema-qualified procedure name
            params: Input values keyed by parameter name (without "@")
            types: Optional SQL type per parameter

        Returns:
            ProcedureResult with rows as column -> value mappings
        """
        pass

    @abstractmethod
    async def query(
        self,
        partition: Partition,
        statement: str,
        params: Mapping[str, Any] | None = None,
    ) -> ProcedureResult:
        """Run a fixed read-only statement with bound parameters."""
        pass

    @abstractmethod
    async def current_database(self, partition: Partition) -> str | None:
        """Return the database name the partition connection lands on."""
        pass

    @abstractmethod
    async def procedure_exists(self, partition: Partition, procedure: str) -> bool:
        """Check whether a stored procedure is defined on the partition."""
        pass


class SqlProcedureInvoker(BaseProcedureInvoker):
    """Procedure invoker backed by the per-partition SQLAlchemy engines."""

    async def execute(
        self,
        partition: Partition,
        procedure: str,
        params: Mapping[str, Any],
        types: Mapping[str, TypeEngine[Any]] | None = None,
    ) -> ProcedureResult:
        statement = build_exec_statement(procedure, params, types)
        engine = get_engine(partition)

        async with engine.begin() as conn:
            result = await conn.execute(statement, dict(params))
            rows = [dict(row) for row in result.mappings().all()] if result.returns_rows else []
            rows_affected = result.rowcount

        logger.bind(
            partition=partition.value,
            procedure=procedure,
            row_count=len(rows),
            columns=list(rows[0].keys()) if rows else [],
        ).debug("procedure_executed")
        return ProcedureResult(rows=rows, rows_affected=rows_affected)

    async def query(
        self,
        partition: Partition,
        statement: str,
        params: Mapping[str, Any] | None = None,
    ) -> ProcedureResult:
        async with get_engine(partition).connect() as conn:
            result = await conn.execute(text(statement), dict(params or {}))
            rows = [dict(row) for row in result.mappings().all()]
        return ProcedureResult(rows=rows, rows_affected=len(rows))

    async def current_database(self, partition: Partition) -> str | None:
        async with get_engine(partition).connect() as conn:
            result = await conn.execute(text("SELECT DB_NAME() AS currentDb"))
            value = result.scalar()
        return str(value) if value is not None else None

    async def procedure_exists(self, partition: Partition, procedure: str) -> bool:
        async with get_engine(partition).connect() as conn:
            result = await conn.execute(text("SELECT OBJECT_ID(:name) AS spId"), {"name": procedure})
            return result.scalar() is not None


_invoker_instance: BaseProcedureInvoker | None = None


def get_procedure_invoker() -> BaseProcedureInvoker:
    """Get the shared procedure invoker."""
    global _invoker_instance
    if _invoker_instance is None:
        _invoker_instance = SqlProcedureInvoker()
    return _invoker_instance
