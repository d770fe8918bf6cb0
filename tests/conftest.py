"""
Pytest configuration and fixtures for Shopfloor Gateway tests.

Provides:
- A scriptable fake procedure invoker
- A controllable clock and job manager
- Test client for API testing
"""

import asyncio
from collections.abc import AsyncGenerator, Callable, Mapping
from dataclasses import dataclass
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from shopfloor.config import Settings, get_settings
from shopfloor.main import app
from shopfloor.schemas.common import Partition
from shopfloor.services.jobs import InMemoryJobStore, JobExecutor, JobManager, get_job_manager
from shopfloor.services.procedures import BaseProcedureInvoker, ProcedureResult, get_procedure_invoker

Response = list[dict[str, Any]] | Exception | Callable[[Mapping[str, Any]], list[dict[str, Any]]]


# Override settings for testing
class TestSettings(Settings):
    db_name_kol: str = "ERP_KOL"
    db_name_ahm: str = "ERP_AHM"
    scheduler_enabled: bool = False
    sync_procedure_timeout_seconds: float = 5.0
    job_retention_seconds: float = 300.0


@dataclass
class ProcedureCall:
    """One call recorded by the fake invoker."""

    partition: Partition
    procedure: str
    params: dict[str, Any]
    types: dict[str, Any] | None


class FakeProcedureInvoker(BaseProcedureInvoker):
    """
    In-memory stand-in for the SQL Server invoker.

    `responses` maps a procedure name (or query text) to rows, an exception, or a
    callable receiving the params. Unknown procedures return no rows.
    Setting `gate` holds every call until the event is set.
    """

    def __init__(self) -> None:
        self.responses: dict[str, Response] = {}
        self.calls: list[ProcedureCall] = []
        self.gate: asyncio.Event | None = None
        self.current_db: str | None = "ERP_KOL"
        self.missing_procedures: set[str] = set()
        self.diagnostics_error: Exception | None = None

    async def execute(
        self,
        partition: Partition,
        procedure: str,
        params: Mapping[str, Any],
        types: Mapping[str, Any] | None = None,
    ) -> ProcedureResult:
        self.calls.append(ProcedureCall(partition, procedure, dict(params), dict(types) if types else None))
        if self.gate is not None:
            await self.gate.wait()

        response = self.responses.get(procedure, [])
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(params)
        return ProcedureResult(rows=[dict(row) for row in response], rows_affected=len(response))

    async def query(
        self,
        partition: Partition,
        statement: str,
        params: Mapping[str, Any] | None = None,
    ) -> ProcedureResult:
        return await self.execute(partition, statement, params or {})

    async def current_database(self, partition: Partition) -> str | None:
        if self.diagnostics_error is not None:
            raise self.diagnostics_error
        return self.current_db

    async def procedure_exists(self, partition: Partition, procedure: str) -> bool:
        if self.diagnostics_error is not None:
            raise self.diagnostics_error
        return procedure not in self.missing_procedures


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def _wait_for_calls(invoker: FakeProcedureInvoker, count: int) -> None:
    """Yield to the event loop until the invoker has seen `count` calls."""
    for _ in range(100):
        if len(invoker.calls) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"expected {count} procedure calls, saw {len(invoker.calls)}")


@pytest.fixture
def invoker() -> FakeProcedureInvoker:
    """Fake procedure invoker with no scripted responses."""
    return FakeProcedureInvoker()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def job_store() -> InMemoryJobStore:
    return InMemoryJobStore()


@pytest.fixture
def job_manager(invoker: FakeProcedureInvoker, job_store: InMemoryJobStore, clock: FakeClock) -> JobManager:
    """Job manager wired to the fake invoker and clock."""
    executor = JobExecutor(invoker, job_store)
    return JobManager(executor, job_store, retention_seconds=300.0, clock=clock)


@pytest_asyncio.fixture
async def client(
    invoker: FakeProcedureInvoker,
    job_manager: JobManager,
) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client with invoker and job manager overrides."""
    from shopfloor.core.rate_limit import limiter

    app.dependency_overrides[get_procedure_invoker] = lambda: invoker
    app.dependency_overrides[get_job_manager] = lambda: job_manager
    app.dependency_overrides[get_settings] = lambda: TestSettings()

    # Reset rate limiter storage before each test
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    if invoker.gate is not None:
        invoker.gate.set()
    await job_manager.shutdown()
    app.dependency_overrides.clear()


@pytest.fixture
def start_body() -> dict[str, Any]:
    """Valid body for start/cancel requests."""
    return {
        "UserID": 1,
        "EmployeeID": 2,
        "ProcessID": 3,
        "JobBookingJobCardContentsID": 4,
        "MachineID": 5,
        "JobCardFormNo": "F100",
        "database": "KOL",
    }


@pytest.fixture
def complete_body(start_body: dict[str, Any]) -> dict[str, Any]:
    """Valid body for complete requests."""
    return {**start_body, "ProductionQty": 500, "WastageQty": 12}


@pytest.fixture
def wait_for_calls(invoker: FakeProcedureInvoker) -> Callable[[int], Any]:
    """Await until the fake invoker has received a number of calls."""

    async def _wait(count: int) -> None:
        await _wait_for_calls(invoker, count)

    return _wait
