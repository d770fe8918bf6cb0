"""
Production run operations (start, complete, cancel).

Each operation is one stored procedure described by a ProcedureDescriptor,
so the synchronous routes and the background job executor share a single
code path: bind the validated request to typed parameters, execute, and
interpret the rows.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Integer, Unicode
from sqlalchemy.types import TypeEngine

from shopfloor.core.logging import get_logger
from shopfloor.schemas.common import Partition
from shopfloor.schemas.production import ProductionKind, StatusWarning
from shopfloor.services.procedures import BaseProcedureInvoker, Row

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProcedureParam:
    """One named, typed procedure input."""

    name: str
    sql_type: TypeEngine[Any]


@dataclass(frozen=True)
class ProcedureDescriptor:
    """Stored procedure name plus its ordered parameter list."""

    name: str
    params: tuple[ProcedureParam, ...]

    def bind(self, request: Mapping[str, Any]) -> dict[str, Any]:
        """
        Pick this procedure's inputs out of a request payload.

        Raises:
            KeyError: If the request lacks a declared parameter
        """
        missing = [p.name for p in self.params if p.name not in request]
        if missing:
            raise KeyError(f"{self.name} is missing parameters: {', '.join(missing)}")
        return {p.name: request[p.name] for p in self.params}

    @property
    def types(self) -> dict[str, TypeEngine[Any]]:
        return {p.name: p.sql_type for p in self.params}


_RUN_PARAMS = (
    ProcedureParam("UserID", Integer()),
    ProcedureParam("EmployeeID", Integer()),
    ProcedureParam("ProcessID", Integer()),
    ProcedureParam("JobBookingJobCardContentsID", Integer()),
    ProcedureParam("MachineID", Integer()),
    ProcedureParam("JobCardFormNo", Unicode(255)),
)

PRODUCTION_PROCEDURES: dict[ProductionKind, ProcedureDescriptor] = {
    ProductionKind.START: ProcedureDescriptor("dbo.Production_Start_Manu", _RUN_PARAMS),
    ProductionKind.COMPLETE: ProcedureDescriptor(
        "dbo.Production_End_Manu",
        _RUN_PARAMS + (ProcedureParam("ProductionQty", Integer()), ProcedureParam("WastageQty", Integer())),
    ),
    ProductionKind.CANCEL: ProcedureDescriptor("dbo.Production_Cancel_Manu", _RUN_PARAMS),
}


def get_descriptor(kind: ProductionKind) -> ProcedureDescriptor:
    """Look up the procedure for a production kind."""
    return PRODUCTION_PROCEDURES[kind]


@dataclass
class ProductionOutcome:
    """Interpreted result of a production procedure."""

    rows: list[Row] = field(default_factory=list)
    production_id: Any | None = None
    status_warning: StatusWarning | None = None


def check_status_only(rows: list[Row]) -> StatusWarning | None:
    """
    Detect a status-only result set.

    Some procedures report soft failures ("no eligible rows") by returning
    exactly one row with exactly one column named `Status` (any case)
    instead of raising. Only that exact shape counts.
    """
    if len(rows) != 1:
        return None
    row = rows[0]
    if len(row) != 1:
        return None
    column, value = next(iter(row.items()))
    if column.lower() != "status":
        return None
    return StatusWarning(message=f"Status: {value}", status_value=value)


def extract_production_id(rows: list[Row]) -> Any | None:
    """Read ProductionID (any case) from the first row, if present."""
    if not rows:
        return None
    for column, value in rows[0].items():
        if column.lower() == "productionid":
            return value
    return None


async def run_production_procedure(
    invoker: BaseProcedureInvoker,
    kind: ProductionKind,
    request: Mapping[str, Any],
    partition: Partition,
) -> ProductionOutcome:
    """
    Execute the procedure for a production kind and interpret its rows.

    Args:
        invoker: Procedure invoker to run against
        kind: Start, complete or cancel
        request: Validated inputs keyed by parameter name
        partition: Target database partition

    Returns:
        ProductionOutcome with rows, the derived production id (start only)
        and a status warning for status-only results
    """
    descriptor = get_descriptor(kind)
    params = descriptor.bind(request)

    logger.bind(kind=kind.value, partition=partition.value, procedure=descriptor.name, params=params).info(
        "production_procedure_started"
    )
    result = await invoker.execute(partition, descriptor.name, params, descriptor.types)

    rows = result.rows
    outcome = ProductionOutcome(
        rows=rows,
        production_id=extract_production_id(rows) if kind is ProductionKind.START else None,
        status_warning=check_status_only(rows),
    )

    log = logger.bind(
        kind=kind.value,
        partition=partition.value,
        procedure=descriptor.name,
        row_count=len(rows),
        rows_affected=result.rows_affected,
    )
    if outcome.status_warning:
        log.bind(status_value=outcome.status_warning.status_value).warning("production_status_warning")
    else:
        log.info("production_procedure_completed")
    return outcome
