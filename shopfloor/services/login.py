"""Operator login against the machines-for-user procedure."""

from sqlalchemy import Unicode

from shopfloor.core.logging import get_logger
from shopfloor.schemas.auth import LoginResponse, Machine
from shopfloor.schemas.common import Partition
from shopfloor.services.procedures import BaseProcedureInvoker, pick

logger = get_logger(__name__)

LOGIN_PROCEDURE = "dbo.GetMachinesForUser"


class LoginProcedureMissing(RuntimeError):
    """The partition database lacks the login procedure."""

    def __init__(self, partition: Partition) -> None:
        super().__init__(
            f"Database {partition.value} is not properly configured. "
            f"Missing required stored procedure: {LOGIN_PROCEDURE}"
        )
        self.partition = partition


async def _diagnose(invoker: BaseProcedureInvoker, partition: Partition) -> tuple[str | None, bool | None]:
    """Report the connected database and whether the login procedure exists.

    Diagnostics are best effort: a failing lookup yields (None, None).
    """
    try:
        current_db = await invoker.current_database(partition)
        exists = await invoker.procedure_exists(partition, LOGIN_PROCEDURE)
    except Exception as e:
        logger.bind(partition=partition.value, error=str(e)).warning("login_diagnostics_failed")
        return None, None
    logger.bind(partition=partition.value, current_db=current_db, procedure_exists=exists).debug(
        "login_diagnostics"
    )
    return current_db, exists


async def login(invoker: BaseProcedureInvoker, username: str, partition: Partition) -> LoginResponse:
    """
    Resolve an operator's machines on a partition.

    Args:
        invoker: Procedure invoker
        username: Trimmed, non-empty user name
        partition: Database partition to log in against

    Returns:
        LoginResponse; `status` is False when the user has no machines

    Raises:
        LoginProcedureMissing: If diagnostics show the procedure is absent
    """
    current_db, exists = await _diagnose(invoker, partition)
    if exists is False:
        raise LoginProcedureMissing(partition)

    result = await invoker.execute(
        partition,
        LOGIN_PROCEDURE,
        {"UserName": username},
        {"UserName": Unicode(255)},
    )
    rows = result.rows

    machines = [
        Machine(
            machine_id=pick(row, "machineid"),
            machine_name=pick(row, "machinename"),
            department_id=pick(row, "departmentid"),
            product_unit_id=pick(row, "productunitid"),
        )
        for row in rows
    ]

    log = logger.bind(partition=partition.value, username=username, current_db=current_db)
    if not machines:
        log.info("login_no_machines")
        return LoginResponse(
            status=False,
            error="No machines found for this user in selected database",
            selected_database=partition,
            current_db=current_db,
        )

    first = rows[0]
    response = LoginResponse(
        status=True,
        user_id=pick(first, "UserID"),
        ledger_id=pick(first, "LedgerID"),
        machines=machines,
        selected_database=partition,
        current_db=current_db,
    )
    log.bind(user_id=response.user_id, machine_count=len(machines)).info("login_succeeded")
    return response
