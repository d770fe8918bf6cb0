"""
Machine schedule maintenance.

Lists machines, reads a machine's schedule and rewrites it: reordering
jobs on one machine or moving jobs to another. Both writes end with the
procedures refreshing the automatic schedule themselves.
"""

import json

from sqlalchemy import Integer, UnicodeText

from shopfloor.core.logging import get_logger
from shopfloor.schemas.common import Partition
from shopfloor.schemas.schedule import ScheduleMachine
from shopfloor.services.procedures import BaseProcedureInvoker, Row, pick

logger = get_logger(__name__)

MACHINE_LIST_QUERY = (
    "SELECT MachineID AS machineId, MachineName AS machineName "
    "FROM dbo.MachineMaster "
    "WHERE IsDeletedTransaction = 0 "
    "ORDER BY MachineName"
)
SCHEDULE_PROCEDURE = "dbo.GetMachineScheduleData"
REORDER_PROCEDURE = "dbo.usp_UpdateMachineJobSequence"
CHANGE_MACHINE_PROCEDURE = "dbo.usp_ChangeJobMachine"


async def list_machines(invoker: BaseProcedureInvoker, partition: Partition) -> list[ScheduleMachine]:
    """Active machines ordered by name."""
    result = await invoker.query(partition, MACHINE_LIST_QUERY)
    machines = []
    for row in result.rows:
        name = pick(row, "machineName")
        machines.append(
            ScheduleMachine(machine_id=pick(row, "machineId"), machine_name="" if name is None else str(name))
        )
    return machines


async def machine_schedule(invoker: BaseProcedureInvoker, partition: Partition, machine_id: int) -> list[Row]:
    """Schedule rows for a machine, every column passed through."""
    result = await invoker.execute(
        partition,
        SCHEDULE_PROCEDURE,
        {"MachineID": machine_id},
        {"MachineID": Integer()},
    )
    logger.bind(partition=partition.value, machine_id=machine_id, row_count=len(result.rows)).debug(
        "machine_schedule_loaded"
    )
    return result.rows


async def reorder_jobs(
    invoker: BaseProcedureInvoker,
    partition: Partition,
    machine_id: int,
    ordered_job_ids: list[int],
) -> None:
    """
    Save a new job order for a machine.

    The procedure takes the order as a JSON array of `{id, pos}` objects
    with 1-based positions.
    """
    ordered = json.dumps(
        [{"id": job_id, "pos": position} for position, job_id in enumerate(ordered_job_ids, start=1)],
        separators=(",", ":"),
    )
    await invoker.execute(
        partition,
        REORDER_PROCEDURE,
        {"MachineID": machine_id, "OrderedJobsJSON": ordered},
        {"MachineID": Integer(), "OrderedJobsJSON": UnicodeText()},
    )
    logger.bind(partition=partition.value, machine_id=machine_id, job_count=len(ordered_job_ids)).info(
        "schedule_reordered"
    )


async def change_machine(
    invoker: BaseProcedureInvoker,
    partition: Partition,
    source_machine_id: int,
    target_machine_id: int,
    job_ids: list[int],
) -> None:
    """Move job card contents from one machine's schedule to another's."""
    await invoker.execute(
        partition,
        CHANGE_MACHINE_PROCEDURE,
        {
            "SourceMachineID": source_machine_id,
            "TargetMachineID": target_machine_id,
            "JobIdsJSON": json.dumps(job_ids, separators=(",", ":")),
        },
        {"SourceMachineID": Integer(), "TargetMachineID": Integer(), "JobIdsJSON": UnicodeText()},
    )
    logger.bind(
        partition=partition.value,
        source_machine_id=source_machine_id,
        target_machine_id=target_machine_id,
        job_count=len(job_ids),
    ).info("jobs_moved_to_machine")
