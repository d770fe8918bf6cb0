"""Machine schedule endpoints."""

from fastapi import APIRouter, HTTPException, Query, status

from shopfloor.core.logging import get_logger
from shopfloor.dependencies import Invoker
from shopfloor.schemas.common import Partition
from shopfloor.schemas.schedule import (
    ChangeMachineRequest,
    MachineListResponse,
    MachineScheduleResponse,
    ReorderRequest,
    ScheduleUpdateResponse,
    parse_machine_id,
)
from shopfloor.services.schedule import change_machine, list_machines, machine_schedule, reorder_jobs

logger = get_logger(__name__)

router = APIRouter()


def _partition(database: str) -> Partition:
    try:
        return Partition.parse(database, default=Partition.KOL)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


def _failed(event: str, fallback: str, partition: Partition, error: Exception) -> HTTPException:
    logger.bind(partition=partition.value, error=str(error)).error(event)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(error) or fallback,
    )


@router.get("/schedule/machines", response_model=MachineListResponse)
async def get_schedule_machines(invoker: Invoker, database: str = Query(default="")) -> MachineListResponse:
    """List active machines for the schedule dropdown."""
    partition = _partition(database)
    try:
        machines = await list_machines(invoker, partition)
    except Exception as e:
        raise _failed("schedule_machines_failed", "Failed to fetch machines", partition, e) from e
    return MachineListResponse(machines=machines)


@router.get("/schedule/machine/{machine_id}", response_model=MachineScheduleResponse)
async def get_machine_schedule(
    machine_id: str,
    invoker: Invoker,
    database: str = Query(default=""),
) -> MachineScheduleResponse:
    """
    Get the schedule of one machine.

    Rows carry every column the schedule procedure returns; clients pick
    what to display.
    """
    partition = _partition(database)
    try:
        parsed_id = parse_machine_id(machine_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    try:
        rows = await machine_schedule(invoker, partition, parsed_id)
    except Exception as e:
        raise _failed("machine_schedule_failed", "Failed to fetch schedule", partition, e) from e
    return MachineScheduleResponse(machine_id=parsed_id, rows=rows)


@router.post("/schedule/reorder", response_model=ScheduleUpdateResponse)
async def reorder_schedule(body: ReorderRequest, invoker: Invoker) -> ScheduleUpdateResponse:
    """Save a new job order for a machine and refresh the schedule."""
    try:
        await reorder_jobs(invoker, body.database, body.machine_id, body.ordered_job_ids)
    except Exception as e:
        raise _failed("schedule_reorder_failed", "Failed to save order", body.database, e) from e
    return ScheduleUpdateResponse()


@router.post("/schedule/change-machine", response_model=ScheduleUpdateResponse)
async def change_schedule_machine(body: ChangeMachineRequest, invoker: Invoker) -> ScheduleUpdateResponse:
    """Move jobs to another machine and refresh the schedule."""
    try:
        await change_machine(
            invoker,
            body.database,
            body.source_machine_id,
            body.target_machine_id,
            body.job_ids,
        )
    except Exception as e:
        raise _failed("schedule_change_machine_failed", "Failed to change machine", body.database, e) from e
    return ScheduleUpdateResponse()
