"""Pending production processes for a machine and job card."""

from typing import Any

from sqlalchemy import Integer, Unicode

from shopfloor.core.logging import get_logger
from shopfloor.schemas.common import Partition
from shopfloor.schemas.processes import PendingProcess, PendingProcessesResponse
from shopfloor.services.procedures import BaseProcedureInvoker, Row, pick

logger = get_logger(__name__)

PENDING_PROCEDURE = "dbo.GetPendingProcesses_ForMachineAndContent"
FIND_JOB_CARDS_PROCEDURE = "dbo.FindJobCardsByPartialNumber"

_JOB_CARD_COLUMNS = ("JobCardContentNo", "JobCardNumber", "Number", "JobCardNo")


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def to_pending_process(row: Row) -> PendingProcess:
    """Map a procedure row to the API shape."""
    return PendingProcess(
        pwo_no=pick(row, "PWOno"),
        pwo_date=pick(row, "PWODate"),
        client=pick(row, "Client"),
        job_name=pick(row, "JobName"),
        component_name=pick(row, "ComponentName"),
        form_no=pick(row, "FormNo"),
        schedule_qty=pick(row, "ScheduleQty"),
        qty_produced=pick(row, "QtyProduced"),
        paper_issued_qty=pick(row, "PaperIssuedQty"),
        current_status=pick(row, "CurrentStatus"),
        jobcard_content_no=pick(row, "JobCardContentNo"),
        job_booking_jobcard_contents_id=_as_int(pick(row, "JobBookingJobCardContentsID")),
        process_name=pick(row, "ProcessName"),
        process_id=_as_int(pick(row, "ProcessID")),
    )


async def _pending_for_content(
    invoker: BaseProcedureInvoker,
    partition: Partition,
    user_id: int,
    machine_id: int,
    job_card_content_no: str,
) -> list[Row]:
    result = await invoker.execute(
        partition,
        PENDING_PROCEDURE,
        {"UserID": user_id, "MachineID": machine_id, "JobCardContentNo": job_card_content_no},
        {"UserID": Integer(), "MachineID": Integer(), "JobCardContentNo": Unicode(255)},
    )
    return result.rows


async def find_pending_processes(
    invoker: BaseProcedureInvoker,
    partition: Partition,
    user_id: int,
    machine_id: int,
    job_card_content_no: str,
    manual_entry: bool = False,
) -> PendingProcessesResponse:
    """
    Look up processes waiting on a machine for a job card.

    A scanned QR code carries the full job card content number. Manual
    entry carries a partial number, which is first expanded into every
    matching job card; a failure for one of them is logged and skipped.
    """
    if not manual_entry:
        rows = await _pending_for_content(invoker, partition, user_id, machine_id, job_card_content_no)
    else:
        matches = await invoker.execute(
            partition,
            FIND_JOB_CARDS_PROCEDURE,
            {"NumberPart": job_card_content_no},
            {"NumberPart": Unicode(255)},
        )
        if not matches.rows:
            return PendingProcessesResponse(
                status=False,
                error="No job cards found matching the partial number",
            )

        rows = []
        for match in matches.rows:
            number = pick(match, *_JOB_CARD_COLUMNS)
            if not number:
                continue
            try:
                rows.extend(
                    await _pending_for_content(invoker, partition, user_id, machine_id, str(number))
                )
            except Exception as e:
                logger.bind(partition=partition.value, job_card=str(number), error=str(e)).warning(
                    "pending_lookup_failed_for_job_card"
                )

    processes = [to_pending_process(row) for row in rows]
    logger.bind(
        partition=partition.value,
        machine_id=machine_id,
        manual_entry=manual_entry,
        count=len(processes),
    ).debug("pending_processes_found")

    if not processes:
        return PendingProcessesResponse(status=False)
    return PendingProcessesResponse(status=True, processes=processes)
