from typing import Any

from shopfloor.schemas.common import CamelModel


class PendingProcess(CamelModel):
    """Production process waiting to run on a machine."""

    pwo_no: Any | None = None
    pwo_date: Any | None = None
    client: Any | None = None
    job_name: Any | None = None
    component_name: Any | None = None
    form_no: Any | None = None
    schedule_qty: Any | None = None
    qty_produced: Any | None = None
    paper_issued_qty: Any | None = None
    current_status: Any | None = None
    jobcard_content_no: Any | None = None
    job_booking_jobcard_contents_id: int = 0
    process_name: Any | None = None
    process_id: int = 0


class PendingProcessesResponse(CamelModel):
    """Pending processes for a machine and job card."""

    status: bool
    processes: list[PendingProcess] | None = None
    error: str | None = None
