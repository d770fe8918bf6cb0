from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from shopfloor.schemas.common import CamelModel, Partition
from shopfloor.schemas.production import ProductionKind, StatusWarning

if TYPE_CHECKING:
    from shopfloor.services.jobs.models import Job


class JobState(str, Enum):
    """Lifecycle state of a background job."""

    PENDING = "pending"  # Stored, not yet running
    PROCESSING = "processing"  # Procedure call in flight
    COMPLETED = "completed"  # Procedure returned (possibly with a status warning)
    FAILED = "failed"  # Procedure raised

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.FAILED)


class JobView(CamelModel):
    """Snapshot of a background job as returned to pollers."""

    job_id: str
    kind: ProductionKind
    state: JobState
    database: Partition
    request: dict[str, Any]
    result: list[dict[str, Any]] | None = None
    production_id: Any | None = None
    status_warning: StatusWarning | None = None
    error: str | None = None
    created_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_job(cls, job: "Job") -> "JobView":
        return cls(
            job_id=job.id,
            kind=job.kind,
            state=job.state,
            database=job.target,
            request=job.request,
            result=job.result.rows if job.result else None,
            production_id=job.result.production_id if job.result else None,
            status_warning=job.result.status_warning if job.result else None,
            error=job.error,
            created_at=job.created_at,
            started_at=job.started_at,
            completed_at=job.completed_at,
        )


class JobStatusResponse(CamelModel):
    """Response for a job status lookup."""

    status: bool = True
    job: JobView
