"""Background job models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from shopfloor.core.datetime_utils import utc_now
from shopfloor.schemas.common import Partition
from shopfloor.schemas.jobs import JobState
from shopfloor.schemas.production import ProductionKind, StatusWarning


class JobResult(BaseModel):
    """Outcome of a completed job."""

    rows: list[dict[str, Any]] = Field(default_factory=list)
    production_id: Any | None = None
    status_warning: StatusWarning | None = None


class Job(BaseModel):
    """One asynchronous production operation."""

    id: str
    kind: ProductionKind
    request: dict[str, Any]
    target: Partition
    state: JobState = JobState.PENDING
    result: JobResult | None = None
    error: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    started_at: datetime | None = None
    completed_at: datetime | None = None
