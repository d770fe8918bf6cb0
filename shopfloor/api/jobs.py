"""Asynchronous production endpoints backed by the background job tracker."""

from fastapi import APIRouter, HTTPException, status

from shopfloor.dependencies import Jobs
from shopfloor.schemas.jobs import JobStatusResponse, JobView
from shopfloor.schemas.production import (
    CancelProductionRequest,
    CompleteProductionRequest,
    JobAccepted,
    ProductionKind,
    StartProductionRequest,
)

router = APIRouter()


@router.post(
    "/processes/start-async",
    response_model=JobAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def start_process_async(body: StartProductionRequest, jobs: Jobs) -> JobAccepted:
    """Queue a production start; poll the returned job id for the outcome."""
    job = jobs.submit(ProductionKind.START, body.procedure_params(), body.database)
    return JobAccepted(job_id=job.id)


@router.post(
    "/processes/complete-async",
    response_model=JobAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def complete_process_async(body: CompleteProductionRequest, jobs: Jobs) -> JobAccepted:
    """Queue a production completion."""
    job = jobs.submit(ProductionKind.COMPLETE, body.procedure_params(), body.database)
    return JobAccepted(job_id=job.id)


@router.post(
    "/processes/cancel-async",
    response_model=JobAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def cancel_process_async(body: CancelProductionRequest, jobs: Jobs) -> JobAccepted:
    """Queue a production cancellation."""
    job = jobs.submit(ProductionKind.CANCEL, body.procedure_params(), body.database)
    return JobAccepted(job_id=job.id)


@router.get("/processes/jobs/{job_id}", response_model=JobStatusResponse)
async def get_job_status(job_id: str, jobs: Jobs) -> JobStatusResponse:
    """
    Get the current state of a background job.

    Jobs disappear a few minutes after finishing; an expired id looks the
    same as one that never existed.
    """
    job = jobs.status(job_id)
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return JobStatusResponse(job=JobView.from_job(job))
