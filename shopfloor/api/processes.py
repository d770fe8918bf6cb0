"""Synchronous production endpoints and pending-process lookup."""

import asyncio

from fastapi import APIRouter, HTTPException, Query, status

from shopfloor.core.logging import get_logger
from shopfloor.dependencies import AppSettings, Invoker
from shopfloor.schemas.common import Partition
from shopfloor.schemas.processes import PendingProcessesResponse
from shopfloor.schemas.production import (
    CancelProductionRequest,
    CompleteProductionRequest,
    ProductionKind,
    ProductionRequest,
    ProductionResponse,
    StartProductionRequest,
)
from shopfloor.services.pending import find_pending_processes
from shopfloor.services.procedures import BaseProcedureInvoker
from shopfloor.services.production import run_production_procedure

logger = get_logger(__name__)

router = APIRouter()


async def _run_production(
    kind: ProductionKind,
    body: ProductionRequest,
    invoker: BaseProcedureInvoker,
    timeout_seconds: float,
) -> ProductionResponse:
    try:
        async with asyncio.timeout(timeout_seconds):
            outcome = await run_production_procedure(
                invoker, kind, body.procedure_params(), body.database
            )
    except TimeoutError as e:
        logger.bind(kind=kind.value, partition=body.database.value, timeout=timeout_seconds).error(
            "production_procedure_timed_out"
        )
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Procedure timed out",
        ) from e
    except Exception as e:
        logger.bind(kind=kind.value, partition=body.database.value, error=str(e)).error(
            "production_procedure_failed"
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e

    return ProductionResponse(
        result=outcome.rows,
        status_warning=outcome.status_warning,
        production_id=outcome.production_id,
    )


@router.post("/processes/start", response_model=ProductionResponse)
async def start_process(
    body: StartProductionRequest,
    invoker: Invoker,
    settings: AppSettings,
) -> ProductionResponse:
    """Start a production run and wait for the procedure result."""
    return await _run_production(
        ProductionKind.START, body, invoker, settings.sync_procedure_timeout_seconds
    )


@router.post("/processes/complete", response_model=ProductionResponse)
async def complete_process(
    body: CompleteProductionRequest,
    invoker: Invoker,
    settings: AppSettings,
) -> ProductionResponse:
    """Complete a production run with produced and wasted quantities."""
    return await _run_production(
        ProductionKind.COMPLETE, body, invoker, settings.sync_procedure_timeout_seconds
    )


@router.post("/processes/cancel", response_model=ProductionResponse)
async def cancel_process(
    body: CancelProductionRequest,
    invoker: Invoker,
    settings: AppSettings,
) -> ProductionResponse:
    """Cancel a production run."""
    return await _run_production(
        ProductionKind.CANCEL, body, invoker, settings.sync_procedure_timeout_seconds
    )


@router.get("/processes/pending", response_model=PendingProcessesResponse)
async def pending_processes(
    invoker: Invoker,
    machine_id: int = Query(alias="MachineID"),
    user_id: int = Query(alias="UserID"),
    job_card_content_no: str = Query(default="", alias="jobcardcontentno"),
    is_manual_entry: str | None = Query(default=None, alias="isManualEntry"),
    database: str = Query(default=""),
) -> PendingProcessesResponse:
    """
    List processes pending on a machine for a job card.

    With `isManualEntry=true` the job card number may be partial.
    """
    try:
        partition = Partition.parse(database)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    content_no = job_card_content_no.strip()
    if not content_no:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing jobcardcontentno")

    try:
        return await find_pending_processes(
            invoker,
            partition,
            user_id=user_id,
            machine_id=machine_id,
            job_card_content_no=content_no,
            manual_entry=is_manual_entry == "true",
        )
    except Exception as e:
        logger.bind(partition=partition.value, machine_id=machine_id, error=str(e)).error(
            "pending_processes_failed"
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e
