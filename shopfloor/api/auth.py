from fastapi import APIRouter, HTTPException, Query, Request, status

from shopfloor.config import get_settings
from shopfloor.core.logging import get_logger
from shopfloor.core.rate_limit import limiter
from shopfloor.dependencies import Invoker
from shopfloor.schemas.auth import LoginResponse
from shopfloor.schemas.common import Partition
from shopfloor.services.login import LoginProcedureMissing, login

logger = get_logger(__name__)

router = APIRouter()


@router.get("/login", response_model=LoginResponse)
@limiter.limit(get_settings().login_rate_limit)
async def login_operator(
    request: Request,
    invoker: Invoker,
    username: str = Query(default=""),
    database: str = Query(default=""),
) -> LoginResponse:
    """
    Log an operator in and list the machines they may run.

    Returns `status: false` (HTTP 200) when the user has no machines on
    the selected database.
    """
    trimmed = username.strip()
    if not trimmed:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing username")

    try:
        partition = Partition.parse(database)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    try:
        return await login(invoker, trimmed, partition)
    except LoginProcedureMissing as e:
        logger.bind(partition=partition.value).error("login_procedure_missing")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)) from e
    except Exception as e:
        logger.bind(partition=partition.value, username=trimmed, error=str(e)).error("login_failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e
