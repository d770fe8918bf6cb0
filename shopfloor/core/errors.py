"""Exception handlers producing the `{status: false, error}` envelope."""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from shopfloor.core.logging import get_logger

logger = get_logger(__name__)

_INTEGER_ERRORS = {"int_parsing", "int_from_float", "int_type"}


def describe_validation_error(error: dict[str, Any]) -> str:
    """Turn one pydantic error into the message clients see."""
    loc = [part for part in error.get("loc", ()) if part not in ("body", "query")]
    field = str(loc[-1]) if loc else "Request body"
    error_type = error.get("type", "")

    if error_type == "missing":
        return f"{field} is required"
    if error_type == "value_error":
        ctx_error = error.get("ctx", {}).get("error")
        if ctx_error is not None:
            return str(ctx_error)
    if error_type in _INTEGER_ERRORS:
        return f"{field} must be an integer"
    return f"{field}: {error.get('msg', 'invalid value')}"


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed input with 400 and the first offending field."""
    errors = exc.errors()
    message = describe_validation_error(errors[0]) if errors else "Invalid request"
    logger.bind(path=request.url.path, error=message).info("request_rejected")
    return JSONResponse(status_code=400, content={"status": False, "error": message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap HTTPException details in the shared error envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope handlers on an application."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
