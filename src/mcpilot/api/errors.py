"""Exception handlers for the mcpilot API.

Every failure leaves as one well-formed JSON body. Orchestration errors
carry their own kind and status; anything unexpected becomes a 500
``orchestration_failed`` with an error ID for the logs.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mcpilot.core.logging import get_logger
from mcpilot.orchestration.errors import OrchestrationError

from .schemas import ErrorResponse

logger = get_logger(__name__)


async def orchestration_error_handler(request: Request, exc: OrchestrationError) -> JSONResponse:
    """Convert an orchestration failure into an error-shaped reply."""
    logger.warning(f"{request.method} {request.url.path} failed [{exc.kind}]: {exc.message}")
    body = ErrorResponse(reply=exc.reply, error=exc.kind, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch anything unhandled so the caller still gets a response."""
    error_id = id(exc)
    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    body = ErrorResponse(
        reply="Orchestration failed.",
        error=OrchestrationError.kind,
        detail=f"error_id={error_id}",
    )
    return JSONResponse(status_code=500, content=body.model_dump())


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI application."""
    app.add_exception_handler(OrchestrationError, orchestration_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
