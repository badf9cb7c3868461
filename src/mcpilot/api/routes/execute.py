"""Direct tool execution endpoint."""

import logging

from fastapi import APIRouter, Request

from ..auth import resolve_credential
from ..deps import Orchestrator
from ..schemas import ErrorResponse, ExecuteRequest, ExecuteResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mcp", tags=["mcp"])


@router.post(
    "/execute",
    response_model=ExecuteResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def execute(
    body: ExecuteRequest,
    request: Request,
    orchestrator: Orchestrator,
) -> ExecuteResponse:
    """Execute a named tool without going through the model."""
    credential = resolve_credential(request, body.token)

    result = await orchestrator.execute(body.tool, body.args, credential)

    return ExecuteResponse(result=result.result, reply=result.reply)
