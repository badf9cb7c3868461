"""Natural-language request endpoint."""

import logging

from fastapi import APIRouter, Request

from ..auth import resolve_credential
from ..deps import Orchestrator
from ..schemas import AskRequest, AskResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ask"])


@router.post(
    "/ask",
    response_model=AskResponse,
    responses={
        401: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def ask(body: AskRequest, request: Request, orchestrator: Orchestrator) -> AskResponse:
    """Resolve a natural-language request and run it against a backend."""
    logger.info(f"Incoming request: {body.query!r}")
    credential = resolve_credential(request, body.token)

    result = await orchestrator.ask(body.query, credential)

    return AskResponse(
        reply=result.reply,
        action=result.action.value if result.action else None,
        backend=result.backend,
    )
