"""API dependencies for dependency injection."""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from mcpilot.core.config import get_llm_client, get_settings
from mcpilot.orchestration.orchestrator import IntentOrchestrator, create_orchestrator
from mcpilot.orchestration.registry import CapabilityRegistry

logger = logging.getLogger(__name__)


@lru_cache
def get_orchestrator() -> IntentOrchestrator:
    """Get the shared orchestrator (stateless across requests)."""
    settings = get_settings()
    if not settings.llm_api_key:
        logger.warning("LLM_API_KEY is not set; /ask requests will fail at the model call")
    return create_orchestrator(settings, get_llm_client(require_key=False))


def get_registry(
    orchestrator: IntentOrchestrator = Depends(get_orchestrator),
) -> CapabilityRegistry:
    """Get the capability registry the orchestrator probes."""
    return orchestrator.registry


# Type aliases for cleaner route signatures
Orchestrator = Annotated[IntentOrchestrator, Depends(get_orchestrator)]
Registry = Annotated[CapabilityRegistry, Depends(get_registry)]
