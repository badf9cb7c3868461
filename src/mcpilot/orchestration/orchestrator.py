"""mcpilot Orchestrator - intent resolution and capability routing.

The orchestrator is the entry point for every natural-language request. It:
1. Rejects callers without a credential before any model call
2. Probes which capability backends are reachable
3. Asks the model for a structured intent grounded in that availability
4. Extracts and normalizes the intent onto the fixed action vocabulary
5. Routes to the owning backend (failing closed when it is down)
6. Reduces the backend response to one reply string

Unparseable model output and unknown actions are not failures: the
model's raw text becomes the reply.
"""

import logging
from typing import Any, Mapping

import httpx
from openai import AsyncOpenAI, OpenAI

from mcpilot.core.config import Settings
from mcpilot.orchestration.errors import MissingCredentialError, UnknownToolError
from mcpilot.orchestration.intent_extractor import extract_intent
from mcpilot.orchestration.models import (
    ActionKind,
    CandidateIntent,
    OrchestratorReply,
    ResolvedIntent,
)
from mcpilot.orchestration.normalizer import ActionNormalizer, ParameterNormalizer
from mcpilot.orchestration.registry import CapabilityRegistry
from mcpilot.orchestration.reply import reduce_reply
from mcpilot.orchestration.requester import ModelIntentRequester
from mcpilot.orchestration.router import CapabilityRouter

logger = logging.getLogger(__name__)


class IntentOrchestrator:
    """Runs one request through the resolve-route-dispatch pipeline.

    Holds no per-request state: every call probes its own CapabilitySet,
    so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        requester: ModelIntentRequester,
        router: CapabilityRouter,
    ):
        self.registry = registry
        self.requester = requester
        self.router = router
        self.action_normalizer = ActionNormalizer()
        self.parameter_normalizer = ParameterNormalizer()

    async def ask(self, user_text: str, credential: str | None) -> OrchestratorReply:
        """Resolve and execute one natural-language request.

        Args:
            user_text: The user's request
            credential: Caller credential, if any was presented

        Returns:
            OrchestratorReply with the user-facing text

        Raises:
            OrchestrationError: For missing credential, model failure,
                unavailable capability, missing parameter or backend failure
        """
        if not credential:
            raise MissingCredentialError()

        available = await self.registry.probe()
        raw_text = await self.requester.request(user_text, available)

        candidate = extract_intent(raw_text)
        if candidate is None:
            return OrchestratorReply(reply=raw_text)
        logger.info(f"Extracted intent: {candidate.action_name} {sorted(candidate.parameters)}")

        intent = self.resolve(candidate, user_text)
        decision = self.router.route(intent, available, credential)
        if decision is None:
            return OrchestratorReply(reply=raw_text)

        result = await self.router.dispatch(decision)
        return OrchestratorReply(
            reply=reduce_reply(result),
            action=intent.action,
            backend=decision.backend,
            result=result,
        )

    async def execute(
        self,
        tool: str,
        args: Mapping[str, Any] | None,
        credential: str | None,
    ) -> OrchestratorReply:
        """Execute a named tool directly, without consulting the model.

        The tool name must be a known alias; keyword guessing and the
        single-token name fallback are not applied.
        """
        if not credential:
            raise MissingCredentialError()

        action = self.action_normalizer.lookup_alias(tool)
        if action is ActionKind.UNKNOWN:
            raise UnknownToolError(tool)

        intent = ResolvedIntent(
            action=action,
            parameters=self.parameter_normalizer.normalize(
                args or {},
                action,
                allow_name_fallback=False,
            ),
            raw_action=tool,
        )

        available = await self.registry.probe()
        decision = self.router.route(intent, available, credential)
        result = await self.router.dispatch(decision)
        return OrchestratorReply(
            reply=reduce_reply(result),
            action=action,
            backend=decision.backend,
            result=result,
        )

    def resolve(self, candidate: CandidateIntent, user_text: str) -> ResolvedIntent:
        """Normalize a candidate intent's action and parameters."""
        action = self.action_normalizer.normalize(candidate.action_name)
        parameters = self.parameter_normalizer.normalize(
            candidate.parameters,
            action,
            user_text,
        )
        return ResolvedIntent(
            action=action,
            parameters=parameters,
            raw_action=candidate.action_name,
        )


def create_orchestrator(
    settings: Settings,
    llm_client: OpenAI | AsyncOpenAI,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> IntentOrchestrator:
    """Create an orchestrator wired from settings.

    Args:
        settings: Application settings (backend table, timeouts, model)
        llm_client: OpenAI-compatible client for the model call
        http_client: Optional shared HTTP client for probes and dispatches
    """
    backends = settings.backend_configs()
    return IntentOrchestrator(
        registry=CapabilityRegistry(
            backends,
            client=http_client,
            timeout=settings.probe_timeout,
        ),
        requester=ModelIntentRequester(
            llm_client,
            model=settings.llm_model,
            temperature=settings.llm_temperature,
            timeout=settings.llm_timeout,
        ),
        router=CapabilityRouter(
            backends,
            client=http_client,
            timeout=settings.dispatch_timeout,
            clone_directory=settings.clone_directory,
        ),
    )
