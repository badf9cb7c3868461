"""mcpilot Orchestration Layer.

This module handles capability discovery, intent requests to the model,
intent extraction and normalization, and routing to capability backends.
"""

from mcpilot.orchestration.errors import (
    BackendCallFailedError,
    CapabilityUnavailableError,
    MissingCredentialError,
    MissingParameterError,
    ModelCallFailedError,
    OrchestrationError,
    UnknownToolError,
)
from mcpilot.orchestration.intent_extractor import extract_intent
from mcpilot.orchestration.models import (
    ActionKind,
    CandidateIntent,
    CapabilitySet,
    OrchestratorReply,
    ParamKey,
    ResolvedIntent,
    RoutingDecision,
)
from mcpilot.orchestration.normalizer import (
    ActionNormalizer,
    ParameterNormalizer,
)
from mcpilot.orchestration.orchestrator import (
    IntentOrchestrator,
    create_orchestrator,
)
from mcpilot.orchestration.registry import CapabilityRegistry
from mcpilot.orchestration.reply import reduce_reply
from mcpilot.orchestration.requester import ModelIntentRequester
from mcpilot.orchestration.router import CapabilityRouter

__all__ = [
    # Models
    "ActionKind",
    "CandidateIntent",
    "CapabilitySet",
    "OrchestratorReply",
    "ParamKey",
    "ResolvedIntent",
    "RoutingDecision",
    # Errors
    "BackendCallFailedError",
    "CapabilityUnavailableError",
    "MissingCredentialError",
    "MissingParameterError",
    "ModelCallFailedError",
    "OrchestrationError",
    "UnknownToolError",
    # Pipeline stages
    "CapabilityRegistry",
    "ModelIntentRequester",
    "extract_intent",
    "ActionNormalizer",
    "ParameterNormalizer",
    "CapabilityRouter",
    "reduce_reply",
    # Orchestrator
    "IntentOrchestrator",
    "create_orchestrator",
]
