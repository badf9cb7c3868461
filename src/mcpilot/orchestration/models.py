"""Models for the orchestration layer.

Intents move through three shapes on their way to a backend:
CandidateIntent (as the model wrote it), ResolvedIntent (mapped onto the
closed action/parameter vocabulary) and RoutingDecision (a materialized
request for one backend).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

CapabilitySet = frozenset[str]
"""Identifiers of the backends that answered their most recent probe."""

ParamValue = Union[str, int, float, bool]


class ActionKind(str, Enum):
    """Closed set of actions the router knows how to dispatch."""

    LIST_REPOS = "listRepos"
    CREATE_REPO = "createRepo"
    CLONE_REPO = "cloneRepo"
    DOCKER_RUN = "dockerRun"
    DOCKER_BUILD = "dockerBuild"
    UNKNOWN = "unknown"


class ParamKey(str, Enum):
    """Canonical parameter names understood by the router."""

    NAME = "name"
    DESCRIPTION = "description"
    IS_PRIVATE = "isPrivate"
    REPO_URL = "repoUrl"
    DIRECTORY = "directory"
    OWNER = "owner"
    IMAGE = "image"
    CONTAINER_NAME = "containerName"
    TAG = "tag"


@dataclass(frozen=True)
class CandidateIntent:
    """Structured intent as emitted by the model, before normalization."""

    action_name: str
    """Action name exactly as the model spelled it."""

    parameters: dict[str, ParamValue] = field(default_factory=dict)
    """Free-form parameter keys, not yet validated."""


@dataclass(frozen=True)
class ResolvedIntent:
    """Intent mapped onto the internal vocabulary."""

    action: ActionKind
    parameters: dict[str, Any] = field(default_factory=dict)
    raw_action: str = ""
    """Original action spelling, kept for diagnostics when action is UNKNOWN."""


@dataclass(frozen=True)
class RoutingDecision:
    """Fully materialized request for one backend."""

    backend: str
    endpoint: str
    payload: dict[str, Any]
    action: ActionKind


@dataclass
class OrchestratorReply:
    """What one request produced for the caller."""

    reply: str
    action: ActionKind | None = None
    """Dispatched action, or None when the reply is the model's raw text."""

    backend: str | None = None
    result: Any = None
    """Unreduced backend response, when a dispatch happened."""
