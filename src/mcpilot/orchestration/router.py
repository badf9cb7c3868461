"""Capability Router.

Turns a ResolvedIntent into a RoutingDecision for its owning backend and
performs the single dispatch call. The routing table is static; a decision
is only built when the owning backend is in the request's CapabilitySet.
Dispatches are never retried: creating a repository or starting a
container is not safe to repeat blindly.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable

import httpx

from mcpilot.core.config import CONTAINER_RUNTIME, SOURCE_CONTROL, BackendConfig
from mcpilot.orchestration.errors import (
    BackendCallFailedError,
    CapabilityUnavailableError,
    MissingCredentialError,
    MissingParameterError,
)
from mcpilot.orchestration.models import (
    ActionKind,
    CapabilitySet,
    ParamKey,
    ResolvedIntent,
    RoutingDecision,
)
from mcpilot.orchestration.normalizer import missing_required
from mcpilot.orchestration.reply import reduce_reply

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Route:
    """Static routing entry for one action."""

    capability: str
    endpoint: str
    """Key into the owning BackendConfig.endpoints."""

    credentialed: bool
    """Whether the caller's credential travels with the payload."""


ROUTING_TABLE: dict[ActionKind, Route] = {
    ActionKind.LIST_REPOS: Route(SOURCE_CONTROL, "listRepos", credentialed=True),
    ActionKind.CREATE_REPO: Route(SOURCE_CONTROL, "createRepo", credentialed=True),
    ActionKind.CLONE_REPO: Route(SOURCE_CONTROL, "cloneRepo", credentialed=True),
    ActionKind.DOCKER_RUN: Route(CONTAINER_RUNTIME, "dockerExec", credentialed=False),
    ActionKind.DOCKER_BUILD: Route(CONTAINER_RUNTIME, "dockerExec", credentialed=False),
}

DEFAULT_CLONE_DIRECTORY = "./repos"


def _passthrough_payload(action: ActionKind, params: dict[str, Any]) -> dict[str, Any]:
    """Container payload: parameters verbatim, minus any credential."""
    payload = {k: v for k, v in params.items() if k != "token"}
    payload["command"] = action.value
    return payload


def _error_message(body: Any) -> str:
    """Pick the human-readable message out of an error payload."""
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return reduce_reply(body)


class CapabilityRouter:
    """Routes resolved intents to their owning backend and dispatches them."""

    def __init__(
        self,
        backends: Iterable[BackendConfig],
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
        clone_directory: str = DEFAULT_CLONE_DIRECTORY,
    ):
        """Initialize the router.

        Args:
            backends: Backend table (addresses and endpoints)
            client: Optional shared HTTP client (tests inject a mock transport)
            timeout: Dispatch timeout in seconds
            clone_directory: Sandbox directory used when cloneRepo names none
        """
        self._backends: dict[str, BackendConfig] = {b.capability: b for b in backends}
        self._client = client
        self.timeout = timeout
        self.clone_directory = clone_directory

    def owner_of(self, action: ActionKind) -> str | None:
        """Backend identifier that owns an action."""
        route = ROUTING_TABLE.get(action)
        return route.capability if route else None

    def route(
        self,
        intent: ResolvedIntent,
        available: CapabilitySet,
        credential: str | None,
    ) -> RoutingDecision | None:
        """Build the routing decision for an intent.

        Returns:
            RoutingDecision, or None for ActionKind.UNKNOWN

        Raises:
            CapabilityUnavailableError: Owning backend is not in ``available``
            MissingParameterError: A required parameter is absent
            MissingCredentialError: Credentialed action without a credential
        """
        route = ROUTING_TABLE.get(intent.action)
        if route is None:
            return None

        backend = self._backends.get(route.capability)
        if route.capability not in available or backend is None:
            logger.warning(f"{intent.action.value} needs unavailable backend {route.capability}")
            raise CapabilityUnavailableError(route.capability)

        missing = missing_required(intent.action, intent.parameters)
        if missing:
            raise MissingParameterError(intent.action.value, missing)

        payload = self._build_payload(intent.action, intent.parameters)
        if route.credentialed:
            if not credential:
                raise MissingCredentialError()
            payload["token"] = credential

        decision = RoutingDecision(
            backend=route.capability,
            endpoint=backend.url_for(backend.endpoints[route.endpoint]),
            payload=payload,
            action=intent.action,
        )
        logger.info(f"Routing {intent.action.value} to {decision.backend} at {decision.endpoint}")
        return decision

    def _build_payload(self, action: ActionKind, params: dict[str, Any]) -> dict[str, Any]:
        """Translate canonical parameters into the backend's wire names."""
        if action is ActionKind.LIST_REPOS:
            payload: dict[str, Any] = {}
            if params.get(ParamKey.OWNER.value):
                payload["owner"] = params[ParamKey.OWNER.value]
            return payload

        if action is ActionKind.CREATE_REPO:
            private = params.get(ParamKey.IS_PRIVATE.value, False)
            return {
                "name": params[ParamKey.NAME.value],
                "description": params.get(ParamKey.DESCRIPTION.value) or "",
                "privateRepo": private if isinstance(private, bool) else False,
            }

        if action is ActionKind.CLONE_REPO:
            return {
                "repoUrl": params[ParamKey.REPO_URL.value],
                "directory": params.get(ParamKey.DIRECTORY.value) or self.clone_directory,
            }

        return _passthrough_payload(action, params)

    async def dispatch(self, decision: RoutingDecision) -> Any:
        """Send the decision's payload once and return the decoded response.

        Raises:
            BackendCallFailedError: Transport failure, timeout, error status,
                or a body reporting ``success: false``
        """
        try:
            if self._client is not None:
                response = await self._post(self._client, decision)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await self._post(client, decision)
        except httpx.TimeoutException as e:
            logger.error(f"{decision.backend} dispatch timed out: {e}")
            raise BackendCallFailedError(decision.backend, "request timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"{decision.backend} dispatch failed: {e}")
            raise BackendCallFailedError(decision.backend, str(e) or type(e).__name__) from e

        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        failed = response.status_code >= 400 or (
            isinstance(body, dict) and body.get("success") is False
        )
        if failed:
            message = _error_message(body)
            logger.error(f"{decision.backend} returned {response.status_code}: {message}")
            raise BackendCallFailedError(decision.backend, message)

        return body

    async def _post(self, client: httpx.AsyncClient, decision: RoutingDecision) -> httpx.Response:
        return await client.post(
            decision.endpoint,
            json=decision.payload,
            timeout=self.timeout,
        )
