"""Capability registry: which backends are reachable right now.

A fresh CapabilitySet is probed for every request. Probes for different
backends run concurrently and any failure simply leaves that backend out.
"""

import asyncio
import logging
from typing import Iterable

import httpx

from mcpilot.core.config import BackendConfig
from mcpilot.orchestration.models import CapabilitySet

logger = logging.getLogger(__name__)

RUNNING_STATUS = "running"


class CapabilityRegistry:
    """Probes backend liveness endpoints and reports the reachable set."""

    def __init__(
        self,
        backends: Iterable[BackendConfig],
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 2.0,
    ):
        """Initialize the registry.

        Args:
            backends: Backend table to probe
            client: Optional shared HTTP client (tests inject a mock transport)
            timeout: Per-probe timeout in seconds
        """
        self.backends: tuple[BackendConfig, ...] = tuple(backends)
        self.timeout = timeout
        self._client = client

    def get(self, capability: str) -> BackendConfig | None:
        """Look up a backend's configuration by identifier."""
        for backend in self.backends:
            if backend.capability == capability:
                return backend
        return None

    async def _probe_one(self, client: httpx.AsyncClient, backend: BackendConfig) -> bool:
        try:
            response = await client.get(
                backend.url_for(backend.status_path),
                timeout=self.timeout,
            )
            body = response.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.warning(f"{backend.capability} backend not available: {e}")
            return False

        if not isinstance(body, dict) or body.get("status") != RUNNING_STATUS:
            logger.warning(f"{backend.capability} backend reported status {body!r}")
            return False
        return True

    async def probe(self) -> CapabilitySet:
        """Probe every backend and return the set that reported 'running'."""
        if self._client is not None:
            results = await self._probe_all(self._client)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                results = await self._probe_all(client)

        available = frozenset(
            backend.capability
            for backend, ok in zip(self.backends, results)
            if ok
        )
        logger.info(f"Available backends: {sorted(available) or 'none'}")
        return available

    async def _probe_all(self, client: httpx.AsyncClient) -> list[bool]:
        return list(
            await asyncio.gather(*(self._probe_one(client, b) for b in self.backends))
        )
