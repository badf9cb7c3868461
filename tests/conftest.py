"""Common test fixtures for mcpilot tests."""

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient
from openai import AsyncOpenAI

from mcpilot.api.deps import get_orchestrator
from mcpilot.api.main import app
from mcpilot.core.config import CONTAINER_RUNTIME, SOURCE_CONTROL, Settings, get_settings
from mcpilot.orchestration.orchestrator import IntentOrchestrator, create_orchestrator

SOURCE_CONTROL_URL = "http://git.test"
CONTAINER_RUNTIME_URL = "http://docker.test"

TEST_TOKEN = "gho_test_token"

LISTING_TEXT = "Here are your repositories (2 total):\n\n**1. alpha**\n\n**2. beta**"


class FakeBackends:
    """In-memory stand-in for the capability backends.

    Serves the liveness and dispatch endpoints through httpx.MockTransport
    and records every request it sees.
    """

    def __init__(self):
        self.status: dict[str, Any] = {
            SOURCE_CONTROL: "running",
            CONTAINER_RUNTIME: "running",
        }
        self.responses: dict[str, tuple[int, Any]] = {
            "/listRepos": (200, {
                "role": "assistant",
                "content": [{"type": "text", "text": LISTING_TEXT}],
                "success": True,
            }),
            "/createRepo": (200, {
                "success": True,
                "message": "Repository created successfully!",
                "repo": {"name": "myrepo", "url": "https://github.com/me/myrepo"},
            }),
            "/cloneRepo": (200, {
                "success": True,
                "message": "Repository cloned successfully into ./repos.",
            }),
            "/docker/exec": (200, {"containerId": "abc123"}),
        }
        self.requests: list[httpx.Request] = []

    def _capability_for(self, request: httpx.Request) -> str:
        return SOURCE_CONTROL if request.url.host == "git.test" else CONTAINER_RUNTIME

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        capability = self._capability_for(request)

        if request.method == "GET" and request.url.path == "/status":
            status = self.status.get(capability)
            if isinstance(status, Exception):
                raise status
            return httpx.Response(200, json={"ok": True, "status": status})

        if request.method == "POST" and request.url.path in self.responses:
            code, body = self.responses[request.url.path]
            if isinstance(body, Exception):
                raise body
            if isinstance(body, str):
                return httpx.Response(code, text=body)
            return httpx.Response(code, json=body)

        return httpx.Response(404, json={"error": "not found"})

    def dispatched(self) -> list[httpx.Request]:
        """Requests other than liveness probes."""
        return [r for r in self.requests if r.url.path != "/status"]

    def last_payload(self) -> dict[str, Any]:
        """JSON body of the most recent dispatch."""
        return json.loads(self.dispatched()[-1].content)


def make_llm_response(content: str | None) -> MagicMock:
    """Create a mock chat completion carrying one text candidate."""
    mock_response = MagicMock()
    mock_response.choices = [MagicMock(message=MagicMock(content=content))]
    return mock_response


def make_llm_client(content: str | None = "") -> MagicMock:
    """Create a mock AsyncOpenAI client returning the given text."""
    client = MagicMock(spec=AsyncOpenAI)
    client.chat.completions.create = AsyncMock(return_value=make_llm_response(content))
    return client


@pytest.fixture
def backends() -> FakeBackends:
    """Fake capability backends, all running."""
    return FakeBackends()


@pytest.fixture
def http_client(backends):
    """Async HTTP client wired to the fake backends."""
    return httpx.AsyncClient(transport=httpx.MockTransport(backends.handler))


@pytest.fixture
def test_settings() -> Settings:
    """Settings pointing at the fake backends."""
    return Settings(
        SOURCE_CONTROL_URL=SOURCE_CONTROL_URL,
        CONTAINER_RUNTIME_URL=CONTAINER_RUNTIME_URL,
        LLM_API_KEY="test-key",
        LLM_MODEL="test-model",
    )


@pytest.fixture
def mock_llm_client() -> MagicMock:
    """Mock model client; set the reply with set_llm_reply."""
    return make_llm_client()


def set_llm_reply(client: MagicMock, content: str | None) -> None:
    """Change the text the mock model client returns."""
    client.chat.completions.create.return_value = make_llm_response(content)


@pytest.fixture
def orchestrator(test_settings, mock_llm_client, http_client) -> IntentOrchestrator:
    """Orchestrator wired to the fake backends and mock model."""
    return create_orchestrator(test_settings, mock_llm_client, http_client=http_client)


@pytest.fixture
def client(orchestrator):
    """Create test client with overridden dependencies."""
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def mock_settings(monkeypatch):
    """Clear cached settings around env-driven tests."""
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()
