"""Tests for the mcpilot Orchestrator."""

import json

import httpx
import pytest

from mcpilot.core.config import CONTAINER_RUNTIME, SOURCE_CONTROL
from mcpilot.orchestration.errors import (
    BackendCallFailedError,
    CapabilityUnavailableError,
    MissingCredentialError,
    MissingParameterError,
    ModelCallFailedError,
    UnknownToolError,
)
from mcpilot.orchestration.models import ActionKind, CandidateIntent

from tests.conftest import LISTING_TEXT, TEST_TOKEN, set_llm_reply


def model_says(action: str, **parameters) -> str:
    """Render a model reply carrying one intent."""
    return json.dumps({"action": action, "parameters": parameters})


def sent_prompt(mock_llm_client) -> str:
    """The user-role message of the last model call."""
    kwargs = mock_llm_client.chat.completions.create.call_args.kwargs
    return kwargs["messages"][-1]["content"]


@pytest.mark.asyncio
class TestAskScenarios:
    """End-to-end runs of IntentOrchestrator.ask."""

    async def test_list_repos(self, orchestrator, mock_llm_client, backends):
        """Test a listing request is routed to source-control and reduced."""
        backends.status[CONTAINER_RUNTIME] = "stopped"
        set_llm_reply(mock_llm_client, model_says("git.list_repos"))

        result = await orchestrator.ask("list my repos", TEST_TOKEN)

        assert result.reply == LISTING_TEXT
        assert result.action == ActionKind.LIST_REPOS
        assert result.backend == SOURCE_CONTROL
        assert backends.dispatched()[0].url.path == "/listRepos"
        assert "Available servers: source-control." in sent_prompt(mock_llm_client)

    async def test_single_token_names_new_repo(self, orchestrator, mock_llm_client, backends):
        """Test a one-word request becomes the repository name."""
        backends.status[CONTAINER_RUNTIME] = "stopped"
        set_llm_reply(mock_llm_client, model_says("create_repo"))

        result = await orchestrator.ask("myrepo", TEST_TOKEN)

        assert result.action == ActionKind.CREATE_REPO
        assert result.reply == "Repository created successfully!"
        payload = backends.last_payload()
        assert payload["name"] == "myrepo"
        assert payload["token"] == TEST_TOKEN

    async def test_container_backend_down(self, orchestrator, mock_llm_client, backends):
        """Test an action for a down backend fails closed without dispatch."""
        backends.status[CONTAINER_RUNTIME] = httpx.ConnectError("connection refused")
        set_llm_reply(mock_llm_client, model_says("docker_run", image="nginx"))

        with pytest.raises(CapabilityUnavailableError) as exc_info:
            await orchestrator.ask("run container", TEST_TOKEN)

        assert exc_info.value.backend == CONTAINER_RUNTIME
        assert backends.dispatched() == []

    async def test_prose_reply_passes_through(self, orchestrator, mock_llm_client, backends):
        """Test a reply without JSON is returned verbatim."""
        prose = "I can help with repositories and containers. What would you like to do?"
        set_llm_reply(mock_llm_client, prose)

        result = await orchestrator.ask("hello", TEST_TOKEN)

        assert result.reply == prose
        assert result.action is None
        assert backends.dispatched() == []

    @pytest.mark.parametrize("credential", [None, ""])
    async def test_no_credential_rejected_first(
        self, orchestrator, mock_llm_client, backends, credential
    ):
        """Test a missing credential stops the request before any outbound call."""
        set_llm_reply(mock_llm_client, model_says("listRepos"))

        with pytest.raises(MissingCredentialError):
            await orchestrator.ask("list my repos", credential)

        mock_llm_client.chat.completions.create.assert_not_called()
        assert backends.requests == []


@pytest.mark.asyncio
class TestAskDegradation:
    """Test the non-happy paths of IntentOrchestrator.ask."""

    async def test_unknown_action_returns_raw_text(self, orchestrator, mock_llm_client, backends):
        """Test an action outside the vocabulary replies with the model text."""
        raw = model_says("deleteEverything")
        set_llm_reply(mock_llm_client, raw)

        result = await orchestrator.ask("delete everything", TEST_TOKEN)

        assert result.reply == raw
        assert result.action is None
        assert backends.dispatched() == []

    async def test_keyword_inferred_action(self, orchestrator, mock_llm_client, backends):
        """Test an unlisted spelling is still resolved by keywords."""
        set_llm_reply(mock_llm_client, model_says("showAllMyRepositories"))

        result = await orchestrator.ask("show everything", TEST_TOKEN)

        assert result.action == ActionKind.LIST_REPOS

    async def test_model_failure(self, orchestrator, mock_llm_client, backends):
        """Test a failing model call is fatal and dispatches nothing."""
        mock_llm_client.chat.completions.create.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(ModelCallFailedError):
            await orchestrator.ask("list my repos", TEST_TOKEN)

        assert backends.dispatched() == []

    async def test_missing_parameter(self, orchestrator, mock_llm_client, backends):
        """Test a multi-word request without a name is not guessed."""
        set_llm_reply(mock_llm_client, model_says("createRepo"))

        with pytest.raises(MissingParameterError):
            await orchestrator.ask("create a repo", TEST_TOKEN)

        assert backends.dispatched() == []

    async def test_backend_failure(self, orchestrator, mock_llm_client, backends):
        """Test a backend error payload surfaces as BackendCallFailedError."""
        backends.responses["/listRepos"] = (401, {"error": "Bad credentials"})
        set_llm_reply(mock_llm_client, model_says("listRepos"))

        with pytest.raises(BackendCallFailedError) as exc_info:
            await orchestrator.ask("list my repos", TEST_TOKEN)

        assert "Bad credentials" in exc_info.value.reply

    async def test_aliased_parameters_reach_backend(self, orchestrator, mock_llm_client, backends):
        """Test parameter aliases are normalized before dispatch."""
        set_llm_reply(
            mock_llm_client,
            model_says("cloneRepo", url="https://github.com/me/alpha.git"),
        )

        await orchestrator.ask("clone alpha", TEST_TOKEN)

        payload = backends.last_payload()
        assert payload["repoUrl"] == "https://github.com/me/alpha.git"
        assert payload["directory"] == "./repos"

    async def test_result_kept_unreduced(self, orchestrator, mock_llm_client, backends):
        """Test the raw backend response rides along with the reply."""
        set_llm_reply(mock_llm_client, model_says("dockerRun", image="nginx"))

        result = await orchestrator.ask("run nginx", TEST_TOKEN)

        assert result.result == {"containerId": "abc123"}
        assert json.loads(result.reply) == {"containerId": "abc123"}


@pytest.mark.asyncio
class TestExecute:
    """Test IntentOrchestrator.execute."""

    async def test_execute_known_tool(self, orchestrator, mock_llm_client, backends):
        """Test a direct call skips the model."""
        result = await orchestrator.execute("git.create_repo", {"repoName": "demo"}, TEST_TOKEN)

        assert result.action == ActionKind.CREATE_REPO
        assert backends.last_payload()["name"] == "demo"
        mock_llm_client.chat.completions.create.assert_not_called()

    async def test_execute_unknown_tool(self, orchestrator, backends):
        """Test tools outside the alias table are rejected."""
        with pytest.raises(UnknownToolError):
            await orchestrator.execute("showAllMyRepositories", {}, TEST_TOKEN)

        assert backends.requests == []

    async def test_execute_requires_credential(self, orchestrator, backends):
        """Test direct calls need a credential too."""
        with pytest.raises(MissingCredentialError):
            await orchestrator.execute("listRepos", {}, None)

    async def test_execute_no_name_fallback(self, orchestrator, backends):
        """Test the tool name is never used as the repository name."""
        with pytest.raises(MissingParameterError):
            await orchestrator.execute("createRepo", None, TEST_TOKEN)

    async def test_execute_backend_down(self, orchestrator, backends):
        """Test direct calls fail closed as well."""
        backends.status[SOURCE_CONTROL] = "stopped"

        with pytest.raises(CapabilityUnavailableError):
            await orchestrator.execute("listRepos", {}, TEST_TOKEN)


class TestResolve:
    """Test IntentOrchestrator.resolve."""

    def test_resolve_keeps_raw_action(self, orchestrator):
        """Test the original spelling is kept for diagnostics."""
        candidate = CandidateIntent(action_name="Git.Create_Repo", parameters={"repo": "x"})

        intent = orchestrator.resolve(candidate, "make a repo called x")

        assert intent.action == ActionKind.CREATE_REPO
        assert intent.parameters == {"name": "x"}
        assert intent.raw_action == "Git.Create_Repo"

