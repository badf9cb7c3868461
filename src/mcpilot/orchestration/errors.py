"""Failure taxonomy for one orchestrated request.

Unparseable intents and unknown actions are not listed here: they degrade
to replying with the model's raw text.
"""


class OrchestrationError(Exception):
    """Base class for request-fatal orchestration failures."""

    kind = "orchestration_failed"
    status_code = 500

    def __init__(self, message: str, *, reply: str | None = None):
        super().__init__(message)
        self.message = message
        self.reply = reply or message


class MissingCredentialError(OrchestrationError):
    """Caller presented no credential."""

    kind = "missing_credential"
    status_code = 401

    def __init__(self):
        super().__init__("Not logged in", reply="Please log in before sending requests.")


class ModelCallFailedError(OrchestrationError):
    """The generative-text capability errored or timed out."""

    kind = "model_call_failed"
    status_code = 502

    def __init__(self, message: str):
        super().__init__(
            message,
            reply="Orchestration failed: the language model did not respond.",
        )


class CapabilityUnavailableError(OrchestrationError):
    """The backend owning the resolved action is not reachable."""

    kind = "capability_unavailable"
    status_code = 503

    def __init__(self, backend: str):
        super().__init__(
            f"{backend} backend not available",
            reply=f"The {backend} backend is not available right now, so this action cannot run.",
        )
        self.backend = backend


class MissingParameterError(OrchestrationError):
    """A required parameter could not be resolved for the action."""

    kind = "missing_parameter"
    status_code = 422

    def __init__(self, action: str, missing: list[str]):
        fields = ", ".join(missing)
        super().__init__(
            f"{action} requires: {fields}",
            reply=f"I need more information to run {action}: {fields}.",
        )
        self.action = action
        self.missing = missing


class BackendCallFailedError(OrchestrationError):
    """The dispatched backend call failed or returned an error payload."""

    kind = "backend_call_failed"
    status_code = 502

    def __init__(self, backend: str, message: str):
        super().__init__(
            f"{backend} call failed: {message}",
            reply=f"The {backend} backend reported an error: {message}",
        )
        self.backend = backend


class UnknownToolError(OrchestrationError):
    """A direct-execute request named a tool outside the action vocabulary."""

    kind = "unknown_tool"
    status_code = 400

    def __init__(self, tool: str):
        super().__init__(f"Unknown tool: {tool}", reply=f"Unknown tool: {tool}")
        self.tool = tool
