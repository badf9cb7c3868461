"""Model Intent Requester.

Grounds the model in the current backend availability and asks it to
classify the user's request into one action from a closed set.
"""

import asyncio
import logging
import time
from typing import Iterable, Optional

from openai import AsyncOpenAI, OpenAI

from mcpilot.orchestration.errors import ModelCallFailedError
from mcpilot.orchestration.models import ActionKind

logger = logging.getLogger(__name__)

NO_BACKENDS_MARKER = "None"

VALID_ACTION_NAMES: tuple[str, ...] = tuple(
    kind.value for kind in ActionKind if kind is not ActionKind.UNKNOWN
)

_SYSTEM_MESSAGE = (
    "You are an MCP orchestrator. "
    "Classify requests into exactly one known action and return only JSON."
)


def build_intent_prompt(user_text: str, available: Iterable[str]) -> str:
    """Build the grounding prompt for one request.

    The output is deterministic for a given text and capability set:
    backend identifiers are sorted before they are embedded.
    """
    backends = ", ".join(sorted(available)) or NO_BACKENDS_MARKER
    actions = ", ".join(VALID_ACTION_NAMES)

    return f"""You are an MCP Orchestrator.
Available servers: {backends}.
User said: "{user_text}".
Respond ONLY in JSON format like:
{{
  "action": "<actionName>",
  "parameters": {{ ... }}
}}
Where actionName is exactly one of: {actions}.
If the request matches none of them, answer in plain text instead."""


class ModelIntentRequester:
    """Invokes the generative-text capability for intent classification.

    Example:
        requester = ModelIntentRequester(AsyncOpenAI(api_key=...))
        raw = await requester.request("list my repos", frozenset({"source-control"}))
    """

    MODEL = "gemini-2.5-flash"
    TEMPERATURE = 0.1  # Classification, not open generation
    MAX_TOKENS = 500
    TIMEOUT = 30.0

    def __init__(
        self,
        client: OpenAI | AsyncOpenAI,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the requester.

        Args:
            client: OpenAI-compatible client (sync or async)
            model: Model to use (default: gemini-2.5-flash)
            temperature: Sampling temperature (default: 0.1)
            timeout: Seconds before the call is abandoned (default: 30)
        """
        self.client = client
        self.model = model or self.MODEL
        self.temperature = self.TEMPERATURE if temperature is None else temperature
        self.timeout = self.TIMEOUT if timeout is None else timeout

    def _create_kwargs(self, prompt: str) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": _SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "n": 1,
            "max_tokens": self.MAX_TOKENS,
        }

    async def _complete(self, prompt: str):
        kwargs = self._create_kwargs(prompt)
        if isinstance(self.client, AsyncOpenAI):
            return await asyncio.wait_for(
                self.client.chat.completions.create(**kwargs),
                timeout=self.timeout,
            )
        # Sync clients run off the event loop so other requests are not blocked
        return await asyncio.wait_for(
            asyncio.to_thread(self.client.chat.completions.create, **kwargs),
            timeout=self.timeout,
        )

    async def request(self, user_text: str, available: Iterable[str]) -> str:
        """Ask the model for a structured intent.

        Args:
            user_text: The user's request, embedded verbatim
            available: Identifiers of currently reachable backends

        Returns:
            The model's raw text (may be empty)

        Raises:
            ModelCallFailedError: If the call errors or times out
        """
        prompt = build_intent_prompt(user_text, available)
        start_time = time.time()

        try:
            response = await self._complete(prompt)
        except asyncio.TimeoutError as e:
            logger.error(f"Intent request timed out after {self.timeout:.0f}s")
            raise ModelCallFailedError("Model call timed out") from e
        except Exception as e:
            elapsed = (time.time() - start_time) * 1000
            logger.error(f"Intent request failed after {elapsed:.0f}ms: {e}")
            raise ModelCallFailedError(f"Model call failed: {e}") from e

        elapsed = (time.time() - start_time) * 1000
        logger.info(f"Intent request completed in {elapsed:.0f}ms")

        try:
            return response.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError):
            logger.warning("Model response carried no text candidate")
            return ""
