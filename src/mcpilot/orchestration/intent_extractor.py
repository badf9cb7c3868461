"""Intent Extractor.

Recovers a structured ``{action, parameters}`` object from free model text.
Models tend to wrap JSON in prose or code fences, so extraction takes the
span from the first ``{`` to the last ``}`` and parses that. A brace inside
a string value can break this span; that trade-off is accepted.

Nothing here raises: any failure yields ``None`` and the caller replies
with the raw text instead.
"""

import json
import logging
from typing import Any

from mcpilot.orchestration.models import CandidateIntent, ParamValue

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (str, int, float, bool)


def _locate_json_span(text: str) -> str | None:
    """Return the greedy first-'{' to last-'}' span, if any."""
    start = text.find("{")
    end = text.rfind("}") + 1
    if start >= 0 and end > start:
        return text[start:end]
    return None


def _parse_object(text: str) -> dict[str, Any] | None:
    """Parse the located span into a JSON object."""
    span = _locate_json_span(text)
    if span is None:
        return None
    try:
        data = json.loads(span)
    except (json.JSONDecodeError, RecursionError):
        logger.warning("Could not parse model JSON, falling back to raw text")
        return None
    return data if isinstance(data, dict) else None


def _scalar_parameters(raw: Any) -> dict[str, ParamValue]:
    """Keep only scalar parameter values."""
    if not isinstance(raw, dict):
        return {}
    params: dict[str, ParamValue] = {}
    for key, value in raw.items():
        if isinstance(value, _SCALAR_TYPES):
            params[str(key)] = value
        else:
            logger.debug(f"Dropping non-scalar parameter {key!r}")
    return params


def extract_intent(raw_text: str | None) -> CandidateIntent | None:
    """Extract a candidate intent from raw model text.

    Args:
        raw_text: Whatever the model returned

    Returns:
        CandidateIntent, or None when no usable object with an action is found
    """
    if not raw_text:
        return None

    data = _parse_object(raw_text)
    if data is None:
        return None

    action = data.get("action")
    if not isinstance(action, str) or not action.strip():
        logger.info("Model JSON has no action, falling back to raw text")
        return None

    return CandidateIntent(
        action_name=action,
        parameters=_scalar_parameters(data.get("parameters")),
    )
