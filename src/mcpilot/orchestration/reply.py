"""Reply Reducer: one display string from any backend response shape."""

import json
from typing import Any


def _first_content_text(content: Any) -> str | None:
    """First text field of a structured content block list."""
    if not isinstance(content, list):
        return None
    for block in content:
        if isinstance(block, dict) and isinstance(block.get("text"), str):
            return block["text"]
    return None


def reduce_reply(response: Any) -> str:
    """Collapse a backend response into the text shown to the user.

    Priority: structured content text, then a top-level ``message``,
    then a pretty-printed dump of the whole response. Plain-text bodies
    are returned as they are.
    """
    if isinstance(response, str):
        return response

    if isinstance(response, dict):
        text = _first_content_text(response.get("content"))
        if text is not None:
            return text
        message = response.get("message")
        if isinstance(message, str):
            return message

    return json.dumps(response, indent=2, default=str)
