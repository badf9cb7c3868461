"""Tests for the Reply Reducer."""

import json

import pytest

from mcpilot.orchestration.reply import reduce_reply


class TestReduceReply:
    """Test reduce_reply function."""

    def test_content_text_first(self):
        """Test structured content text wins over message."""
        response = {
            "content": [{"type": "text", "text": "listing"}],
            "message": "ignored",
        }
        assert reduce_reply(response) == "listing"

    def test_first_text_block(self):
        """Test the first block with text is used."""
        response = {
            "content": [
                {"type": "image", "data": "..."},
                {"type": "text", "text": "second"},
                {"type": "text", "text": "third"},
            ]
        }
        assert reduce_reply(response) == "second"

    def test_message_when_no_content(self):
        """Test a top-level message is used next."""
        assert reduce_reply({"success": True, "message": "Repository created"}) == "Repository created"

    def test_message_when_content_has_no_text(self):
        """Test empty content falls through to message."""
        assert reduce_reply({"content": [], "message": "done"}) == "done"

    def test_non_string_message_ignored(self):
        """Test a message that is not text is not used as the reply."""
        response = {"message": {"nested": True}}
        assert reduce_reply(response) == json.dumps(response, indent=2)

    def test_pretty_printed_fallback(self):
        """Test responses without text are dumped with indentation."""
        response = {"containerId": "abc123", "ports": [80]}
        reply = reduce_reply(response)

        assert json.loads(reply) == response
        assert "\n  " in reply

    def test_string_passthrough(self):
        """Test a plain-text body is returned unchanged."""
        assert reduce_reply("container started") == "container started"

    @pytest.mark.parametrize("response", [None, [1, 2], 42, True])
    def test_other_shapes_dumped(self, response):
        """Test any JSON value reduces to its dump."""
        assert reduce_reply(response) == json.dumps(response, indent=2)

    def test_empty_text_is_still_text(self):
        """Test an empty text block is a valid reply."""
        assert reduce_reply({"content": [{"type": "text", "text": ""}], "message": "m"}) == ""
