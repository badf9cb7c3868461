"""mcpilot - natural-language front door for capability backends."""

__version__ = "0.1.0"
