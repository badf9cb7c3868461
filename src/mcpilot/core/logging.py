"""Logging setup for mcpilot.

Every request carries a source-control token, and payloads, headers and
httpx errors all end up in log lines sooner or later. Handlers installed
here mask anything token-shaped before a record is written.
"""

import logging
import re
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers that chatter at INFO about every outbound request
NOISY_LOGGERS = ("httpx", "httpcore", "openai")

_TOKEN_PATTERNS = (
    re.compile(r"\b(gh[pousr]_)[A-Za-z0-9_]{4,}"),
    re.compile(r"(Bearer\s+)[^\s'\"]+", re.IGNORECASE),
    re.compile(r"""(["']token["']\s*:\s*["'])[^"']+"""),
)


def redact(text: str) -> str:
    """Mask credential-looking substrings, keeping their prefix."""
    for pattern in _TOKEN_PATTERNS:
        text = pattern.sub(r"\1***", text)
    return text


class RedactingFilter(logging.Filter):
    """Rewrites each record's message with credentials masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = redact(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def _make_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handler.addFilter(RedactingFilter())
    return handler


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Get a logger whose own handler redacts credentials.

    Args:
        name: Logger name, typically __name__ from the calling module
        level: Optional log level override

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        logger.addHandler(_make_handler())
        logger.propagate = False

    if level is not None:
        logger.setLevel(level)

    return logger


def configure_logging(level: Optional[int] = None, quiet: bool = False) -> None:
    """Configure root logging for the application.

    Args:
        level: Log level. If None, uses MCPILOT_LOG_LEVEL from settings.
        quiet: If True, only show warnings and errors
    """
    if level is None:
        from .config import get_settings
        level = get_settings().log_level_int

    if quiet:
        level = logging.WARNING

    root = logging.getLogger()
    root.setLevel(level)
    if not any(isinstance(f, RedactingFilter) for h in root.handlers for f in h.filters):
        root.addHandler(_make_handler())

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
