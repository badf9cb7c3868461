"""Credential resolution for mcpilot API.

The credential (a source-control access token) can arrive three ways:
1. An explicit ``token`` field in the request body
2. An ``Authorization: Bearer <token>`` header
3. A ``token`` session cookie

Whichever is found first is handed to the orchestrator. Acquiring the
token is the caller's business.
"""

import logging
from typing import Optional

from fastapi import Request

logger = logging.getLogger(__name__)

CREDENTIAL_COOKIE_NAMES = [
    "token",
    "github_token",
]


def _get_bearer_token(request: Request) -> str | None:
    """Extract a bearer token from the Authorization header."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


def _get_session_cookie(cookies: dict[str, str]) -> str | None:
    """Extract the credential from cookies."""
    for name in CREDENTIAL_COOKIE_NAMES:
        if token := cookies.get(name):
            return token
    return None


def resolve_credential(request: Request, body_token: Optional[str] = None) -> str | None:
    """Resolve the caller's credential, if any was presented."""
    if body_token and body_token.strip():
        return body_token.strip()

    token = _get_bearer_token(request)
    if token:
        return token

    token = _get_session_cookie(request.cookies)
    if token:
        logger.debug("Using credential from session cookie")
    return token
