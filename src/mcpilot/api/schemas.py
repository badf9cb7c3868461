"""Pydantic schemas for API request/response models."""

from typing import Any, Optional

from pydantic import BaseModel, Field


# Ask schemas
class AskRequest(BaseModel):
    """Natural-language request."""

    query: str
    token: Optional[str] = None


class AskResponse(BaseModel):
    """Reply for a natural-language request."""

    reply: str
    action: Optional[str] = None
    backend: Optional[str] = None


# Direct execution schemas
class ExecuteRequest(BaseModel):
    """Direct tool execution, bypassing the model."""

    tool: str
    args: dict[str, Any] = Field(default_factory=dict)
    token: Optional[str] = None


class ExecuteResponse(BaseModel):
    """Result of a direct tool execution."""

    result: Any = None
    reply: str


# Capability schemas
class BackendStatus(BaseModel):
    """Availability of one backend."""

    capability: str
    base_url: str
    available: bool


class CapabilitiesResponse(BaseModel):
    """Currently reachable backends."""

    available: list[str] = Field(default_factory=list)
    backends: list[BackendStatus] = Field(default_factory=list)


# Error schema
class ErrorResponse(BaseModel):
    """Error-shaped reply, distinguishable from a normal one by ``error``."""

    reply: str
    error: str
    detail: Optional[str] = None
