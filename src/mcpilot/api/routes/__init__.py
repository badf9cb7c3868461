"""API routes."""

from .ask import router as ask_router
from .capabilities import router as capabilities_router
from .execute import router as execute_router

__all__ = [
    "ask_router",
    "capabilities_router",
    "execute_router",
]
