"""Capability availability endpoint."""

from fastapi import APIRouter

from ..deps import Registry
from ..schemas import BackendStatus, CapabilitiesResponse

router = APIRouter(prefix="/api", tags=["capabilities"])


@router.get("/capabilities", response_model=CapabilitiesResponse)
async def list_capabilities(registry: Registry) -> CapabilitiesResponse:
    """Probe every backend and report which are reachable."""
    available = await registry.probe()
    return CapabilitiesResponse(
        available=sorted(available),
        backends=[
            BackendStatus(
                capability=backend.capability,
                base_url=backend.base_url,
                available=backend.capability in available,
            )
            for backend in registry.backends
        ],
    )
