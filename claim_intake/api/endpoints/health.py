"""Health check endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...infrastructure.dependencies import ServiceContainer
from ..dependencies import get_container

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(container: ServiceContainer = Depends(get_container)) -> Dict[str, Any]:
    """Report container state and store backend availability."""
    return {
        "status": "healthy" if container.is_started else "starting",
        **container.health(),
    }
