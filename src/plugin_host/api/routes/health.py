"""Health check routes."""
from fastapi import APIRouter, Depends

from plugin_host.api.state import HostState, get_state

router = APIRouter()


@router.get("/health")
def health_check(state: HostState = Depends(get_state)) -> dict:
    """
    Health check endpoint.

    Returns:
        Status dict with document counts
    """
    return {
        "status": "healthy",
        "service": "plugin-host",
        "documents": state.counts(),
    }
