"""Health check endpoints."""

from fastapi import APIRouter, Request

from walletdesk import __version__
from walletdesk.config import get_settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "walletdesk"}


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Detailed health check with configuration and session status."""
    settings = get_settings()
    controller = request.app.state.controller
    return {
        "status": "healthy",
        "service": "walletdesk",
        "version": __version__,
        "wallet": controller.wallet.name,
        "session_status": controller.session.status.value,
        "config": settings.get_safe_dict(),
    }
