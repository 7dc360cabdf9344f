"""Health endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/routes", status_code=status.HTTP_200_OK)
def health_routes() -> dict:
    """Check the routed distance provider with one trivial request."""
    from ...services.distance.routes_client import RoutesMatrixClient

    try:
        client = RoutesMatrixClient()
    except ValueError as e:
        return {"service": "routes", "configured": False, "healthy": False, "error": str(e)}
    return {"service": "routes", "configured": True, "healthy": client.check_health()}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and report the active merchant count."""
    from ...data.merchants_repository import MerchantRepository
    from ...db.supabase import get_supabase_client
    from ...errors import DiscoveryError

    if not get_supabase_client():
        return {
            "configured": False,
            "message": "Supabase not configured. Set DISCOVERY_SUPABASE_URL and DISCOVERY_SUPABASE_KEY environment variables.",
        }

    try:
        active = MerchantRepository().count_active()
    except DiscoveryError as exc:
        return {
            "configured": True,
            "connected": False,
            "error": exc.message,
        }
    return {
        "configured": True,
        "connected": True,
        "total_active_merchants": active,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
