"""Health and readiness endpoints."""

from importlib import metadata
from typing import Any

from fastapi import APIRouter

from backend.core.config import settings

from .metrics import get_metrics

router = APIRouter()


def get_version() -> str:
    """Get the installed package version."""
    try:
        return metadata.version("efactura-export")
    except metadata.PackageNotFoundError:
        return "dev"


def check_billing_api() -> str:
    """Report whether the billing API connection is configured."""
    if settings.UCRM_API_URL and settings.UCRM_APP_KEY:
        return "CONFIGURED"
    return "MISSING_KEY"


@router.get("/health/ready")
async def readiness_check() -> dict[str, Any]:
    """Readiness endpoint for load balancers."""
    api_status = check_billing_api()

    return {
        "status": "OK" if api_status == "CONFIGURED" else "DEGRADED",
        "version": get_version(),
        "billing_api": api_status,
    }


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """Liveness endpoint - always OK if service is running."""
    return {"status": "OK"}


@router.get("/metrics")
async def metrics_snapshot() -> dict[str, Any]:
    """In-process metrics snapshot."""
    return get_metrics()
