"""GET / and GET /health - liveness checks."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from app.core.settings import get_settings

router = APIRouter(tags=["health"])


@router.get("/", summary="Service banner")
def root() -> dict[str, str]:
    return {"message": f"{get_settings().app_name} is running"}


@router.get("/health", summary="Basic health check")
@router.get("/api/v1/health", include_in_schema=False)
def health_check() -> dict[str, str]:
    settings = get_settings()
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.app_env,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
