"""GET / and GET /health: liveness checks."""
from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from app.core.settings import get_settings

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse, summary="Liveness banner")
def root() -> str:
    return "Checkout API is live."


@router.get("/health", summary="Basic health check")
def health_check() -> dict[str, str]:
    settings = get_settings()
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.app_env,
    }
