"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings
from ...services.routing.gemini_client import is_configured

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/oracle", status_code=status.HTTP_200_OK)
def health_oracle() -> dict:
    """Report whether oracle credentials are present. Makes no network call."""
    return {"service": "oracle", "model": settings.gemini_model, "configured": is_configured()}
