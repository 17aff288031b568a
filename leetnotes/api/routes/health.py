"""Health check endpoint for the LeetNotes API."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

from leetnotes.config import APP_VERSION, GEMINI_MODEL

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Service status and version (makes no upstream API calls)."""
    return {
        "status": "healthy",
        "service": "LeetNotes API",
        "version": APP_VERSION,
        "model": GEMINI_MODEL,
        "timestamp": datetime.now(UTC).isoformat(),
    }
