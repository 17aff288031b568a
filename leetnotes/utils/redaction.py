"""
Redaction helpers for logging and API responses.

Provides:
- redact(): Hash sensitive strings for correlation without exposure
- mask_secret(): Show only the tail of an API key
"""

from __future__ import annotations

from hashlib import sha256


def redact(value: str | None) -> str:
    """
    Return a stable hash representation of a sensitive string.
    """
    if not value:
        return "hash:missing"
    digest = sha256(value.encode("utf-8")).hexdigest()[:12]
    return f"hash:{digest}"


def mask_secret(secret: str | None, visible: int = 4) -> str:
    """
    Mask an API key for display, keeping the last `visible` characters.

    Example:
        "AIzaSyD-abcdef1234" -> "**************1234"
    """
    if not secret:
        return ""
    if len(secret) <= visible:
        return "*" * len(secret)
    return "*" * (len(secret) - visible) + secret[-visible:]
