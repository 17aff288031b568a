"""Centralized configuration for the LeetNotes backend.

Typed constants read from the environment with safe defaults so the service
and the CLI start without extra configuration. `.env` is loaded once through
leetnotes.infrastructure.env before any value is read.
"""

from __future__ import annotations

import os

from leetnotes.infrastructure.env import ensure_env_loaded

ensure_env_loaded()

# --- App ---
APP_VERSION: str = "1.0.0"
APP_ENV: str = os.getenv("LEETNOTES_ENV", "development")
EXTENSION_ID: str = os.getenv("LEETNOTES_EXTENSION_ID", "")
LOG_LEVEL: str = os.getenv("LEETNOTES_LOG_LEVEL", "INFO").upper()

# --- HTTP ---
HTTP_TIMEOUT_SECONDS: float = float(os.getenv("LEETNOTES_HTTP_TIMEOUT", "60"))

# --- Google APIs ---
DRIVE_API_BASE_URL: str = "https://www.googleapis.com/drive/v3/"
DOCS_API_BASE_URL: str = "https://docs.googleapis.com/v1/"
GEMINI_API_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/"
GOOGLE_OAUTH_CLIENT_SECRETS: str = os.getenv(
    "GOOGLE_OAUTH_CLIENT_SECRETS", "credentials/credentials.json"
)

# --- LLM ---
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash-latest")

# --- Notes document ---
DEFAULT_DOC_NAME: str = "LeetNotes"

# --- Orchestrator ---
SINGLE_FLIGHT: bool = os.getenv("LEETNOTES_SINGLE_FLIGHT", "true").lower() == "true"

# --- Settings keys ---
SETTINGS_KEY_API_KEY: str = "geminiKey"
SETTINGS_KEY_DOC_ID: str = "leetnotesDocId"
