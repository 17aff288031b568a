"""
Settings endpoints - load and save the extension's configuration.

The Gemini key is write-only over HTTP: reads return whether it is set and
a masked form, never the key itself.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from leetnotes.errors import LeetNotesError, ValidationError
from leetnotes.observability.logging import get_logger
from leetnotes.storage.settings_repository import Settings, SettingsRepository
from leetnotes.utils.redaction import mask_secret

router = APIRouter(prefix="/api/settings", tags=["settings"])
logger = get_logger(__name__)

_settings_repo: SettingsRepository | None = None


def set_settings_repository(repo: SettingsRepository | None) -> None:
    """Inject the repository (app startup and tests)."""
    global _settings_repo
    _settings_repo = repo


def get_settings_repository() -> SettingsRepository:
    global _settings_repo
    if _settings_repo is None:
        _settings_repo = SettingsRepository()
    return _settings_repo


class SettingsResponse(BaseModel):
    has_api_key: bool
    api_key_masked: str
    doc_id: str

    @classmethod
    def from_settings(cls, settings: Settings) -> SettingsResponse:
        return cls(
            has_api_key=settings.has_api_key,
            api_key_masked=mask_secret(settings.api_key),
            doc_id=settings.doc_id,
        )


class SaveSettingsRequest(BaseModel):
    api_key: str = ""
    doc_id: str = ""


@router.get("", response_model=SettingsResponse)
def load_settings() -> SettingsResponse:
    try:
        settings = get_settings_repository().load()
    except LeetNotesError as e:
        logger.error("Failed to load settings: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e
    return SettingsResponse.from_settings(settings)


@router.put("", response_model=SettingsResponse)
def save_settings(request: SaveSettingsRequest) -> SettingsResponse:
    """Persist the Gemini key and optional doc ID. 400 if the key is empty."""
    try:
        settings = get_settings_repository().save(request.api_key, request.doc_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except LeetNotesError as e:
        logger.error("Failed to save settings: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e
    return SettingsResponse.from_settings(settings)
