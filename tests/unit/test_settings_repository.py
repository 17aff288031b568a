"""Unit tests for stored settings (Gemini key + preferred doc ID)"""

from __future__ import annotations

import pytest
from cryptography.fernet import Fernet

from leetnotes.config import SETTINGS_KEY_API_KEY
from leetnotes.errors import ConfigurationError, CredentialEncryptionError, ValidationError
from leetnotes.infrastructure.database import get_db_connection
from leetnotes.storage.settings_repository import Settings, SettingsRepository


def test_empty_store_loads_blank_settings():
    settings = SettingsRepository().load()

    assert settings == Settings(api_key="", doc_id="")
    assert settings.has_api_key is False


def test_save_and_load_round_trip():
    repo = SettingsRepository()
    repo.save("  gemini-key  ", " doc-123 ")

    assert repo.load() == Settings(api_key="gemini-key", doc_id="doc-123")


def test_api_key_is_encrypted_at_rest():
    SettingsRepository().save("super-secret-key", "")

    with get_db_connection() as conn:
        row = conn.execute(
            "SELECT value, encrypted FROM settings WHERE key = ?", (SETTINGS_KEY_API_KEY,)
        ).fetchone()

    assert row["encrypted"] == 1
    assert "super-secret-key" not in row["value"]


@pytest.mark.parametrize("api_key", ["", "   ", None])
def test_save_requires_api_key(api_key):
    repo = SettingsRepository()

    with pytest.raises(ValidationError):
        repo.save(api_key, "doc-1")

    assert repo.load() == Settings()


def test_save_overwrites_previous_values():
    repo = SettingsRepository()
    repo.save("first", "doc-1")
    repo.save("second", "")

    assert repo.load() == Settings(api_key="second", doc_id="")


def test_wrong_encryption_key_fails_to_decrypt(monkeypatch):
    repo = SettingsRepository()
    repo.save("gemini-key", "")

    monkeypatch.setenv("LEETNOTES_ENCRYPTION_KEY", Fernet.generate_key().decode())

    with pytest.raises(CredentialEncryptionError):
        repo.load()


def test_missing_encryption_key_is_configuration_error(monkeypatch):
    monkeypatch.delenv("LEETNOTES_ENCRYPTION_KEY")

    with pytest.raises(ConfigurationError):
        SettingsRepository().save("gemini-key", "")
