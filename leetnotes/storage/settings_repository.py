"""Settings repository - the two user preferences LeetNotes keeps

Key-value storage for:
- geminiKey: Gemini API key (stored Fernet-encrypted)
- leetnotesDocId: preferred Google Doc ID (optional, plain text)

Values are read once at the start of each note request and never cached.
"""

from __future__ import annotations

from dataclasses import dataclass

from cryptography.fernet import InvalidToken

from leetnotes.config import SETTINGS_KEY_API_KEY, SETTINGS_KEY_DOC_ID
from leetnotes.errors import CredentialEncryptionError, ValidationError
from leetnotes.observability.logging import get_logger
from leetnotes.observability.telemetry import log_event
from leetnotes.utils.redaction import redact
from leetnotes.storage import BaseRepository, get_cipher

logger = get_logger(__name__)


@dataclass(frozen=True)
class Settings:
    """Snapshot of stored configuration."""

    api_key: str = ""
    doc_id: str = ""

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


class SettingsRepository(BaseRepository):
    """Repository for the settings key-value table."""

    def __init__(self):
        super().__init__("settings")

    def get(self, key: str) -> str | None:
        """
        Get a stored value, decrypting it if it was stored encrypted.

        Raises:
            CredentialEncryptionError: If an encrypted value can't be decrypted
        """
        row = self.query_one("SELECT value, encrypted FROM settings WHERE key = ?", (key,))
        if row is None or row["value"] is None:
            return None

        if not row["encrypted"]:
            return row["value"]

        try:
            return get_cipher().decrypt(row["value"].encode()).decode()
        except InvalidToken as e:
            logger.error("Failed to decrypt setting %s", key)
            raise CredentialEncryptionError(f"Decryption failed for setting '{key}'") from e

    def set(self, key: str, value: str | None, encrypt: bool = False) -> None:
        """
        Insert or replace a value.

        Side Effects:
            - Upserts a row in the settings table
        """
        stored = value
        if encrypt and value:
            stored = get_cipher().encrypt(value.encode()).decode()

        self.execute(
            """
            INSERT INTO settings (key, value, encrypted, updated_at)
            VALUES (?, ?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                encrypted = excluded.encrypted,
                updated_at = CURRENT_TIMESTAMP
            """,
            (key, stored, int(bool(encrypt and value))),
        )

    def load(self) -> Settings:
        """Load the Gemini key and preferred doc ID (missing values are empty strings)."""
        return Settings(
            api_key=self.get(SETTINGS_KEY_API_KEY) or "",
            doc_id=self.get(SETTINGS_KEY_DOC_ID) or "",
        )

    def save(self, api_key: str, doc_id: str | None = None) -> Settings:
        """
        Persist both settings. A non-empty API key is required.

        Args:
            api_key: Gemini API key
            doc_id: Preferred Google Doc ID ("" or None clears it)

        Raises:
            ValidationError: If api_key is empty
        """
        api_key = (api_key or "").strip()
        doc_id = (doc_id or "").strip()

        if not api_key:
            raise ValidationError("Enter your Gemini API key")

        self.set(SETTINGS_KEY_API_KEY, api_key, encrypt=True)
        self.set(SETTINGS_KEY_DOC_ID, doc_id)

        log_event("settings.saved", api_key=redact(api_key), has_doc_id=bool(doc_id))
        return Settings(api_key=api_key, doc_id=doc_id)
