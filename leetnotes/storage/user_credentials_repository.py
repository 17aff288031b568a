"""User credentials repository for Google OAuth tokens

Stores the Drive/Docs OAuth token obtained by the interactive sign-in so
later note requests can get a bearer token without prompting again.

SECURITY:
- Tokens encrypted with Fernet (LEETNOTES_ENCRYPTION_KEY)
- Token expiry tracked so callers can refresh before use
"""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import Any

from leetnotes.errors import CredentialEncryptionError
from leetnotes.observability.logging import get_logger
from leetnotes.storage import BaseRepository, get_cipher

logger = get_logger(__name__)


class UserCredentialsRepository(BaseRepository):
    """Repository for encrypted OAuth credentials, one row per user_id."""

    def __init__(self):
        super().__init__("user_credentials")
        self._cipher = get_cipher()

    def _encrypt_token(self, token_dict: dict[str, Any]) -> str:
        try:
            return self._cipher.encrypt(json.dumps(token_dict).encode()).decode()
        except (TypeError, ValueError) as e:
            logger.error("Failed to encrypt token: %s", e)
            raise CredentialEncryptionError(f"Encryption failed: {e}") from e

    def _decrypt_token(self, encrypted_token: str) -> dict[str, Any]:
        try:
            decrypted_bytes = self._cipher.decrypt(encrypted_token.encode())
            return json.loads(decrypted_bytes.decode())
        except Exception as e:
            logger.error("Failed to decrypt token: %s", e)
            raise CredentialEncryptionError(f"Decryption failed: {e}") from e

    def store_credentials(
        self,
        user_id: str,
        token_dict: dict[str, Any],
        scopes: list[str],
        token_expiry: datetime | None = None,
    ) -> None:
        """
        Store or update user credentials

        Args:
            user_id: User identifier ("default" for the local single-user setup)
            token_dict: OAuth token data (token, refresh_token, client_id, ...)
            scopes: List of OAuth scopes granted
            token_expiry: Token expiration timestamp (UTC)

        Raises:
            CredentialEncryptionError: If encryption fails
        """
        encrypted_token = self._encrypt_token(token_dict)
        expiry_str = token_expiry.isoformat() if token_expiry else None

        self.execute(
            """
            INSERT INTO user_credentials (user_id, encrypted_token_json, scopes, token_expiry)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                encrypted_token_json = excluded.encrypted_token_json,
                scopes = excluded.scopes,
                token_expiry = excluded.token_expiry,
                updated_at = CURRENT_TIMESTAMP
            """,
            (user_id, encrypted_token, json.dumps(scopes), expiry_str),
        )
        logger.info("Stored credentials for user: %s", user_id)

    def get_by_user_id(self, user_id: str) -> dict[str, Any] | None:
        """
        Get decrypted credentials for a user

        Returns:
            Dict with keys user_id, token_dict, scopes, token_expiry, or None if not found

        Raises:
            CredentialEncryptionError: If decryption fails
        """
        row = self.query_one("SELECT * FROM user_credentials WHERE user_id = ?", (user_id,))

        if not row:
            return None

        return {
            "user_id": row["user_id"],
            "token_dict": self._decrypt_token(row["encrypted_token_json"]),
            "scopes": json.loads(row["scopes"]),
            "token_expiry": (
                datetime.fromisoformat(row["token_expiry"]) if row["token_expiry"] else None
            ),
        }

    def is_token_expired(self, user_id: str, buffer_seconds: int = 300) -> bool:
        """
        Check if token is expired or will expire within buffer_seconds

        Returns True if nothing is stored or expiry is unknown (to trigger refresh).
        """
        row = self.query_one(
            "SELECT token_expiry FROM user_credentials WHERE user_id = ?", (user_id,)
        )

        if not row or not row["token_expiry"]:
            return True

        expiry = datetime.fromisoformat(row["token_expiry"])
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=UTC)

        return expiry <= datetime.now(UTC) + timedelta(seconds=buffer_seconds)

    def delete_credentials(self, user_id: str) -> None:
        """
        Delete user credentials

        Side Effects:
            - Deletes row from user_credentials table
        """
        self.execute(f"DELETE FROM {self.table_name} WHERE user_id = ?", (user_id,))
        logger.info("Deleted credentials for user: %s", user_id)
