"""Storage - repositories over the LeetNotes SQLite database"""

from __future__ import annotations

import os
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from cryptography.fernet import Fernet

from leetnotes.errors import ConfigurationError
from leetnotes.infrastructure.database import db_transaction, get_db_connection


class BaseRepository:
    """Base class for database repositories with common CRUD operations."""

    def __init__(self, table_name: str) -> None:
        if not isinstance(table_name, str) or not table_name.replace("_", "").isalnum():
            raise ValueError(f"Invalid table name: {table_name}")
        self.table_name = table_name

    @contextmanager
    def _get_conn(self) -> Generator[sqlite3.Connection, None, None]:
        with get_db_connection() as conn:
            yield conn

    def query_one(self, query: str, params: tuple[Any, ...] | None = None) -> sqlite3.Row | None:
        with self._get_conn() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params or ())
            return cursor.fetchone()

    def execute(self, query: str, params: tuple[Any, ...] | None = None) -> int | None:
        """
        Execute a write query (INSERT, UPDATE, DELETE)

        Returns:
            Last inserted row ID

        Side Effects:
            - Writes to database table specified in query
            - Commits transaction automatically (via db_transaction)
        """
        with db_transaction() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params or ())
            return cursor.lastrowid


def get_cipher() -> Fernet:
    """
    Get Fernet cipher for secrets at rest (Gemini key, OAuth tokens)

    Raises:
        ConfigurationError: If LEETNOTES_ENCRYPTION_KEY is missing or malformed
    """
    encryption_key = os.getenv("LEETNOTES_ENCRYPTION_KEY")

    if not encryption_key:
        raise ConfigurationError(
            "LEETNOTES_ENCRYPTION_KEY environment variable must be set. "
            "Generate one with: python -c "
            "'from cryptography.fernet import Fernet; "
            "print(Fernet.generate_key().decode())'"
        )

    try:
        return Fernet(encryption_key.encode())
    except ValueError as e:
        raise ConfigurationError(f"Invalid encryption key format: {e}") from e


__all__ = ["BaseRepository", "get_cipher"]
