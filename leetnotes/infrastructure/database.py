"""Centralized database configuration

LeetNotes keeps its two pieces of local state (settings and OAuth
credentials) in ONE SQLite database, by default leetnotes/data/leetnotes.db.
All repositories go through get_db_connection() / db_transaction().

Connections are short-lived: one per context manager, configured with WAL
and Row factory. The HTTP service and the CLI each touch the database a
handful of times per invocation.
"""

from __future__ import annotations

import os
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from leetnotes.observability.logging import get_logger

DB_PATH = Path(__file__).parent.parent / "data" / "leetnotes.db"
DB_CONNECT_TIMEOUT = 30.0

logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT,
    encrypted INTEGER NOT NULL DEFAULT 0,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS user_credentials (
    user_id TEXT PRIMARY KEY,
    encrypted_token_json TEXT NOT NULL,
    scopes TEXT NOT NULL,
    token_expiry TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


def get_db_path() -> Path:
    """
    Get database path (environment-aware)

    Checks LEETNOTES_DB_PATH environment variable first,
    falls back to default location.
    """
    if env_path := os.getenv("LEETNOTES_DB_PATH"):
        return Path(env_path)

    return DB_PATH


def _create_connection(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), timeout=DB_CONNECT_TIMEOUT, check_same_thread=False)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA synchronous=NORMAL")
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_db_connection() -> Generator[sqlite3.Connection, None, None]:
    """
    Get database connection (context manager)

    Usage:
        with get_db_connection() as conn:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()

    Yields:
        sqlite3.Connection with Row factory enabled

    Raises:
        FileNotFoundError: If database hasn't been initialized
    """
    db_path = get_db_path()

    if not db_path.exists():
        raise FileNotFoundError(
            f"Database not found: {db_path}\nRun init_database() (done by `leetnotes` on startup)."
        )

    conn = _create_connection(db_path)
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def db_transaction() -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database transactions

    Automatically commits on success, rolls back on error.

    Side Effects:
        - Commits transaction on success (writes changes to disk)
        - Rolls back transaction on exception
    """
    with get_db_connection() as conn:
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise


def init_database() -> None:
    """
    Initialize database with schema (idempotent)

    Safe to run multiple times - uses CREATE TABLE IF NOT EXISTS.

    Side Effects:
    - Creates the data directory if needed
    - Creates the settings and user_credentials tables
    """
    db_path = get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = _create_connection(db_path)
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()

    logger.debug("Database initialized at %s", db_path)
