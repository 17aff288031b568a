"""
Pytest configuration for LeetNotes tests

Every test gets its own SQLite database and encryption key, so nothing
touches leetnotes/data or a developer's real settings.
"""

from __future__ import annotations

import pytest
from cryptography.fernet import Fernet

from leetnotes.infrastructure.database import init_database
from leetnotes.observability.telemetry import reset_telemetry


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point the database at tmp_path and set a throwaway encryption key"""
    monkeypatch.setenv("LEETNOTES_DB_PATH", str(tmp_path / "leetnotes_test.db"))
    monkeypatch.setenv("LEETNOTES_ENCRYPTION_KEY", Fernet.generate_key().decode())
    init_database()
    reset_telemetry()
    yield
