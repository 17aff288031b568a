"""Unit tests for process-wide logging setup"""

from __future__ import annotations

import logging

import pytest

from leetnotes.config import LOG_LEVEL
from leetnotes.observability.logging import get_logger


def test_module_logger_uses_configured_level():
    logger = get_logger("leetnotes.tests.sample")

    assert logger.level == getattr(logging, LOG_LEVEL, logging.INFO)


@pytest.mark.parametrize("name", ["urllib3", "google", "google_auth_oauthlib"])
def test_client_libraries_log_at_warning_or_above(name):
    get_logger("leetnotes.tests.sample")

    assert logging.getLogger(name).getEffectiveLevel() >= logging.WARNING
