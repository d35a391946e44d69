"""
Pytest configuration and fixtures for tsmrules tests.
"""

from __future__ import annotations

import logging
from typing import Generator

import pytest

from tsmrules.config import reset_settings
from tsmrules.logger import ROOT_LOGGER
from tsmrules.storage.keys import composite_key
from tsmrules.storage.types import Value


@pytest.fixture(autouse=True)
def _isolate_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Reset settings and CLI log handlers around each test."""
    for var in ("TSMRULES_LOG_LEVEL", "TSMRULES_LOG_FORMAT", "TSMRULES_RULES_FILE"):
        monkeypatch.delenv(var, raising=False)
    reset_settings()

    yield

    reset_settings()
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        if getattr(handler, "_tsmrules", False):
            root.removeHandler(handler)
    root.setLevel(logging.NOTSET)


@pytest.fixture
def block():
    """Build a (key, values) block for a series field from timestamps."""

    def _block(series: str, field: str, *timestamps: int):
        return composite_key(series, field), [Value(unix_nano=ts) for ts in timestamps]

    return _block
