"""Shared pytest fixtures."""

from __future__ import annotations

import logging

import pytest

from studydeck.db.connection import Database
from studydeck.db.schema import initialize


@pytest.fixture
def tmp_db(tmp_path):
    """File-based DB in tmp_path with schema initialized, closed after test."""
    db = Database(tmp_path / ".studydeck.db")
    conn = db.connect()
    initialize(conn)
    yield conn
    conn.close()


@pytest.fixture(autouse=True)
def _reset_studydeck_logger():
    """Drop handlers installed by CLI invocations so they don't outlive the test."""
    yield
    logger = logging.getLogger("studydeck")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path, monkeypatch):
    """Keep the user's ~/.studydeck/config.yaml and STUDYDECK_* variables out of tests."""
    monkeypatch.setattr("studydeck.config._GLOBAL_CONFIG_PATH", tmp_path / "home" / "config.yaml")
    for var in ("STUDYDECK_EMBEDDING_MODEL", "STUDYDECK_DB", "STUDYDECK_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
