"""Tests for studydeck review / due / stats."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from studydeck.cli.main import app
from studydeck.db.connection import Database
from studydeck.db.models import ProgressStatus
from studydeck.db.progress import ProgressRepository

runner = CliRunner()


@pytest.fixture(autouse=True)
def project(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _progress(project: Path, card: str):
    with Database(project / ".studydeck.db") as conn:
        return ProgressRepository(conn).get_progress(card)


# ------------------------------------------------------------------
# review
# ------------------------------------------------------------------


def test_review_correct(project: Path) -> None:
    result = runner.invoke(app, ["review", "card-1", "--correct", "--response-ms", "900"])
    assert result.exit_code == 0, result.output
    assert "learning" in result.output
    assert "1/1 correct" in result.output
    assert _progress(project, "card-1").status == ProgressStatus.LEARNING


def test_review_incorrect(project: Path) -> None:
    result = runner.invoke(app, ["review", "card-1", "--incorrect"])
    assert result.exit_code == 0, result.output
    assert "needs_review" in result.output
    assert "0/1 correct" in result.output


def test_review_requires_outcome(project: Path) -> None:
    result = runner.invoke(app, ["review", "card-1"])
    assert result.exit_code != 0


def test_review_accumulates(project: Path) -> None:
    for _ in range(5):
        runner.invoke(app, ["review", "card-1", "--correct"])
    record = _progress(project, "card-1")
    assert record.status == ProgressStatus.MASTERED
    assert (record.times_correct, record.times_reviewed) == (5, 5)


# ------------------------------------------------------------------
# due
# ------------------------------------------------------------------


def test_due_without_database(project: Path) -> None:
    result = runner.invoke(app, ["due"])
    assert result.exit_code == 1
    assert "No database found" in result.output


def test_due_nothing_due(project: Path) -> None:
    runner.invoke(app, ["review", "card-1", "--correct"])
    result = runner.invoke(app, ["due"])
    assert result.exit_code == 0, result.output
    assert "all caught up" in result.output


def test_due_lists_missed_cards(project: Path) -> None:
    runner.invoke(app, ["review", "card-1", "--correct"])
    runner.invoke(app, ["review", "card-2", "--incorrect"])
    result = runner.invoke(app, ["due"])
    assert result.exit_code == 0, result.output
    assert "card-2" in result.output
    assert "card-1" not in result.output


# ------------------------------------------------------------------
# stats
# ------------------------------------------------------------------


def test_stats_reports_readiness_and_streak(project: Path) -> None:
    runner.invoke(app, ["review", "card-1", "--correct"])
    runner.invoke(app, ["review", "card-2", "--incorrect"])
    result = runner.invoke(app, ["stats", "--total", "4"])
    assert result.exit_code == 0, result.output
    # one learning card out of four: 0.5 / 4 = 12.5% rounds to 13%
    assert "13%" in result.output
    assert "1 day" in result.output


def test_stats_requires_total(project: Path) -> None:
    runner.invoke(app, ["init", "--no-config"])
    result = runner.invoke(app, ["stats"])
    assert result.exit_code != 0


# ------------------------------------------------------------------
# Top-level options
# ------------------------------------------------------------------


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.output.startswith("studydeck ")


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "studydeck" in result.output


def test_verbose_enables_debug_logging() -> None:
    runner.invoke(app, ["--verbose", "version"])
    assert logging.getLogger("studydeck").level == logging.DEBUG


def test_log_level_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("STUDYDECK_LOG_LEVEL", "info")
    runner.invoke(app, ["version"])
    assert logging.getLogger("studydeck").level == logging.INFO
