"""Tests for studydeck ingest (litellm.embedding is patched)."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from studydeck.cli.main import app
from studydeck.db.connection import Database
from studydeck.db.models import DocumentStatus
from studydeck.db.repository import Repository

runner = CliRunner()

_PATCH = "studydeck.ingest.embedder.litellm.embedding"


def _fake_embedding(**kwargs):
    texts = [kwargs["input"]] if isinstance(kwargs["input"], str) else kwargs["input"]
    return SimpleNamespace(
        data=[{"index": i, "embedding": [1.0, 0.0, float(i)]} for i in range(len(texts))],
        usage=SimpleNamespace(total_tokens=4 * len(texts)),
    )


@pytest.fixture(autouse=True)
def project(tmp_path: Path, monkeypatch) -> Path:
    """A project dir with a 3-dimensional embedding config and an API key set."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    (tmp_path / "studydeck.yaml").write_text(
        "embedding:\n  dimensions: 3\nchunking:\n  chunk_size: 50\n  chunk_overlap: 5\n",
        encoding="utf-8",
    )
    return tmp_path


def _documents(project: Path):
    with Database(project / ".studydeck.db") as conn:
        return Repository(conn).list_documents()


# ------------------------------------------------------------------
# Input validation
# ------------------------------------------------------------------


def test_ingest_missing_file(project: Path) -> None:
    result = runner.invoke(app, ["ingest", "missing.txt"])
    assert result.exit_code == 1
    assert "File not found" in result.output


def test_ingest_unsupported_suffix(project: Path) -> None:
    (project / "slides.pdf").write_bytes(b"%PDF-1.7")
    result = runner.invoke(app, ["ingest", "slides.pdf"])
    assert result.exit_code == 1
    assert "Unsupported file type" in result.output


def test_ingest_without_api_key(project: Path, monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY")
    (project / "notes.txt").write_text("Some notes.", encoding="utf-8")
    with patch(_PATCH) as mock_embed:
        result = runner.invoke(app, ["ingest", "notes.txt"])
    assert result.exit_code == 1
    assert "OPENAI_API_KEY" in result.output
    mock_embed.assert_not_called()


# ------------------------------------------------------------------
# Ingestion
# ------------------------------------------------------------------


def test_ingest_stores_document(project: Path) -> None:
    text = " ".join(f"Photosynthesis fact {i} is important." for i in range(30))
    (project / "biology.md").write_text(text, encoding="utf-8")

    with patch(_PATCH, side_effect=_fake_embedding):
        result = runner.invoke(app, ["ingest", "biology.md", "--name", "Biology notes"])

    assert result.exit_code == 0, result.output
    assert "chunks stored" in result.output
    [doc] = _documents(project)
    assert doc.name == "Biology notes"
    assert doc.status == DocumentStatus.READY
    assert doc.file_type == "text"
    assert doc.total_chunks > 1


def test_ingest_page_markers_stored_as_pdf_text(project: Path) -> None:
    (project / "book.txt").write_text("[PAGE 1] One. [PAGE 2] Two.", encoding="utf-8")
    with patch(_PATCH, side_effect=_fake_embedding):
        result = runner.invoke(app, ["ingest", "book.txt"])

    assert result.exit_code == 0, result.output
    [doc] = _documents(project)
    assert doc.file_type == "pdf"
    assert doc.name == "book.txt"
    assert doc.total_chunks == 2


def test_ingest_empty_file_fails(project: Path) -> None:
    (project / "empty.txt").write_text("   \n", encoding="utf-8")
    with patch(_PATCH, side_effect=_fake_embedding):
        result = runner.invoke(app, ["ingest", "empty.txt"])

    assert result.exit_code == 1
    assert "No text content" in result.output
    [doc] = _documents(project)
    assert doc.status == DocumentStatus.ERROR


def test_ingest_upstream_failure(project: Path) -> None:
    (project / "notes.txt").write_text("Some notes.", encoding="utf-8")
    with patch(_PATCH, side_effect=RuntimeError("quota exceeded")):
        result = runner.invoke(app, ["ingest", "notes.txt"])

    assert result.exit_code == 1
    assert "Embedding service failed" in result.output
    [doc] = _documents(project)
    assert doc.status == DocumentStatus.ERROR
    assert "quota exceeded" in doc.error_message
