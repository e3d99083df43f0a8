"""Tests for the studydeck config loader."""

from __future__ import annotations

import warnings
from pathlib import Path

import pytest
import yaml

from studydeck.config import StudydeckConfig, load_config, write_project_config
from studydeck.errors import ValidationError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_yaml(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.dump(data), encoding="utf-8")


def _load(tmp_path: Path, global_path: Path | None = None) -> StudydeckConfig:
    return load_config(
        project_dir=tmp_path,
        global_config_path=global_path or tmp_path / "nonexistent" / "config.yaml",
    )


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


def test_load_config_defaults_no_files(tmp_path: Path) -> None:
    cfg = _load(tmp_path)
    assert cfg.database.path == ".studydeck.db"
    assert cfg.embedding.model == "openai/text-embedding-3-small"
    assert cfg.embedding.dimensions == 1536
    assert cfg.embedding.num_retries == 1
    assert cfg.embedding.batch_size == 20
    assert cfg.chunking.chunk_size == 500
    assert cfg.chunking.chunk_overlap == 50
    assert cfg.retrieval.match_threshold == 0.7
    assert cfg.retrieval.match_count == 5
    assert cfg.study.due_limit == 20


# ---------------------------------------------------------------------------
# Layering
# ---------------------------------------------------------------------------


def test_project_config_overrides_global(tmp_path: Path) -> None:
    global_path = tmp_path / "home" / "config.yaml"
    _write_yaml(global_path, {"retrieval": {"match_count": 8, "match_threshold": 0.5}})
    _write_yaml(tmp_path / "studydeck.yaml", {"retrieval": {"match_count": 3}})

    cfg = _load(tmp_path, global_path)
    assert cfg.retrieval.match_count == 3
    assert cfg.retrieval.match_threshold == 0.5


def test_env_overrides_files(tmp_path: Path, monkeypatch) -> None:
    _write_yaml(tmp_path / "studydeck.yaml", {"embedding": {"model": "cohere/embed-english-v3.0"}})
    monkeypatch.setenv("STUDYDECK_EMBEDDING_MODEL", "openai/text-embedding-3-large")
    monkeypatch.setenv("STUDYDECK_DB", "/data/study.db")

    cfg = _load(tmp_path)
    assert cfg.embedding.model == "openai/text-embedding-3-large"
    assert cfg.database.path == "/data/study.db"


def test_empty_section_keeps_defaults(tmp_path: Path) -> None:
    _write_yaml(tmp_path / "studydeck.yaml", {"chunking": None})
    assert _load(tmp_path).chunking.chunk_size == 500


def test_unknown_section_warns(tmp_path: Path) -> None:
    _write_yaml(tmp_path / "studydeck.yaml", {"generation": {"model": "x"}})
    with warnings.catch_warnings(record=True) as w:
        warnings.simplefilter("always")
        _load(tmp_path)
    assert any("generation" in str(warning.message) for warning in w)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def test_global_config_rejects_api_keys(tmp_path: Path) -> None:
    global_path = tmp_path / "home" / "config.yaml"
    _write_yaml(global_path, {"embedding": {"api_key": "sk-leak"}})
    with pytest.raises(ValidationError, match="embedding.api_key"):
        _load(tmp_path, global_path)


def test_chunk_size_key_is_not_mistaken_for_secret(tmp_path: Path) -> None:
    global_path = tmp_path / "home" / "config.yaml"
    _write_yaml(global_path, {"chunking": {"chunk_size": 300}})
    assert _load(tmp_path, global_path).chunking.chunk_size == 300


@pytest.mark.parametrize(
    "data",
    [
        {"chunking": {"chunk_size": 0}},
        {"chunking": {"chunk_size": 100, "chunk_overlap": 100}},
        {"chunking": {"chunk_overlap": -1}},
        {"embedding": {"dimensions": 0}},
        {"embedding": {"batch_size": 0}},
        {"retrieval": {"match_count": 0}},
        {"retrieval": {"match_threshold": "high"}},
        {"embedding": ["not", "a", "mapping"]},
    ],
)
def test_invalid_values_rejected(tmp_path: Path, data: dict) -> None:
    _write_yaml(tmp_path / "studydeck.yaml", data)
    with pytest.raises(ValidationError):
        _load(tmp_path)


# ---------------------------------------------------------------------------
# write_project_config
# ---------------------------------------------------------------------------


def test_write_project_config_round_trips(tmp_path: Path) -> None:
    path = write_project_config(tmp_path)
    assert path == tmp_path / "studydeck.yaml"
    text = path.read_text(encoding="utf-8")
    assert text.startswith("# studydeck project configuration.")
    assert "api_key" not in text
    assert _load(tmp_path).embedding.model == "openai/text-embedding-3-small"


def test_write_project_config_does_not_overwrite(tmp_path: Path) -> None:
    target = tmp_path / "studydeck.yaml"
    target.write_text("retrieval:\n  match_count: 9\n", encoding="utf-8")
    write_project_config(tmp_path)
    assert _load(tmp_path).retrieval.match_count == 9
