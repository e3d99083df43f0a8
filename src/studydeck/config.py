"""studydeck configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site, not in this module)
  2. Environment variables  (STUDYDECK_EMBEDDING_MODEL, STUDYDECK_DB)
  3. Per-project studydeck.yaml
  4. Global ~/.studydeck/config.yaml  (defaults only, no API keys)
  5. Hardcoded defaults

Global config must never contain API keys; use environment variables instead.
All YAML reads use yaml.safe_load(), never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from studydeck.errors import ValidationError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".studydeck"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "studydeck.yaml"

# Key names that look like credentials; forbidden in global config.
# Does NOT match legitimate keys like chunk_size or match_count.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["database", "embedding", "chunking", "retrieval", "study"]
)


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class DatabaseCfg:
    """SQLite database location (studydeck.yaml: database:)."""

    path: str = ".studydeck.db"


@dataclass
class EmbeddingCfg:
    """Embedding service configuration (studydeck.yaml: embedding:).

    Attributes:
        model: LiteLLM embedding model string (provider/model format).
        dimensions: Requested vector length; fixed for the lifetime of a vec table.
        timeout: Per-request timeout in seconds.
        num_retries: Retries on transient failures (LiteLLM backoff).
        batch_size: Texts per embedding request during ingestion.
    """

    model: str = "openai/text-embedding-3-small"
    dimensions: int = 1536
    timeout: float = 10.0
    num_retries: int = 1
    batch_size: int = 20


@dataclass
class ChunkingCfg:
    """Chunk size and overlap in approximate tokens (studydeck.yaml: chunking:)."""

    chunk_size: int = 500
    chunk_overlap: int = 50


@dataclass
class RetrievalCfg:
    """Similarity search configuration (studydeck.yaml: retrieval:)."""

    match_threshold: float = 0.7
    match_count: int = 5


@dataclass
class StudyCfg:
    """Study queue configuration (studydeck.yaml: study:)."""

    due_limit: int = 20


@dataclass
class StudydeckConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    database: DatabaseCfg = field(default_factory=DatabaseCfg)
    embedding: EmbeddingCfg = field(default_factory=EmbeddingCfg)
    chunking: ChunkingCfg = field(default_factory=ChunkingCfg)
    retrieval: RetrievalCfg = field(default_factory=RetrievalCfg)
    study: StudyCfg = field(default_factory=StudyCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ValidationError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ValidationError(
                        f"Global config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {str(k).upper().replace('-', '_')}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _validate(cfg: StudydeckConfig) -> None:
    """Reject values that would make the pipeline misbehave silently."""
    if cfg.chunking.chunk_size < 1:
        raise ValidationError("chunking.chunk_size must be >= 1")
    if not 0 <= cfg.chunking.chunk_overlap < cfg.chunking.chunk_size:
        raise ValidationError(
            "chunking.chunk_overlap must be >= 0 and smaller than chunking.chunk_size"
        )
    if cfg.embedding.dimensions < 1:
        raise ValidationError("embedding.dimensions must be >= 1")
    if cfg.embedding.batch_size < 1:
        raise ValidationError("embedding.batch_size must be >= 1")
    if cfg.retrieval.match_count < 1:
        raise ValidationError("retrieval.match_count must be >= 1")


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> StudydeckConfig:
    """Build a *StudydeckConfig* from a merged raw YAML dict."""
    cfg = StudydeckConfig()

    try:
        if "database" in data:
            d = data["database"] or {}
            cfg.database = DatabaseCfg(path=str(d.get("path", cfg.database.path)))

        if "embedding" in data:
            e = data["embedding"] or {}
            cfg.embedding = EmbeddingCfg(
                model=str(e.get("model", cfg.embedding.model)),
                dimensions=int(e.get("dimensions", cfg.embedding.dimensions)),
                timeout=float(e.get("timeout", cfg.embedding.timeout)),
                num_retries=int(e.get("num_retries", cfg.embedding.num_retries)),
                batch_size=int(e.get("batch_size", cfg.embedding.batch_size)),
            )

        if "chunking" in data:
            c = data["chunking"] or {}
            cfg.chunking = ChunkingCfg(
                chunk_size=int(c.get("chunk_size", cfg.chunking.chunk_size)),
                chunk_overlap=int(c.get("chunk_overlap", cfg.chunking.chunk_overlap)),
            )

        if "retrieval" in data:
            r = data["retrieval"] or {}
            cfg.retrieval = RetrievalCfg(
                match_threshold=float(r.get("match_threshold", cfg.retrieval.match_threshold)),
                match_count=int(r.get("match_count", cfg.retrieval.match_count)),
            )

        if "study" in data:
            s = data["study"] or {}
            cfg.study = StudyCfg(due_limit=int(s.get("due_limit", cfg.study.due_limit)))

    except (TypeError, ValueError, AttributeError) as exc:
        raise ValidationError(f"Invalid config value: {exc}") from exc

    return cfg


def _apply_env_overrides(cfg: StudydeckConfig) -> StudydeckConfig:
    """Apply STUDYDECK_* environment variable overrides (layer 2)."""
    if model := os.environ.get("STUDYDECK_EMBEDDING_MODEL"):
        cfg.embedding.model = model
    if db_path := os.environ.get("STUDYDECK_DB"):
        cfg.database.path = db_path
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> StudydeckConfig:
    """Load and return a merged *StudydeckConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *studydeck.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ValidationError: If global config contains API-key-like fields, or a
            value is malformed or out of range.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    if global_path.exists():
        raw_global = yaml.safe_load(global_path.read_text(encoding="utf-8")) or {}
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = yaml.safe_load(project_cfg_path.read_text(encoding="utf-8")) or {}
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _apply_env_overrides(_cfg_from_dict(merged))
    _validate(cfg)
    return cfg


def write_project_config(project_dir: Path, cfg: StudydeckConfig | None = None) -> Path:
    """Write a starter *studydeck.yaml* into *project_dir* if none exists.

    Returns:
        Path to the project config file.
    """
    cfg = cfg or StudydeckConfig()
    target = project_dir / _PROJECT_CONFIG_NAME
    if target.exists():
        return target

    data = {
        "database": {"path": cfg.database.path},
        "embedding": {
            "model": cfg.embedding.model,
            "dimensions": cfg.embedding.dimensions,
        },
        "chunking": {
            "chunk_size": cfg.chunking.chunk_size,
            "chunk_overlap": cfg.chunking.chunk_overlap,
        },
        "retrieval": {
            "match_threshold": cfg.retrieval.match_threshold,
            "match_count": cfg.retrieval.match_count,
        },
    }
    header = (
        "# studydeck project configuration.\n"
        "# NEVER store API keys here — use environment variables:\n"
        "#   export OPENAI_API_KEY=sk-...\n\n"
    )
    target.write_text(header + yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return target
