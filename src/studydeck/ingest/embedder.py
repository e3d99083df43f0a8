"""Embedding client over ``litellm.embedding()``.

One request embeds one text or a whole batch. Every call checks that a
credential is available first (``ConfigurationError`` otherwise) and maps any
provider failure or malformed payload to ``UpstreamError``.

Batch token accounting is approximate: the provider reports one aggregate
``usage.total_tokens`` per request, which is split evenly (floor division)
across the batch. Embed texts one at a time when exact per-text counts matter.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import litellm

from studydeck.config import EmbeddingCfg
from studydeck.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

litellm.suppress_debug_info = True

# Provider → env var holding its key. None = local provider, no key needed.
_PROVIDER_ENV: dict[str, str | None] = {
    "openai": "OPENAI_API_KEY",
    "azure": "AZURE_API_KEY",
    "cohere": "COHERE_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "voyage": "VOYAGE_API_KEY",
    "ollama": None,
}


@dataclass
class EmbeddingResult:
    embedding: list[float]
    tokens_used: int


def provider_of(model: str) -> str:
    """Return the provider prefix of a LiteLLM model string (default: openai)."""
    return model.split("/")[0].lower() if "/" in model else "openai"


def credential_env_var(model: str) -> str | None:
    provider = provider_of(model)
    return _PROVIDER_ENV.get(provider, f"{provider.upper()}_API_KEY")


class EmbeddingClient:
    """Embed texts with a fixed model and dimensionality.

    Args:
        config: Embedding configuration (model, dimensions, timeout, retries).
        api_key: Explicit credential. When omitted the provider's environment
            variable (e.g. ``OPENAI_API_KEY``) is used.
    """

    def __init__(self, config: EmbeddingCfg | None = None, api_key: str | None = None) -> None:
        self._config = config or EmbeddingCfg()
        self._api_key = api_key

    @property
    def model(self) -> str:
        return self._config.model

    @property
    def dimensions(self) -> int:
        return self._config.dimensions

    def is_configured(self) -> bool:
        """True when a credential for the configured provider is available."""
        if self._api_key:
            return True
        env_var = credential_env_var(self._config.model)
        return env_var is None or bool(os.environ.get(env_var))

    def embed(self, text: str) -> EmbeddingResult:
        """Embed a single text."""
        response = self._request(text)
        vectors = self._vectors(response, expected=1)
        return EmbeddingResult(embedding=vectors[0], tokens_used=_total_tokens(response))

    def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Embed *texts* in one request; ``result[i]`` belongs to ``texts[i]``.

        ``tokens_used`` per item is the request total divided evenly across
        the batch, not an exact per-text count.
        """
        if not texts:
            return []
        response = self._request(list(texts))
        vectors = self._vectors(response, expected=len(texts))
        per_item = _total_tokens(response) // len(texts)
        return [EmbeddingResult(embedding=v, tokens_used=per_item) for v in vectors]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_api_key(self) -> None:
        if not self.is_configured():
            env_var = credential_env_var(self._config.model)
            raise ConfigurationError(
                f"No API key found for provider '{provider_of(self._config.model)}'. "
                f"Set the {env_var} environment variable."
            )

    def _request(self, payload: str | list[str]) -> Any:
        self._check_api_key()
        kwargs: dict[str, Any] = {
            "model": self._config.model,
            "input": payload,
            "dimensions": self._config.dimensions,
            "timeout": self._config.timeout,
            "num_retries": self._config.num_retries,
        }
        if self._api_key:
            kwargs["api_key"] = self._api_key

        size = 1 if isinstance(payload, str) else len(payload)
        logger.debug("Embedding %d text(s) with %s", size, self._config.model)
        try:
            return litellm.embedding(**kwargs)
        except Exception as exc:
            # LiteLLM maps provider failures onto many exception classes; all carry .message
            message = getattr(exc, "message", None) or str(exc) or None
            logger.error("Embedding request failed: %s", message)
            raise UpstreamError(message) from exc

    def _vectors(self, response: Any, expected: int) -> list[list[float]]:
        """Extract vectors in input order and validate count and dimensionality."""
        data = _field(response, "data")
        if not isinstance(data, list) or len(data) != expected:
            got = len(data) if isinstance(data, list) else 0
            raise UpstreamError(f"expected {expected} embeddings, got {got}")

        if all(_field(item, "index") is not None for item in data):
            data = sorted(data, key=lambda item: _field(item, "index"))

        vectors: list[list[float]] = []
        for item in data:
            embedding = _field(item, "embedding")
            if not isinstance(embedding, list) or len(embedding) != self._config.dimensions:
                size = len(embedding) if isinstance(embedding, list) else 0
                raise UpstreamError(
                    f"expected {self._config.dimensions}-dimensional embedding, got {size}"
                )
            vectors.append([float(v) for v in embedding])
        return vectors


def embedding_client_or_none(
    config: EmbeddingCfg | None = None, api_key: str | None = None
) -> EmbeddingClient | None:
    """Return a configured EmbeddingClient, or None when no credential is available."""
    client = EmbeddingClient(config, api_key=api_key)
    if not client.is_configured():
        logger.warning(
            "Embeddings not configured: set %s to enable document search",
            credential_env_var(client.model),
        )
        return None
    return client


def _field(obj: Any, name: str) -> Any:
    """Read *name* from a dict-like or attribute-style LiteLLM response object."""
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _total_tokens(response: Any) -> int:
    usage = _field(response, "usage")
    total = _field(usage, "total_tokens") if usage is not None else None
    return int(total or 0)
