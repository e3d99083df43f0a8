"""Best-effort document retrieval: embed the query, search the vector store.

``search_documents`` never raises. A missing embedding client or store, an
embedding failure, or a store failure all yield an empty list; the cause is
only visible in the logs. Callers proceed without grounding context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from studydeck.db.models import SearchResult
from studydeck.errors import StudydeckError
from studydeck.ingest.embedder import EmbeddingClient
from studydeck.rag.vector_store import VectorStore

logger = logging.getLogger(__name__)


@dataclass
class RetrieverConfig:
    """Configuration for similarity retrieval.

    Attributes:
        match_threshold: Minimum cosine similarity for a chunk to be returned.
        match_count: Maximum number of chunks to return.
    """

    match_threshold: float = 0.7
    match_count: int = 5


def search_documents(
    query: str,
    embedder: EmbeddingClient | None,
    store: VectorStore | None,
    config: RetrieverConfig | None = None,
) -> list[SearchResult]:
    """Return the chunks most similar to *query*, best first.

    Args:
        query: User question or search text.
        embedder: Configured embedding client, or None when embeddings are
            not configured.
        store: Vector store, or None when no store is available.
        config: Threshold and result count.
    """
    config = config or RetrieverConfig()

    if embedder is None or store is None:
        logger.warning("Document search not configured, returning no results")
        return []
    if not query.strip():
        return []

    try:
        query_vector = embedder.embed(query).embedding
    except StudydeckError as exc:
        logger.error("Query embedding failed: %s", exc)
        return []

    results = store.query(
        query_vector,
        match_threshold=config.match_threshold,
        match_count=config.match_count,
    )
    logger.debug("Retrieved %d chunk(s) for query", len(results))
    return results
