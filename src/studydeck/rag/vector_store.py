"""Vector store adapter over SQLite + sqlite-vec.

Writes go to ``document_chunks`` plus the per-model ``vec_chunks_<slug>``
table (rowid = chunk id). Reads are best-effort: any store failure is logged
and surfaces as an empty result list, so retrieval can never take down the
calling chat or study flow.
"""

from __future__ import annotations

import logging
import sqlite3

from studydeck.db.models import DocumentChunk, SearchResult
from studydeck.db.repository import Repository
from studydeck.db.vectors import ensure_vec_table, model_to_slug, vec_table_exists, vec_table_name
from studydeck.errors import ValidationError

logger = logging.getLogger(__name__)


class VectorStore:
    """Chunk vectors for one embedding model.

    Args:
        conn: Open connection with sqlite-vec loaded and schema initialised.
        model: Embedding model string; selects the vec table.
        dimensions: Vector length stored in the vec table.
    """

    def __init__(self, conn: sqlite3.Connection, model: str, dimensions: int) -> None:
        self._repo = Repository(conn)
        self._conn = conn
        self.model = model
        self.dimensions = dimensions
        self.table = vec_table_name(model_to_slug(model))

    def upsert_chunks(self, document_id: str, chunks: list[DocumentChunk]) -> None:
        """Replace the stored chunks of *document_id* with *chunks* and their vectors.

        The old rows are removed and the new ones written in one transaction;
        on failure the previous chunks are left in place.

        Raises:
            ValidationError: If a chunk's embedding does not match ``dimensions``.
        """
        for chunk in chunks:
            if len(chunk.embedding) != self.dimensions:
                raise ValidationError(
                    f"chunk {chunk.chunk_index} has a {len(chunk.embedding)}-dimensional "
                    f"embedding; store expects {self.dimensions}"
                )

        ensure_vec_table(self._conn, model_to_slug(self.model), self.dimensions)
        try:
            self._repo.delete_chunks_by_document(document_id, commit=False)
            for chunk in chunks:
                chunk.document_id = document_id
                chunk.id = self._repo.add_chunk(chunk, commit=False)
                self._repo.add_embedding(self.table, chunk.id, chunk.embedding, commit=False)
            self._conn.commit()
        except sqlite3.Error:
            self._conn.rollback()
            raise
        logger.info("Stored %d chunks for document %s", len(chunks), document_id)

    def query(
        self,
        query_vector: list[float],
        match_threshold: float = 0.7,
        match_count: int = 5,
    ) -> list[SearchResult]:
        """Return up to *match_count* chunks with similarity >= *match_threshold*.

        Similarity is cosine similarity (``1 - cosine distance``). Results are
        sorted by similarity descending, ties broken by ascending chunk id.
        Returns an empty list when the store is missing or fails.
        """
        if match_count < 1:
            return []
        if len(query_vector) != self.dimensions:
            logger.error(
                "Query vector has %d dimensions; store expects %d",
                len(query_vector),
                self.dimensions,
            )
            return []

        try:
            if not vec_table_exists(self._conn, self.table):
                logger.warning("No vectors stored for model %s yet", self.model)
                return []
            rows = self._repo.search_vec(self.table, query_vector, limit=match_count)
        except sqlite3.Error as exc:
            logger.error("Vector search failed: %s", exc)
            return []

        results = [
            SearchResult(
                id=chunk.id,
                document_id=chunk.document_id,
                document_name=document_name,
                content=chunk.content,
                page_number=chunk.page_number,
                similarity=1.0 - distance,
            )
            for chunk, document_name, distance in rows
        ]
        results = [r for r in results if r.similarity >= match_threshold]
        results.sort(key=lambda r: (-r.similarity, r.id))
        return results[:match_count]

    def delete_document_vectors(self, document_id: str) -> int:
        """Remove the vectors of *document_id*; chunk rows are left to the caller."""
        return self._repo.delete_embeddings_by_document(document_id)
