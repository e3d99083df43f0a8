"""Document ingestion: register → chunk → batch embed → store → mark ready.

Document status moves ``processing`` → ``ready`` on success and
``processing`` → ``error`` (with a message) on failure. Chunks are written
only after every batch has been embedded, so a failed upload never leaves a
partial set of chunks behind.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from collections.abc import Callable
from dataclasses import dataclass

from studydeck.config import ChunkingCfg
from studydeck.db.models import Document, DocumentChunk, DocumentStatus, TextChunk
from studydeck.db.repository import Repository
from studydeck.errors import StudydeckError, ValidationError
from studydeck.ingest.chunker import SentenceChunker, has_page_markers
from studydeck.ingest.embedder import EmbeddingClient
from studydeck.rag.vector_store import VectorStore

logger = logging.getLogger(__name__)

_SUPPORTED_FILE_TYPES = ("text", "pdf")


@dataclass
class IngestResult:
    document_id: str
    chunks_created: int
    tokens_used: int = 0


class DocumentIngestor:
    """Turn document text into stored, embedded chunks.

    Args:
        repo:       Repository over the study database.
        store:      Vector store for the embedding model in use.
        embedder:   Configured embedding client.
        chunking:   Chunk size / overlap in approximate tokens.
        batch_size: Number of chunks per embedding request.
    """

    def __init__(
        self,
        repo: Repository,
        store: VectorStore,
        embedder: EmbeddingClient,
        chunking: ChunkingCfg | None = None,
        batch_size: int = 20,
    ) -> None:
        if batch_size < 1:
            raise ValidationError(f"batch_size must be >= 1, got {batch_size}")
        chunking = chunking or ChunkingCfg()
        self._repo = repo
        self._store = store
        self._embedder = embedder
        self._chunker = SentenceChunker(chunking.chunk_size, chunking.chunk_overlap)
        self._batch_size = batch_size

    def ingest_text(
        self,
        name: str,
        text: str,
        *,
        file_path: str = "",
        file_type: str = "text",
        on_progress: Callable[[int, int], None] | None = None,
    ) -> IngestResult:
        """Ingest one document's extracted text.

        Text containing ``[PAGE n]`` markers is chunked page by page.

        Args:
            name:        Display name used in citations.
            text:        Extracted document text.
            file_path:   Storage path of the original file.
            file_type:   ``"text"`` or ``"pdf"``.
            on_progress: Called with ``(chunks_embedded, total_chunks)`` after each batch.

        Raises:
            ValidationError: Unsupported file type, or no text content.
            ConfigurationError, UpstreamError: Embedding failed; the document
                is left in ``error`` state.
        """
        if file_type not in _SUPPORTED_FILE_TYPES:
            raise ValidationError(
                f"Unsupported file type {file_type!r}; expected one of {_SUPPORTED_FILE_TYPES}"
            )

        document_id = str(uuid.uuid4())
        self._repo.add_document(
            Document(
                id=document_id,
                name=name,
                file_path=file_path,
                file_type=file_type,
                status=DocumentStatus.PROCESSING,
            )
        )

        if has_page_markers(text):
            text_chunks = self._chunker.chunk_with_pages(text)
        else:
            text_chunks = self._chunker.chunk(text)

        if not text_chunks:
            self._repo.update_document_status(
                document_id, DocumentStatus.ERROR, error_message="No text content found"
            )
            raise ValidationError(f"No text content found in document '{name}'")

        try:
            chunks, tokens = self._embed_all(text_chunks, on_progress)
            self._store.upsert_chunks(document_id, chunks)
        except (StudydeckError, sqlite3.Error) as exc:
            logger.error("Ingest of '%s' failed: %s", name, exc)
            self._repo.update_document_status(
                document_id, DocumentStatus.ERROR, error_message=str(exc)
            )
            raise

        self._repo.update_document_status(
            document_id, DocumentStatus.READY, total_chunks=len(chunks)
        )
        logger.info("Processed '%s' into %d chunks", name, len(chunks))
        return IngestResult(document_id=document_id, chunks_created=len(chunks), tokens_used=tokens)

    def delete_document(self, document_id: str) -> bool:
        """Delete a document with its chunks and vectors. Returns False if unknown."""
        return self._repo.delete_document(document_id)

    # ------------------------------------------------------------------
    # Embedding
    # ------------------------------------------------------------------

    def _embed_all(
        self,
        text_chunks: list[TextChunk],
        on_progress: Callable[[int, int], None] | None,
    ) -> tuple[list[DocumentChunk], int]:
        chunks: list[DocumentChunk] = []
        tokens = 0
        total = len(text_chunks)
        for start in range(0, total, self._batch_size):
            batch = text_chunks[start:start + self._batch_size]
            embeddings = self._embedder.embed_batch([c.content for c in batch])
            for text_chunk, result in zip(batch, embeddings):
                chunks.append(
                    DocumentChunk(
                        document_id="",
                        chunk_index=text_chunk.index,
                        content=text_chunk.content,
                        page_number=text_chunk.page_number,
                        embedding=result.embedding,
                    )
                )
                tokens += result.tokens_used
            if on_progress is not None:
                on_progress(len(chunks), total)
        return chunks, tokens
