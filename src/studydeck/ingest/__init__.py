"""studydeck ingest pipeline: chunking, embedding, document ingestion."""

from studydeck.ingest.base import BaseChunker, estimate_tokens, normalize_whitespace
from studydeck.ingest.chunker import SentenceChunker, chunk_text, chunk_text_with_pages
from studydeck.ingest.embedder import EmbeddingClient, EmbeddingResult, embedding_client_or_none
from studydeck.ingest.writer import DocumentIngestor, IngestResult

__all__ = [
    "BaseChunker",
    "DocumentIngestor",
    "EmbeddingClient",
    "EmbeddingResult",
    "IngestResult",
    "SentenceChunker",
    "chunk_text",
    "chunk_text_with_pages",
    "embedding_client_or_none",
    "estimate_tokens",
    "normalize_whitespace",
]
