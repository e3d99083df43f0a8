"""Sentence-aware sliding-window chunker, with a page-aware variant.

The window is ``chunk_size`` tokens wide and advances by
``chunk_size - chunk_overlap`` tokens. Each cut point is moved to the sentence
boundary (``.``, ``!`` or ``?`` followed by whitespace) nearest to the nominal
cut, looking up to 200 characters back and 100 characters ahead. The look-back
never reaches past the start of the next window, so consecutive chunks always
overlap or touch and the normalised text is covered without gaps.
"""

from __future__ import annotations

import re

from studydeck.db.models import TextChunk
from studydeck.ingest.base import BaseChunker, normalize_whitespace

_LOOKBEHIND_CHARS = 200
_LOOKAHEAD_CHARS = 100

_SENTENCE_END_RE = re.compile(r"[.!?]\s")
_PAGE_MARKER_RE = re.compile(r"\[PAGE\s+(\d+)\]", re.IGNORECASE)


class SentenceChunker(BaseChunker):
    """Split text into overlapping windows cut at sentence boundaries.

    Default: 500 tokens / 50 tokens overlap.
    """

    def chunk(self, text: str) -> list[TextChunk]:
        return self._make_chunks(self._split(text))

    def chunk_with_pages(self, text: str) -> list[TextChunk]:
        """Chunk text containing ``[PAGE n]`` markers page by page.

        Text before the first marker is attributed to page 1. Indices are
        renumbered globally; each chunk keeps the number of its page.
        """
        chunks: list[TextChunk] = []
        for page_number, page_text in split_pages(text):
            segments = self._split(page_text)
            chunks.extend(self._make_chunks(segments, page_number, start=len(chunks)))
        return chunks

    def _split(self, text: str) -> list[str]:
        cleaned = normalize_whitespace(text)
        if not cleaned:
            return []
        if len(cleaned) <= self.chunk_chars:
            return [cleaned]

        segments: list[str] = []
        length = len(cleaned)
        pos = 0
        while pos < length:
            end = pos + self.chunk_chars
            if end < length:
                end = self._sentence_cut(cleaned, pos, end)
            segment = cleaned[pos:end].strip()
            if segment:
                segments.append(segment)
            if end >= length:
                break
            pos += self.step
        return segments

    def _sentence_cut(self, text: str, pos: int, nominal_end: int) -> int:
        """Return the cut point nearest *nominal_end* that ends a sentence.

        Falls back to *nominal_end* when no boundary lies in the search range.
        """
        search_start = max(nominal_end - _LOOKBEHIND_CHARS, pos + self.step)
        search_end = min(nominal_end + _LOOKAHEAD_CHARS, len(text))
        window = text[search_start:search_end]

        candidates = [search_start + m.end() for m in _SENTENCE_END_RE.finditer(window)]
        if not candidates:
            return nominal_end
        return min(candidates, key=lambda cut: (abs(cut - nominal_end), cut))


def split_pages(text: str) -> list[tuple[int, str]]:
    """Partition *text* on ``[PAGE n]`` markers into ``(page_number, text)`` pairs.

    Empty stretches between markers are dropped.
    """
    pages: list[tuple[int, str]] = []
    current_page = 1
    last = 0
    for match in _PAGE_MARKER_RE.finditer(text):
        if last < match.start():
            pages.append((current_page, text[last:match.start()]))
        current_page = int(match.group(1))
        last = match.end()
    if last < len(text):
        pages.append((current_page, text[last:]))
    return pages


def has_page_markers(text: str) -> bool:
    return _PAGE_MARKER_RE.search(text) is not None


def chunk_text(text: str, chunk_size: int = 500, chunk_overlap: int = 50) -> list[TextChunk]:
    """Chunk *text* with a SentenceChunker (sizes in approximate tokens)."""
    return SentenceChunker(chunk_size, chunk_overlap).chunk(text)


def chunk_text_with_pages(
    text: str, chunk_size: int = 500, chunk_overlap: int = 50
) -> list[TextChunk]:
    """Chunk *text* containing ``[PAGE n]`` markers, keeping page numbers."""
    return SentenceChunker(chunk_size, chunk_overlap).chunk_with_pages(text)
