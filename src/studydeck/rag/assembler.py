"""Retrieval formatting: prompt-ready context blocks and positional citations."""

from __future__ import annotations

from studydeck.db.models import SearchResult

CONTEXT_HEADER = "Relevant context from uploaded documents:"
CONTEXT_SEPARATOR = "\n\n---\n\n"

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful study tutor. Answer concisely. When the provided context "
    "is relevant, base your answer on it and cite sources as [Source N]."
)


def format_context(results: list[SearchResult]) -> str:
    """Render *results* as a labelled context block.

    Returns an empty string for no results; callers treat that as "no context"
    and leave it out of the prompt. Blocks are joined by ``CONTEXT_SEPARATOR``
    so ``blocks[i]`` lines up with ``citations(results)[i]``.
    """
    if not results:
        return ""

    blocks = []
    for i, result in enumerate(results, start=1):
        page_info = f" (Page {result.page_number})" if result.page_number else ""
        blocks.append(f"[Source {i}: {result.document_name}{page_info}]\n{result.content}")

    return f"{CONTEXT_HEADER}\n\n{CONTEXT_SEPARATOR.join(blocks)}"


def split_context(context: str) -> list[str]:
    """Inverse of format_context: return the per-source blocks."""
    if not context:
        return []
    body = context.removeprefix(f"{CONTEXT_HEADER}\n\n")
    return body.split(CONTEXT_SEPARATOR)


def citations(results: list[SearchResult]) -> list[str]:
    """One ``"<document>[, Page n]"`` string per result, in input order."""
    return [
        f"{r.document_name}, Page {r.page_number}" if r.page_number else r.document_name
        for r in results
    ]


def build_messages(
    question: str,
    results: list[SearchResult],
    system_prompt: str = DEFAULT_SYSTEM_PROMPT,
) -> list[dict[str, str]]:
    """Build an OpenAI-style message list, grounded when context exists."""
    messages = [{"role": "system", "content": system_prompt}]
    context = format_context(results)
    if context:
        messages.append({"role": "system", "content": context})
    messages.append({"role": "user", "content": question})
    return messages
