from __future__ import annotations

"""Prompt context assembly from a document corpus."""

from typing import Sequence

from docsearch.rag.types import Document

SEGMENT_SEPARATOR = "\n"
SEGMENT_TERMINATOR = "\n---"


def format_segment(document: Document) -> str:
    """Format one document as a context segment."""
    return f"Document: {document.name}\nContent: {document.content}{SEGMENT_TERMINATOR}"


def assemble_context(documents: Sequence[Document], max_chars: int | None = None) -> str:
    """Concatenate documents into a single context block, preserving order.

    Without a budget every document is included in full. With a positive
    ``max_chars`` the segment crossing the budget has its content cut and
    later segments are dropped.
    """
    if not max_chars or max_chars <= 0:
        return SEGMENT_SEPARATOR.join(format_segment(document) for document in documents)

    segments: list[str] = []
    total = 0
    for document in documents:
        separator = SEGMENT_SEPARATOR if segments else ""
        segment = format_segment(document)
        if total + len(separator) + len(segment) <= max_chars:
            segments.append(separator + segment)
            total += len(separator) + len(segment)
            continue
        header = f"{separator}Document: {document.name}\nContent: "
        remaining = max_chars - total - len(header) - len(SEGMENT_TERMINATOR)
        if remaining > 0:
            segments.append(header + document.content[:remaining] + SEGMENT_TERMINATOR)
        break
    return "".join(segments)


def prioritize_documents(
    documents: Sequence[Document], preferred_ids: Sequence[str] | None
) -> list[Document]:
    """Order documents so preferred IDs come first, the rest in corpus order."""
    if not preferred_ids:
        return list(documents)
    preferred_map = {doc_id: idx for idx, doc_id in enumerate(preferred_ids)}
    preferred: list[Document] = []
    remaining: list[Document] = []
    for document in documents:
        if document.id in preferred_map:
            preferred.append(document)
        else:
            remaining.append(document)
    preferred.sort(key=lambda document: preferred_map.get(document.id, 0))
    return preferred + remaining
