from __future__ import annotations

"""Lexical relevance scoring for answer sources.

The answer generator returns free text without structured citations, so
sources are picked independently from the raw query: any document whose
content contains a query term of four or more characters is a candidate.
Candidates keep corpus order and every one carries the same fixed
confidence; there is no computed relevance value.
"""

import logging
import string
import unicodedata
from typing import Sequence

from docsearch.rag.types import Document, SourceAttribution

logger = logging.getLogger(__name__)

MIN_TERM_LENGTH = 4
DEFAULT_MAX_SOURCES = 5
DEFAULT_CONFIDENCE = 0.8
DEFAULT_EXCERPT_CHARS = 200
EXCERPT_SUFFIX = "..."


def _is_punctuation(char: str) -> bool:
    return char in string.punctuation or unicodedata.category(char).startswith("P")


def _strip_punctuation(token: str) -> str:
    start, end = 0, len(token)
    while start < end and _is_punctuation(token[start]):
        start += 1
    while end > start and _is_punctuation(token[end - 1]):
        end -= 1
    return token[start:end]


def query_terms(query: str) -> list[str]:
    """Return lower-cased whitespace tokens longer than three characters.

    Leading and trailing punctuation, ASCII or Unicode, is dropped before the
    length check, so ``"budget?"`` and ``"\u201cbudget\u201d"`` yield ``"budget"``
    and ``"is?"`` yields nothing.
    """
    terms: list[str] = []
    for token in query.lower().split():
        term = _strip_punctuation(token)
        if len(term) >= MIN_TERM_LENGTH:
            terms.append(term)
    return terms


def matching_terms(content: str, terms: Sequence[str]) -> tuple[str, ...]:
    """Return the unique terms contained in content, in query order."""
    lowered = content.lower()
    seen: set[str] = set()
    matched: list[str] = []
    for term in terms:
        if term in seen:
            continue
        seen.add(term)
        if term in lowered:
            matched.append(term)
    return tuple(matched)


def build_excerpt(content: str, max_chars: int = DEFAULT_EXCERPT_CHARS) -> str:
    """Return the content prefix used as a source preview."""
    return content[:max_chars] + EXCERPT_SUFFIX


def score_sources(
    query: str,
    documents: Sequence[Document],
    max_sources: int = DEFAULT_MAX_SOURCES,
    confidence: float = DEFAULT_CONFIDENCE,
    excerpt_chars: int = DEFAULT_EXCERPT_CHARS,
) -> list[SourceAttribution]:
    """Select up to ``max_sources`` documents that contain a query term."""
    terms = query_terms(query)
    if not terms or not documents or max_sources <= 0:
        return []
    sources: list[SourceAttribution] = []
    for document in documents:
        matched = matching_terms(document.content, terms)
        if not matched:
            continue
        sources.append(
            SourceAttribution(
                document_id=document.id,
                document_name=document.name,
                relevant_text=build_excerpt(document.content, excerpt_chars),
                confidence=confidence,
                matched_terms=matched,
            )
        )
        if len(sources) >= max_sources:
            break
    logger.debug(
        "sources_scored",
        extra={"terms": len(terms), "documents": len(documents), "sources": len(sources)},
    )
    return sources
