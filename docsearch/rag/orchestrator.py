from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Sequence

from docsearch.rag.context import assemble_context, prioritize_documents
from docsearch.rag.llm import AnswerGenerator, GenerationError
from docsearch.rag.prompts import build_answer_prompt
from docsearch.rag.relevance import (
    DEFAULT_CONFIDENCE,
    DEFAULT_EXCERPT_CHARS,
    DEFAULT_MAX_SOURCES,
    score_sources,
)
from docsearch.rag.types import Document, SearchOutcome, SearchResult

logger = logging.getLogger(__name__)

SKIP_BLANK_QUERY = "blank_query"
SKIP_EMPTY_CORPUS = "empty_corpus"
DEFAULT_MAX_TOKENS = 1000


def query_fingerprint(query: str) -> str:
    """Return a short SHA-256 digest of a query for logs and audit events."""
    return hashlib.sha256(query.encode("utf-8")).hexdigest()[:16]


@dataclass
class QueryOrchestrator:
    """Answer queries over a document set and attach lexical sources.

    Context assembly, source scoring and the token budget are configured
    per instance; the generator is called once per search, without retry.
    """
    generator: AnswerGenerator
    max_tokens: int = DEFAULT_MAX_TOKENS
    max_sources: int = DEFAULT_MAX_SOURCES
    confidence: float = DEFAULT_CONFIDENCE
    excerpt_chars: int = DEFAULT_EXCERPT_CHARS
    context_max_chars: int | None = None

    async def search(self, query: str, documents: Sequence[Document]) -> SearchOutcome:
        """Answer a query over the full corpus and attach lexical sources.

        Blank queries and empty corpora are skipped before any external call.
        A generation failure propagates as ``GenerationError``.
        """
        cleaned = query.strip()
        if not cleaned:
            logger.info("search_skipped", extra={"reason": SKIP_BLANK_QUERY})
            return SearchOutcome(result=None, skipped_reason=SKIP_BLANK_QUERY)
        if not documents:
            logger.info("search_skipped", extra={"reason": SKIP_EMPTY_CORPUS})
            return SearchOutcome(result=None, skipped_reason=SKIP_EMPTY_CORPUS)

        sources = score_sources(
            cleaned,
            documents,
            max_sources=self.max_sources,
            confidence=self.confidence,
            excerpt_chars=self.excerpt_chars,
        )
        context = self.build_context(documents, [source.document_id for source in sources])
        prompt = build_answer_prompt(cleaned, context)
        logger.info(
            "search_started",
            extra={
                "query_hash": query_fingerprint(cleaned),
                "query_length": len(cleaned),
                "documents": len(documents),
                "context_length": len(context),
            },
        )
        try:
            answer = await self.generator.generate(prompt, self.max_tokens)
        except GenerationError as exc:
            logger.error(
                "search_generation_failed",
                extra={"query_hash": query_fingerprint(cleaned), "detail": type(exc).__name__},
            )
            raise
        logger.info(
            "search_completed",
            extra={
                "query_hash": query_fingerprint(cleaned),
                "answer_length": len(answer),
                "sources": len(sources),
            },
        )
        return SearchOutcome(result=SearchResult(answer=answer, sources=sources))

    def build_context(self, documents: Sequence[Document], preferred_ids: list[str]) -> str:
        """Assemble the prompt context, putting scored documents first under a budget."""
        if not self.context_max_chars or self.context_max_chars <= 0:
            return assemble_context(documents)
        ordered = prioritize_documents(documents, preferred_ids)
        return assemble_context(ordered, max_chars=self.context_max_chars)
