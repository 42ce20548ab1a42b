from __future__ import annotations

from functools import lru_cache

from docsearch.app.settings import settings
from docsearch.corpus.accessor import InMemoryCorpusStore
from docsearch.corpus.store import SQLCorpusStore
from docsearch.metadata.audit import AuditStore
from docsearch.rag.llm import AnswerGenerator, build_answer_generator
from docsearch.rag.orchestrator import QueryOrchestrator
from docsearch.rag.session import SessionRegistry

_generator_override: AnswerGenerator | None = None


@lru_cache
def get_corpus_store() -> InMemoryCorpusStore | SQLCorpusStore:
    if settings.database_uri:
        return SQLCorpusStore(settings.database_uri)
    return InMemoryCorpusStore()


@lru_cache
def get_audit_store() -> AuditStore | None:
    if settings.audit_db_uri:
        return AuditStore(settings.audit_db_uri)
    return None


def build_generator() -> AnswerGenerator:
    if _generator_override is not None:
        return _generator_override
    return build_answer_generator(
        settings.llm_provider,
        api_key_openai=settings.openai_api_key,
        api_key_gemini=settings.gemini_api_key,
        openai_base_url=settings.openai_base_url,
        openai_model=settings.openai_chat_model,
        gemini_model=settings.gemini_chat_model,
        ollama_base_url=settings.ollama_base_url,
        ollama_model=settings.ollama_model,
        temperature=settings.llm_temperature,
        timeout=settings.llm_timeout,
    )


@lru_cache
def get_orchestrator() -> QueryOrchestrator:
    return QueryOrchestrator(
        generator=build_generator(),
        max_tokens=settings.llm_max_tokens,
        max_sources=settings.max_sources,
        confidence=settings.source_confidence,
        excerpt_chars=settings.excerpt_chars,
        context_max_chars=settings.context_max_chars,
    )


@lru_cache
def get_session_registry() -> SessionRegistry:
    return SessionRegistry(corpus=get_corpus_store(), orchestrator=get_orchestrator())


def override_generator(generator: AnswerGenerator | None) -> None:
    """Swap the answer generator used by new orchestrators."""
    global _generator_override
    _generator_override = generator
    get_orchestrator.cache_clear()
    get_session_registry.cache_clear()


def reset_caches() -> None:
    get_corpus_store.cache_clear()
    get_audit_store.cache_clear()
    get_orchestrator.cache_clear()
    get_session_registry.cache_clear()
