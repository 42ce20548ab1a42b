from __future__ import annotations

"""Shared pytest fixtures and test environment defaults."""

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ["DOCSEARCH_ALLOW_ANONYMOUS"] = "true"
os.environ["DOCSEARCH_METRICS_ENABLED"] = "true"
os.environ.pop("DOCSEARCH_API_KEYS", None)
os.environ.pop("DOCSEARCH_API_KEY_MAP", None)
os.environ.pop("DOCSEARCH_DATABASE_URI", None)
os.environ.pop("DOCSEARCH_AUDIT_DB_URI", None)
os.environ.pop("DOCSEARCH_CONTEXT_MAX_CHARS", None)
os.environ.pop("DOCSEARCH_LLM_PROVIDER", None)
os.environ.pop("OPENAI_API_KEY", None)

import pytest

from docsearch.rag.types import Document


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class RecordingGenerator:
    """Answer generator double that records prompts."""

    def __init__(self, answer: str = "Generated answer", error: Exception | None = None) -> None:
        self.answer = answer
        self.error = error
        self.calls: list[tuple[str, int]] = []

    async def generate(self, prompt: str, max_tokens: int) -> str:
        self.calls.append((prompt, max_tokens))
        if self.error is not None:
            raise self.error
        return self.answer


def make_document(
    doc_id: str,
    content: str,
    name: str | None = None,
    visibility: str = "team",
    uploaded_by: str = "user-1",
) -> Document:
    return Document(
        id=doc_id,
        name=name or f"{doc_id}.txt",
        content=content,
        file_type="text/plain",
        file_size=len(content),
        project_id="project-1",
        uploaded_by=uploaded_by,
        visibility=visibility,
    )
