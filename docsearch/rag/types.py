from __future__ import annotations

"""Core data types for documents, projects and search results."""

from dataclasses import dataclass, field
from datetime import datetime

VISIBILITY_PRIVATE = "private"
VISIBILITY_TEAM = "team"
VISIBILITIES = (VISIBILITY_PRIVATE, VISIBILITY_TEAM)


@dataclass(frozen=True)
class Document:
    """Uploaded document with its full extracted text."""
    id: str
    name: str
    content: str
    file_type: str
    file_size: int
    project_id: str
    uploaded_by: str
    visibility: str = VISIBILITY_TEAM
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Project:
    """Project grouping documents for one owner."""
    id: str
    name: str
    owner_id: str
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class SourceAttribution:
    """Document considered a source for an answer."""
    document_id: str
    document_name: str
    relevant_text: str
    confidence: float
    matched_terms: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SearchResult:
    """Generated answer with its independently scored sources."""
    answer: str
    sources: list[SourceAttribution]


@dataclass(frozen=True)
class SearchOutcome:
    """Result of one orchestrator call, or the reason it was skipped."""
    result: SearchResult | None
    skipped_reason: str | None = None

    @property
    def skipped(self) -> bool:
        return self.result is None
