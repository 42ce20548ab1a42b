from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from docsearch.rag.types import Document, Project, SearchResult


class SearchRequest(BaseModel):
    query: str = Field(max_length=4000)


class SourceAttributionModel(BaseModel):
    document_id: str
    document_name: str
    relevant_text: str
    confidence: float = Field(ge=0.0, le=1.0)
    matched_terms: list[str] = Field(default_factory=list)


class SearchResultModel(BaseModel):
    answer: str
    sources: list[SourceAttributionModel]

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResultModel":
        return cls(
            answer=result.answer,
            sources=[
                SourceAttributionModel(
                    document_id=source.document_id,
                    document_name=source.document_name,
                    relevant_text=source.relevant_text,
                    confidence=source.confidence,
                    matched_terms=list(source.matched_terms),
                )
                for source in result.sources
            ],
        )


class SearchResponse(BaseModel):
    result: SearchResultModel | None
    skipped_reason: str | None = None
    request_id: str


class LatestSearchResponse(BaseModel):
    result: SearchResultModel | None


class ProjectCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None


class ProjectModel(BaseModel):
    id: str
    name: str
    description: str | None = None
    owner_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_project(cls, project: Project) -> "ProjectModel":
        return cls(**project.__dict__)


class DocumentSummary(BaseModel):
    """Document metadata without its extracted text."""
    id: str
    name: str
    file_type: str
    file_size: int
    size_kb: float
    project_id: str
    uploaded_by: str
    visibility: Literal["private", "team"]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, document: Document) -> "DocumentSummary":
        return cls(
            id=document.id,
            name=document.name,
            file_type=document.file_type,
            file_size=document.file_size,
            size_kb=round(document.file_size / 1024, 1),
            project_id=document.project_id,
            uploaded_by=document.uploaded_by,
            visibility=document.visibility,
            created_at=document.created_at,
            updated_at=document.updated_at,
        )


class DocumentDetail(DocumentSummary):
    content: str

    @classmethod
    def from_document(cls, document: Document) -> "DocumentDetail":
        summary = DocumentSummary.from_document(document)
        return cls(**summary.model_dump(), content=document.content)


class DocumentListResponse(BaseModel):
    documents: list[DocumentSummary]
    total: int


class DashboardResponse(BaseModel):
    recent_projects: list[ProjectModel]
    recent_documents: list[DocumentSummary]
    document_count: int
