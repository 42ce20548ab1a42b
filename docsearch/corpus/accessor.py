from __future__ import annotations

"""Corpus access interface and the in-memory document library."""

import itertools
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, Protocol

from docsearch.rag.types import VISIBILITIES, VISIBILITY_TEAM, Document, Project


class CorpusStoreError(RuntimeError):
    """Raised when project or document persistence fails."""
    pass


class CorpusAccessor(Protocol):
    """Source of the documents a user may query."""

    async def fetch_documents(self, user_id: str) -> list[Document]:
        ...


PROJECT_ORDERS = ("name", "updated_at")
DOCUMENT_ORDERS = ("created_at", "updated_at")
VISIBILITY_FILTERS = ("all",) + VISIBILITIES


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def check_project_order(order_by: str) -> str:
    if order_by not in PROJECT_ORDERS:
        raise CorpusStoreError(f"Unsupported project ordering: {order_by}")
    return order_by


def check_document_order(order_by: str) -> str:
    if order_by not in DOCUMENT_ORDERS:
        raise CorpusStoreError(f"Unsupported document ordering: {order_by}")
    return order_by


def check_visibility(visibility: str) -> str:
    normalized = visibility.strip().lower()
    if normalized not in VISIBILITIES:
        raise CorpusStoreError(f"Unsupported visibility: {visibility}")
    return normalized


def filter_documents(
    documents: Iterable[Document],
    search_term: str = "",
    visibility: str = "all",
) -> list[Document]:
    """Filter documents by case-insensitive name match and visibility."""
    term = search_term.strip().lower()
    mode = visibility.strip().lower() or "all"
    if mode not in VISIBILITY_FILTERS:
        raise CorpusStoreError(f"Unsupported visibility filter: {visibility}")
    return [
        document
        for document in documents
        if term in document.name.lower()
        and (mode == "all" or document.visibility == mode)
    ]


class InMemoryCorpusStore:
    """Keep projects and documents in process memory."""

    def __init__(self) -> None:
        self._projects: dict[str, Project] = {}
        self._documents: dict[str, tuple[int, Document]] = {}
        self._sequence = itertools.count()

    def create_project(
        self, name: str, owner_id: str, description: str | None = None
    ) -> Project:
        """Create a project owned by ``owner_id``."""
        if not name.strip():
            raise CorpusStoreError("Project name is required")
        now = utcnow()
        project = Project(
            id=str(uuid.uuid4()),
            name=name.strip(),
            owner_id=owner_id,
            description=description,
            created_at=now,
            updated_at=now,
        )
        self._projects[project.id] = project
        return project

    def get_project(self, project_id: str) -> Project | None:
        return self._projects.get(project_id)

    def list_projects(
        self, owner_id: str, order_by: str = "name", limit: int | None = None
    ) -> list[Project]:
        """List projects of an owner by name or most recently updated."""
        check_project_order(order_by)
        projects = [project for project in self._projects.values() if project.owner_id == owner_id]
        if order_by == "name":
            projects.sort(key=lambda project: project.name.lower())
        else:
            projects.sort(key=lambda project: project.updated_at, reverse=True)
        return projects[:limit] if limit else projects

    def create_document(
        self,
        *,
        name: str,
        content: str,
        file_type: str,
        file_size: int,
        project_id: str,
        uploaded_by: str,
        visibility: str = VISIBILITY_TEAM,
    ) -> Document:
        """Create a document record and touch its project."""
        project = self._projects.get(project_id)
        if project is None:
            raise CorpusStoreError(f"Unknown project: {project_id}")
        now = utcnow()
        document = Document(
            id=str(uuid.uuid4()),
            name=name,
            content=content,
            file_type=file_type,
            file_size=file_size,
            project_id=project_id,
            uploaded_by=uploaded_by,
            visibility=check_visibility(visibility),
            created_at=now,
            updated_at=now,
        )
        self._documents[document.id] = (next(self._sequence), document)
        self._projects[project_id] = replace(project, updated_at=now)
        return document

    def get_document(self, document_id: str) -> Document | None:
        entry = self._documents.get(document_id)
        return entry[1] if entry else None

    def list_documents(
        self, uploaded_by: str, order_by: str = "created_at", limit: int | None = None
    ) -> list[Document]:
        """List a user's documents, newest first."""
        check_document_order(order_by)
        entries = [entry for entry in self._documents.values() if entry[1].uploaded_by == uploaded_by]
        entries.sort(key=lambda entry: (getattr(entry[1], order_by), entry[0]), reverse=True)
        documents = [document for _, document in entries]
        return documents[:limit] if limit else documents

    async def fetch_documents(self, user_id: str) -> list[Document]:
        return self.list_documents(user_id, order_by="created_at")
