from __future__ import annotations

"""SQL persistence for projects and documents."""

import asyncio
import logging
import uuid
from typing import Any

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    select,
)
from sqlalchemy.exc import SQLAlchemyError

from docsearch.corpus.accessor import (
    CorpusStoreError,
    check_document_order,
    check_project_order,
    check_visibility,
    utcnow,
)
from docsearch.rag.types import VISIBILITY_TEAM, Document, Project

logger = logging.getLogger(__name__)


class SQLCorpusStore:
    """Store projects and documents in a SQL database."""
    def __init__(self, connection_uri: str) -> None:
        """Initialize the store and ensure tables exist."""
        self._engine = create_engine(connection_uri)
        self._metadata = MetaData()
        self._projects = Table(
            "projects",
            self._metadata,
            Column("seq", Integer, primary_key=True, autoincrement=True),
            Column("id", String(36), nullable=False, unique=True),
            Column("name", String(255), nullable=False),
            Column("description", Text, nullable=True),
            Column("owner_id", String(128), nullable=False, index=True),
            Column("created_at", DateTime(timezone=True), nullable=False),
            Column("updated_at", DateTime(timezone=True), nullable=False),
        )
        self._documents = Table(
            "documents",
            self._metadata,
            Column("seq", Integer, primary_key=True, autoincrement=True),
            Column("id", String(36), nullable=False, unique=True),
            Column("name", String(255), nullable=False),
            Column("content", Text, nullable=False),
            Column("file_type", String(255), nullable=False),
            Column("file_size", Integer, nullable=False),
            Column("project_id", String(36), nullable=False, index=True),
            Column("uploaded_by", String(128), nullable=False, index=True),
            Column("visibility", String(16), nullable=False),
            Column("created_at", DateTime(timezone=True), nullable=False),
            Column("updated_at", DateTime(timezone=True), nullable=False),
        )
        try:
            self._metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            raise CorpusStoreError(f"Failed to initialize corpus store: {type(exc).__name__}") from exc

    def create_project(
        self, name: str, owner_id: str, description: str | None = None
    ) -> Project:
        """Insert a project row and return it."""
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
        self._execute_write(
            self._projects.insert().values(
                id=project.id,
                name=project.name,
                description=project.description,
                owner_id=project.owner_id,
                created_at=now,
                updated_at=now,
            )
        )
        return project

    def get_project(self, project_id: str) -> Project | None:
        rows = self._fetch(select(self._projects).where(self._projects.c.id == project_id))
        return _row_to_project(rows[0]) if rows else None

    def list_projects(
        self, owner_id: str, order_by: str = "name", limit: int | None = None
    ) -> list[Project]:
        """List an owner's projects by name or most recently updated."""
        check_project_order(order_by)
        stmt = select(self._projects).where(self._projects.c.owner_id == owner_id)
        if order_by == "name":
            stmt = stmt.order_by(self._projects.c.name.asc())
        else:
            stmt = stmt.order_by(self._projects.c.updated_at.desc(), self._projects.c.seq.desc())
        if limit:
            stmt = stmt.limit(limit)
        return [_row_to_project(row) for row in self._fetch(stmt)]

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
        """Insert a document row and touch its project."""
        if self.get_project(project_id) is None:
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
        try:
            with self._engine.begin() as conn:
                conn.execute(self._documents.insert().values(**_document_payload(document)))
                conn.execute(
                    self._projects.update()
                    .where(self._projects.c.id == project_id)
                    .values(updated_at=now)
                )
        except SQLAlchemyError as exc:
            raise CorpusStoreError(f"Failed to store document: {type(exc).__name__}") from exc
        return document

    def get_document(self, document_id: str) -> Document | None:
        rows = self._fetch(select(self._documents).where(self._documents.c.id == document_id))
        return _row_to_document(rows[0]) if rows else None

    def list_documents(
        self, uploaded_by: str, order_by: str = "created_at", limit: int | None = None
    ) -> list[Document]:
        """List a user's documents, newest first."""
        column = self._documents.c[check_document_order(order_by)]
        stmt = (
            select(self._documents)
            .where(self._documents.c.uploaded_by == uploaded_by)
            .order_by(column.desc(), self._documents.c.seq.desc())
        )
        if limit:
            stmt = stmt.limit(limit)
        return [_row_to_document(row) for row in self._fetch(stmt)]

    async def fetch_documents(self, user_id: str) -> list[Document]:
        return await asyncio.to_thread(self.list_documents, user_id, "created_at")

    def _fetch(self, stmt: Any) -> list[Any]:
        try:
            with self._engine.connect() as conn:
                return list(conn.execute(stmt).mappings())
        except SQLAlchemyError as exc:
            logger.error("corpus_store_read_failed", extra={"detail": type(exc).__name__})
            raise CorpusStoreError(f"Failed to read corpus store: {type(exc).__name__}") from exc

    def _execute_write(self, stmt: Any) -> None:
        try:
            with self._engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error("corpus_store_write_failed", extra={"detail": type(exc).__name__})
            raise CorpusStoreError(f"Failed to write corpus store: {type(exc).__name__}") from exc


def _document_payload(document: Document) -> dict[str, Any]:
    """Prepare a document row for insertion."""
    return {
        "id": document.id,
        "name": document.name,
        "content": document.content,
        "file_type": document.file_type,
        "file_size": document.file_size,
        "project_id": document.project_id,
        "uploaded_by": document.uploaded_by,
        "visibility": document.visibility,
        "created_at": document.created_at,
        "updated_at": document.updated_at,
    }


def _row_to_project(row: Any) -> Project:
    return Project(
        id=row["id"],
        name=row["name"],
        owner_id=row["owner_id"],
        description=row["description"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_document(row: Any) -> Document:
    return Document(
        id=row["id"],
        name=row["name"],
        content=row["content"],
        file_type=row["file_type"],
        file_size=row["file_size"],
        project_id=row["project_id"],
        uploaded_by=row["uploaded_by"],
        visibility=row["visibility"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
