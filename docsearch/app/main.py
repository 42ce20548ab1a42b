from __future__ import annotations

"""FastAPI application entrypoint for the document Q&A service."""

import logging
import uuid
from typing import Literal

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile

from docsearch.app.dependencies import (
    get_audit_store,
    get_corpus_store,
    get_session_registry,
)
from docsearch.app.metrics import metrics_middleware, metrics_response, record_search
from docsearch.app.schemas import (
    DashboardResponse,
    DocumentDetail,
    DocumentListResponse,
    DocumentSummary,
    LatestSearchResponse,
    ProjectCreateRequest,
    ProjectModel,
    SearchRequest,
    SearchResponse,
    SearchResultModel,
)
from docsearch.app.security import AuthContext, require_api_key
from docsearch.app.settings import settings
from docsearch.corpus.accessor import CorpusStoreError, filter_documents
from docsearch.corpus.uploads import ExtractionError, UploadRejected, extract_text, validate_upload
from docsearch.metadata.audit import AuditEvent, AuditStoreError, hash_actor
from docsearch.rag.llm import GenerationError
from docsearch.rag.orchestrator import SKIP_BLANK_QUERY, query_fingerprint

logger = logging.getLogger(__name__)

app = FastAPI(title="Document Search", version="0.1.0")


def _configure_logging() -> None:
    """Configure root logging using environment settings."""
    level_name = settings.log_level.strip().upper()
    level = getattr(logging, level_name, logging.INFO)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logging.getLogger("docsearch").setLevel(level)


_configure_logging()


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


def _record_audit_event(event: AuditEvent) -> None:
    """Persist an audit event if an audit store is configured."""
    audit_store = get_audit_store()
    if not audit_store:
        return
    try:
        audit_store.record_event(event)
    except AuditStoreError:
        logger.warning("audit_event_dropped", extra={"request_id": event.request_id})


async def _read_upload_bytes(upload: UploadFile, max_bytes: int | None) -> bytes:
    """Stream upload bytes with a hard size limit."""
    if not max_bytes or max_bytes <= 0:
        return await upload.read()
    buffer = bytearray()
    while True:
        chunk = await upload.read(65536)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            limit_mb = max_bytes // (1024 * 1024)
            raise HTTPException(
                status_code=400,
                detail=f"File size too large. Maximum size is {limit_mb}MB",
            )
    return bytes(buffer)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Attach or create a request ID for traceability."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.middleware("http")
async def record_metrics(request: Request, call_next):
    """Capture request metrics before returning the response."""
    return await metrics_middleware(request, call_next)


@app.get("/metrics")
async def metrics():
    """Expose Prometheus-style metrics."""
    return metrics_response()


@app.get("/health")
async def health() -> dict[str, str]:
    """Simple health probe for uptime checks."""
    return {"status": "ok"}


@app.post("/projects", response_model=ProjectModel)
async def create_project(
    request: ProjectCreateRequest,
    auth: AuthContext = Depends(require_api_key),
) -> ProjectModel:
    """Create a project owned by the caller."""
    store = get_corpus_store()
    try:
        project = store.create_project(request.name, auth.user_id, request.description)
    except CorpusStoreError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    logger.info("project_created", extra={"project_id": project.id})
    return ProjectModel.from_project(project)


@app.get("/projects", response_model=list[ProjectModel])
async def list_projects(
    order_by: Literal["name", "updated_at"] = "name",
    limit: int | None = None,
    auth: AuthContext = Depends(require_api_key),
) -> list[ProjectModel]:
    """List the caller's projects."""
    store = get_corpus_store()
    projects = store.list_projects(auth.user_id, order_by=order_by, limit=limit)
    return [ProjectModel.from_project(project) for project in projects]


@app.post("/documents", response_model=DocumentSummary)
async def upload_document(
    http_request: Request,
    file: UploadFile = File(...),
    project_id: str = Form(...),
    visibility: Literal["private", "team"] = Form("team"),
    auth: AuthContext = Depends(require_api_key),
) -> DocumentSummary:
    """Validate an upload, extract its text and store it as a document."""
    request_id = _request_id(http_request)
    store = get_corpus_store()
    project = store.get_project(project_id)
    if project is None or project.owner_id != auth.user_id:
        raise HTTPException(status_code=404, detail="Project not found")

    data = await _read_upload_bytes(file, settings.max_upload_bytes)
    try:
        check = validate_upload(
            file.filename,
            len(data),
            content_type=file.content_type,
            max_bytes=settings.max_upload_bytes,
        )
        content = extract_text(data, check.filename)
    except UploadRejected as exc:
        _record_audit_event(
            AuditEvent(
                event_type="upload",
                request_id=request_id,
                user_id=auth.user_id,
                actor=hash_actor(auth.api_key),
                status="rejected",
                detail={"reason": str(exc)},
            )
        )
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ExtractionError as exc:
        _record_audit_event(
            AuditEvent(
                event_type="upload",
                request_id=request_id,
                user_id=auth.user_id,
                actor=hash_actor(auth.api_key),
                status="failed",
                detail={"reason": type(exc).__name__},
            )
        )
        raise HTTPException(
            status_code=422, detail=f"Failed to extract text: {exc}"
        ) from exc

    document = store.create_document(
        name=check.filename,
        content=content,
        file_type=check.content_type,
        file_size=check.size,
        project_id=project.id,
        uploaded_by=auth.user_id,
        visibility=visibility,
    )
    _record_audit_event(
        AuditEvent(
            event_type="upload",
            request_id=request_id,
            user_id=auth.user_id,
            actor=hash_actor(auth.api_key),
            status="completed",
            detail={
                "document_id": document.id,
                "file_size": document.file_size,
                "content_length": len(content),
            },
        )
    )
    logger.info(
        "document_uploaded",
        extra={
            "request_id": request_id,
            "document_id": document.id,
            "file_size": document.file_size,
            "content_length": len(content),
        },
    )
    return DocumentSummary.from_document(document)


@app.get("/documents", response_model=DocumentListResponse)
async def list_documents(
    search: str = "",
    visibility: Literal["all", "private", "team"] = "all",
    auth: AuthContext = Depends(require_api_key),
) -> DocumentListResponse:
    """List the caller's documents, newest first, with optional filters."""
    store = get_corpus_store()
    documents = filter_documents(
        store.list_documents(auth.user_id), search_term=search, visibility=visibility
    )
    return DocumentListResponse(
        documents=[DocumentSummary.from_document(document) for document in documents],
        total=len(documents),
    )


@app.get("/documents/{document_id}", response_model=DocumentDetail)
async def get_document(
    document_id: str,
    auth: AuthContext = Depends(require_api_key),
) -> DocumentDetail:
    """Return one of the caller's documents including its text."""
    document = get_corpus_store().get_document(document_id)
    if document is None or document.uploaded_by != auth.user_id:
        raise HTTPException(status_code=404, detail="Document not found")
    return DocumentDetail.from_document(document)


@app.get("/dashboard", response_model=DashboardResponse)
async def dashboard(auth: AuthContext = Depends(require_api_key)) -> DashboardResponse:
    """Return the caller's recently updated projects and documents."""
    store = get_corpus_store()
    limit = settings.recent_limit
    projects = store.list_projects(auth.user_id, order_by="updated_at", limit=limit)
    documents = store.list_documents(auth.user_id, order_by="updated_at")
    return DashboardResponse(
        recent_projects=[ProjectModel.from_project(project) for project in projects],
        recent_documents=[DocumentSummary.from_document(document) for document in documents[:limit]],
        document_count=len(documents),
    )


@app.post("/search", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    http_request: Request,
    auth: AuthContext = Depends(require_api_key),
) -> SearchResponse:
    """Answer a question over the caller's documents with scored sources."""
    request_id = _request_id(http_request)
    logger.info(
        "search_received",
        extra={
            "request_id": request_id,
            "query_length": len(request.query),
            "query_hash": query_fingerprint(request.query),
            "actor": hash_actor(auth.api_key),
        },
    )
    if not request.query.strip():
        record_search("skipped")
        return SearchResponse(
            result=None,
            skipped_reason=SKIP_BLANK_QUERY,
            request_id=request_id,
        )
    try:
        session = get_session_registry().get(auth.user_id)
        outcome = await session.run(request.query)
    except GenerationError as exc:
        record_search("failed")
        _record_audit_event(
            AuditEvent(
                event_type="search",
                request_id=request_id,
                user_id=auth.user_id,
                actor=hash_actor(auth.api_key),
                status="failed",
                detail={"reason": type(exc).__name__},
            )
        )
        raise HTTPException(status_code=502, detail="Answer generation failed") from exc
    except CorpusStoreError as exc:
        record_search("failed")
        logger.error(
            "search_corpus_failed",
            extra={"request_id": request_id, "detail": type(exc).__name__},
        )
        raise HTTPException(status_code=503, detail="Document store unavailable") from exc

    if outcome.result is None:
        record_search("skipped")
        return SearchResponse(
            result=None,
            skipped_reason=outcome.skipped_reason,
            request_id=request_id,
        )
    record_search("answered", sources=len(outcome.result.sources))
    _record_audit_event(
        AuditEvent(
            event_type="search",
            request_id=request_id,
            user_id=auth.user_id,
            actor=hash_actor(auth.api_key),
            status="completed",
            detail={
                "query_hash": query_fingerprint(request.query),
                "sources": [source.document_id for source in outcome.result.sources],
            },
        )
    )
    return SearchResponse(
        result=SearchResultModel.from_result(outcome.result),
        request_id=request_id,
    )


@app.get("/search/latest", response_model=LatestSearchResponse)
async def latest_search(auth: AuthContext = Depends(require_api_key)) -> LatestSearchResponse:
    """Return the caller's most recent successful search result."""
    try:
        result = get_session_registry().latest(auth.user_id)
    except GenerationError as exc:
        logger.warning("search_registry_unavailable", extra={"detail": type(exc).__name__})
        result = None
    if result is None:
        return LatestSearchResponse(result=None)
    return LatestSearchResponse(result=SearchResultModel.from_result(result))
