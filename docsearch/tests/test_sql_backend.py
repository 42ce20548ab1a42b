from __future__ import annotations

"""End-to-end tests against SQL-backed corpus and audit stores."""

import os
import sqlite3

import httpx
import pytest

from conftest import RecordingGenerator

from docsearch.app.dependencies import override_generator, reset_caches
from docsearch.app.main import app

pytestmark = pytest.mark.anyio


@pytest.fixture
def sql_env(tmp_path):
    corpus_db = tmp_path / "corpus.db"
    audit_db = tmp_path / "audit.db"
    os.environ["DOCSEARCH_DATABASE_URI"] = f"sqlite:///{corpus_db}"
    os.environ["DOCSEARCH_AUDIT_DB_URI"] = f"sqlite:///{audit_db}"
    reset_caches()
    yield corpus_db, audit_db
    os.environ.pop("DOCSEARCH_DATABASE_URI", None)
    os.environ.pop("DOCSEARCH_AUDIT_DB_URI", None)
    reset_caches()


async def test_upload_and_search_persist_and_audit(sql_env) -> None:
    corpus_db, audit_db = sql_env
    override_generator(RecordingGenerator(answer="Ten documents mention the project."))
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        project = await client.post("/projects", json={"name": "Launch"})
        project_id = project.json()["id"]
        for idx in range(10):
            response = await client.post(
                "/documents",
                files={"file": (f"doc-{idx}.txt", f"Project update {idx}".encode(), "text/plain")},
                data={"project_id": project_id},
            )
            assert response.status_code == 200
        search = await client.post("/search", json={"query": "project"})

    sources = search.json()["result"]["sources"]
    assert [source["document_name"] for source in sources] == [
        f"doc-{idx}.txt" for idx in range(9, 4, -1)
    ]

    conn = sqlite3.connect(corpus_db)
    try:
        count = conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0]
    finally:
        conn.close()
    assert count == 10

    conn = sqlite3.connect(audit_db)
    try:
        events = conn.execute(
            "SELECT event_type, status FROM audit_events ORDER BY created_at"
        ).fetchall()
    finally:
        conn.close()
    assert events.count(("upload", "completed")) == 10
    assert ("search", "completed") in events
