from __future__ import annotations

import json
import os

import httpx
import pytest

from conftest import RecordingGenerator

from docsearch.app.dependencies import override_generator, reset_caches
from docsearch.app.main import app

pytestmark = pytest.mark.anyio


def get_client() -> httpx.AsyncClient:
    reset_caches()
    override_generator(RecordingGenerator())
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


async def test_api_key_required_for_search() -> None:
    original = os.environ.get("DOCSEARCH_API_KEYS")
    os.environ["DOCSEARCH_API_KEYS"] = "secret"
    try:
        async with get_client() as client:
            response = await client.post("/search", json={"query": "test"})
            assert response.status_code == 401

            ok_response = await client.post(
                "/search",
                json={"query": "test"},
                headers={"Authorization": "Bearer secret"},
            )
            assert ok_response.status_code == 200
    finally:
        if original is None:
            os.environ.pop("DOCSEARCH_API_KEYS", None)
        else:
            os.environ["DOCSEARCH_API_KEYS"] = original


async def test_anonymous_access_can_be_disabled() -> None:
    original = os.environ.get("DOCSEARCH_ALLOW_ANONYMOUS")
    os.environ["DOCSEARCH_ALLOW_ANONYMOUS"] = "false"
    try:
        async with get_client() as client:
            response = await client.get("/documents")
        assert response.status_code == 401
    finally:
        if original is None:
            os.environ.pop("DOCSEARCH_ALLOW_ANONYMOUS", None)
        else:
            os.environ["DOCSEARCH_ALLOW_ANONYMOUS"] = original


async def test_users_only_see_their_own_documents() -> None:
    original = os.environ.get("DOCSEARCH_API_KEY_MAP")
    os.environ["DOCSEARCH_API_KEY_MAP"] = json.dumps(
        {"key-a": "user-a", "key-b": {"user_id": "user-b"}}
    )
    try:
        async with get_client() as client:
            headers_a = {"X-API-Key": "key-a"}
            headers_b = {"X-API-Key": "key-b"}
            project = await client.post("/projects", json={"name": "A"}, headers=headers_a)
            project_id = project.json()["id"]
            upload = await client.post(
                "/documents",
                files={"file": ("alpha.txt", b"Alpha roadmap", "text/plain")},
                data={"project_id": project_id},
                headers=headers_a,
            )
            assert upload.status_code == 200

            foreign_upload = await client.post(
                "/documents",
                files={"file": ("beta.txt", b"Beta", "text/plain")},
                data={"project_id": project_id},
                headers=headers_b,
            )
            listed_b = await client.get("/documents", headers=headers_b)
            search_b = await client.post(
                "/search", json={"query": "roadmap"}, headers=headers_b
            )
            detail_b = await client.get(
                f"/documents/{upload.json()['id']}", headers=headers_b
            )
            unknown = await client.get("/documents", headers={"X-API-Key": "nope"})

        assert foreign_upload.status_code == 404
        assert listed_b.json()["documents"] == []
        assert search_b.json()["skipped_reason"] == "empty_corpus"
        assert detail_b.status_code == 404
        assert unknown.status_code == 401
    finally:
        if original is None:
            os.environ.pop("DOCSEARCH_API_KEY_MAP", None)
        else:
            os.environ["DOCSEARCH_API_KEY_MAP"] = original
