from __future__ import annotations

"""Tests for the in-memory and SQL document libraries."""

import pytest

from conftest import make_document

from docsearch.corpus.accessor import CorpusStoreError, InMemoryCorpusStore, filter_documents
from docsearch.corpus.store import SQLCorpusStore


@pytest.fixture(params=["memory", "sql"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryCorpusStore()
    return SQLCorpusStore(f"sqlite:///{tmp_path / 'corpus.db'}")


def _add_document(store, project_id: str, name: str, uploaded_by: str = "user-1", visibility: str = "team"):
    return store.create_document(
        name=name,
        content=f"Content of {name}",
        file_type="text/plain",
        file_size=100,
        project_id=project_id,
        uploaded_by=uploaded_by,
        visibility=visibility,
    )


def test_documents_listed_newest_first(store) -> None:
    project = store.create_project("Research", owner_id="user-1")
    names = ["first.txt", "second.txt", "third.txt"]
    for name in names:
        _add_document(store, project.id, name)

    listed = store.list_documents("user-1")

    assert [document.name for document in listed] == list(reversed(names))
    assert [document.name for document in store.list_documents("user-1", limit=2)] == [
        "third.txt",
        "second.txt",
    ]


def test_documents_are_scoped_to_uploader(store) -> None:
    project = store.create_project("Shared", owner_id="user-1")
    _add_document(store, project.id, "mine.txt")
    _add_document(store, project.id, "theirs.txt", uploaded_by="user-2")

    assert [document.name for document in store.list_documents("user-1")] == ["mine.txt"]
    assert store.list_documents("user-3") == []


@pytest.mark.anyio
async def test_fetch_documents_matches_listing(store) -> None:
    project = store.create_project("Ops", owner_id="user-1")
    _add_document(store, project.id, "a.txt")
    _add_document(store, project.id, "b.txt")

    fetched = await store.fetch_documents("user-1")

    assert [document.id for document in fetched] == [
        document.id for document in store.list_documents("user-1")
    ]


def test_document_round_trip_fields(store) -> None:
    project = store.create_project("Legal", owner_id="user-1")
    created = _add_document(store, project.id, "contract.txt", visibility="private")

    loaded = store.get_document(created.id)

    assert loaded is not None
    assert loaded.name == "contract.txt"
    assert loaded.content == "Content of contract.txt"
    assert loaded.visibility == "private"
    assert loaded.project_id == project.id
    assert store.get_document("missing") is None


def test_unknown_project_rejected(store) -> None:
    with pytest.raises(CorpusStoreError):
        _add_document(store, "missing-project", "orphan.txt")


def test_invalid_visibility_rejected(store) -> None:
    project = store.create_project("Legal", owner_id="user-1")
    with pytest.raises(CorpusStoreError):
        _add_document(store, project.id, "x.txt", visibility="public")


def test_projects_ordered_by_name_or_recent_update(store) -> None:
    beta = store.create_project("beta", owner_id="user-1")
    store.create_project("Alpha", owner_id="user-1")
    store.create_project("Gamma", owner_id="user-2")
    _add_document(store, beta.id, "touch.txt")

    by_name = store.list_projects("user-1")
    recent = store.list_projects("user-1", order_by="updated_at", limit=1)

    assert [project.name for project in by_name] == ["Alpha", "beta"]
    assert [project.name for project in recent] == ["beta"]


def test_blank_project_name_rejected(store) -> None:
    with pytest.raises(CorpusStoreError):
        store.create_project("   ", owner_id="user-1")


def test_unsupported_ordering_rejected(store) -> None:
    with pytest.raises(CorpusStoreError):
        store.list_documents("user-1", order_by="name")


def test_filter_documents_by_name_and_visibility() -> None:
    documents = [
        make_document("a", "x", name="Quarterly Report.pdf", visibility="team"),
        make_document("b", "x", name="report-draft.docx", visibility="private"),
        make_document("c", "x", name="Notes.txt", visibility="private"),
    ]

    assert [d.id for d in filter_documents(documents, "REPORT")] == ["a", "b"]
    assert [d.id for d in filter_documents(documents, visibility="private")] == ["b", "c"]
    assert [d.id for d in filter_documents(documents, "report", "private")] == ["b"]
    assert [d.id for d in filter_documents(documents)] == ["a", "b", "c"]
    with pytest.raises(CorpusStoreError):
        filter_documents(documents, visibility="public")
