from __future__ import annotations

from conftest import make_document

from docsearch.rag.context import assemble_context, prioritize_documents


def test_context_preserves_order_and_format() -> None:
    documents = [
        make_document("a", "First content", name="A.txt"),
        make_document("b", "Second content", name="B.txt"),
    ]

    context = assemble_context(documents)

    assert context == (
        "Document: A.txt\nContent: First content\n---\n"
        "Document: B.txt\nContent: Second content\n---"
    )


def test_empty_corpus_gives_empty_context() -> None:
    assert assemble_context([]) == ""


def test_budget_truncates_crossing_segment() -> None:
    documents = [
        make_document("a", "a" * 50, name="A.txt"),
        make_document("b", "b" * 500, name="B.txt"),
        make_document("c", "c" * 50, name="C.txt"),
    ]

    context = assemble_context(documents, max_chars=200)

    assert len(context) == 200
    assert context.startswith("Document: A.txt\nContent: " + "a" * 50)
    assert "Document: B.txt" in context
    assert context.endswith("\n---")
    assert "C.txt" not in context


def test_budget_drops_segment_without_room_for_content() -> None:
    documents = [
        make_document("a", "a" * 20, name="A.txt"),
        make_document("b", "b" * 20, name="B.txt"),
    ]
    first = assemble_context(documents[:1])

    context = assemble_context(documents, max_chars=len(first) + 10)

    assert context == first


def test_non_positive_budget_is_unbounded() -> None:
    documents = [make_document("a", "a" * 100)]

    assert assemble_context(documents, max_chars=0) == assemble_context(documents)


def test_prioritize_moves_preferred_first() -> None:
    documents = [make_document(name, name) for name in ("a", "b", "c", "d")]

    ordered = prioritize_documents(documents, ["c", "a"])

    assert [document.id for document in ordered] == ["c", "a", "b", "d"]
    assert [document.id for document in prioritize_documents(documents, None)] == [
        "a",
        "b",
        "c",
        "d",
    ]
