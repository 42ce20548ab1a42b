from __future__ import annotations

from conftest import make_document

from docsearch.rag.relevance import build_excerpt, query_terms, score_sources


def test_query_terms_drop_short_tokens() -> None:
    assert query_terms("What is the budget?") == ["what", "budget"]
    assert query_terms("(draft) roadmap, v2.") == ["draft", "roadmap"]
    assert query_terms("  is   it\tok \n") == []


def test_query_terms_strip_unicode_punctuation() -> None:
    assert query_terms("“budget”") == ["budget"]
    assert query_terms("budget？ ¿roadmap»") == ["budget", "roadmap"]
    assert query_terms("「is」") == []

    sources = score_sources("Total “budget？", [make_document("b", "Budget for Q1")])
    assert [source.document_id for source in sources] == ["b"]


def test_budget_document_is_source() -> None:
    documents = [make_document("budget", "Total budget is $5000 for Q1", name="Budget.txt")]

    sources = score_sources("What is the budget?", documents)

    assert [source.document_name for source in sources] == ["Budget.txt"]
    assert sources[0].confidence == 0.8
    assert sources[0].matched_terms == ("budget",)


def test_short_tokens_yield_no_sources() -> None:
    documents = [make_document("notes", "Meeting went well", name="Notes.txt")]

    assert score_sources("is it ok", documents) == []


def test_substring_match_is_not_word_bounded() -> None:
    documents = [make_document("plan", "Projection for next quarter")]

    sources = score_sources("project", documents)

    assert [source.document_id for source in sources] == ["plan"]


def test_match_is_case_insensitive() -> None:
    documents = [make_document("memo", "The ROADMAP covers three releases.")]

    assert score_sources("Roadmap", documents)[0].document_id == "memo"


def test_sources_capped_at_five_in_corpus_order() -> None:
    documents = [
        make_document(f"doc-{idx}", f"Status of project number {idx}") for idx in range(10)
    ]

    sources = score_sources("project status", documents)

    assert [source.document_id for source in sources] == [f"doc-{idx}" for idx in range(5)]
    assert all(source.confidence == 0.8 for source in sources)


def test_unmatched_documents_never_appear() -> None:
    documents = [
        make_document("a", "Invoices for March"),
        make_document("b", "Holiday schedule"),
        make_document("c", "Invoice template"),
    ]

    sources = score_sources("invoice", documents)

    assert [source.document_id for source in sources] == ["a", "c"]


def test_excerpt_is_prefix_regardless_of_match_position() -> None:
    content = "x" * 250 + " budget"
    documents = [make_document("long", content)]

    sources = score_sources("budget", documents)

    assert sources[0].relevant_text == "x" * 200 + "..."
    assert "budget" not in sources[0].relevant_text


def test_short_content_excerpt_still_gets_ellipsis() -> None:
    assert build_excerpt("Short text") == "Short text..."


def test_empty_corpus_has_no_sources() -> None:
    assert score_sources("anything here", []) == []


def test_matched_terms_are_unique_in_query_order() -> None:
    documents = [make_document("doc", "alpha beta gamma")]

    sources = score_sources("gamma alpha gamma delta", documents)

    assert sources[0].matched_terms == ("gamma", "alpha")
