from __future__ import annotations

"""Prompt templates for document question answering."""

INSUFFICIENT_CONTEXT_HINT = (
    "If the answer cannot be found in the documents, say so clearly."
)


def build_answer_prompt(query: str, context: str) -> str:
    """Build the single-shot prompt sent to the answer generator."""
    return (
        f'Based on the following documents, answer this question: "{query}"\n\n'
        f"Documents:\n{context}\n\n"
        "Please provide a comprehensive answer using only the documents above "
        "and indicate which documents you referenced. "
        f"{INSUFFICIENT_CONTEXT_HINT}"
    )
