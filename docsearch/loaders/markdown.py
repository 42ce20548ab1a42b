from __future__ import annotations

"""Markdown extraction."""

from docsearch.loaders.text import load_text_bytes


def load_markdown_bytes(data: bytes) -> str:
    """Decode Markdown bytes, keeping its markup."""
    return load_text_bytes(data)
