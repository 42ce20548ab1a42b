from __future__ import annotations

"""Plain text extraction."""


def load_text_bytes(data: bytes) -> str:
    """Decode plain text bytes, dropping undecodable sequences."""
    text = data.decode("utf-8", errors="ignore")
    return text.lstrip("\ufeff")
