from __future__ import annotations

"""PDF text extraction and cleanup."""

import re


class PDFLoaderError(RuntimeError):
    """Raised when PDF loading fails."""
    pass


_WHITESPACE_RE = re.compile(r"[ \t]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def _clean_pdf_text(text: str) -> str:
    """Join hyphenated line breaks and collapse runs of whitespace."""
    if not text:
        return ""
    cleaned = text.replace("\r\n", "\n")
    cleaned = re.sub(r"(\w)-\n(\w)", r"\1\2", cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned)
    cleaned = "\n".join(line.strip() for line in cleaned.split("\n"))
    return _BLANK_LINES_RE.sub("\n\n", cleaned).strip()


def _open_pdf(**kwargs):
    try:
        import fitz
    except ImportError as exc:
        raise PDFLoaderError("PyMuPDF is required to load PDF files") from exc
    try:
        return fitz.open(**kwargs)
    except Exception as exc:
        raise PDFLoaderError(f"Unreadable PDF: {type(exc).__name__}") from exc


def _read_pages(reader) -> str:
    text_parts: list[str] = []
    with reader:
        for page in reader:
            text_parts.append(page.get_text() or "")
    return _clean_pdf_text("\n".join(text_parts))


def load_pdf_bytes(data: bytes) -> str:
    """Extract the text of an in-memory PDF."""
    return _read_pages(_open_pdf(stream=data, filetype="pdf"))
