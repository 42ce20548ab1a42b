from __future__ import annotations

"""Upload validation and text extraction for new documents."""

import logging
from dataclasses import dataclass
from pathlib import PurePath

from docsearch.loaders.docx import DocxLoaderError, load_docx_bytes
from docsearch.loaders.legacy_doc import load_legacy_doc_bytes
from docsearch.loaders.markdown import load_markdown_bytes
from docsearch.loaders.pdf import PDFLoaderError, load_pdf_bytes
from docsearch.loaders.rtf import RTFLoaderError, load_rtf_bytes
from docsearch.loaders.text import load_text_bytes

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = ("pdf", "doc", "docx", "txt", "md", "rtf")
MAX_UPLOAD_BYTES = 50 * 1024 * 1024

_CONTENT_TYPES = {
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "txt": "text/plain",
    "md": "text/markdown",
    "rtf": "application/rtf",
}


class UploadRejected(RuntimeError):
    """Raised when an uploaded file fails validation."""
    pass


class ExtractionError(RuntimeError):
    """Raised when text cannot be extracted from an uploaded file."""
    pass


@dataclass(frozen=True)
class UploadCheck:
    """Validated upload attributes."""
    filename: str
    extension: str
    size: int
    content_type: str


def file_extension(filename: str) -> str:
    return PurePath(filename).suffix.lower().lstrip(".")


def validate_upload(
    filename: str | None,
    size: int,
    content_type: str | None = None,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> UploadCheck:
    """Check name, extension and size of an uploaded file."""
    name = (filename or "").strip()
    if not name:
        raise UploadRejected("File name is missing")
    if size <= 0:
        raise UploadRejected("Selected file is empty")
    extension = file_extension(name)
    if extension not in ALLOWED_EXTENSIONS:
        allowed = ", ".join(ALLOWED_EXTENSIONS).upper()
        raise UploadRejected(f"Unsupported file type. Please upload: {allowed} files")
    if size > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise UploadRejected(f"File size too large. Maximum size is {limit_mb}MB")
    resolved_type = (content_type or "").strip()
    if not resolved_type or resolved_type == "application/octet-stream":
        resolved_type = _CONTENT_TYPES[extension]
    return UploadCheck(filename=name, extension=extension, size=size, content_type=resolved_type)


def extract_text(data: bytes, filename: str) -> str:
    """Extract plain text from file bytes based on the file extension."""
    extension = file_extension(filename)
    try:
        if extension == "pdf":
            text = load_pdf_bytes(data)
        elif extension == "docx":
            text = load_docx_bytes(data)
        elif extension == "doc":
            text = load_legacy_doc_bytes(data)
        elif extension == "rtf":
            text = load_rtf_bytes(data)
        elif extension == "md":
            text = load_markdown_bytes(data)
        elif extension == "txt":
            text = load_text_bytes(data)
        else:
            raise ExtractionError(f"No text extractor for .{extension} files")
    except (PDFLoaderError, DocxLoaderError, RTFLoaderError) as exc:
        logger.warning(
            "text_extraction_failed",
            extra={"extension": extension, "detail": type(exc).__name__},
        )
        raise ExtractionError(str(exc)) from exc
    logger.info("text_extracted", extra={"extension": extension, "length": len(text)})
    return text
