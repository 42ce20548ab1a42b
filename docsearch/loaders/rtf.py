from __future__ import annotations

"""RTF text extraction."""

import re


class RTFLoaderError(RuntimeError):
    """Raised when RTF loading fails."""
    pass


# Destinations whose content is metadata, not document text.
_SKIP_GROUPS_RE = re.compile(
    r"\{\\(?:\*\\[a-z]+|fonttbl|colortbl|stylesheet|info|pict)[^{}]*(?:\{[^{}]*\}[^{}]*)*\}",
    re.IGNORECASE,
)
_ESCAPES = {"\\\\": "\x01", "\\{": "\x02", "\\}": "\x03"}
_HEX_RE = re.compile(r"\\'([0-9a-fA-F]{2})")
_UNICODE_RE = re.compile(r"\\u(-?\d+)\??")
_PARAGRAPH_RE = re.compile(r"\\(?:par|line)\b ?")
_TAB_RE = re.compile(r"\\tab\b ?")
_CONTROL_RE = re.compile(r"\\[a-zA-Z]+-?\d* ?")


def load_rtf_bytes(data: bytes) -> str:
    """Strip RTF control words and groups, keeping the visible text."""
    raw = data.decode("latin-1")
    if not raw.lstrip().startswith("{\\rtf"):
        raise RTFLoaderError("Invalid RTF document")
    text = raw
    for escape, placeholder in _ESCAPES.items():
        text = text.replace(escape, placeholder)
    text = _SKIP_GROUPS_RE.sub("", text)
    text = _UNICODE_RE.sub(lambda match: chr(int(match.group(1)) % 65536), text)
    text = _HEX_RE.sub(
        lambda match: bytes.fromhex(match.group(1)).decode("cp1252", errors="ignore"), text
    )
    text = _PARAGRAPH_RE.sub("\n", text)
    text = _TAB_RE.sub("\t", text)
    text = _CONTROL_RE.sub("", text)
    text = text.replace("{", "").replace("}", "")
    for escape, placeholder in _ESCAPES.items():
        text = text.replace(placeholder, escape[1])
    lines = [line.strip() for line in text.splitlines()]
    return "\n".join(line for line in lines if line).strip()
