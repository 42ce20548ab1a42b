from __future__ import annotations

"""Best-effort text recovery from legacy binary Word files."""

import re

_UTF16_RUN_RE = re.compile(rb"(?:[\x20-\x7e\r\n\t]\x00){4,}")
_ASCII_RUN_RE = re.compile(rb"[\x20-\x7e\r\n\t]{8,}")


def load_legacy_doc_bytes(data: bytes, min_run: int = 8) -> str:
    """Recover readable text runs from a ``.doc`` file.

    Word 97-2003 stores body text either as UTF-16LE or as 8-bit runs; the
    longer of the two recoveries is returned.
    """
    utf16 = [
        match.decode("utf-16-le", errors="ignore")
        for match in _UTF16_RUN_RE.findall(data)
    ]
    ascii_runs = [match.decode("ascii", errors="ignore") for match in _ASCII_RUN_RE.findall(data)]
    candidates = [
        "\n".join(run.strip() for run in runs if len(run.strip()) >= min_run)
        for runs in (utf16, ascii_runs)
    ]
    return max(candidates, key=len).strip()
