"""Cleanup of model output that is expected to carry JSON."""

from __future__ import annotations

import re

_JSON_FENCE_RE = re.compile(r"```json", re.IGNORECASE)
_FENCE_RE = re.compile(r"```")
# C0 controls except tab and line breaks; a CR is kept only when it starts a CRLF.
_CONTROL_RE = re.compile(r"(?:[\x00-\x08\x0b\x0c\x0e-\x1f]|\r(?!\n))+")
_ALL_CONTROL_RE = re.compile(r"[\x00-\x1f]+")
_NEWLINE_RE = re.compile(r"\r?\n")


def sanitize_json_text(text: str | None, *, escape_newlines: bool = True) -> str:
    """Strip code fences and control characters from model output.

    Line breaks become the two-character sequence ``\\n`` so the result can be
    embedded in a JSON string verbatim, and tabs become spaces. With
    ``escape_newlines=False`` line breaks are treated like any other control
    character and folded into a single space, which keeps pretty-printed JSON
    parseable.
    """

    if not text:
        return ""

    cleaned = _JSON_FENCE_RE.sub("", text)
    cleaned = _FENCE_RE.sub("", cleaned)

    if not escape_newlines:
        return _ALL_CONTROL_RE.sub(" ", cleaned).strip()

    cleaned = _CONTROL_RE.sub(" ", cleaned)
    cleaned = _NEWLINE_RE.sub(r"\\n", cleaned)
    cleaned = cleaned.replace("\t", " ")
    return cleaned.strip()
