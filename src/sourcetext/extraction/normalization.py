"""Text normalization applied to raw extraction output."""

from __future__ import annotations

import re

# Long lines are deduplicated on their prefix only, so two lines that differ
# after this many characters collapse into the first one.
DEDUP_KEY_LENGTH = 160
PARAGRAPH_SEPARATOR = "\n\n"

_WHITESPACE_RE = re.compile(r"\s+")
_DOUBLE_PARAGRAPH_RE = re.compile(r"\n\s*\n")


def normalize_whitespace(text: str) -> str:
    """Collapse repeated whitespace and trim boundaries."""

    return _WHITESPACE_RE.sub(" ", text).strip()


def dedup_key(line: str) -> str:
    return line[:DEDUP_KEY_LENGTH] if len(line) > DEDUP_KEY_LENGTH else line


def dedupe_lines(lines: list[str]) -> list[str]:
    """Drop repeated lines, keeping first occurrences in order."""

    seen: set[str] = set()
    kept: list[str] = []
    for line in lines:
        key = dedup_key(line)
        if key in seen:
            continue
        seen.add(key)
        kept.append(line)
    return kept


def normalize_extracted_text(raw: str | None) -> str:
    """Turn raw extracted text into deduplicated, whitespace-canonical text.

    Lines are trimmed, blank lines dropped and repeats removed before the
    survivors are joined as paragraphs. Whitespace runs, paragraph separators
    included, then collapse to single spaces. Empty or ``None`` input yields
    an empty string.
    """

    if not raw:
        return ""

    text = raw.replace("\r\n", "\n")
    lines = [line.strip() for line in text.split("\n")]
    lines = [line for line in lines if line]

    text = PARAGRAPH_SEPARATOR.join(dedupe_lines(lines))
    text = _WHITESPACE_RE.sub(" ", text)
    text = _DOUBLE_PARAGRAPH_RE.sub(PARAGRAPH_SEPARATOR, text)
    return text.strip()
