"""Runtime configuration for source extraction."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping

from sourcetext.extraction.models import OfficeOptions


DEFAULT_STABILITY_MODE = True
DEFAULT_OFFICE_DELIMITER = " "
DEFAULT_OFFICE_INCLUDE_NOTES = True
DEFAULT_FETCH_TIMEOUT_SECONDS = 10.0
DEFAULT_BROWSER_TIMEOUT_SECONDS = 15.0
DEFAULT_RENDERED_MIN_WORDS = 50
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(*, name: str, raw_value: str) -> bool:
    value = raw_value.strip().casefold()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be one of: {', '.join(sorted(_TRUE_VALUES | _FALSE_VALUES))}")


def _parse_positive_int(*, name: str, raw_value: str, minimum: int = 1) -> int:
    value = int(raw_value)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _parse_positive_float(*, name: str, raw_value: str, minimum: float = 0.001) -> float:
    value = float(raw_value)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


@dataclass(frozen=True, slots=True)
class ExtractionSettings:
    """Validated settings for extractors, the browser manager and fetches."""

    stability_mode: bool = DEFAULT_STABILITY_MODE
    office_delimiter: str = DEFAULT_OFFICE_DELIMITER
    office_include_notes: bool = DEFAULT_OFFICE_INCLUDE_NOTES
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS
    browser_timeout_seconds: float = DEFAULT_BROWSER_TIMEOUT_SECONDS
    rendered_min_words: int = DEFAULT_RENDERED_MIN_WORDS
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def office_options(self) -> OfficeOptions:
        return OfficeOptions(
            paragraph_delimiter=self.office_delimiter,
            include_annotations=self.office_include_notes,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExtractionSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        stability_raw = source.get("SOURCETEXT_STABILITY_MODE", str(DEFAULT_STABILITY_MODE))
        # Whitespace is a legitimate join token, so the delimiter is not stripped.
        delimiter = source.get("SOURCETEXT_OFFICE_DELIMITER", DEFAULT_OFFICE_DELIMITER)
        notes_raw = source.get("SOURCETEXT_OFFICE_INCLUDE_NOTES", str(DEFAULT_OFFICE_INCLUDE_NOTES))
        fetch_timeout_raw = source.get(
            "SOURCETEXT_FETCH_TIMEOUT_SECONDS", str(DEFAULT_FETCH_TIMEOUT_SECONDS)
        ).strip()
        browser_timeout_raw = source.get(
            "SOURCETEXT_BROWSER_TIMEOUT_SECONDS", str(DEFAULT_BROWSER_TIMEOUT_SECONDS)
        ).strip()
        min_words_raw = source.get("SOURCETEXT_RENDERED_MIN_WORDS", str(DEFAULT_RENDERED_MIN_WORDS)).strip()
        user_agent = source.get("SOURCETEXT_USER_AGENT", DEFAULT_USER_AGENT).strip()

        if not delimiter:
            raise ValueError("SOURCETEXT_OFFICE_DELIMITER cannot be empty")
        if not fetch_timeout_raw:
            raise ValueError("SOURCETEXT_FETCH_TIMEOUT_SECONDS cannot be empty")
        if not browser_timeout_raw:
            raise ValueError("SOURCETEXT_BROWSER_TIMEOUT_SECONDS cannot be empty")
        if not min_words_raw:
            raise ValueError("SOURCETEXT_RENDERED_MIN_WORDS cannot be empty")
        if not user_agent:
            raise ValueError("SOURCETEXT_USER_AGENT cannot be empty")

        return cls(
            stability_mode=_parse_bool(name="SOURCETEXT_STABILITY_MODE", raw_value=stability_raw),
            office_delimiter=delimiter,
            office_include_notes=_parse_bool(name="SOURCETEXT_OFFICE_INCLUDE_NOTES", raw_value=notes_raw),
            fetch_timeout_seconds=_parse_positive_float(
                name="SOURCETEXT_FETCH_TIMEOUT_SECONDS",
                raw_value=fetch_timeout_raw,
                minimum=0.1,
            ),
            browser_timeout_seconds=_parse_positive_float(
                name="SOURCETEXT_BROWSER_TIMEOUT_SECONDS",
                raw_value=browser_timeout_raw,
                minimum=0.1,
            ),
            rendered_min_words=_parse_positive_int(
                name="SOURCETEXT_RENDERED_MIN_WORDS",
                raw_value=min_words_raw,
                minimum=0,
            ),
            user_agent=user_agent,
        )
