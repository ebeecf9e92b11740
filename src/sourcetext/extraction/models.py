"""Canonical data structures shared by extraction adapters and the extractor."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

_WEB_SCHEMES = ("http://", "https://")


class SourceKind(Enum):
    OFFICE_DOCUMENT = "office-document"
    WEB_PAGE = "web-page"


@dataclass(frozen=True, slots=True)
class ContentSource:
    """Descriptor of where raw content comes from: a file path or a URL."""

    kind: SourceKind
    location: str

    @classmethod
    def document(cls, path: str | Path) -> "ContentSource":
        return cls(kind=SourceKind.OFFICE_DOCUMENT, location=str(path))

    @classmethod
    def web_page(cls, url: str) -> "ContentSource":
        return cls(kind=SourceKind.WEB_PAGE, location=url.strip())

    @classmethod
    def from_location(cls, value: str | Path) -> "ContentSource":
        """Pick the source kind from the shape of *value*."""

        text = str(value).strip()
        if text.lower().startswith(_WEB_SCHEMES):
            return cls.web_page(text)
        return cls.document(text)


@dataclass(frozen=True, slots=True)
class OfficeOptions:
    """Recognized options for office-document text conversion."""

    paragraph_delimiter: str = " "
    include_annotations: bool = True
