"""Shared adapter contract for per-format document converters."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable
import zipfile

from sourcetext.extraction.models import OfficeOptions

ZIP_MAGIC = b"PK\x03\x04"


@runtime_checkable
class DocumentAdapter(Protocol):
    """Protocol that every document format adapter must implement."""

    def supports(self, path: Path, sniffed_bytes: bytes | None = None) -> bool:
        """Return True when this adapter can convert the given file."""

    def extract(self, path: Path, options: OfficeOptions) -> list[str]:
        """Return the document's logical text blocks in reading order."""


def zip_contains(path: Path, member: str) -> bool:
    """Return True when *path* is a zip archive holding *member*."""

    try:
        with zipfile.ZipFile(path) as archive:
            return member in archive.namelist()
    except (OSError, zipfile.BadZipFile):
        return False
