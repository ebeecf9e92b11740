"""Domain errors raised by source extraction."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ExtractionFailure(Enum):
    FETCH_FAILED = "fetch_failed"
    READ_FAILED = "read_failed"
    UNSUPPORTED_SOURCE = "unsupported_source"


@dataclass(slots=True)
class ExtractionError(Exception):
    """Domain error for unreachable, unreadable or unsupported sources."""

    kind: ExtractionFailure
    location: str
    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        detail = f"kind={self.kind.value}, source={self.location}"
        if self.status_code is not None:
            detail = f"{detail}, status={self.status_code}"
        return f"{self.message} ({detail})"
