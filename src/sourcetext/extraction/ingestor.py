"""Multi-source ingestion: extract concurrently, then normalize once."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Sequence

from sourcetext.extraction.extractor import SourceExtractor
from sourcetext.extraction.models import ContentSource
from sourcetext.extraction.normalization import PARAGRAPH_SEPARATOR, normalize_extracted_text

logger = logging.getLogger(__name__)

DEFAULT_MIN_CHARS = 500


@dataclass(frozen=True, slots=True)
class IngestionResult:
    """Normalized text ready for downstream generation."""

    text: str
    char_count: int
    is_sufficient: bool
    sources: tuple[ContentSource, ...]


class SourceIngestor:
    """Combine several sources into one normalized text payload."""

    def __init__(self, extractor: SourceExtractor, *, min_chars: int = DEFAULT_MIN_CHARS) -> None:
        if min_chars < 0:
            raise ValueError("min_chars cannot be negative")
        self._extractor = extractor
        self._min_chars = min_chars

    async def ingest(self, sources: Sequence[ContentSource]) -> IngestionResult:
        if not sources:
            raise ValueError("No file or URL provided for ingestion")

        raw_texts = await self._extract_all(sources)
        text = normalize_extracted_text(PARAGRAPH_SEPARATOR.join(raw_texts))
        char_count = len(text)
        is_sufficient = char_count >= self._min_chars
        if not is_sufficient:
            logger.info(
                "Not enough textual content: %d chars from %d source(s), need %d",
                char_count,
                len(sources),
                self._min_chars,
            )

        return IngestionResult(
            text=text,
            char_count=char_count,
            is_sufficient=is_sufficient,
            sources=tuple(sources),
        )

    async def _extract_all(self, sources: Sequence[ContentSource]) -> list[str]:
        """Extract every source concurrently; the first failure cancels the rest."""

        tasks = [asyncio.ensure_future(self._extractor.extract(source)) for source in sources]
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
