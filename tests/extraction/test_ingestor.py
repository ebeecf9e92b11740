from __future__ import annotations

import asyncio

import pytest

from sourcetext.extraction.errors import ExtractionError, ExtractionFailure
from sourcetext.extraction.ingestor import SourceIngestor
from sourcetext.extraction.models import ContentSource


class _FakeExtractor:
    def __init__(
        self,
        texts: dict[str, str],
        *,
        failing: set[str] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self._texts = texts
        self._failing = failing or set()
        self._delays = delays or {}
        self.in_flight = 0
        self.max_in_flight = 0
        self.cancelled: list[str] = []

    async def extract(self, source: ContentSource) -> str:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self._delays.get(source.location, 0.01))
        except asyncio.CancelledError:
            self.cancelled.append(source.location)
            raise
        finally:
            self.in_flight -= 1
        if source.location in self._failing:
            raise ExtractionError(
                kind=ExtractionFailure.FETCH_FAILED,
                location=source.location,
                message="Failed to fetch URL: HTTP 503",
                status_code=503,
            )
        return self._texts[source.location]


@pytest.mark.asyncio
async def test_sources_are_extracted_concurrently_and_normalized_together() -> None:
    extractor = _FakeExtractor(
        {
            "https://example.com/a": "Shared heading\nPage A body",
            "/tmp/b.docx": "Shared heading\n\nDocument B body",
        }
    )
    ingestor = SourceIngestor(extractor, min_chars=10)

    result = await ingestor.ingest(
        [ContentSource.web_page("https://example.com/a"), ContentSource.document("/tmp/b.docx")]
    )

    assert result.text == "Shared heading Page A body Document B body"
    assert result.char_count == len(result.text)
    assert result.is_sufficient is True
    assert extractor.max_in_flight == 2
    assert len(result.sources) == 2


@pytest.mark.asyncio
async def test_short_content_is_flagged_insufficient() -> None:
    extractor = _FakeExtractor({"/tmp/tiny.pptx": "Only a title"})

    result = await SourceIngestor(extractor).ingest([ContentSource.document("/tmp/tiny.pptx")])

    assert result.text == "Only a title"
    assert result.is_sufficient is False


@pytest.mark.asyncio
async def test_empty_source_list_is_rejected() -> None:
    with pytest.raises(ValueError, match="No file or URL"):
        await SourceIngestor(_FakeExtractor({})).ingest([])


@pytest.mark.asyncio
async def test_extraction_errors_propagate_unchanged() -> None:
    extractor = _FakeExtractor({}, failing={"https://down.example"})

    with pytest.raises(ExtractionError) as exc_info:
        await SourceIngestor(extractor).ingest([ContentSource.web_page("https://down.example")])

    assert exc_info.value.status_code == 503


def test_negative_minimum_is_rejected() -> None:
    with pytest.raises(ValueError, match="min_chars"):
        SourceIngestor(_FakeExtractor({}), min_chars=-1)


@pytest.mark.asyncio
async def test_first_failure_cancels_remaining_extractions() -> None:
    extractor = _FakeExtractor(
        {"/tmp/slow.pdf": "Slow document"},
        failing={"https://down.example"},
        delays={"/tmp/slow.pdf": 5.0},
    )

    with pytest.raises(ExtractionError):
        await SourceIngestor(extractor).ingest(
            [ContentSource.document("/tmp/slow.pdf"), ContentSource.web_page("https://down.example")]
        )

    assert extractor.cancelled == ["/tmp/slow.pdf"]
    assert extractor.in_flight == 0
