from __future__ import annotations

from pathlib import Path

import docx
import httpx
import pytest

from sourcetext.extraction.config import ExtractionSettings
from sourcetext.extraction.errors import ExtractionError, ExtractionFailure
from sourcetext.extraction.extractor import SourceExtractor
from sourcetext.extraction.models import ContentSource, OfficeOptions, SourceKind
from sourcetext.extraction.web import build_http_client


class _StaticAdapter:
    def __init__(self, blocks: list[str]) -> None:
        self._blocks = blocks
        self.options: list[OfficeOptions] = []

    def supports(self, path: Path, sniffed_bytes: bytes | None = None) -> bool:
        return path.suffix == ".fake"

    def extract(self, path: Path, options: OfficeOptions) -> list[str]:
        self.options.append(options)
        return list(self._blocks)


class _BrokenAdapter:
    def supports(self, path: Path, sniffed_bytes: bytes | None = None) -> bool:
        return True

    def extract(self, path: Path, options: OfficeOptions) -> list[str]:
        raise RuntimeError("corrupt archive")


def _client(html: str = "<html><body><p>Static page</p></body></html>") -> httpx.AsyncClient:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=html, headers={"Content-Type": "text/html; charset=utf-8"})

    return build_http_client(ExtractionSettings(), transport=httpx.MockTransport(_handler))


def test_content_source_from_location_picks_kind() -> None:
    assert ContentSource.from_location("https://example.com/a").kind is SourceKind.WEB_PAGE
    assert ContentSource.from_location("HTTP://example.com").kind is SourceKind.WEB_PAGE
    assert ContentSource.from_location("/tmp/slides.pptx").kind is SourceKind.OFFICE_DOCUMENT
    assert ContentSource.from_location(Path("notes.docx")).location == "notes.docx"


@pytest.mark.asyncio
async def test_document_blocks_are_joined_with_configured_delimiter(tmp_path: Path) -> None:
    source = tmp_path / "sample.fake"
    source.write_bytes(b"irrelevant")
    adapter = _StaticAdapter(["first block", "second block"])
    settings = ExtractionSettings(office_delimiter="\n", office_include_notes=False)

    async with SourceExtractor(settings, adapters={"fake": adapter}, http_client=_client()) as extractor:
        raw = await extractor.extract(ContentSource.document(source))

    assert raw == "first block\nsecond block"
    assert adapter.options == [OfficeOptions(paragraph_delimiter="\n", include_annotations=False)]


@pytest.mark.asyncio
async def test_document_without_text_yields_empty_string(tmp_path: Path) -> None:
    source = tmp_path / "blank.fake"
    source.write_bytes(b"irrelevant")

    async with SourceExtractor(adapters={"fake": _StaticAdapter([])}, http_client=_client()) as extractor:
        raw = await extractor.extract(ContentSource.document(source))

    assert raw == ""


@pytest.mark.asyncio
async def test_docx_is_extracted_end_to_end(tmp_path: Path) -> None:
    source = tmp_path / "lecture.docx"
    document = docx.Document()
    document.add_paragraph("Newton's first law")
    document.add_paragraph("An object at rest stays at rest.")
    document.save(str(source))

    async with SourceExtractor(http_client=_client()) as extractor:
        raw = await extractor.extract(ContentSource.document(source))

    assert "Newton's first law An object at rest stays at rest." in raw


@pytest.mark.asyncio
async def test_missing_file_raises_read_failed(tmp_path: Path) -> None:
    async with SourceExtractor(http_client=_client()) as extractor:
        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(ContentSource.document(tmp_path / "absent.docx"))

    assert exc_info.value.kind is ExtractionFailure.READ_FAILED
    assert "absent.docx" in str(exc_info.value)


@pytest.mark.asyncio
async def test_corrupt_document_raises_read_failed(tmp_path: Path) -> None:
    source = tmp_path / "broken.docx"
    source.write_bytes(b"this is not a zip archive")

    async with SourceExtractor(http_client=_client()) as extractor:
        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(ContentSource.document(source))

    assert exc_info.value.kind is ExtractionFailure.READ_FAILED
    assert exc_info.value.__cause__ is not None


@pytest.mark.asyncio
async def test_adapter_failure_is_wrapped(tmp_path: Path) -> None:
    source = tmp_path / "any.bin"
    source.write_bytes(b"data")

    async with SourceExtractor(adapters={"broken": _BrokenAdapter()}, http_client=_client()) as extractor:
        with pytest.raises(ExtractionError, match="corrupt archive") as exc_info:
            await extractor.extract(ContentSource.document(source))

    assert exc_info.value.kind is ExtractionFailure.READ_FAILED


@pytest.mark.asyncio
async def test_unknown_format_raises_unsupported_source(tmp_path: Path) -> None:
    source = tmp_path / "photo.xyz"
    source.write_bytes(b"\x89PNG\r\n\x1a\n")

    async with SourceExtractor(http_client=_client()) as extractor:
        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(ContentSource.document(source))

    assert exc_info.value.kind is ExtractionFailure.UNSUPPORTED_SOURCE


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["ftp://example.com/file", "example.com/page", "https://"])
async def test_non_http_url_raises_unsupported_source(url: str) -> None:
    async with SourceExtractor(http_client=_client()) as extractor:
        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(ContentSource.web_page(url))

    assert exc_info.value.kind is ExtractionFailure.UNSUPPORTED_SOURCE


@pytest.mark.asyncio
async def test_web_page_uses_static_fetch_under_stability_mode() -> None:
    async with SourceExtractor(ExtractionSettings(stability_mode=True), http_client=_client()) as extractor:
        raw = await extractor.extract(ContentSource.web_page("https://example.com"))

    assert raw.strip() == "Static page"


@pytest.mark.asyncio
async def test_register_adapter_rejects_empty_name() -> None:
    async with SourceExtractor(http_client=_client()) as extractor:
        with pytest.raises(ValueError, match="Adapter name"):
            extractor.register_adapter("", _StaticAdapter([]))
