"""Routing entrypoint turning content sources into raw text."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from urllib.parse import urlparse

import httpx

from sourcetext.extraction.adapters import build_default_adapters
from sourcetext.extraction.adapters.base import DocumentAdapter
from sourcetext.extraction.browser import BrowserContextManager
from sourcetext.extraction.config import ExtractionSettings
from sourcetext.extraction.errors import ExtractionError, ExtractionFailure
from sourcetext.extraction.models import ContentSource, OfficeOptions, SourceKind
from sourcetext.extraction.web import WebPageExtractor, build_http_client

logger = logging.getLogger(__name__)


def _is_web_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


class SourceExtractor:
    """Resolve the right extraction path for a source and return its raw text."""

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        *,
        browser: BrowserContextManager | None = None,
        http_client: httpx.AsyncClient | None = None,
        adapters: dict[str, DocumentAdapter] | None = None,
        sniff_bytes: int = 4096,
    ) -> None:
        self._settings = settings or ExtractionSettings()
        self._browser = browser or BrowserContextManager(
            stability_mode=self._settings.stability_mode,
            user_agent=self._settings.user_agent,
        )
        self._owns_client = http_client is None
        self._client = http_client or build_http_client(self._settings)
        self._adapter_map: dict[str, DocumentAdapter] = (
            dict(adapters) if adapters is not None else build_default_adapters()
        )
        self._sniff_bytes = sniff_bytes
        self._web = WebPageExtractor(client=self._client, browser=self._browser, settings=self._settings)

    @property
    def browser(self) -> BrowserContextManager:
        return self._browser

    @property
    def office_options(self) -> OfficeOptions:
        return self._settings.office_options

    @property
    def adapter_map(self) -> dict[str, DocumentAdapter]:
        """Registered adapters keyed by adapter name."""

        return dict(self._adapter_map)

    def register_adapter(self, name: str, adapter: DocumentAdapter) -> None:
        """Register an adapter implementation by key."""

        if not name:
            raise ValueError("Adapter name cannot be empty")
        self._adapter_map[name] = adapter

    async def extract(self, source: ContentSource) -> str:
        """Return raw text for *source*, or raise ``ExtractionError``."""

        if source.kind is SourceKind.WEB_PAGE:
            return await self._extract_web_page(source.location)
        if source.kind is SourceKind.OFFICE_DOCUMENT:
            return await self._extract_document(Path(source.location))
        raise ExtractionError(
            kind=ExtractionFailure.UNSUPPORTED_SOURCE,
            location=source.location,
            message=f"Unsupported source kind: {source.kind}",
        )

    async def aclose(self) -> None:
        """Release the browser session and any HTTP client this extractor created."""

        await self._browser.release()
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "SourceExtractor":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _extract_web_page(self, url: str) -> str:
        if not _is_web_url(url):
            raise ExtractionError(
                kind=ExtractionFailure.UNSUPPORTED_SOURCE,
                location=url,
                message="Invalid URL format. Only HTTP/HTTPS URLs are supported",
            )
        return await self._web.extract(url)

    async def _extract_document(self, path: Path) -> str:
        sniffed = await asyncio.to_thread(self._read_prefix, path)
        options = self.office_options

        for name, adapter in self._adapter_map.items():
            if not adapter.supports(path, sniffed):
                continue
            logger.debug("Extracting %s with %s adapter", path, name)
            try:
                blocks = await asyncio.to_thread(adapter.extract, path, options)
            except Exception as exc:
                raise ExtractionError(
                    kind=ExtractionFailure.READ_FAILED,
                    location=str(path),
                    message=f"Document conversion failed: {exc}",
                ) from exc
            return options.paragraph_delimiter.join(blocks)

        raise ExtractionError(
            kind=ExtractionFailure.UNSUPPORTED_SOURCE,
            location=str(path),
            message="No adapter registered for file content",
        )

    def _read_prefix(self, path: Path) -> bytes:
        """Read the leading bytes used for format sniffing."""

        try:
            with path.open("rb") as handle:
                return handle.read(self._sniff_bytes)
        except OSError as exc:
            raise ExtractionError(
                kind=ExtractionFailure.READ_FAILED,
                location=str(path),
                message=f"Failed to read source file: {exc}",
            ) from exc
