"""Web page extraction: browser-rendered when possible, static fetch otherwise."""

from __future__ import annotations

import json
import logging
from typing import Any

from bs4 import BeautifulSoup
from charset_normalizer import from_bytes
import httpx

from sourcetext.extraction.browser import BrowserAvailable, BrowserContextManager
from sourcetext.extraction.config import ExtractionSettings
from sourcetext.extraction.errors import ExtractionError, ExtractionFailure

logger = logging.getLogger(__name__)

NON_CONTENT_TAGS = ["script", "style", "noscript", "header", "footer", "nav", "iframe", "aside"]

# Page chrome removed on both the rendered and the static path.
NON_CONTENT_SELECTORS = [
    *NON_CONTENT_TAGS,
    "form",
    "svg",
    '[role="navigation"]',
    '[role="banner"]',
    '[role="contentinfo"]',
    ".nav",
    ".menu",
    ".sidebar",
    ".ads",
    ".advertisement",
    ".social",
    '[class*="cookie"]',
    '[class*="popup"]',
    '[class*="modal"]',
    '[id*="cookie"]',
]

_BLOCKED_RESOURCES = "**/*.{png,jpg,jpeg,gif,svg,css,woff,woff2}"

# Runs inside the rendered page: strip chrome, then read the visible text.
_RENDERED_TEXT_SCRIPT = (
    "() => {\n"
    f"    document.querySelectorAll({json.dumps(', '.join(NON_CONTENT_SELECTORS))})"
    ".forEach((el) => el.remove());\n"
    "    return document.body ? document.body.innerText : '';\n"
    "}\n"
)

# Playwright reports a dead page, context or browser with this wording.
_CLOSED_TARGET_MARKERS = ("has been closed", "Target closed", "Browser closed")


def detect_encoding(content: bytes) -> str:
    """Guess a charset for responses that do not declare one."""

    best = from_bytes(content).best()
    if best and best.encoding:
        return best.encoding
    return "utf-8"


def build_http_client(
    settings: ExtractionSettings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=settings.fetch_timeout_seconds,
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
        default_encoding=detect_encoding,
        transport=transport,
    )


def html_to_text(html: str) -> str:
    """Return the visible body text of *html* with non-content elements removed."""

    soup = BeautifulSoup(html, "lxml")
    for node in soup.select(", ".join(NON_CONTENT_SELECTORS)):
        # Children of an already removed match are gone with it.
        if not node.decomposed:
            node.decompose()
    root = soup.body or soup
    return root.get_text("\n")


async def fetch_static_text(url: str, client: httpx.AsyncClient) -> str:
    """Fetch *url* without rendering and extract its visible text."""

    try:
        response = await client.get(url)
    except httpx.HTTPError as exc:
        raise ExtractionError(
            kind=ExtractionFailure.FETCH_FAILED,
            location=url,
            message=f"Failed to fetch URL: {exc}",
        ) from exc

    if not response.is_success:
        raise ExtractionError(
            kind=ExtractionFailure.FETCH_FAILED,
            location=url,
            message=f"Failed to fetch URL: HTTP {response.status_code}",
            status_code=response.status_code,
        )

    return html_to_text(response.text)


def _is_closed_target_error(exc: BaseException) -> bool:
    if type(exc).__name__ == "TargetClosedError":
        return True
    message = str(exc)
    return any(marker in message for marker in _CLOSED_TARGET_MARKERS)


async def _abort_route(route: Any) -> None:
    await route.abort()


async def render_page_text(context: Any, url: str, *, timeout_seconds: float) -> str:
    """Render *url* in a fresh page of *context* and return its visible text."""

    page = await context.new_page()
    try:
        await page.route(_BLOCKED_RESOURCES, _abort_route)
        await page.goto(url, wait_until="domcontentloaded", timeout=timeout_seconds * 1000)
        text = await page.evaluate(_RENDERED_TEXT_SCRIPT)
    finally:
        await page.close()
    return text or ""


class WebPageExtractor:
    """Extract page text, preferring the shared browser when it is available."""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        browser: BrowserContextManager,
        settings: ExtractionSettings,
    ) -> None:
        self._client = client
        self._browser = browser
        self._settings = settings

    async def extract(self, url: str) -> str:
        capability = await self._browser.acquire()
        if isinstance(capability, BrowserAvailable):
            rendered = await self._rendered_text(capability.context, url)
            if rendered is not None:
                return rendered
        else:
            logger.debug("Static fetch for %s (%s)", url, capability.reason)

        return await fetch_static_text(url, self._client)

    async def _rendered_text(self, context: Any, url: str) -> str | None:
        try:
            text = await render_page_text(context, url, timeout_seconds=self._settings.browser_timeout_seconds)
        except Exception as exc:
            logger.warning("Rendering failed for %s, trying static fetch: %s", url, exc)
            if _is_closed_target_error(exc):
                await self._browser.release()
            return None

        word_count = len(text.split())
        if word_count <= self._settings.rendered_min_words:
            logger.info("Rendered %s returned sparse content (%d words), trying static fetch", url, word_count)
            return None
        return text
