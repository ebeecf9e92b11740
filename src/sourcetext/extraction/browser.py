"""Lazily-initialized, shared headless browser context.

Playwright is a soft dependency: it is imported only inside
``launch_playwright_session()``. Rendering is an optional enhancement, so every
initialization failure is reported as ``BrowserUnavailable`` and callers fall
back to static fetching.

While ``stability_mode`` is on (the default) the manager never launches
anything and every ``acquire()`` reports the browser as unavailable.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol, Union

from sourcetext.extraction.config import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

STABILITY_MODE_REASON = "stability mode"

_CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


class BrowserSession(Protocol):
    """An open rendering session owning its browser context."""

    @property
    def context(self) -> Any:
        """Browser context pages are opened in."""

    async def close(self) -> None:
        """Terminate the context and every resource behind it."""


@dataclass(frozen=True, slots=True)
class BrowserAvailable:
    context: Any


@dataclass(frozen=True, slots=True)
class BrowserUnavailable:
    reason: str


BrowserCapability = Union[BrowserAvailable, BrowserUnavailable]
SessionLauncher = Callable[[], Awaitable[BrowserSession]]


class _PlaywrightSession:
    def __init__(self, playwright: Any, browser: Any, context: Any) -> None:
        self._playwright = playwright
        self._browser = browser
        self._context = context

    @property
    def context(self) -> Any:
        return self._context

    async def close(self) -> None:
        for label, closer in (
            ("context", self._context.close),
            ("browser", self._browser.close),
            ("playwright", self._playwright.stop),
        ):
            try:
                await closer()
            except Exception:  # pragma: no cover - best effort cleanup
                logger.debug("Failed to close Playwright %s", label, exc_info=True)


async def launch_playwright_session(
    *,
    headless: bool = True,
    user_agent: str = DEFAULT_USER_AGENT,
) -> BrowserSession:
    """Start Playwright, launch Chromium and open one browser context."""

    from playwright.async_api import async_playwright

    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(headless=headless, args=_CHROMIUM_ARGS)
        context = await browser.new_context(
            user_agent=user_agent,
            viewport={"width": 1280, "height": 720},
            java_script_enabled=True,
        )
    except BaseException:
        await playwright.stop()
        raise
    return _PlaywrightSession(playwright, browser, context)


class BrowserContextManager:
    """Own at most one live browser session and hand out its context."""

    def __init__(
        self,
        *,
        stability_mode: bool = True,
        launcher: SessionLauncher | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._stability_mode = stability_mode
        self._launcher = launcher or (lambda: launch_playwright_session(user_agent=user_agent))
        self._session: BrowserSession | None = None
        self._lock = asyncio.Lock()
        # Set once the playwright package turns out to be missing.
        self._missing_dependency: str | None = None
        self._kill_switch_logged = False

    @property
    def stability_mode(self) -> bool:
        return self._stability_mode

    @property
    def is_active(self) -> bool:
        return self._session is not None

    async def acquire(self) -> BrowserCapability:
        """Return the shared context, creating it on first demand."""

        if self._stability_mode:
            self._log_kill_switch()
            return BrowserUnavailable(STABILITY_MODE_REASON)

        if self._session is not None:
            return BrowserAvailable(self._session.context)
        if self._missing_dependency is not None:
            return BrowserUnavailable(self._missing_dependency)

        async with self._lock:
            if self._session is not None:
                return BrowserAvailable(self._session.context)

            try:
                session = await self._launcher()
            except ImportError as exc:
                self._missing_dependency = f"playwright unavailable: {exc}"
                logger.warning(
                    "Playwright is not installed; web pages will be fetched without rendering. "
                    "Install the 'browser' extra to enable rendered extraction."
                )
                return BrowserUnavailable(self._missing_dependency)
            except Exception as exc:
                logger.warning("Browser launch failed, falling back to static fetch: %s", exc)
                return BrowserUnavailable(f"launch failed: {exc}")

            self._session = session
            logger.info("Browser context initialized")
            return BrowserAvailable(session.context)

    async def release(self) -> None:
        """Tear down the held session, if any, so the next acquire starts fresh."""

        async with self._lock:
            session, self._session = self._session, None
            if session is None:
                return
            await session.close()
            logger.info("Browser context released")

    async def __aenter__(self) -> "BrowserContextManager":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.release()

    def _log_kill_switch(self) -> None:
        if self._kill_switch_logged:
            logger.debug("Browser rendering disabled by stability mode")
            return
        self._kill_switch_logged = True
        logger.warning("Browser rendering is disabled (stability mode); falling back to static fetch")
