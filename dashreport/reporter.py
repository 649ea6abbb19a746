"""
Reporter
========
Owns one headless browser, one context and one page for the length of a
single run, and captures the page as a PDF and a PNG screenshot.

Lifecycle (linear, no way back)::

    CREATED → BROWSER_OPEN → PAGE_LOADED → [AUTHENTICATED] → CAPTURED → CLOSED
              open_page()                  (auth strategy)   pdf() /     end()
                                                             screenshot()

Every step is awaited in program order.  Any failure is wrapped in a
``ReportError`` subclass carrying the URL and re-raised; nothing is retried.
Use the Reporter as an async context manager so the browser is released
even when a step fails.

Usage::

    async with Reporter(targets, config) as reporter:
        await reporter.open_page(url, auth)
        await reporter.pdf()
        await reporter.screenshot()
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from playwright.async_api import async_playwright

from .auth.auth_factory import AuthFactory
from .auth.base_auth import AuthDescriptor
from .errors import (
    CaptureError,
    LaunchError,
    NavigationError,
    ReporterStateError,
    TeardownError,
)
from .run_config import FileTargets, ReportRunConfig

logger = logging.getLogger(__name__)


# Sandbox off for containers and CI runners
_LAUNCH_ARGS = [
    '--no-sandbox',
    '--disable-setuid-sandbox',
]


class ReporterState(str, Enum):
    CREATED = "created"
    BROWSER_OPEN = "browser_open"
    PAGE_LOADED = "page_loaded"
    AUTHENTICATED = "authenticated"
    CAPTURED = "captured"
    CLOSED = "closed"


def _ensure_parent(path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


class Reporter:
    """Drives one browser session from launch to close."""

    def __init__(self, targets: FileTargets, config: Optional[ReportRunConfig] = None):
        self.targets = targets
        self.config = config or ReportRunConfig(targets=targets)
        self.url = ""
        self.auth: Optional[AuthDescriptor] = None
        self.state = ReporterState.CREATED

        self._playwright = None
        self._browser = None
        self._context = None
        self.page = None

    async def __aenter__(self) -> "Reporter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            await self.end()
            return False
        # Already failing: release the browser but let the original error win
        try:
            await self.end()
        except TeardownError as err:
            logger.error(f"[BROWSER] {err}")
        return False

    # ------------------------------------------------------------------
    # Browser management
    # ------------------------------------------------------------------

    async def _launch_browser(self) -> None:
        """Start Playwright, launch Chromium and open an isolated page."""
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.config.headless,
            args=_LAUNCH_ARGS,
        )
        self._context = await self._browser.new_context(
            ignore_https_errors=self.config.ignore_https_errors,
        )
        self.page = await self._context.new_page()

    async def open_page(self, url: str, auth: Optional[AuthDescriptor] = None) -> None:
        """Launch the browser, navigate to *url* and authenticate.

        Basic auth is applied before navigation so the first request
        already carries the header; form logins run on the loaded page.

        Raises:
            LaunchError:         the browser could not be started.
            NavigationError:     *url* failed to load or never went idle.
            AuthenticationError: the selected strategy failed.
        """
        if self.state is not ReporterState.CREATED:
            raise ReporterStateError(
                f"open_page() called twice (state: {self.state.value})", url=url
            )
        self.url = url
        self.auth = auth

        try:
            await self._launch_browser()
        except Exception as err:
            raise LaunchError(f"fail to open headless chrome, {err}", url=url) from err
        self.state = ReporterState.BROWSER_OPEN
        logger.info("[BROWSER] Headless Chromium launched")

        handler = AuthFactory.get_handler(auth.mode) if auth else None
        if handler is not None and handler.before_navigation:
            self.page = await handler.login(self.page, auth, **self._auth_kwargs())

        try:
            await self.page.goto(
                url,
                wait_until=self.config.wait_until,
                timeout=self.config.navigation_timeout_ms,
            )
        except Exception as err:
            raise NavigationError(
                f"fail to go to url: {url}, {err}", url=url,
                user=auth.user if auth else None,
            ) from err
        self.state = ReporterState.PAGE_LOADED
        logger.info(f"[REPORT] Page loaded: {url[:100]}")

        if handler is not None and not handler.before_navigation:
            await self.authenticate(auth)
        elif handler is not None:
            self.state = ReporterState.AUTHENTICATED

    async def authenticate(self, auth: AuthDescriptor) -> None:
        """Run the form-login strategy selected by ``auth.mode``."""
        if self.page is None:
            raise ReporterStateError("authenticate() before open_page()", user=auth.user)
        handler = AuthFactory.get_handler(auth.mode)
        self.page = await handler.login(self.page, auth, **self._auth_kwargs())
        self.state = ReporterState.AUTHENTICATED
        logger.info(f"[AUTH] Authenticated via {auth.mode.value}")

    def _auth_kwargs(self) -> dict:
        return {
            "load_delay_ms": self.config.load_delay_ms,
            "encoding": self.config.basic_encoding,
        }

    # ------------------------------------------------------------------
    # Captures
    # ------------------------------------------------------------------

    def _require_page(self, operation: str) -> None:
        if self.page is None or self.state in (
            ReporterState.CREATED, ReporterState.BROWSER_OPEN, ReporterState.CLOSED,
        ):
            raise ReporterStateError(
                f"{operation}() needs a loaded page (state: {self.state.value})",
                url=self.url or None,
                operation=operation,
            )

    async def screenshot(self) -> Path:
        """Resize the viewport and save a PNG of the current page."""
        self._require_page("screenshot")
        img = self.targets.img
        try:
            path = _ensure_parent(img.path)
            await self.page.set_viewport_size({"width": img.width, "height": img.height})
            await self.page.screenshot(path=str(path), full_page=img.full_page)
        except Exception as err:
            raise CaptureError(
                f"fail to do a screenshot, url: {self.url}, {err}",
                url=self.url,
                operation="screenshot",
            ) from err

        self.state = ReporterState.CAPTURED
        logger.info(f"[REPORT] Screenshot saved: {path} ({img.width}x{img.height})")
        return path

    async def pdf(self) -> Path:
        """Render the current page to PDF."""
        self._require_page("pdf")
        target = self.targets.pdf
        try:
            path = _ensure_parent(target.path)
            await self.page.pdf(**target.to_options())
        except Exception as err:
            raise CaptureError(
                f"fail to do a PDF doc, url: {self.url}, {err}",
                url=self.url,
                operation="pdf",
            ) from err

        self.state = ReporterState.CAPTURED
        logger.info(f"[REPORT] PDF saved: {path} ({target.format})")
        return path

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def end(self) -> None:
        """Close the browser and stop Playwright.  Safe to call twice."""
        if self.state is ReporterState.CLOSED:
            return

        # Each resource is released even if an earlier one failed to close
        first_error = None
        for resource, release in (
            (self._context, "close"),
            (self._browser, "close"),
            (self._playwright, "stop"),
        ):
            if resource is None:
                continue
            try:
                await getattr(resource, release)()
            except Exception as err:
                logger.debug(f"[BROWSER] {type(resource).__name__}.{release}() failed: {err}")
                if first_error is None:
                    first_error = err

        self._context = None
        self._browser = None
        self._playwright = None
        self.page = None
        self.state = ReporterState.CLOSED

        if first_error is not None:
            raise TeardownError(
                f"fail to close headless chrome, {first_error}", url=self.url or None
            ) from first_error
        logger.info("[BROWSER] Closed")


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

@dataclass
class ReportResult:
    url: str
    pdf_path: Optional[Path] = None
    screenshot_path: Optional[Path] = None
    elapsed_s: float = 0.0

    @property
    def artifacts(self) -> List[Path]:
        return [p for p in (self.pdf_path, self.screenshot_path) if p is not None]


async def run_report(
    config: ReportRunConfig,
    reporter_factory: Callable[..., Reporter] = Reporter,
) -> ReportResult:
    """Open → (authenticate) → PDF → screenshot → close.

    Inactive targets are skipped.  Any ``ReportError`` propagates to the
    caller after the browser has been released.
    """
    config.validate()
    result = ReportResult(url=config.url)
    start = time.monotonic()

    async with reporter_factory(config.targets, config) as reporter:
        await reporter.open_page(config.url, config.auth)

        if config.targets.pdf.active:
            result.pdf_path = await reporter.pdf()
        else:
            logger.info("[REPORT] PDF target inactive, skipped")

        if config.targets.img.active:
            result.screenshot_path = await reporter.screenshot()
        else:
            logger.info("[REPORT] Screenshot target inactive, skipped")

    result.elapsed_s = time.monotonic() - start
    return result


def run(config: ReportRunConfig) -> ReportResult:
    """Synchronous entry point."""
    return asyncio.run(run_report(config))
