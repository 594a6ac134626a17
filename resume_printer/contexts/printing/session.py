"""
Browser session management for the remote rendering engine.

A RenderSession is one connection to the pre-existing Chromium process plus at
most one tab. Sessions are scoped to a single attempt: the tab is closed and the
connection dropped on every exit path, and nothing is ever reused across retries.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from playwright.async_api import async_playwright

from resume_printer.contexts.printing.config import PrinterConfig
from resume_printer.contexts.printing.exceptions import BrowserUnavailable
from resume_printer.contexts.printing.logger import _log_debug


class RenderSession:
    """
    Live handle to a remote browser connection and the tab opened on it.

    Args:
        browser: Connected browser (Playwright Browser or a compatible object)
        ignore_https_errors: Accept invalid certificates in the opened tab
        driver: Object with an async stop() owning the connection (Playwright instance)
    """

    def __init__(self, browser: Any, ignore_https_errors: bool = False, driver: Any = None):
        self.browser = browser
        self.ignore_https_errors = ignore_https_errors
        self._driver = driver
        self._context = None
        self.page = None
        self.closed = False

    async def new_page(self):
        """Open the session's single tab in a fresh browser context."""
        if self.closed:
            raise RuntimeError("Render session already closed")
        if self.page is not None:
            raise RuntimeError("Render session already has an open tab")

        self._context = await self.browser.new_context(ignore_https_errors=self.ignore_https_errors)
        self.page = await self._context.new_page()
        return self.page

    async def close_page(self) -> None:
        if self.page is not None:
            page, self.page = self.page, None
            await page.close()
        if self._context is not None:
            context, self._context = self._context, None
            await context.close()

    async def disconnect(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            await self.browser.close()
        finally:
            if self._driver is not None:
                await self._driver.stop()

    async def version(self) -> str:
        return self.browser.version


Connector = Callable[[str, bool, int], Awaitable[RenderSession]]


async def connect_over_cdp(endpoint: str, ignore_https_errors: bool, timeout_ms: int) -> RenderSession:
    """Connect to a running Chromium over the DevTools protocol with Playwright."""
    driver = await async_playwright().start()
    try:
        browser = await driver.chromium.connect_over_cdp(endpoint, timeout=timeout_ms)
    except BaseException:
        await driver.stop()
        raise
    return RenderSession(browser, ignore_https_errors=ignore_https_errors, driver=driver)


class BrowserSessionManager:
    """
    Acquires sessions against the remote rendering engine.

    Connection errors surface as BrowserUnavailable and are never retried here;
    the retry orchestrator retries whole attempts.

    Args:
        config: Printer configuration (endpoint, token, TLS tolerance)
        connector: Coroutine function (endpoint, ignore_https_errors, timeout_ms) -> RenderSession
    """

    def __init__(self, config: PrinterConfig, connector: Optional[Connector] = None):
        self.config = config
        self._connector = connector or connect_over_cdp

    async def acquire_session(self) -> RenderSession:
        try:
            return await self._connector(
                self.config.browser_endpoint,
                self.config.ignore_https_errors,
                self.config.settings.connect_timeout_ms,
            )
        except Exception as e:
            raise BrowserUnavailable("Unable to connect to the rendering engine", str(e)) from e

    @asynccontextmanager
    async def new_page(self) -> AsyncIterator[Any]:
        """
        Yield one tab on a fresh session.

        The tab is closed and the session disconnected before this returns,
        on success and on failure alike.
        """
        session = await self.acquire_session()
        try:
            page = await session.new_page()
            _log_debug("Opened render tab")
            yield page
        finally:
            try:
                await session.close_page()
            finally:
                await session.disconnect()
                _log_debug("Disconnected from rendering engine")

    async def get_version(self) -> str:
        """Health check: connect, read the engine version, disconnect."""
        session = await self.acquire_session()
        try:
            return await session.version()
        finally:
            await session.disconnect()
