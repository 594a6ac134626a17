"""
Storage request interception for the render tab.

When the render target needed a loopback rewrite, assets requested from the
storage origin must be rewritten the same way or they would hit the engine's
own container. Every intercepted request is continued exactly once.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from playwright.async_api import Error as PlaywrightError

from resume_printer.contexts.printing.logger import _log_debug, _log_warning
from resume_printer.contexts.printing.target import RenderTarget, rewrite_loopback

ROUTE_PATTERN = "**/*"


class StorageRequestRewriter:
    """Route handler that points storage requests at the container alias."""

    def __init__(self, target: RenderTarget):
        self.target = target

    def rewrite(self, url: str) -> str:
        """Return the URL to continue with (unchanged unless it targets storage)."""
        if url.startswith(self.target.storage_url):
            return rewrite_loopback(url, self.target.container_host)
        return url

    async def handle(self, route: Any, request: Any) -> None:
        url = request.url
        modified_url = self.rewrite(url)
        if modified_url != url:
            await route.continue_(url=modified_url)
        else:
            await route.continue_()

    async def install(self, page: Any) -> None:
        await page.route(ROUTE_PATTERN, self.handle)
        _log_debug(f"Intercepting requests to {self.target.storage_url}")

    async def remove(self, page: Any) -> None:
        """Deregister the handler; a crashed tab only gets a warning."""
        try:
            await page.unroute(ROUTE_PATTERN, self.handle)
        except PlaywrightError as e:
            _log_warning(f"Could not remove storage interception: {e}")


@asynccontextmanager
async def intercept_storage_requests(page: Any, target: RenderTarget) -> AsyncIterator[None]:
    """Install the rewriter for the duration of the block, if the target needs it."""
    if not target.requires_interception:
        yield
        return

    rewriter = StorageRequestRewriter(target)
    await rewriter.install(page)
    try:
        yield
    finally:
        await rewriter.remove(page)
