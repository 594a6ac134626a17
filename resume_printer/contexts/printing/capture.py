"""
Capture strategies: turn a loaded artboard tab into ordered PDF page buffers.

Two strategies share one contract, capture(page, request, url) -> List[PageBuffer]:

FormattedCapture (A4 / Letter)
    Loads the artboard, seeds the resume into localStorage and reloads, then
    prints every [data-page] container in one export call with forced page
    breaks between them. Always yields exactly one buffer.

ContinuousCapture (web, no physical format)
    Seeds the resume before the first navigation, then for each logical page
    swaps the document body for a clone of that page, measures its real height
    and exports a PDF sized to it. The original body is restored after every
    page, even when the export fails. Yields one buffer per logical page.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from resume_printer.contexts.printing.config import PrinterSettings
from resume_printer.contexts.printing.exceptions import CaptureFailure, RenderTimeout
from resume_printer.contexts.printing.logger import _log_debug, _log_warning, log_page_captured
from resume_printer.contexts.printing.request import CustomCss, Layout, PageBuffer, RenderRequest

PAGE_FORMATS = {"a4": "A4", "letter": "Letter"}

LOCAL_STORAGE_KEY = "resume"

SEED_RESUME_SCRIPT = """(data) => {
    window.localStorage.setItem("resume", JSON.stringify(data));
}"""

ISOLATE_PAGE_SCRIPT = """(element) => {
    const clone = element.cloneNode(true);
    const originalHtml = document.body.innerHTML;
    document.body.innerHTML = clone.outerHTML;
    return originalHtml;
}"""

MEASURE_HEIGHT_SCRIPT = """async (settleDelay) => {
    await new Promise((resolve) => setTimeout(resolve, settleDelay));
    const element = document.body.firstElementChild;
    if (!element) return document.body.scrollHeight;
    return Math.max(element.getBoundingClientRect().height, document.body.scrollHeight);
}"""

RESTORE_BODY_SCRIPT = """(html) => {
    document.body.innerHTML = html;
}"""

SCROLL_WIDTH_SCRIPT = "(element) => element.scrollWidth"

# Scale page content to 95% about its centre (safe margins without reflow),
# break after every page but the last, and let outer containers grow.
PRINT_STYLESHEET = """
[data-page] > div {
  transform: scale(0.95);
  transform-origin: center center;
  width: 100%;
}

html,
body,
#root {
  overflow: visible !important;
  height: auto !important;
}

[data-page] {
  break-after: page;
  page-break-after: always;
}

[data-page]:last-child {
  break-after: auto;
  page-break-after: auto;
}
"""


def page_selector(index: int) -> str:
    return f'[data-page="{index}"]'


def normalize_format(format: str) -> str:
    """Map a user-supplied page format to the engine's name (A4 or Letter)."""
    try:
        return PAGE_FORMATS[format.lower()]
    except KeyError:
        raise ValueError(f"Unsupported page format '{format}'. Available: {list(PAGE_FORMATS.values())}")


def merge_layout(layout: Layout) -> Layout:
    """
    Merge every page of a layout into one page, column by column.

    Example:
        >>> merge_layout([[["A", "B"], ["X"]], [["C", "D"], ["Y"]]])
        [[['A', 'B', 'C', 'D'], ['X', 'Y']]]
    """
    column_count = max((len(page) for page in layout), default=2)
    merged: List[List[str]] = [[] for _ in range(max(column_count, 2))]
    for page in layout:
        for column_index, column in enumerate(page):
            merged[column_index].extend(column)
    return [merged]


def seed_script(data: dict) -> str:
    """Init script storing the resume in localStorage before any page script runs."""
    return f"window.localStorage.setItem({json.dumps(LOCAL_STORAGE_KEY)}, {json.dumps(json.dumps(data))});"


async def inject_custom_css(page: Any, css: CustomCss) -> None:
    if css.visible and css.value:
        await page.add_style_tag(content=css.value)


class CaptureStrategy(ABC):
    """Common contract for both capture modes."""

    name: str

    def __init__(self, settings: Optional[PrinterSettings] = None):
        self.settings = settings or PrinterSettings()

    @abstractmethod
    async def load(self, page: Any, request: RenderRequest, url: str) -> None:
        """Navigate the tab to the artboard with the resume payload in place."""

    @abstractmethod
    async def capture(self, page: Any, request: RenderRequest, url: str) -> List[PageBuffer]:
        """Load the artboard and return page buffers in ascending logical order."""

    async def _wait_for_first_page(self, page: Any) -> None:
        timeout_ms = self.settings.ready_timeout_ms
        try:
            await page.wait_for_selector(page_selector(1), timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise RenderTimeout("First page marker did not appear", timeout_ms, str(e)) from e


class FormattedCapture(CaptureStrategy):
    """Single export of all pages at a physical page format."""

    name = "formatted"

    def __init__(self, format: str, settings: Optional[PrinterSettings] = None):
        super().__init__(settings)
        self.format = normalize_format(format)

    async def load(self, page: Any, request: RenderRequest, url: str) -> None:
        timeout_ms = self.settings.navigation_timeout_ms
        try:
            await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
            await page.evaluate(SEED_RESUME_SCRIPT, request.data)
            # Reload so the front end picks up the payload
            await page.reload(wait_until="load", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise RenderTimeout("Artboard did not finish loading", timeout_ms, str(e)) from e
        except PlaywrightError as e:
            raise CaptureFailure("Failed to load artboard", detail=str(e)) from e

        await self._wait_for_first_page(page)

    async def capture(self, page: Any, request: RenderRequest, url: str) -> List[PageBuffer]:
        await self.load(page, request, url)

        try:
            await inject_custom_css(page, request.css)
            await page.add_style_tag(content=PRINT_STYLESHEET)
            data = await page.pdf(format=self.format, print_background=True)
        except PlaywrightError as e:
            raise CaptureFailure(f"Failed to export {self.format} document", detail=str(e)) from e

        _log_debug(f"  Captured {request.page_count} page(s) at {self.format}")
        return [PageBuffer(position=1, data=data)]


class ContinuousCapture(CaptureStrategy):
    """One custom-sized export per logical page, isolated in place."""

    name = "continuous"

    async def load(self, page: Any, request: RenderRequest, url: str) -> None:
        await page.add_init_script(script=seed_script(request.data))

        timeout_ms = self.settings.navigation_timeout_ms
        try:
            await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise RenderTimeout("Artboard did not reach network idle", timeout_ms, str(e)) from e

        await self._wait_for_first_page(page)

    async def capture(self, page: Any, request: RenderRequest, url: str) -> List[PageBuffer]:
        await self.load(page, request, url)

        buffers = []
        for index in range(1, request.page_count + 1):
            buffers.append(await self.capture_page(page, request, index))
        return buffers

    async def capture_page(self, page: Any, request: RenderRequest, index: int) -> PageBuffer:
        """Isolate, measure and export one logical page, then restore the body."""
        element = await page.query_selector(page_selector(index))
        if element is None:
            raise CaptureFailure("Page container not found", page=index)

        try:
            width = await element.evaluate(SCROLL_WIDTH_SCRIPT)
            original_html = await page.evaluate(ISOLATE_PAGE_SCRIPT, element)
        except PlaywrightError as e:
            raise CaptureFailure("Failed to isolate page content", page=index, detail=str(e)) from e

        try:
            await inject_custom_css(page, request.css)
            body_height = await page.evaluate(MEASURE_HEIGHT_SCRIPT, self.settings.settle_delay_ms)
            height = body_height + self.settings.height_buffer_px
            data = await page.pdf(width=f"{width}px", height=f"{height}px", print_background=True)
        except PlaywrightError as e:
            raise CaptureFailure("Failed to export page", page=index, detail=str(e)) from e
        finally:
            await restore_body(page, original_html, index)

        log_page_captured(index, width, height)
        return PageBuffer(position=index, data=data)


async def restore_body(page: Any, original_html: str, index: int) -> None:
    """Put the saved body back; a failure here never masks the capture error."""
    try:
        await page.evaluate(RESTORE_BODY_SCRIPT, original_html)
    except PlaywrightError as e:
        _log_warning(f"  Could not restore body after page {index}: {e}")


def select_capture_strategy(
    format: Optional[str], settings: Optional[PrinterSettings] = None
) -> CaptureStrategy:
    """FormattedCapture when a physical format is requested, else ContinuousCapture."""
    if format:
        return FormattedCapture(format, settings)
    return ContinuousCapture(settings)
