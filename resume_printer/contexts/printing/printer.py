"""
Resume printing service.

Ties the pipeline together: each attempt opens a fresh tab on the remote
engine, installs storage interception when the target needs it, runs a
capture strategy, merges the buffers and publishes the result. print_resume()
and print_preview() wrap attempts in independent retry orchestrators and
convert the final failure into a ResumePrinterError.
"""

import asyncio
import time
from functools import partial
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from resume_printer.contexts.printing.assembler import assemble_pages
from resume_printer.contexts.printing.capture import (
    merge_layout,
    normalize_format,
    seed_script,
    select_capture_strategy,
)
from resume_printer.contexts.printing.config import PrinterConfig
from resume_printer.contexts.printing.exceptions import (
    CaptureFailure,
    PrinterError,
    PublishFailure,
    RenderTimeout,
    ResumePrinterError,
)
from resume_printer.contexts.printing.interception import intercept_storage_requests
from resume_printer.contexts.printing.logger import (
    log_attempt_start,
    log_print_failed,
    log_print_finished,
)
from resume_printer.contexts.printing.request import RenderRequest
from resume_printer.contexts.printing.retry import RetryOrchestrator
from resume_printer.contexts.printing.session import BrowserSessionManager
from resume_printer.contexts.printing.target import RenderTarget, resolve_render_target
from resume_printer.contexts.storage.publisher import ArtifactPublisher
from resume_printer.utils.event_logging import log_pipeline_event


class ResumePrinter:
    """
    Prints resumes to PDF and captures JPEG previews through a remote browser.

    Args:
        config: Printer configuration (origins, engine endpoint, tunables)
        publisher: Artifact store receiving final documents and previews
        sessions: Session manager (defaults to one built from config)
        sleep: Awaitable sleep used for retry backoff
    """

    def __init__(
        self,
        config: PrinterConfig,
        publisher: ArtifactPublisher,
        sessions: Optional[BrowserSessionManager] = None,
        sleep=asyncio.sleep,
    ):
        self.config = config
        self.publisher = publisher
        self.sessions = sessions or BrowserSessionManager(config)

        settings = config.settings
        retry_options = dict(
            max_attempts=settings.max_attempts,
            base_delay=settings.retry_base_delay_s,
            max_delay=settings.retry_max_delay_s,
            sleep=sleep,
        )
        self._print_retry = RetryOrchestrator("print", **retry_options)
        self._preview_retry = RetryOrchestrator("generate a preview of", **retry_options)

    def render_target(self) -> RenderTarget:
        return resolve_render_target(
            self.config.public_url, self.config.storage_url, self.config.settings.container_host
        )

    async def get_version(self) -> str:
        return await self.sessions.get_version()

    # --- Retried entry points ---

    async def print_resume(self, request: RenderRequest, format: Optional[str] = None) -> str:
        """
        Print a resume to PDF and return the published URL.

        Args:
            request: Resume to print
            format: "A4" or "Letter" for printable output, None for continuous web output

        Raises:
            ValueError: If format is not a supported page format
            ResumePrinterError: When every attempt failed
        """
        if format is not None:
            format = normalize_format(format)

        start = time.perf_counter()
        try:
            url = await self._print_retry.run(
                partial(self.generate_resume, request, format), request.id
            )
        except Exception as e:
            self._record_failure("print", request, e)
            raise ResumePrinterError(
                getattr(e, "code", "ResumePrinterError"), str(e), request.id
            ) from e

        duration_ms = round((time.perf_counter() - start) * 1000)
        log_print_finished("print", request.id, duration_ms, request.page_count)
        log_pipeline_event(
            self.config.events_file,
            event_type="print_completed",
            resume_id=request.id,
            source="printing",
            duration_ms=duration_ms,
            page_count=request.page_count,
            format=format or "web",
            url=url,
        )
        return url

    async def print_preview(self, request: RenderRequest) -> str:
        """Capture a JPEG preview of the first screen and return the published URL."""
        start = time.perf_counter()
        try:
            url = await self._preview_retry.run(partial(self.generate_preview, request), request.id)
        except Exception as e:
            self._record_failure("preview", request, e)
            raise ResumePrinterError(
                getattr(e, "code", "ResumePreviewError"), str(e), request.id
            ) from e

        duration_ms = round((time.perf_counter() - start) * 1000)
        log_print_finished("preview", request.id, duration_ms, None)
        log_pipeline_event(
            self.config.events_file,
            event_type="preview_completed",
            resume_id=request.id,
            source="printing",
            duration_ms=duration_ms,
            url=url,
        )
        return url

    # --- Single attempts ---

    async def generate_resume(self, request: RenderRequest, format: Optional[str] = None) -> str:
        """One print attempt: capture, assemble and publish. Not retried."""
        settings = self.config.settings
        target = self.render_target()
        strategy = select_capture_strategy(format, settings)

        # Web output scrolls continuously, so all pages become one
        if format is None and settings.merge_web_pages:
            request = request.with_layout(merge_layout(request.layout))

        url = target.artboard_url(settings.artboard_path)
        log_attempt_start("print", request.id, url, strategy.name)

        async with self.sessions.new_page() as page:
            async with intercept_storage_requests(page, target):
                buffers = await strategy.capture(page, request, url)

        document = assemble_pages(buffers)
        return await self._publish(request.user_id, "resumes", document, request.title)

    async def generate_preview(self, request: RenderRequest) -> str:
        """One preview attempt: load with the payload pre-seeded, screenshot, publish."""
        settings = self.config.settings
        target = self.render_target()
        url = target.artboard_url(settings.artboard_path)
        log_attempt_start("preview", request.id, url, "screenshot")

        async with self.sessions.new_page() as page:
            async with intercept_storage_requests(page, target):
                await page.add_init_script(script=seed_script(request.data))
                await page.set_viewport_size(
                    {"width": settings.preview_width, "height": settings.preview_height}
                )

                try:
                    await page.goto(
                        url, wait_until="networkidle", timeout=settings.navigation_timeout_ms
                    )
                except PlaywrightTimeoutError as e:
                    raise RenderTimeout(
                        "Artboard did not reach network idle", settings.navigation_timeout_ms, str(e)
                    ) from e

                try:
                    image = await page.screenshot(type="jpeg", quality=settings.preview_quality)
                except PlaywrightError as e:
                    raise CaptureFailure("Failed to capture preview", detail=str(e)) from e

        return await self._publish(request.user_id, "previews", image, request.id)

    async def _publish(self, user_id: str, category: str, data: bytes, name: str) -> str:
        try:
            return await self.publisher.upload_object(user_id, category, data, name)
        except PrinterError:
            raise
        except Exception as e:
            raise PublishFailure(f"Failed to publish {category} object '{name}'", str(e)) from e

    def _record_failure(self, kind: str, request: RenderRequest, error: Exception) -> None:
        log_print_failed(kind, request.id, error)
        log_pipeline_event(
            self.config.events_file,
            event_type=f"{kind}_failed",
            resume_id=request.id,
            source="printing",
            error_code=getattr(error, "code", None),
            error=str(error),
        )
