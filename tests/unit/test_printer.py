"""Unit tests for the resume printing service against a fake engine."""

import asyncio
import copy
from dataclasses import replace

import pytest
from fakes import FakeEngine, FakePage, RecordingPublisher, RecordingSleep, make_request, page_width
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from resume_printer.contexts.printing.exceptions import (
    BrowserUnavailable,
    CaptureFailure,
    PublishFailure,
    RenderTimeout,
    ResumePrinterError,
)
from resume_printer.contexts.printing.printer import ResumePrinter
from resume_printer.contexts.printing.session import BrowserSessionManager
from resume_printer.utils.event_logging import get_recent_events
from resume_printer.utils.pdf_processing import page_count, page_sizes

ARTBOARD_URL = "http://host.docker.internal:3000/artboard/preview"


def build_printer(config, engine=None, publisher=None):
    engine = engine or FakeEngine()
    publisher = publisher or RecordingPublisher()
    sleep = RecordingSleep()
    printer = ResumePrinter(
        config, publisher, sessions=BrowserSessionManager(config, connector=engine), sleep=sleep
    )
    return printer, engine, publisher, sleep


def assert_sessions_closed(engine):
    for browser, driver in zip(engine.browsers, engine.drivers):
        assert browser.page.close_count == 1
        assert browser.close_count == 1
        assert driver.stop_count == 1


class TestPrintResume:
    """Tests for ResumePrinter.print_resume."""

    @pytest.mark.unit
    def test_web_output_merges_pages_into_one(self, config):
        printer, engine, publisher, _ = build_printer(config)
        request = make_request()

        url = asyncio.run(printer.print_resume(request))

        assert url == "https://storage.test/user-7/resumes/Analytical Engineer"
        (user_id, category, document, name) = publisher.uploads[0]
        assert (user_id, category, name) == ("user-7", "resumes", "Analytical Engineer")
        assert page_count(document) == 1
        page = engine.pages[0]
        assert page.layout == [
            [["summary", "experience", "projects", "education"], ["profiles", "skills", "languages", "interests"]]
        ]

    @pytest.mark.unit
    def test_request_not_mutated(self, config):
        printer, _, _, _ = build_printer(config)
        request = make_request()
        original = copy.deepcopy(request.data)

        asyncio.run(printer.print_resume(request))

        assert request.data == original

    @pytest.mark.unit
    def test_unmerged_web_output_keeps_page_order(self, config):
        config = replace(config, settings=replace(config.settings, merge_web_pages=False))
        printer, _, publisher, _ = build_printer(config)

        asyncio.run(printer.print_resume(make_request()))

        document = publisher.uploads[0][2]
        assert page_count(document) == 3
        assert [width for width, _ in page_sizes(document)] == [page_width(i) for i in (1, 2, 3)]

    @pytest.mark.unit
    def test_formatted_output_one_page_per_logical_page(self, config):
        printer, engine, publisher, _ = build_printer(config)

        asyncio.run(printer.print_resume(make_request(), "A4"))

        document = publisher.uploads[0][2]
        assert page_sizes(document) == [(595, 842)] * 3
        assert len(engine.pages[0].pdf_calls) == 1
        assert engine.pages[0].visits == [(ARTBOARD_URL, "domcontentloaded")]

    @pytest.mark.unit
    def test_invalid_format_rejected_before_connecting(self, config):
        printer, engine, _, _ = build_printer(config)

        with pytest.raises(ValueError):
            asyncio.run(printer.print_resume(make_request(), "Tabloid"))

        assert engine.connect_calls == []

    @pytest.mark.unit
    def test_retry_restarts_from_first_page_on_fresh_session(self, config, log_messages):
        config = replace(config, settings=replace(config.settings, merge_web_pages=False))
        engine = FakeEngine(pages=[FakePage(fail_pdf_on={2}), FakePage()])
        printer, engine, publisher, sleep = build_printer(config, engine)

        asyncio.run(printer.print_resume(make_request()))

        assert len(engine.browsers) == 2
        assert engine.pages[0].isolated == [1, 2]
        assert engine.pages[1].isolated == [1, 2, 3]
        assert page_count(publisher.uploads[0][2]) == 3
        assert len(sleep.delays) == 1
        assert "[print] Retrying to print resume #clx42, attempt #2" in log_messages
        assert_sessions_closed(engine)

    @pytest.mark.unit
    def test_exhausted_retries_raise_printer_error(self, config):
        engine = FakeEngine(pages=[FakePage(fail_pdf_on={0}) for _ in range(3)])
        printer, engine, publisher, _ = build_printer(config, engine)

        with pytest.raises(ResumePrinterError) as exc_info:
            asyncio.run(printer.print_resume(make_request(), "Letter"))

        error = exc_info.value
        assert error.code == "CaptureFailure"
        assert error.resume_id == "clx42"
        assert isinstance(error.__cause__, CaptureFailure)
        assert len(engine.browsers) == 3
        assert publisher.uploads == []
        assert_sessions_closed(engine)

    @pytest.mark.unit
    def test_timeout_attempt_still_tears_down(self, config):
        engine = FakeEngine(pages=[FakePage(missing_marker=True) for _ in range(3)])
        printer, engine, _, _ = build_printer(config, engine)

        with pytest.raises(ResumePrinterError) as exc_info:
            asyncio.run(printer.print_resume(make_request(), "A4"))

        assert exc_info.value.code == "RenderTimeout"
        assert_sessions_closed(engine)

    @pytest.mark.unit
    def test_reload_timeout_reported_as_render_timeout(self, config):
        timeout = PlaywrightTimeoutError("Timeout 30000ms exceeded.")
        engine = FakeEngine(pages=[FakePage(reload_error=timeout) for _ in range(3)])
        printer, engine, _, _ = build_printer(config, engine)

        with pytest.raises(ResumePrinterError) as exc_info:
            asyncio.run(printer.print_resume(make_request(), "A4"))

        assert exc_info.value.code == "RenderTimeout"
        assert isinstance(exc_info.value.__cause__, RenderTimeout)
        assert_sessions_closed(engine)

    @pytest.mark.unit
    def test_unreachable_engine(self, config):
        printer, engine, _, _ = build_printer(config, FakeEngine(refuse_connections=3))

        with pytest.raises(ResumePrinterError) as exc_info:
            asyncio.run(printer.print_resume(make_request()))

        assert exc_info.value.code == "InvalidBrowserConnection"
        assert isinstance(exc_info.value.__cause__, BrowserUnavailable)
        assert len(engine.connect_calls) == 3

    @pytest.mark.unit
    def test_publish_errors_wrapped(self, config):
        printer, _, _, _ = build_printer(config, publisher=RecordingPublisher(failures=3))

        with pytest.raises(ResumePrinterError) as exc_info:
            asyncio.run(printer.print_resume(make_request()))

        assert exc_info.value.code == "PublishFailure"
        assert isinstance(exc_info.value.__cause__, PublishFailure)

    @pytest.mark.unit
    def test_storage_interception_removed_after_attempt(self, config):
        printer, engine, _, _ = build_printer(config)

        asyncio.run(printer.print_resume(make_request()))

        assert engine.pages[0].routes == []

    @pytest.mark.unit
    def test_remote_origins_navigate_directly(self, config):
        config = replace(
            config, public_url="https://resume.example.com", storage_url="https://cdn.example.com"
        )
        printer, engine, _, _ = build_printer(config)

        asyncio.run(printer.print_resume(make_request()))

        assert engine.pages[0].visits == [("https://resume.example.com/artboard/preview", "networkidle")]

    @pytest.mark.unit
    def test_events_recorded(self, config):
        printer, _, _, _ = build_printer(config)

        asyncio.run(printer.print_resume(make_request(), "A4"))

        events = get_recent_events(config.events_file, resume_id="clx42")
        assert [event["event_type"] for event in events] == ["print_completed"]
        assert events[0]["format"] == "A4"
        assert events[0]["page_count"] == 3


class TestPrintPreview:
    """Tests for ResumePrinter.print_preview."""

    @pytest.mark.unit
    def test_preview_published_under_resume_id(self, config):
        printer, engine, publisher, _ = build_printer(config)
        request = make_request()

        url = asyncio.run(printer.print_preview(request))

        assert url == "https://storage.test/user-7/previews/clx42"
        assert publisher.uploads[0][1] == "previews"
        assert publisher.uploads[0][2].startswith(b"\xff\xd8")
        page = engine.pages[0]
        assert page.viewport == {"width": 794, "height": 1123}
        assert page.visits == [(ARTBOARD_URL, "networkidle")]
        assert page.local_storage["resume"] == request.data
        assert page.reloads == 0
        assert_sessions_closed(engine)

    @pytest.mark.unit
    def test_preview_retries_independently(self, config, log_messages):
        engine = FakeEngine(pages=[FakePage(fail_pdf_on={0}), FakePage()])
        printer, engine, publisher, _ = build_printer(config, engine)

        asyncio.run(printer.print_preview(make_request()))

        assert len(publisher.uploads) == 1
        assert "[print] Retrying to generate a preview of resume #clx42, attempt #2" in log_messages

    @pytest.mark.unit
    def test_preview_failure_code(self, config):
        engine = FakeEngine(pages=[FakePage(idle_timeout=True) for _ in range(3)])
        printer, _, _, _ = build_printer(config, engine)

        with pytest.raises(ResumePrinterError) as exc_info:
            asyncio.run(printer.print_preview(make_request()))

        assert exc_info.value.code == "RenderTimeout"
        events = get_recent_events(config.events_file, event_type="preview_failed")
        assert events[0]["error_code"] == "RenderTimeout"


@pytest.mark.unit
def test_get_version(config):
    printer, _, _, _ = build_printer(config)

    assert asyncio.run(printer.get_version()).startswith("HeadlessChrome/")
