"""Shared fixtures for resume-printer tests."""

import pytest
from loguru import logger

from resume_printer.contexts.printing.config import PrinterConfig, PrinterSettings


@pytest.fixture
def settings():
    return PrinterSettings(settle_delay_ms=0, retry_base_delay_s=0.5)


@pytest.fixture
def config(settings, tmp_path):
    """Development topology: front end and storage on the host's localhost."""
    return PrinterConfig(
        public_url="http://localhost:3000",
        storage_url="http://localhost:3001/api/storage",
        chrome_url="ws://chrome:3000",
        chrome_token="secret-token",
        ignore_https_errors=True,
        events_file=tmp_path / "print_events.log",
        settings=settings,
    )


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during a test."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
