"""
Printing context logger.

Provides logging interface for the printing context with automatic [print] prefix.
All printing modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from resume_printer.contexts.printing.config import PrinterConfig
from resume_printer.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[print]"


def setup_printing_logger(
    log_dir: Path, config: Optional[PrinterConfig] = None, verbose: bool = False
) -> Path:
    """
    Setup logger for printing context.

    Configures loguru with provenance tracking and printing-specific context.

    Args:
        log_dir: Directory for this printing session
        config: Printer configuration summarised in the provenance header (the token is never logged)
        verbose: Show DEBUG messages on the console

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="print",
        log_dir=log_dir,
        extra_provenance=printing_provenance(config) if config else None,
        console_level="DEBUG" if verbose else "INFO",
    )


def printing_provenance(config: PrinterConfig) -> dict:
    return {
        "Chrome endpoint": config.chrome_url,
        "Public URL": config.public_url,
        "Storage URL": config.storage_url,
        "Settings file": config.settings_path or "defaults",
        "Max attempts": config.settings.max_attempts,
        "Merge web pages": config.settings.merge_web_pages,
    }


# Wrapper functions with automatic [print] prefix


def _log_info(message: str) -> None:
    """Log info message with [print] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [print] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [print] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [print] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [print] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level printing-specific logging helpers


def log_attempt_start(kind: str, resume_id: str, url: str, mode: str) -> None:
    """Log the start of one print/preview attempt."""
    _log_info(f"Starting {kind} of resume #{resume_id}")
    _log_debug(f"  Target: {url}")
    _log_debug(f"  Mode: {mode}")


def log_retry(kind: str, resume_id: str, attempt: int, delay: float, error: Exception) -> None:
    """Log a retry of a failed attempt."""
    _log_warning(f"Attempt #{attempt - 1} failed: {type(error).__name__}: {error}")
    _log_info(f"Retrying to {kind} resume #{resume_id}, attempt #{attempt}")
    _log_debug(f"  Backing off {delay:.2f}s")


def log_page_captured(index: int, width: float, height: float) -> None:
    """Log one continuous-capture page with its measured size."""
    _log_debug(f"  Captured page {index} ({width:.0f}x{height:.0f}px)")


def log_print_finished(kind: str, resume_id: str, duration_ms: int, page_count: Optional[int]) -> None:
    """Log how long the engine took, with page count when known."""
    _log_success(f"Finished {kind} of resume #{resume_id}")
    if page_count is None:
        _log_debug(f"Chrome took {duration_ms}ms to {kind} resume #{resume_id}")
    else:
        _log_debug(f"Chrome took {duration_ms}ms to {kind} {page_count} page(s) of resume #{resume_id}")


def log_print_failed(kind: str, resume_id: str, error: Exception) -> None:
    """Log the terminal failure of a request after retries are exhausted."""
    _log_error(f"Failed to {kind} resume #{resume_id}")
    _log_error(f"  {type(error).__name__}: {error}")
