"""Error taxonomy for the printing pipeline, each with a stable error code."""

from typing import Optional


class PrinterError(Exception):
    """
    Base class for every stage failure in a print or preview attempt.

    Attributes:
        message: Error description
        code: Stable identifier surfaced to callers
        detail: Underlying transport or library message, if any
    """

    code = "PrinterError"

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail

        parts = [message]
        if detail:
            parts.append(detail)

        super().__init__(": ".join(parts))


class BrowserUnavailable(PrinterError):
    """Connection to the remote rendering engine failed."""

    code = "InvalidBrowserConnection"


class RenderTimeout(PrinterError):
    """Readiness signal (page marker or network idle) not observed in time."""

    code = "RenderTimeout"

    def __init__(self, message: str, timeout_ms: int, detail: Optional[str] = None):
        self.timeout_ms = timeout_ms
        super().__init__(f"{message} (after {timeout_ms}ms)", detail)


class CaptureFailure(PrinterError):
    """Export call failed for one logical page or for the merged document."""

    code = "CaptureFailure"

    def __init__(self, message: str, page: Optional[int] = None, detail: Optional[str] = None):
        self.page = page
        if page is not None:
            message = f"{message} (page {page})"
        super().__init__(message, detail)


class AssemblyFailure(PrinterError):
    """A captured page buffer could not be parsed or merged."""

    code = "AssemblyFailure"

    def __init__(
        self, message: str, position: Optional[int] = None, detail: Optional[str] = None
    ):
        self.position = position
        if position is not None:
            message = f"{message} (buffer {position})"
        super().__init__(message, detail)


class PublishFailure(PrinterError):
    """The artifact publisher rejected or failed to store the final buffer."""

    code = "PublishFailure"


class ResumePrinterError(Exception):
    """
    User-facing failure raised once retries are exhausted.

    Carries the stable code of the stage that failed last plus its message.
    The original exception is chained as __cause__.

    Attributes:
        code: Stable error code (e.g., "ResumePrinterError", "InvalidBrowserConnection")
        message: Underlying error message
        resume_id: Resume that failed to print
    """

    def __init__(self, code: str, message: str, resume_id: Optional[str] = None):
        self.code = code
        self.message = message
        self.resume_id = resume_id
        super().__init__(f"[{code}] {message}")


class ConfigurationError(ValueError):
    """Printer configuration is missing or malformed. Raised at startup."""

    pass


class InvalidResumeRequestError(ValueError):
    """Resume payload lacks the fields the printer needs (layout, css)."""

    pass
