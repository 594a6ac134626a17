"""
PDF inspection helpers for captured and merged documents.

Helper functions:
    page_count: Quick page count without full extraction.
    page_sizes: Media box (width, height) of every page in order.
"""

from io import BytesIO
from pathlib import Path
from typing import List, Optional, Tuple, Union

from PyPDF2 import PdfReader

PdfSource = Union[str, Path, bytes]


def _open_reader(source: PdfSource) -> PdfReader:
    if isinstance(source, (bytes, bytearray)):
        return PdfReader(BytesIO(source))
    return PdfReader(str(source))


def page_count(source: PdfSource) -> Optional[int]:
    """Get page count from a PDF path or buffer, or None if unreadable."""
    try:
        return len(_open_reader(source).pages)
    except Exception:
        return None


def page_sizes(source: PdfSource) -> List[Tuple[float, float]]:
    """
    Get the media box size of each page, in page order.

    Args:
        source: PDF file path or in-memory buffer

    Returns:
        List of (width, height) tuples in PDF points
    """
    reader = _open_reader(source)
    return [(float(page.mediabox.width), float(page.mediabox.height)) for page in reader.pages]
