"""Merge ordered page buffers into one PDF document."""

from io import BytesIO
from typing import List

from PyPDF2 import PdfReader, PdfWriter

from resume_printer.contexts.printing.exceptions import AssemblyFailure
from resume_printer.contexts.printing.request import PageBuffer


def assemble_pages(buffers: List[PageBuffer]) -> bytes:
    """
    Copy every page of every buffer into a single PDF, in input order.

    Buffers must already be in strictly ascending logical order; the assembler
    never reorders. Page content is copied as-is, so the result always holds
    exactly sum(pages per buffer) pages.

    Args:
        buffers: Captured page buffers, ascending by position

    Returns:
        Bytes of the merged PDF

    Raises:
        AssemblyFailure: If the list is empty, out of order, or a buffer is unreadable
    """
    if not buffers:
        raise AssemblyFailure("No page buffers to assemble")

    positions = [buffer.position for buffer in buffers]
    if any(later <= earlier for earlier, later in zip(positions, positions[1:])):
        raise AssemblyFailure(f"Page buffers out of order: {positions}")

    writer = PdfWriter()
    for buffer in buffers:
        try:
            reader = PdfReader(BytesIO(buffer.data))
            pages = list(reader.pages)
        except Exception as e:
            raise AssemblyFailure("Unreadable page buffer", buffer.position, str(e)) from e

        for page in pages:
            writer.add_page(page)

    output = BytesIO()
    writer.write(output)
    return output.getvalue()
