"""
Shared utilities for resume-printer.

Common functionality used across contexts:
- Logger setup with provenance
- Pipeline event log
- PDF inspection
- Timestamps
"""

from resume_printer.utils.timestamp import now, now_exact

__all__ = ["now", "now_exact"]
