"""
resume-printer - Remote-browser resume printing pipeline

Renders structured resume documents through the artboard web front end running
inside a remote Chromium instance and exports the result as a merged PDF or a
JPEG preview.

Architecture:
- Printing Context: session management, capture strategies, page assembly, retries
- Storage Context: publication of final artifacts to a durable store
"""

__version__ = "0.1.0"
