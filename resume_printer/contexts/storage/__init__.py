"""
Storage Context

Responsibilities:
- Publishes final PDFs and preview images
- Returns durable URLs for stored artifacts

Owns: Artifact naming and persistence
Never: Renders or modifies artifact content
"""
