"""
Pipeline event logging utilities (Tier 2 logging).

Appends one JSON object per line to a pipeline events file so print and
preview outcomes can be filtered by event_type, resume_id, or source without
parsing the detailed loguru output.

For detailed within-context logging (Tier 1), use resume_printer.utils.logger instead.

Usage:
    from resume_printer.utils.event_logging import log_pipeline_event

    log_pipeline_event(
        events_file,
        event_type="print_completed",
        resume_id="clx123",
        source="printing",
        duration_ms=2310,
    )
"""

import json
from pathlib import Path
from typing import Optional

from resume_printer.utils.timestamp import now_exact


def log_pipeline_event(
    events_file: Optional[Path], event_type: str, resume_id: str, source: str, **extra_fields
) -> None:
    """
    Log an event to the pipeline event log.

    Does nothing when no events file is configured.

    Args:
        events_file: JSON Lines file to append to (None disables event logging)
        event_type: Type of event (e.g., "print_completed", "preview_failed")
        resume_id: Resume identifier
        source: Event source (e.g., "printing", "cli")
        **extra_fields: Additional event-specific fields
    """
    if events_file is None:
        return

    events_file = Path(events_file)
    events_file.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "resume_id": resume_id,
        "source": source,
        **extra_fields,
    }

    with open(events_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event) + "\n")


def get_recent_events(
    events_file: Path,
    n: int = 10,
    resume_id: Optional[str] = None,
    event_type: Optional[str] = None,
) -> list[dict]:
    """
    Get the last n events from the pipeline log, optionally filtered.

    Args:
        events_file: JSON Lines file to read
        n: Number of recent events to return (default: 10)
        resume_id: Filter to only events for this resume (optional)
        event_type: Filter to only events of this type (optional)

    Returns:
        List of event dicts (most recent last)
    """
    events_file = Path(events_file)
    if not events_file.exists():
        return []

    events = []
    with open(events_file, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if resume_id:
        events = [e for e in events if e.get("resume_id") == resume_id]

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
