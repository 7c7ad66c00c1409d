"""
Export office-hour events to ICS, CSV, JSON, or plain text.
"""
from __future__ import annotations

import csv
import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterable, List

import icalendar

from .errors import ExportError
from .models import CalendarEvent, InstructorRecord
from .week import DEFAULT_TIMEZONE, materialize_week, week_start_date

logger = logging.getLogger(__name__)

ICS_MIME_TYPE = "text/calendar"
PRODID = "-//Office Hours Export//EN"


@dataclass
class CalendarFile:
    data: bytes
    mime_type: str = ICS_MIME_TYPE
    filename: str = "office_hours.ics"


@dataclass
class FallbackText:
    text: str


def _event_uid(event: CalendarEvent) -> str:
    uid_string = f"{event.summary}-{event.start.isoformat()}-{event.end.isoformat()}"
    return f"{hashlib.md5(uid_string.encode('utf-8')).hexdigest()}@office-hours-export"


def events_to_ics(events: Iterable[CalendarEvent], calname: str = "Office Hours") -> bytes:
    """Serialize events to an iCalendar document."""
    cal = icalendar.Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("x-wr-calname", calname)

    stamp = datetime.now(timezone.utc)
    for ev in events:
        event = icalendar.Event()
        event.add("uid", _event_uid(ev))
        event.add("summary", ev.summary)
        event.add("description", ev.description)
        event.add("location", ev.location)
        event.add("dtstart", ev.start)
        event.add("dtend", ev.end)
        event.add("dtstamp", stamp)
        cal.add_component(event)
    return cal.to_ical()


def render_fallback_text(events: Iterable[CalendarEvent]) -> str:
    """Plain-text listing of events, one block per event."""
    blocks: List[str] = []
    for ev in events:
        lines = [
            ev.summary,
            f"{ev.start:%A %Y-%m-%d} {ev.start:%H:%M}-{ev.end:%H:%M}",
            f"Location: {ev.location}",
        ]
        if ev.description:
            lines.append(ev.description)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def events_to_calendar(events: List[CalendarEvent], filename: str = "office_hours.ics") -> CalendarFile | FallbackText:
    """
    Serialize events to a CalendarFile, or fall back to text if that fails
    or the serialized calendar lost any event.
    """
    try:
        data = events_to_ics(events)
        written = data.count(b"BEGIN:VEVENT")
        if written != len(events):
            raise ExportError(f"Calendar has {written} of {len(events)} event(s)")
    except Exception as e:
        logger.warning("Calendar export failed, falling back to text: %s", e)
        return FallbackText(render_fallback_text(events))
    return CalendarFile(data=data, filename=filename)


def build_calendar(
    records: Iterable[InstructorRecord],
    target: date | datetime,
    tz: str = DEFAULT_TIMEZONE,
) -> CalendarFile | FallbackText:
    """
    Materialize records for target's week and serialize them.

    Raises NoEventsThisWeek (from week.materialize_week) when nothing falls in
    that week.
    """
    events = materialize_week(records, target, tz)
    filename = f"office_hours_{week_start_date(target).isoformat()}.ics"
    return events_to_calendar(events, filename)


def _rows(events: Iterable[CalendarEvent]) -> List[dict]:
    return [
        {
            "summary": ev.summary,
            "start": ev.start.isoformat(),
            "end": ev.end.isoformat(),
            "location": ev.location,
            "description": ev.description,
        }
        for ev in events
    ]


def export_ics(events: List[CalendarEvent], out_path: str | Path) -> None:
    """Export events to iCalendar (.ics) for Apple/Google calendar."""
    Path(out_path).write_bytes(events_to_ics(events))


def export_csv(events: List[CalendarEvent], out_path: str | Path) -> None:
    """Export events to CSV."""
    rows = _rows(events)
    if not rows:
        Path(out_path).write_text("", encoding="utf-8")
        return
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        w.writeheader()
        w.writerows(rows)


def export_json(events: List[CalendarEvent], out_path: str | Path) -> None:
    """Export events to JSON."""
    Path(out_path).write_text(
        json.dumps(_rows(events), indent=2, ensure_ascii=False), encoding="utf-8"
    )


def export_txt(events: List[CalendarEvent], out_path: str | Path) -> None:
    """Export events as the plain-text listing."""
    Path(out_path).write_text(render_fallback_text(events) + "\n", encoding="utf-8")


def export(events: List[CalendarEvent], out_path: str | Path, fmt: str) -> None:
    """Export to the given format: ics, csv, json, or txt."""
    fmt = fmt.lower()
    if fmt == "ics":
        export_ics(events, out_path)
    elif fmt == "csv":
        export_csv(events, out_path)
    elif fmt == "json":
        export_json(events, out_path)
    elif fmt == "txt":
        export_txt(events, out_path)
    else:
        raise ValueError(f"Unsupported format: {fmt}. Use ics, csv, json, or txt.")
