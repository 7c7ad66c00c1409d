"""
Project weekly office-hour slots onto one concrete calendar week.

Weeks run Sunday 00:00:00 to Saturday 23:59:59 in the course's timezone.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Tuple

import pytz

from .errors import NoEventsThisWeek
from .models import WEEKDAYS, CalendarEvent, InstructorRecord, TimeSlot
from .time_range import parse_slot_line

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/New_York"
LOCATION_PLACEHOLDER = "Location TBA"


def _as_date(target: date | datetime) -> date:
    return target.date() if isinstance(target, datetime) else target


def week_start_date(target: date | datetime) -> date:
    """The Sunday on or before target."""
    d = _as_date(target)
    # date.weekday(): Monday is 0, Sunday is 6
    return d - timedelta(days=(d.weekday() + 1) % 7)


def week_bounds(target: date | datetime, tz: str = DEFAULT_TIMEZONE) -> Tuple[datetime, datetime]:
    """
    Return (week_start, week_end) for the week containing target:
    the most recent Sunday at 00:00:00 and six days later at 23:59:59.
    """
    zone = pytz.timezone(tz)
    sunday = week_start_date(target)
    start = zone.localize(datetime.combine(sunday, datetime.min.time()))
    end = zone.localize(datetime.combine(sunday + timedelta(days=6), datetime.max.time().replace(microsecond=0)))
    return start, end


def slot_date(slot: TimeSlot, target: date | datetime) -> date:
    """The date within target's week that falls on slot.weekday."""
    return week_start_date(target) + timedelta(days=WEEKDAYS.index(slot.weekday))


def record_slots(record: InstructorRecord) -> List[TimeSlot]:
    """Re-parse a record's office-hour lines into TimeSlots."""
    slots: List[TimeSlot] = []
    for line in record.office_hours_text.splitlines():
        slot = parse_slot_line(line)
        if slot:
            slots.append(slot)
    return slots


def _description(record: InstructorRecord) -> str:
    desc = record.office_hours_text
    if record.email:
        desc = f"{desc}\nEmail: {record.email}"
    return desc


def materialize_week(
    records: Iterable[InstructorRecord],
    target: date | datetime,
    tz: str = DEFAULT_TIMEZONE,
) -> List[CalendarEvent]:
    """
    Turn every slot of every record into a CalendarEvent in target's week,
    ordered by start time.

    Raises NoEventsThisWeek if no slot materializes.
    """
    zone = pytz.timezone(tz)
    events: List[CalendarEvent] = []
    for record in records:
        for slot in record_slots(record):
            day = slot_date(slot, target)
            start = zone.localize(datetime.combine(day, slot.start))
            end = zone.localize(datetime.combine(day, slot.end))
            if start >= end:
                # The clock skipped the whole slot (spring-forward night)
                logger.info("Skipping %s %s-%s on %s: not on the local clock", slot.weekday, slot.start, slot.end, day)
                continue
            events.append(
                CalendarEvent(
                    start=start,
                    end=end,
                    summary=f"Office Hours: {record.instructor_label}",
                    description=_description(record),
                    location=slot.location or record.location or LOCATION_PLACEHOLDER,
                )
            )
    if not events:
        raise NoEventsThisWeek(f"No office hours in the week of {week_start_date(target).isoformat()}")
    events.sort(key=lambda e: e.start)
    return events
