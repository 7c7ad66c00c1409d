"""
Resolve office-hour lines like "Monday: 2:00-3:00 in Room 101" into
canonical 24-hour TimeSlots.

Instructors rarely write AM/PM on office hours, so a bare "3:00-4:00" has to
be guessed. The rules, in order:

1. A bound with its own "am"/"pm" is converted directly ("pm" adds 12 unless
   the hour is 12, "12am" is 0). Markers are never copied to the other bound.
2. A bound without a marker: 1-8 is afternoon, 9-11 is morning, 12 is noon
   unless the other bound is explicitly "am" or lands on 11 or earlier, in
   which case it is midnight. 0 and 13-23 are already 24-hour values.
3. If the end is not after the start, the end moves 12 hours later
   ("11:00-1:00" is 11:00-13:00). Still not after the start (or past the end
   of the day) means the line is malformed and is dropped.

"12:00-1:00" therefore always reads as 12:00-13:00, even if someone meant
midnight.
"""
from __future__ import annotations

import logging
import re
from datetime import time
from typing import NamedTuple, Optional, Tuple

from .errors import ParseAnomaly
from .models import TimeSlot

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────
#  Day helpers
# ──────────────────────────────────────────────────────────────────

_DAY_MAP = {
    "su": "Sun", "sun": "Sun", "sunday": "Sun",
    "mo": "Mon", "mon": "Mon", "monday": "Mon",
    "tu": "Tue", "tue": "Tue", "tues": "Tue", "tuesday": "Tue",
    "we": "Wed", "wed": "Wed", "weds": "Wed", "wednesday": "Wed",
    "th": "Thu", "thu": "Thu", "thur": "Thu", "thurs": "Thu", "thursday": "Thu",
    "fr": "Fri", "fri": "Fri", "friday": "Fri",
    "sa": "Sat", "sat": "Sat", "saturday": "Sat",
}


def normalize_day(text: str) -> str | None:
    """
    Normalize 'Mon', 'MONDAY', 'Mondays', 'Thurs.' to the 3-letter form.

    Unlike a prefix match, unknown words ('Most', 'Final') give None.
    """
    t = text.strip().rstrip(".").lower()
    if t in _DAY_MAP:
        return _DAY_MAP[t]
    # Plural of a full name: "Mondays"
    if t.endswith("s") and len(t) > 6 and t[:-1] in _DAY_MAP:
        return _DAY_MAP[t[:-1]]
    return None


# ──────────────────────────────────────────────────────────────────
#  Clock parsing and disambiguation
# ──────────────────────────────────────────────────────────────────

class Clock(NamedTuple):
    hour: int
    minute: int
    meridiem: Optional[str]  # "am", "pm" or None


_CLOCK_RE = re.compile(
    r"^(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?:(?P<ap>[ap])\.?m\.?)?$",
    re.I,
)


def parse_clock(text: str) -> Clock | None:
    """Parse 'H', 'H:MM' or 'H(:MM) am|pm'. Returns None for invalid clocks."""
    m = _CLOCK_RE.match(text.strip())
    if not m:
        return None
    hour = int(m.group("hour"))
    minute = int(m.group("minute") or 0)
    ap = m.group("ap")
    meridiem = f"{ap.lower()}m" if ap else None
    if minute > 59 or hour > 23:
        return None
    if meridiem and not 1 <= hour <= 12:
        return None
    return Clock(hour, minute, meridiem)


def _explicit_hour(clock: Clock) -> int:
    if clock.meridiem == "pm" and clock.hour != 12:
        return clock.hour + 12
    if clock.meridiem == "am" and clock.hour == 12:
        return 0
    return clock.hour


def _default_hour(hour: int) -> int:
    if 1 <= hour <= 8:
        return hour + 12
    return hour


def _resolve_hour(own: Clock, other: Clock) -> int:
    if own.meridiem:
        return _explicit_hour(own)
    if own.hour != 12:
        return _default_hour(own.hour)
    if other.meridiem == "am":
        return 0
    other_hour = _explicit_hour(other) if other.meridiem else _default_hour(other.hour)
    return 0 if other_hour <= 11 else 12


def resolve_time_range(day: str, start: str, end: str) -> Tuple[int, int, int, int] | None:
    """
    Resolve a weekday and two clock strings to (start_hour, start_minute,
    end_hour, end_minute) in 24-hour form, or None if the range is malformed.

    >>> resolve_time_range("Monday", "11:00", "1:00")
    (11, 0, 13, 0)
    """
    if normalize_day(day) is None:
        return None
    a = parse_clock(start)
    b = parse_clock(end)
    if a is None or b is None:
        return None

    start_min = _resolve_hour(a, b) * 60 + a.minute
    end_min = _resolve_hour(b, a) * 60 + b.minute
    if end_min <= start_min:
        end_min += 12 * 60
    if end_min <= start_min or end_min >= 24 * 60:
        return None
    return start_min // 60, start_min % 60, end_min // 60, end_min % 60


# ──────────────────────────────────────────────────────────────────
#  Office-hour lines
# ──────────────────────────────────────────────────────────────────

_CLOCK_PART = r"\d{1,2}(?::\d{2})?\s*(?:[ap]\.?m\.?)?"

_SLOT_LINE_RE = re.compile(
    r"^(?P<day>[A-Za-z]{2,10})\.?\s*:\s*"
    rf"(?P<start>{_CLOCK_PART})\s*(?:-|–|—|to)\s*(?P<end>{_CLOCK_PART})"
    r"(?:\s*,?\s+in\s+(?P<location>.+?))?\s*\.?$",
    re.I,
)


def _parse_slot(line: str) -> TimeSlot | None:
    """
    Parse one office-hour line. None if the line is not a day/time line;
    ParseAnomaly if it is one but the range cannot be resolved.
    """
    m = _SLOT_LINE_RE.match(line.strip())
    if not m:
        return None
    day = normalize_day(m.group("day"))
    if not day:
        return None
    resolved = resolve_time_range(m.group("day"), m.group("start"), m.group("end"))
    if resolved is None:
        raise ParseAnomaly(f"Unresolvable time range: {line!r}")
    sh, sm, eh, em = resolved
    location = (m.group("location") or "").strip() or None
    return TimeSlot(weekday=day, start=time(sh, sm), end=time(eh, em), location=location)


def parse_slot_line(line: str) -> TimeSlot | None:
    """Parse an office-hour line into a TimeSlot; malformed ranges give None."""
    try:
        return _parse_slot(line)
    except ParseAnomaly as e:
        logger.debug("Skipping office-hour line: %s", e)
        return None
