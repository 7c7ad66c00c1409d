"""
Find instructors and their office hours in normalized course text.

Expected layout (one item per line, after content_text.normalize_lines):

    Jane Doe (Instructor)
    Office Hours:
    Monday: 2:00-3:00 in Room 101
    Wednesday: 10-11am
    Email: jane@example.edu
    John Roe (TA)
    Office Hours: Friday: 1-2

Anything that does not fit these patterns is ignored; a page full of prose
yields no records rather than wrong ones.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .content_text import normalize_lines
from .models import InstructorRecord
from .time_range import parse_slot_line

logger = logging.getLogger(__name__)


_INSTRUCTOR_RE = re.compile(
    r"^(?P<name>[A-Za-zÀ-ÿ][A-Za-zÀ-ÿ.,'’\- ]{1,79}?)\s*"
    r"\((?P<role>[A-Za-zÀ-ÿ][^()]{0,39})\)\s*:?$"
)
_OFFICE_HOURS_RE = re.compile(r"^office\s*hours?\b\s*(?P<colon>:)?\s*(?P<rest>.*)$", re.I)
_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")


@dataclass
class _Accumulator:
    label: Optional[str]
    lines: List[str] = field(default_factory=list)
    location: Optional[str] = None
    email: Optional[str] = None
    collecting: bool = False

    def to_record(self) -> InstructorRecord | None:
        if not self.lines:
            return None
        if not self.label:
            logger.debug("Dropping %d office-hour line(s) with no instructor", len(self.lines))
            return None
        return InstructorRecord(
            instructor_label=self.label,
            office_hours_text="\n".join(self.lines),
            location=self.location,
            email=self.email,
        )


def _instructor_label(line: str) -> str | None:
    m = _INSTRUCTOR_RE.match(line)
    if not m:
        return None
    name = " ".join(m.group("name").split())
    role = " ".join(m.group("role").split())
    return f"{name} ({role})"


def _office_hours_marker(line: str) -> str | None:
    """
    If line is an 'Office Hours' marker, return the slot written after it
    ('' for a bare marker). Prose such as 'Office hours are by appointment'
    is not a marker and gives None.
    """
    m = _OFFICE_HOURS_RE.match(line)
    if not m:
        return None
    rest = m.group("rest").strip()
    if not rest:
        return ""
    if m.group("colon") and parse_slot_line(rest) is not None:
        return rest
    return None


def _collect(acc: _Accumulator, line: str) -> None:
    slot = parse_slot_line(line)
    if slot is None:
        return
    acc.lines.append(line)
    if acc.location is None and slot.location:
        acc.location = slot.location


def extract_instructors(
    lines: Iterable[str],
    default_label: str | None = None,
) -> List[InstructorRecord]:
    """
    Scan normalized lines and return one record per instructor block that has
    at least one office-hour line.

    :param lines: Output of content_text.normalize_lines.
    :param default_label: Label for office hours that appear before any
        '<name> (<role>)' line. None drops them.
    """
    records: List[InstructorRecord] = []
    acc = _Accumulator(label=default_label)

    for line in lines:
        marker = _office_hours_marker(line)
        label = None if marker is not None else _instructor_label(line)
        if label:
            record = acc.to_record()
            if record:
                records.append(record)
            acc = _Accumulator(label=label)

        email = _EMAIL_RE.search(line)
        if email and acc.email is None:
            acc.email = email.group(0)

        if marker is not None:
            acc.collecting = True
            if marker:
                _collect(acc, marker)
        elif acc.collecting and not label:
            _collect(acc, line)

    record = acc.to_record()
    if record:
        records.append(record)
    return records


def extract_from_text(text: str | None, default_label: str | None = None) -> List[InstructorRecord]:
    """Normalize raw markup/text and extract instructor records from it."""
    return extract_instructors(normalize_lines(text), default_label=default_label)
