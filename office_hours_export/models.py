"""
Data model shared by the extraction pipeline, the week materializer and the
exporter.

Everything here is created fresh for one pipeline run (one course, one week)
and thrown away after export.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from typing import List, Optional


WEEKDAYS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


class StrategyKind(Enum):
    """Where office hours were looked up, in priority order."""

    PROFILE = "profile"
    SYLLABUS_PAGE = "syllabus_page"
    SYLLABUS_FILE = "syllabus_file"
    COURSE_META = "course_meta"


class FailureKind(Enum):
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    OTHER_ERROR = "other_error"


@dataclass
class RawSource:
    """One fetched text/markup blob."""

    text: str
    kind: StrategyKind
    ref: str = ""


@dataclass
class InstructorRecord:
    """
    One instructor and the office-hour lines found for them.

    instructor_label is the deduplication key and is compared verbatim.
    """

    instructor_label: str
    office_hours_text: str
    location: Optional[str] = None
    email: Optional[str] = None


@dataclass
class TimeSlot:
    weekday: str  # "Sun" .. "Sat"
    start: time
    end: time
    location: Optional[str] = None

    def __post_init__(self) -> None:
        if self.weekday not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {self.weekday!r}")
        if self.start >= self.end:
            raise ValueError("Start time must be before end time")


@dataclass
class CalendarEvent:
    start: datetime
    end: datetime
    summary: str
    description: str
    location: str


@dataclass
class StrategyOutcome:
    kind: StrategyKind
    records: List[InstructorRecord] = field(default_factory=list)
    failure: Optional[FailureKind] = None
    timed_out: bool = False


@dataclass
class PipelineResult:
    """
    Deduplicated records for a course.

    permission_only_failure is True only when every strategy failed and every
    failure was an access denial; callers should then ask the user to get
    access instead of reporting that nothing was found.
    """

    records: List[InstructorRecord]
    permission_only_failure: bool = False
    outcomes: List[StrategyOutcome] = field(default_factory=list)

    @property
    def no_records_found(self) -> bool:
        return not self.records and not self.permission_only_failure
