import csv
import json
from datetime import date

import pytest

from office_hours_export import export as export_mod
from office_hours_export.errors import NoEventsThisWeek
from office_hours_export.export import (
    ICS_MIME_TYPE,
    CalendarFile,
    FallbackText,
    build_calendar,
    events_to_calendar,
    export,
    export_ics,
    render_fallback_text,
)
from office_hours_export.models import InstructorRecord
from office_hours_export.week import materialize_week

TZ = "America/New_York"
WEEK_OF = date(2026, 10, 21)


@pytest.fixture
def records():
    return [
        InstructorRecord(
            instructor_label="Jane Doe (Instructor)",
            office_hours_text="Monday: 2:00-3:00 in Room 101\nWednesday: 10-11",
            email="jane@example.edu",
        ),
        InstructorRecord(instructor_label="Sam Lee (TA)", office_hours_text="Friday: 1-2"),
    ]


@pytest.fixture
def events(records):
    return materialize_week(records, WEEK_OF, TZ)


def test_build_calendar(records):
    result = build_calendar(records, WEEK_OF, TZ)
    assert isinstance(result, CalendarFile)
    assert result.mime_type == ICS_MIME_TYPE
    assert result.filename == "office_hours_2026-10-18.ics"

    content = result.data.decode("utf-8")
    assert content.startswith("BEGIN:VCALENDAR")
    assert content.count("BEGIN:VEVENT") == 3
    assert "DTSTART;TZID=America/New_York:20261019T140000" in content
    assert "DTEND;TZID=America/New_York:20261019T150000" in content
    assert "SUMMARY:Office Hours: Jane Doe (Instructor)" in content
    assert "LOCATION:Room 101" in content
    assert "@office-hours-export" in content


def test_build_calendar_no_events():
    with pytest.raises(NoEventsThisWeek):
        build_calendar([InstructorRecord("Jane Doe (Instructor)", "By appointment")], WEEK_OF, TZ)


def test_uids_are_stable(events):
    first = events_to_calendar(events).data.decode("utf-8")
    second = events_to_calendar(events).data.decode("utf-8")
    uids = [line for line in first.splitlines() if line.startswith("UID:")]
    assert len(set(uids)) == 3
    assert uids == [line for line in second.splitlines() if line.startswith("UID:")]


def test_falls_back_to_text_when_serializing_fails(events, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(export_mod, "events_to_ics", broken)
    result = events_to_calendar(events)
    assert isinstance(result, FallbackText)
    assert "Office Hours: Sam Lee (TA)" in result.text
    assert "Location: Room 101" in result.text


def test_falls_back_when_events_go_missing(events, monkeypatch):
    monkeypatch.setattr(export_mod, "events_to_ics", lambda evs: b"BEGIN:VCALENDAR\r\nEND:VCALENDAR\r\n")
    assert isinstance(events_to_calendar(events), FallbackText)


def test_render_fallback_text(events):
    text = render_fallback_text(events)
    blocks = text.split("\n\n")
    assert len(blocks) == 3
    assert blocks[0].splitlines()[:3] == [
        "Office Hours: Jane Doe (Instructor)",
        "Monday 2026-10-19 14:00-15:00",
        "Location: Room 101",
    ]


def test_export_ics(events, tmp_path):
    out_path = tmp_path / "test.ics"
    export_ics(events, out_path)
    content = out_path.read_text(encoding="utf-8")
    assert "BEGIN:VCALENDAR" in content
    assert "END:VCALENDAR" in content
    assert content.count("BEGIN:VEVENT") == 3


def test_export_csv(events, tmp_path):
    out_path = tmp_path / "test.csv"
    export(events, out_path, "csv")
    with open(out_path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["summary"] for r in rows] == [
        "Office Hours: Jane Doe (Instructor)",
        "Office Hours: Jane Doe (Instructor)",
        "Office Hours: Sam Lee (TA)",
    ]
    assert rows[2]["location"] == "Location TBA"


def test_export_json(events, tmp_path):
    out_path = tmp_path / "test.json"
    export(events, out_path, "JSON")
    data = json.loads(out_path.read_text(encoding="utf-8"))
    assert data[0]["start"] == "2026-10-19T14:00:00-04:00"
    assert data[0]["description"].endswith("Email: jane@example.edu")


def test_export_txt(events, tmp_path):
    out_path = tmp_path / "test.txt"
    export(events, out_path, "txt")
    assert out_path.read_text(encoding="utf-8").startswith("Office Hours: Jane Doe (Instructor)\n")


def test_export_unknown_format(events, tmp_path):
    with pytest.raises(ValueError):
        export(events, tmp_path / "x.pdf", "pdf")
