"""
Command-line interface: find a course's office hours and export one week of
them to a file.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import date
from pathlib import Path

from . import __version__
from .canvas_fetch import DEFAULT_BASE_URL, CanvasProvider
from .errors import NoEventsThisWeek
from .export import FallbackText, build_calendar, export, render_fallback_text
from .office_hours_text import extract_from_text
from .pipeline import OfficeHoursPipeline, dedupe_records
from .strategies import DEFAULT_LABEL
from .week import DEFAULT_TIMEZONE, materialize_week, week_bounds

EXIT_PERMISSION = 2


def _print_records(records) -> None:
    print("Instructor                       | Location        | Office hours")
    print("-" * 72)
    for r in records:
        hours = r.office_hours_text.replace("\n", "; ")
        print(f"{r.instructor_label[:32]:<32} | {(r.location or '')[:15]:<15} | {hours}")


def _parse_week_of(value: str | None) -> date:
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise SystemExit(f"Error: --week-of must be YYYY-MM-DD, got {value!r}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Export a course's instructor office hours for one week to ICS / CSV / JSON / text.\n"
            "- Canvas mode: look through profiles, syllabus pages, syllabus files and course info.\n"
            "- Offline mode: read a saved syllabus page."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-o",
        "--output",
        default="office_hours",
        help="Output path (without extension). Default: office_hours",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["ics", "csv", "json", "txt"],
        default="ics",
        help="Export format. Default: ics",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--course-id",
        help="Canvas course id to look up. Needs --token (or CANVAS_TOKEN).",
    )
    mode.add_argument(
        "--syllabus-html",
        metavar="HTML_PATH",
        help="Saved syllabus page (HTML or text) to read instead of calling Canvas.",
    )

    # Canvas mode options
    parser.add_argument(
        "--base-url",
        default=os.environ.get("CANVAS_BASE_URL", DEFAULT_BASE_URL),
        help="(Canvas mode) API base URL, e.g. https://udel.instructure.com/api/v1. Default: $CANVAS_BASE_URL",
    )
    parser.add_argument(
        "--token",
        default=os.environ.get("CANVAS_TOKEN", ""),
        help="(Canvas mode) Canvas access token. Default: $CANVAS_TOKEN",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="(Canvas mode) Give up on unfinished lookups after this many seconds and use what was found.",
    )
    parser.add_argument(
        "--concurrent",
        action="store_true",
        help="(Canvas mode) Query all sources at the same time.",
    )

    parser.add_argument(
        "--week-of",
        metavar="YYYY-MM-DD",
        help="Any date in the week to export (Sunday to Saturday). Default: today.",
    )
    parser.add_argument(
        "--tz",
        default=DEFAULT_TIMEZONE,
        help=f"Timezone of the office hours. Default: {DEFAULT_TIMEZONE}",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List the instructors and office hours found, then exit.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s: %(message)s",
    )
    target = _parse_week_of(args.week_of)

    if args.course_id:
        if not args.token:
            print("Error: --course-id requires --token or the CANVAS_TOKEN environment variable.", file=sys.stderr)
            return 1
        provider = CanvasProvider(base_url=args.base_url, token=args.token)
        pipeline = OfficeHoursPipeline(concurrent=args.concurrent, timeout=args.timeout)
        result = pipeline.get_office_hours(args.course_id, provider)
        if result.permission_only_failure:
            print(
                "Canvas denied access to every source of office hours for this course. "
                "Ask your instructor to publish the syllabus or grant access.",
                file=sys.stderr,
            )
            return EXIT_PERMISSION
        records = result.records

    elif args.syllabus_html:
        p = Path(args.syllabus_html)
        if not p.exists():
            print(f"Error: --syllabus-html not found: {p}", file=sys.stderr)
            return 1
        records = dedupe_records(
            extract_from_text(p.read_text(encoding="utf-8", errors="ignore"), default_label=DEFAULT_LABEL)
        )
    else:
        print(
            "No mode specified. Use --course-id to look up a Canvas course "
            "or --syllabus-html for a saved syllabus page.",
            file=sys.stderr,
        )
        return 1

    if not records:
        print("No office hours found for this course.")
        return 0

    if args.list:
        _print_records(records)
        return 0

    ext = "." + args.format
    out_path = Path(args.output).with_suffix(ext) if Path(args.output).suffix else Path(args.output + ext)
    try:
        events = materialize_week(records, target, args.tz)
        calendar = build_calendar(records, target, args.tz) if args.format == "ics" else None
    except NoEventsThisWeek:
        start, end = week_bounds(target, args.tz)
        print(f"No office hours between {start:%Y-%m-%d} and {end:%Y-%m-%d}.")
        return 0

    if isinstance(calendar, FallbackText):
        print("Error: could not build the calendar file. Office hours this week:", file=sys.stderr)
        print(calendar.text)
        return 1
    try:
        if calendar is not None:
            out_path.write_bytes(calendar.data)
        else:
            export(events, out_path, args.format)
    except (OSError, ValueError) as e:
        print(f"Error writing {out_path}: {e}", file=sys.stderr)
        print(render_fallback_text(events))
        return 1
    print(f"Exported {len(events)} office hour event(s) to {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
