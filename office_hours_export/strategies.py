"""
The four ways of finding office hours for a course, in priority order:

1. instructor profiles (Canvas bios of teachers and TAs)
2. syllabus pages (front page, then the syllabus tab, then pages linked from
   those or listed in modules)
3. syllabus-like course files
4. course description and settings

Each strategy returns the InstructorRecords it found or raises a provider
error; the pipeline classifies the error and moves on to the next one.
"""
from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterator, List

from .content_text import find_page_links, normalize_lines
from .errors import classify_failure, failure_to_error
from .models import FailureKind, InstructorRecord, RawSource, StrategyKind
from .office_hours_text import extract_from_text, extract_instructors
from .provider import ContentProvider, FileMeta

logger = logging.getLogger(__name__)

# Label for office hours that are not preceded by an instructor name
DEFAULT_LABEL = "Instructor"
MAX_LINKED_PAGES = 10
MAX_FILES = 10

_SYLLABUS_LIKE_RE = re.compile(
    r"syllabus|office[\s_-]*hours?|course[\s_-]*info|instructor|contact|start[\s_-]*here",
    re.I,
)
_TEXT_CONTENT_TYPES = ("text/", "application/json", "application/xml", "application/xhtml")
_TEXT_EXTENSIONS = (".txt", ".htm", ".html", ".md", ".csv", ".xml")


class _Attempts:
    """
    Track provider calls made by a multi-call strategy.

    A failed call is remembered and skipped; if nothing was found and no call
    succeeded at all, raise_if_failed() raises one error summarizing them.
    """

    def __init__(self, kind: StrategyKind) -> None:
        self.kind = kind
        self.succeeded = False
        self.failures: List[FailureKind] = []

    def call(self, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            result = fn(*args)
        except Exception as e:
            failure = classify_failure(e)
            self.failures.append(failure)
            if failure is FailureKind.OTHER_ERROR:
                logger.warning("%s: %s failed: %s", self.kind.value, getattr(fn, "__name__", fn), e)
            else:
                logger.debug("%s: %s: %s", self.kind.value, failure.value, e)
            return None
        self.succeeded = True
        return result

    def raise_if_failed(self) -> None:
        if self.succeeded or not self.failures:
            return
        if all(f is FailureKind.PERMISSION_DENIED for f in self.failures):
            kind = FailureKind.PERMISSION_DENIED
        elif FailureKind.OTHER_ERROR in self.failures:
            kind = FailureKind.OTHER_ERROR
        else:
            kind = FailureKind.NOT_FOUND
        raise failure_to_error(kind, f"{self.kind.value}: all {len(self.failures)} request(s) failed")


def _log_found(kind: StrategyKind, ref: str, records: List[InstructorRecord]) -> None:
    if records:
        logger.info("%s: %d record(s) in %s", kind.value, len(records), ref)


class Strategy(ABC):
    """Produce InstructorRecords for a course from one kind of source."""

    kind: StrategyKind

    @abstractmethod
    def run(self, course_id: str, provider: ContentProvider) -> List[InstructorRecord]:
        pass

    def _extract(self, source: RawSource) -> List[InstructorRecord]:
        records = extract_from_text(source.text, default_label=DEFAULT_LABEL)
        _log_found(source.kind, source.ref, records)
        return records

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ProfileStrategy(Strategy):
    kind = StrategyKind.PROFILE

    def run(self, course_id: str, provider: ContentProvider) -> List[InstructorRecord]:
        records: List[InstructorRecord] = []
        for profile in provider.fetch_instructor_profiles(course_id):
            label = f"{profile.name} ({profile.role})" if profile.role else profile.name
            lines = normalize_lines(profile.bio)
            if profile.email:
                lines.insert(0, profile.email)
            found = extract_instructors(lines, default_label=label)
            _log_found(self.kind, label, found)
            records.extend(found)
        return records


class SyllabusPageStrategy(Strategy):
    kind = StrategyKind.SYLLABUS_PAGE

    def run(self, course_id: str, provider: ContentProvider) -> List[InstructorRecord]:
        attempts = _Attempts(self.kind)
        bodies: List[str] = []

        for name, fetch in (
            ("front_page", provider.fetch_front_page),
            ("syllabus", provider.fetch_syllabus_tab),
        ):
            body = attempts.call(fetch, course_id)
            if not body:
                continue
            records = self._extract(RawSource(body, self.kind, name))
            if records:
                return records
            bodies.append(body)

        records = self._linked_pages(course_id, provider, bodies, attempts)
        if not records:
            attempts.raise_if_failed()
        return records

    def _page_refs(
        self,
        course_id: str,
        provider: ContentProvider,
        bodies: List[str],
        attempts: _Attempts,
    ) -> List[str]:
        refs: List[str] = []
        for body in bodies:
            for slug in find_page_links(body):
                if slug not in refs:
                    refs.append(slug)

        modules = attempts.call(provider.fetch_modules, course_id) or []
        for module in modules:
            if len(refs) >= MAX_LINKED_PAGES:
                break
            module_id = module.get("id")
            if module_id is None:
                continue
            items = attempts.call(provider.fetch_module_items, course_id, str(module_id)) or []
            for item in items:
                if item.type != "Page" or not item.page_ref:
                    continue
                if not _SYLLABUS_LIKE_RE.search(item.title or ""):
                    continue
                if item.page_ref not in refs:
                    refs.append(item.page_ref)
        return refs[:MAX_LINKED_PAGES]

    def _linked_pages(
        self,
        course_id: str,
        provider: ContentProvider,
        bodies: List[str],
        attempts: _Attempts,
    ) -> List[InstructorRecord]:
        records: List[InstructorRecord] = []
        for ref in self._page_refs(course_id, provider, bodies, attempts):
            body = attempts.call(provider.fetch_page, course_id, ref)
            if body:
                records.extend(self._extract(RawSource(body, self.kind, f"page {ref}")))
        return records


def _is_text_file(f: FileMeta) -> bool:
    ctype = (f.content_type or "").lower()
    if ctype:
        return ctype.startswith(_TEXT_CONTENT_TYPES)
    return f.name.lower().endswith(_TEXT_EXTENSIONS)


class SyllabusFileStrategy(Strategy):
    kind = StrategyKind.SYLLABUS_FILE

    def run(self, course_id: str, provider: ContentProvider) -> List[InstructorRecord]:
        files = provider.fetch_course_files(course_id)
        candidates = [f for f in files if _SYLLABUS_LIKE_RE.search(f.name or "")]

        attempts = _Attempts(self.kind)
        records: List[InstructorRecord] = []
        for f in candidates[:MAX_FILES]:
            if not _is_text_file(f):
                logger.debug("%s: skipping non-text file %s (%s)", self.kind.value, f.name, f.content_type)
                continue
            body = attempts.call(provider.fetch_file_content, course_id, f)
            if body:
                records.extend(self._extract(RawSource(body, self.kind, f"file {f.name}")))
        if not records:
            attempts.raise_if_failed()
        return records


def _string_values(value: Any) -> Iterator[str]:
    """Yield every string inside nested dicts/lists, in order."""
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for v in value.values():
            yield from _string_values(v)
    elif isinstance(value, (list, tuple)):
        for v in value:
            yield from _string_values(v)


class CourseMetaStrategy(Strategy):
    kind = StrategyKind.COURSE_META

    def run(self, course_id: str, provider: ContentProvider) -> List[InstructorRecord]:
        meta = provider.fetch_course_meta(course_id)
        records = self._extract(RawSource(meta.description, self.kind, "description"))
        for text in _string_values(meta.settings):
            records.extend(self._extract(RawSource(text, self.kind, "settings")))
        return records


def default_strategies() -> List[Strategy]:
    """Fresh strategy instances in priority order."""
    return [
        ProfileStrategy(),
        SyllabusPageStrategy(),
        SyllabusFileStrategy(),
        CourseMetaStrategy(),
    ]
