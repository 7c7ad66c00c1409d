"""Shared fixtures: an in-memory ContentProvider."""
from __future__ import annotations

import pytest

from office_hours_export.errors import NotFoundError, PermissionDeniedError
from office_hours_export.provider import ContentProvider, CourseMeta


class FakeProvider(ContentProvider):
    """
    Serve canned content. Any attribute can be set to an exception instance
    (or class) to make the matching fetch raise it instead.
    """

    def __init__(self, **content):
        self.profiles = content.get("profiles", [])
        self.front_page = content.get("front_page", NotFoundError("no front page"))
        self.syllabus = content.get("syllabus", "")
        self.modules = content.get("modules", [])
        self.module_items = content.get("module_items", {})
        self.pages = content.get("pages", {})
        self.files = content.get("files", [])
        self.file_contents = content.get("file_contents", {})
        self.meta = content.get("meta", CourseMeta())
        self.calls = []

    def _serve(self, name, value):
        self.calls.append(name)
        if isinstance(value, type) and issubclass(value, BaseException):
            raise value(name)
        if isinstance(value, BaseException):
            raise value
        return value

    def fetch_instructor_profiles(self, course_id):
        return self._serve("profiles", self.profiles)

    def fetch_front_page(self, course_id):
        return self._serve("front_page", self.front_page)

    def fetch_syllabus_tab(self, course_id):
        return self._serve("syllabus", self.syllabus)

    def fetch_modules(self, course_id):
        return self._serve("modules", self.modules)

    def fetch_module_items(self, course_id, module_id):
        return self._serve(f"module_items:{module_id}", self.module_items.get(module_id, []))

    def fetch_page(self, course_id, page_ref):
        return self._serve(f"page:{page_ref}", self.pages.get(page_ref, NotFoundError(page_ref)))

    def fetch_course_files(self, course_id):
        return self._serve("files", self.files)

    def fetch_file_content(self, course_id, file_ref):
        return self._serve(f"file:{file_ref.ref}", self.file_contents.get(file_ref.ref, NotFoundError(file_ref.ref)))

    def fetch_course_meta(self, course_id):
        return self._serve("meta", self.meta)


class DeniedProvider(FakeProvider):
    """Every fetch is denied."""

    def __init__(self):
        denied = PermissionDeniedError
        super().__init__(
            profiles=denied,
            front_page=denied,
            syllabus=denied,
            modules=denied,
            files=denied,
            meta=denied,
        )


JANE_SYLLABUS = (
    "Jane Doe (Instructor)\n"
    "Office Hours:\n"
    "Monday: 2:00-3:00 in Room 101\n"
    "Email: jane@example.edu"
)


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def denied_provider():
    return DeniedProvider()
