"""Abstract content provider the strategies fetch course content from."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ProfileBlob:
    """One teacher/TA of a course as the provider lists them."""

    name: str
    role: str = ""
    bio: str = ""
    email: Optional[str] = None


@dataclass
class ModuleItem:
    type: str
    title: str
    page_ref: Optional[str] = None


@dataclass
class FileMeta:
    ref: str
    name: str
    content_type: str = ""
    url: str = ""


@dataclass
class CourseMeta:
    description: str = ""
    settings: Dict[str, Any] = field(default_factory=dict)


class ContentProvider(ABC):
    """
    Read-only access to one authenticated user's view of course content.

    Every method either returns the requested content or raises:
    PermissionDeniedError when access is denied, NotFoundError when the
    resource does not exist, anything else for other failures.
    """

    @abstractmethod
    def fetch_instructor_profiles(self, course_id: str) -> List[ProfileBlob]:
        pass

    @abstractmethod
    def fetch_front_page(self, course_id: str) -> str:
        pass

    @abstractmethod
    def fetch_syllabus_tab(self, course_id: str) -> str:
        pass

    @abstractmethod
    def fetch_modules(self, course_id: str) -> List[Dict[str, Any]]:
        """Return modules as dicts with at least 'id' and 'name'."""
        pass

    @abstractmethod
    def fetch_module_items(self, course_id: str, module_id: str) -> List[ModuleItem]:
        pass

    @abstractmethod
    def fetch_page(self, course_id: str, page_ref: str) -> str:
        pass

    @abstractmethod
    def fetch_course_files(self, course_id: str) -> List[FileMeta]:
        pass

    @abstractmethod
    def fetch_file_content(self, course_id: str, file_ref: FileMeta) -> str:
        pass

    @abstractmethod
    def fetch_course_meta(self, course_id: str) -> CourseMeta:
        pass
