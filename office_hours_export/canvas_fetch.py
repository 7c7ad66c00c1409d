"""
Fetch course content from the Canvas LMS REST API.

The caller supplies an API base URL (e.g. https://udel.instructure.com/api/v1)
and a user access token; every request is made as that user, so students get
401/403 on content their instructor has not published. Those responses are
mapped to PermissionDeniedError so the pipeline can tell "no access" apart
from "nothing there". Requests are not retried.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .errors import NotFoundError, PermissionDeniedError, ProviderError
from .provider import ContentProvider, CourseMeta, FileMeta, ModuleItem, ProfileBlob

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://canvas.instructure.com/api/v1"
PER_PAGE = 100
MAX_PAGES = 20  # pagination safety limit

_ROLE_NAMES = {
    "TeacherEnrollment": "Instructor",
    "TaEnrollment": "TA",
    "DesignerEnrollment": "Designer",
}


def _check_response(resp: requests.Response) -> None:
    """Raise the provider error matching an HTTP error status."""
    if resp.status_code in (401, 403):
        raise PermissionDeniedError(f"Access denied ({resp.status_code}): {resp.url}")
    if resp.status_code == 404:
        raise NotFoundError(f"Not found: {resp.url}")
    if resp.status_code >= 400:
        raise ProviderError(f"Canvas returned {resp.status_code} for {resp.url}")


def _role_label(user: Dict[str, Any]) -> str:
    for enrollment in user.get("enrollments") or []:
        role = _ROLE_NAMES.get(enrollment.get("type", ""))
        if role:
            return role
    return "Instructor"


class CanvasProvider(ContentProvider):
    """ContentProvider backed by the Canvas REST API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: str = "",
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not token:
            raise ValueError("A Canvas access token is required.")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers["Authorization"] = f"Bearer {token}"

    # ──────────────────────────────────────────────────────────────
    #  HTTP helpers
    # ──────────────────────────────────────────────────────────────

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        resp = self._session.get(url, params=params, timeout=self._timeout)
        _check_response(resp)
        return resp

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._get(self._url(path), params).json()

    def _get_list(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """GET a paginated list endpoint, following Link: rel="next"."""
        query = dict(params or {})
        query.setdefault("per_page", PER_PAGE)
        url: Optional[str] = self._url(path)
        items: List[Dict[str, Any]] = []
        pages = 0
        while url and pages < MAX_PAGES:
            resp = self._get(url, query)
            items.extend(resp.json())
            url = resp.links.get("next", {}).get("url")
            # The next link already carries the query string
            query = None
            pages += 1
        return items

    # ──────────────────────────────────────────────────────────────
    #  ContentProvider
    # ──────────────────────────────────────────────────────────────

    def fetch_instructor_profiles(self, course_id: str) -> List[ProfileBlob]:
        users = self._get_list(
            f"courses/{course_id}/users",
            {
                "enrollment_type[]": ["teacher", "ta"],
                "include[]": ["bio", "email", "enrollments"],
            },
        )
        profiles: List[ProfileBlob] = []
        for user in users:
            name = (user.get("name") or "").strip()
            if not name:
                continue
            bio = user.get("bio")
            if bio is None and user.get("id") is not None:
                bio = self._fetch_profile_bio(user["id"])
            profiles.append(
                ProfileBlob(
                    name=name,
                    role=_role_label(user),
                    bio=bio or "",
                    email=user.get("email") or None,
                )
            )
        return profiles

    def _fetch_profile_bio(self, user_id: Any) -> str:
        """Older Canvas versions only expose bios on /users/:id/profile."""
        try:
            profile = self._get_json(f"users/{user_id}/profile")
        except (PermissionDeniedError, NotFoundError) as e:
            logger.debug("No profile bio for user %s: %s", user_id, e)
            return ""
        return profile.get("bio") or ""

    def fetch_front_page(self, course_id: str) -> str:
        return self._get_json(f"courses/{course_id}/front_page").get("body") or ""

    def fetch_syllabus_tab(self, course_id: str) -> str:
        course = self._get_json(f"courses/{course_id}", {"include[]": "syllabus_body"})
        return course.get("syllabus_body") or ""

    def fetch_modules(self, course_id: str) -> List[Dict[str, Any]]:
        return self._get_list(f"courses/{course_id}/modules")

    def fetch_module_items(self, course_id: str, module_id: str) -> List[ModuleItem]:
        items = self._get_list(f"courses/{course_id}/modules/{module_id}/items")
        return [
            ModuleItem(
                type=item.get("type", ""),
                title=item.get("title", ""),
                page_ref=item.get("page_url"),
            )
            for item in items
        ]

    def fetch_page(self, course_id: str, page_ref: str) -> str:
        return self._get_json(f"courses/{course_id}/pages/{page_ref}").get("body") or ""

    def fetch_course_files(self, course_id: str) -> List[FileMeta]:
        files = self._get_list(f"courses/{course_id}/files")
        return [
            FileMeta(
                ref=str(f.get("id", "")),
                name=f.get("display_name") or f.get("filename") or "",
                content_type=f.get("content-type", ""),
                url=f.get("url", ""),
            )
            for f in files
        ]

    def fetch_file_content(self, course_id: str, file_ref: FileMeta) -> str:
        if not file_ref.url:
            raise NotFoundError(f"File {file_ref.ref} has no download URL")
        return self._get(file_ref.url).text

    def fetch_course_meta(self, course_id: str) -> CourseMeta:
        course = self._get_json(f"courses/{course_id}", {"include[]": "public_description"})
        try:
            settings = self._get_json(f"courses/{course_id}/settings")
        except PermissionDeniedError as e:
            # Students usually cannot read settings; the description still counts.
            logger.debug("Course settings not readable: %s", e)
            settings = {}
        return CourseMeta(
            description=course.get("public_description") or "",
            settings=settings if isinstance(settings, dict) else {},
        )
