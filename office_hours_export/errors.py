"""
Exception types and failure classification.
"""
from __future__ import annotations

from .models import FailureKind


class OfficeHoursError(Exception):
    """Base class for errors raised by this package."""


class ProviderError(OfficeHoursError):
    """The content provider failed in a way it could classify."""


class PermissionDeniedError(ProviderError):
    """The provider denied access to a resource (HTTP 401/403)."""


class NotFoundError(ProviderError):
    """The provider has no such resource (HTTP 404)."""


class ParseAnomaly(OfficeHoursError):
    """A day/time line that cannot be resolved to a valid range."""


class NoEventsThisWeek(OfficeHoursError):
    """Records exist but none of their slots falls in the requested week."""


class ExportError(OfficeHoursError):
    """The calendar file could not be produced."""


def classify_failure(exc: BaseException) -> FailureKind:
    """Map an exception raised by a strategy to a FailureKind."""
    if isinstance(exc, PermissionDeniedError):
        return FailureKind.PERMISSION_DENIED
    if isinstance(exc, NotFoundError):
        return FailureKind.NOT_FOUND
    return FailureKind.OTHER_ERROR


def failure_to_error(kind: FailureKind, message: str) -> ProviderError:
    """Build the exception that stands for an aggregated failure kind."""
    if kind is FailureKind.PERMISSION_DENIED:
        return PermissionDeniedError(message)
    if kind is FailureKind.NOT_FOUND:
        return NotFoundError(message)
    return ProviderError(message)
