from __future__ import annotations

from typing import Iterable, Tuple

from .enums import FailureReason


class DomainError(Exception):
    """Base exception for business rule violations.

    Carries the failure reason and remediation hints so the orchestrator can
    turn it into a typed result.
    """

    reason: FailureReason = FailureReason.VALIDATION_FAILED

    def __init__(self, message: str, recommendations: Iterable[str] = ()):
        super().__init__(message)
        self.message = message
        self.recommendations: Tuple[str, ...] = tuple(recommendations)


class UserNotFoundError(DomainError):
    reason = FailureReason.NOT_FOUND


class DuplicateCheckInError(DomainError):
    reason = FailureReason.DUPLICATE_CHECK_IN


class NoOpenCheckInError(DomainError):
    reason = FailureReason.NO_OPEN_CHECK_IN


class AlreadyCheckedOutError(DomainError):
    reason = FailureReason.ALREADY_CHECKED_OUT


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    reason = FailureReason.VALIDATION_FAILED


class LocationRejectedError(DomainError):
    """Raised when an office check-in falls outside every geofence."""

    reason = FailureReason.LOCATION_REJECTED


class PhotoUploadError(Exception):
    """Raised by photo storage backends; never escapes the orchestrator."""
