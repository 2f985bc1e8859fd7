from __future__ import annotations

from enum import Enum
from typing import Optional


class Department(str, Enum):
    """Departments with a configured shift window."""

    OPERATIONS = "operations"
    ADMIN = "admin"
    HR = "hr"
    MARKETING = "marketing"
    SALES = "sales"
    TECHNICAL = "technical"
    HOUSEKEEPING = "housekeeping"

    @classmethod
    def parse(cls, value: object) -> Optional["Department"]:
        """Case-insensitive lookup; unknown or empty values give None."""
        if isinstance(value, cls):
            return value
        if not value:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class AttendanceType(str, Enum):
    OFFICE = "office"
    REMOTE = "remote"
    FIELD_WORK = "field_work"

    @property
    def display_name(self) -> str:
        return {
            AttendanceType.OFFICE: "Office",
            AttendanceType.REMOTE: "Remote Work",
            AttendanceType.FIELD_WORK: "Field Work",
        }[self]


class AttendanceStatus(str, Enum):
    """Status stored on the attendance record."""

    PRESENT = "present"
    LATE = "late"


class ValidationType(str, Enum):
    EXACT = "exact"
    PROXIMITY_BASED = "proximity_based"
    INDOOR_COMPENSATION = "indoor_compensation"
    FAILED = "failed"


class FailureReason(str, Enum):
    """Why a check-in/check-out was rejected."""

    NOT_FOUND = "NotFound"
    DUPLICATE_CHECK_IN = "DuplicateCheckIn"
    NO_OPEN_CHECK_IN = "NoOpenCheckIn"
    ALREADY_CHECKED_OUT = "AlreadyCheckedOut"
    VALIDATION_FAILED = "ValidationFailed"
    LOCATION_REJECTED = "LocationRejected"
    SYSTEM_ERROR = "SystemError"


class ActivityType(str, Enum):
    ATTENDANCE = "attendance"
