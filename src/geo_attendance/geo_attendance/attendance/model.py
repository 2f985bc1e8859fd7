from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import AttendanceStatus, AttendanceType, FailureReason, ValidationType
from ..location.model import LocationValidationResult


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per (user, calendar day).

    Check-out fields stay None until the single check-out happens.
    """

    attendance_id: Optional[int]
    user_id: str
    work_date: date
    attendance_type: AttendanceType
    status: AttendanceStatus
    check_in_time: datetime
    check_in_latitude: float
    check_in_longitude: float
    location_accuracy: float
    is_late: bool = False
    late_minutes: int = 0
    is_early_login: bool = False
    early_login_minutes: int = 0
    location_validation_type: ValidationType = ValidationType.FAILED
    location_confidence: float = 0.0
    detected_office_id: Optional[str] = None
    distance_from_office: Optional[int] = None
    is_within_office_radius: bool = False
    reason: Optional[str] = None
    customer_name: Optional[str] = None
    check_in_image_url: Optional[str] = None
    remarks: Optional[str] = None
    check_out_time: Optional[datetime] = None
    check_out_latitude: Optional[float] = None
    check_out_longitude: Optional[float] = None
    check_out_image_url: Optional[str] = None
    working_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    is_early_checkout: bool = False
    early_checkout_minutes: int = 0
    check_out_reason: Optional[str] = None
    ot_reason: Optional[str] = None

    @property
    def is_closed(self) -> bool:
        return self.check_out_time is not None


@dataclass(frozen=True)
class CheckOutUpdate:
    """Fields written by the one-time check-out mutation."""

    check_out_time: datetime
    check_out_latitude: Optional[float]
    check_out_longitude: Optional[float]
    working_hours: float
    overtime_hours: float
    is_early_checkout: bool
    early_checkout_minutes: int
    check_out_reason: Optional[str] = None
    ot_reason: Optional[str] = None
    check_out_image_url: Optional[str] = None


@dataclass(frozen=True)
class DeviceInfo:
    device_type: str
    user_agent: Optional[str] = None
    location_capability: Optional[str] = None


@dataclass(frozen=True)
class CheckInRequest:
    user_id: str
    latitude: float
    longitude: float
    accuracy: float
    attendance_type: AttendanceType
    reason: Optional[str] = None
    customer_name: Optional[str] = None
    image_data: Optional[str] = None
    device_info: Optional[DeviceInfo] = None


@dataclass(frozen=True)
class CheckOutRequest:
    user_id: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    reason: Optional[str] = None
    ot_reason: Optional[str] = None
    image_data: Optional[str] = None


@dataclass(frozen=True)
class LatenessDetail:
    is_late: bool
    late_minutes: int
    is_early_login: bool
    early_login_minutes: int
    expected_check_in_time: str
    actual_check_in_time: str


@dataclass(frozen=True)
class CheckInResult:
    success: bool
    message: str
    failure_reason: Optional[FailureReason] = None
    attendance_id: Optional[int] = None
    location_validation: Optional[LocationValidationResult] = None
    attendance_details: Optional[LatenessDetail] = None
    recommendations: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @classmethod
    def failure(
        cls,
        reason: FailureReason,
        message: str,
        *,
        recommendations: Tuple[str, ...] = (),
        location_validation: Optional[LocationValidationResult] = None,
    ) -> "CheckInResult":
        return cls(
            success=False,
            message=message,
            failure_reason=reason,
            location_validation=location_validation,
            recommendations=recommendations,
        )


@dataclass(frozen=True)
class CheckOutResult:
    success: bool
    message: str
    failure_reason: Optional[FailureReason] = None
    attendance_id: Optional[int] = None
    working_hours: float = 0.0
    overtime_hours: float = 0.0
    total_hours: float = 0.0
    is_early_checkout: bool = False
    early_checkout_minutes: int = 0
    recommendations: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @classmethod
    def failure(cls, reason: FailureReason, message: str, *, recommendations: Tuple[str, ...] = ()) -> "CheckOutResult":
        return cls(success=False, message=message, failure_reason=reason, recommendations=recommendations)


@dataclass(frozen=True)
class AttendanceMetrics:
    """Per-user summary over a date range."""

    total_days: int
    total_working_hours: float
    total_overtime_hours: float
    average_working_hours: float
    late_arrivals: int
    punctuality_rate: int
