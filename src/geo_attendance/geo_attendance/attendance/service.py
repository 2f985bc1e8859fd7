from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from datetime import datetime
from typing import Callable, Optional, Tuple

from ..activity.model import ActivityLogEntry
from ..activity.repository import ActivityLogRepository
from ..common.datetime_utils import format_12h, now_local
from ..common.validators import is_blank
from ..core.constants import DEFAULT_PHOTO_UPLOAD_TIMEOUT_SECONDS
from ..core.enums import ActivityType, AttendanceStatus, AttendanceType, FailureReason, ValidationType
from ..core.exceptions import (
    AlreadyCheckedOutError,
    DomainError,
    DuplicateCheckInError,
    NoOpenCheckInError,
    UserNotFoundError,
)
from ..location.model import GeoFix, LocationValidationResult
from ..location.validator import LocationValidator
from ..photos.storage import PhotoStorage
from ..timing.resolver import TimingResolver
from ..users.repository import UserRepository
from .factory import AttendanceRuleFactory
from .model import (
    AttendanceRecord,
    CheckInRequest,
    CheckInResult,
    CheckOutRequest,
    CheckOutResult,
    CheckOutUpdate,
    LatenessDetail,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

SYSTEM_ERROR_HINTS = ("Please try again or contact support",)


class AttendanceService:
    """Check-in/check-out orchestrator.

    Per user and day the record moves NoRecord -> CheckedIn -> CheckedOut.
    Both operations return typed results; nothing raised by collaborators
    escapes ``check_in`` / ``check_out``.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        timing: TimingResolver,
        locations: LocationValidator,
        activity: ActivityLogRepository,
        photos: Optional[PhotoStorage] = None,
        *,
        rule_factory: Optional[AttendanceRuleFactory] = None,
        clock: Callable[[], datetime] = now_local,
        photo_timeout_seconds: float = DEFAULT_PHOTO_UPLOAD_TIMEOUT_SECONDS,
    ):
        self._attendance = attendance
        self._users = users
        self._timing = timing
        self._locations = locations
        self._activity = activity
        self._photos = photos
        self._rules = rule_factory or AttendanceRuleFactory()
        self._clock = clock
        self._photo_timeout = float(photo_timeout_seconds)
        self._photo_executor: Optional[ThreadPoolExecutor] = None

    # ---- check-in -------------------------------------------------------

    def check_in(self, request: CheckInRequest, *, now: Optional[datetime] = None) -> CheckInResult:
        now = now or self._clock()
        try:
            return self._check_in(request, now)
        except DomainError as e:
            logger.info("[attendance] check-in rejected user_id=%s reason=%s: %s", request.user_id, e.reason.value, e.message)
            return CheckInResult.failure(e.reason, e.message, recommendations=e.recommendations)
        except Exception:
            logger.exception("[attendance] check-in failed for user_id=%s", request.user_id)
            return CheckInResult.failure(
                FailureReason.SYSTEM_ERROR,
                "Failed to process check-in due to system error",
                recommendations=SYSTEM_ERROR_HINTS,
            )

    def _check_in(self, request: CheckInRequest, now: datetime) -> CheckInResult:
        user = self._users.get_by_id(request.user_id)
        if not user or not user.is_active:
            raise UserNotFoundError("User not found", ["Contact system administrator"])

        today = now.date()
        if self._attendance.get_for_user_and_date(request.user_id, today):
            raise DuplicateCheckInError("You have already checked in today", ["You can only check in once per day"])

        location = self._locations.validate(GeoFix(request.latitude, request.longitude, request.accuracy))

        try:
            self._rules.for_type(request.attendance_type).check(request, location)
        except DomainError as e:
            logger.info(
                "[attendance] %s check-in rejected user_id=%s: %s",
                request.attendance_type.value,
                request.user_id,
                e.message,
            )
            return CheckInResult.failure(
                e.reason,
                e.message,
                recommendations=e.recommendations,
                location_validation=location,
            )

        timing = self._timing.timing_for(user.department)
        lateness = self._timing.compute_lateness(now, timing.check_in_time)

        image_url, warnings = self._upload_photo(request.image_data, user_id=request.user_id, taken_at=now)

        record = AttendanceRecord(
            attendance_id=None,
            user_id=request.user_id,
            work_date=today,
            attendance_type=request.attendance_type,
            status=AttendanceStatus.LATE if lateness.is_late else AttendanceStatus.PRESENT,
            check_in_time=now,
            check_in_latitude=request.latitude,
            check_in_longitude=request.longitude,
            location_accuracy=request.accuracy,
            is_late=lateness.is_late,
            late_minutes=lateness.late_minutes,
            is_early_login=lateness.is_early_login,
            early_login_minutes=lateness.early_login_minutes,
            location_validation_type=location.validation_type,
            location_confidence=location.confidence,
            detected_office_id=location.detected_office.office_id if location.detected_office else None,
            distance_from_office=location.distance_m,
            is_within_office_radius=location.is_valid and request.attendance_type is AttendanceType.OFFICE,
            reason=request.reason,
            customer_name=request.customer_name,
            check_in_image_url=image_url,
            remarks=self._build_remarks(request, location),
        )
        attendance_id = self._attendance.create_checkin(record)

        late_note = f" ({lateness.late_minutes} minutes late)" if lateness.is_late else ""
        self._log_activity(
            ActivityLogEntry(
                type=ActivityType.ATTENDANCE,
                title=f"Location Validation - {location.validation_type.value}",
                description=(
                    f"{request.attendance_type.value} check-in validation: {location.message} "
                    f"(Confidence: {round(location.confidence * 100)}%)"
                ),
                entity_id=request.user_id,
                entity_type="user",
                user_id=request.user_id,
                created_at=now,
            )
        )
        self._log_activity(
            ActivityLogEntry(
                type=ActivityType.ATTENDANCE,
                title=f"{request.attendance_type.display_name} Check-in",
                description=(
                    f"{user.display_name} checked in for {request.attendance_type.value} work{late_note}"
                    f" - Location confidence: {round(location.confidence * 100)}%"
                ),
                entity_id=str(attendance_id),
                entity_type="attendance",
                user_id=request.user_id,
                created_at=now,
            )
        )

        logger.info(
            "[attendance] check-in user_id=%s type=%s late=%s validation=%s",
            request.user_id,
            request.attendance_type.value,
            lateness.late_minutes,
            location.validation_type.value,
        )
        return CheckInResult(
            success=True,
            message=f"Check-in successful for {request.attendance_type.display_name} work{late_note}",
            attendance_id=attendance_id,
            location_validation=location,
            attendance_details=LatenessDetail(
                is_late=lateness.is_late,
                late_minutes=lateness.late_minutes,
                is_early_login=lateness.is_early_login,
                early_login_minutes=lateness.early_login_minutes,
                expected_check_in_time=timing.check_in_time,
                actual_check_in_time=format_12h(now),
            ),
            recommendations=location.recommendations,
            warnings=warnings,
        )

    # ---- check-out ------------------------------------------------------

    def check_out(self, request: CheckOutRequest, *, now: Optional[datetime] = None) -> CheckOutResult:
        now = now or self._clock()
        try:
            return self._check_out(request, now)
        except DomainError as e:
            logger.info("[attendance] check-out rejected user_id=%s reason=%s: %s", request.user_id, e.reason.value, e.message)
            return CheckOutResult.failure(e.reason, e.message, recommendations=e.recommendations)
        except Exception:
            logger.exception("[attendance] check-out failed for user_id=%s", request.user_id)
            return CheckOutResult.failure(
                FailureReason.SYSTEM_ERROR,
                "Failed to process check-out due to system error",
                recommendations=SYSTEM_ERROR_HINTS,
            )

    def _check_out(self, request: CheckOutRequest, now: datetime) -> CheckOutResult:
        record = self._attendance.get_for_user_and_date(request.user_id, now.date())
        if not record:
            raise NoOpenCheckInError("No check-in record found for today", ["Please check in before checking out"])
        if record.is_closed:
            raise AlreadyCheckedOutError("You have already checked out for today", ["Your attendance for today is complete"])

        user = self._users.get_by_id(request.user_id)
        timing = self._timing.timing_for(user.department if user else None)
        hours = self._timing.compute_working_hours(record.check_in_time, now, timing.working_hours)
        early = self._timing.compute_early_checkout(now, timing.check_out_time)

        image_url, warnings = self._upload_photo(request.image_data, user_id=request.user_id, taken_at=now)

        has_coords = request.latitude is not None and request.longitude is not None
        working_hours = round(hours.regular_hours, 2)
        overtime_hours = round(hours.overtime_hours, 2)
        total_hours = round(hours.total_hours, 2)

        updated = self._attendance.update_checkout(
            attendance_id=record.attendance_id,
            update=CheckOutUpdate(
                check_out_time=now,
                check_out_latitude=request.latitude if has_coords else None,
                check_out_longitude=request.longitude if has_coords else None,
                working_hours=working_hours,
                overtime_hours=overtime_hours,
                is_early_checkout=early.is_early_checkout,
                early_checkout_minutes=early.early_checkout_minutes,
                check_out_reason=request.reason or None,
                ot_reason=request.ot_reason or None,
                check_out_image_url=image_url,
            ),
        )
        if not updated:
            # Another request closed the record between our read and write.
            raise AlreadyCheckedOutError("You have already checked out for today", ["Your attendance for today is complete"])

        summary = f"{total_hours:g} hours"
        if hours.overtime_minutes > 0:
            summary += f" ({overtime_hours:g}h overtime)"
        if early.is_early_checkout:
            summary += f" ({early.early_checkout_minutes} minutes early)"

        display_name = user.display_name if user else request.user_id
        self._log_activity(
            ActivityLogEntry(
                type=ActivityType.ATTENDANCE,
                title="Check-out",
                description=f"{display_name} checked out after {summary}",
                entity_id=str(record.attendance_id),
                entity_type="attendance",
                user_id=request.user_id,
                created_at=now,
            )
        )

        recommendations: Tuple[str, ...] = ()
        if hours.overtime_minutes > 0 and is_blank(request.ot_reason):
            recommendations = ("Add an overtime reason so your manager can approve the extra hours",)

        logger.info(
            "[attendance] check-out user_id=%s total=%s regular=%s overtime=%s",
            request.user_id,
            total_hours,
            working_hours,
            overtime_hours,
        )
        return CheckOutResult(
            success=True,
            message=f"Check-out successful. Total working time: {summary}",
            attendance_id=record.attendance_id,
            working_hours=working_hours,
            overtime_hours=overtime_hours,
            total_hours=total_hours,
            is_early_checkout=early.is_early_checkout,
            early_checkout_minutes=early.early_checkout_minutes,
            recommendations=recommendations,
            warnings=warnings,
        )

    def close(self) -> None:
        """Stop the photo upload pool; a later upload starts a fresh one."""
        executor, self._photo_executor = self._photo_executor, None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)

    # ---- helpers --------------------------------------------------------

    def _upload_photo(self, image_data: Optional[str], *, user_id: str, taken_at: datetime) -> Tuple[Optional[str], Tuple[str, ...]]:
        """Best-effort upload; failures come back as warnings."""
        if is_blank(image_data):
            return None, ()
        if self._photos is None:
            logger.warning("[attendance] photo received for user_id=%s but no photo storage is configured", user_id)
            return None, ("Photo storage is not configured; the photo was not saved",)

        if self._photo_executor is None:
            self._photo_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="photo-upload")

        future = self._photo_executor.submit(self._photos.upload, image_data, user_id=user_id, taken_at=taken_at)
        try:
            result = future.result(timeout=self._photo_timeout)
        except FutureTimeoutError:
            future.cancel()
            logger.warning("[attendance] photo upload timed out after %ss for user_id=%s", self._photo_timeout, user_id)
            return None, ("Photo upload timed out; attendance was recorded without the photo",)
        except Exception:
            logger.exception("[attendance] photo upload raised for user_id=%s", user_id)
            return None, ("Photo upload failed; attendance was recorded without the photo",)

        if not result.success:
            logger.warning("[attendance] photo upload failed for user_id=%s: %s", user_id, result.error)
            return None, ("Photo upload failed; attendance was recorded without the photo",)
        return result.url, ()

    def _log_activity(self, entry: ActivityLogEntry) -> None:
        try:
            self._activity.create(entry)
        except Exception:
            logger.exception("[attendance] activity log write failed: %s", entry.title)

    @staticmethod
    def _build_remarks(request: CheckInRequest, location: LocationValidationResult) -> str:
        parts: list[str] = []
        if request.attendance_type is AttendanceType.FIELD_WORK and not is_blank(request.customer_name):
            parts.append(f"Field work at {request.customer_name.strip()}")
        if not is_blank(request.reason):
            parts.append(request.reason.strip())

        if location.validation_type is ValidationType.INDOOR_COMPENSATION:
            parts.append("Indoor GPS detection")
        elif location.validation_type is ValidationType.PROXIMITY_BASED:
            parts.append("Proximity-based location validation")

        if location.detected_office:
            parts.append(f"Office: {location.detected_office.name}")
        return " | ".join(parts) or "Standard check-in"
