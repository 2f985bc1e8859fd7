from __future__ import annotations

import threading
from datetime import datetime

import pytest

from src.geo_attendance.geo_attendance.attendance.model import CheckInRequest, DeviceInfo
from src.geo_attendance.geo_attendance.attendance.rules.office_rule import SWITCH_TO_REMOTE
from src.geo_attendance.geo_attendance.core.enums import AttendanceStatus, AttendanceType, FailureReason, ValidationType
from src.geo_attendance.geo_attendance.photos.storage import UploadResult


def office_request(office, **overrides) -> CheckInRequest:
    fields = dict(
        user_id="u1",
        latitude=office.latitude,
        longitude=office.longitude,
        accuracy=5,
        attendance_type=AttendanceType.OFFICE,
    )
    fields.update(overrides)
    return CheckInRequest(**fields)


def test_office_check_in_at_office_is_recorded_as_late(make_service, attendance_repo, activity_log, head_office, fixed_now):
    svc = make_service()

    result = svc.check_in(office_request(head_office), now=fixed_now)

    assert result.success is True
    assert result.failure_reason is None
    assert result.message == "Check-in successful for Office work (15 minutes late)"
    assert result.attendance_details.is_late is True
    assert result.attendance_details.late_minutes == 15
    assert result.attendance_details.expected_check_in_time == "9:00 AM"
    assert result.attendance_details.actual_check_in_time == "9:15 AM"
    assert result.location_validation.validation_type == ValidationType.EXACT

    rec = attendance_repo.get_for_user_and_date("u1", fixed_now.date())
    assert rec is not None
    assert rec.attendance_id == result.attendance_id
    assert rec.status == AttendanceStatus.LATE
    assert rec.detected_office_id == "hq"
    assert rec.is_within_office_radius is True
    assert rec.check_out_time is None
    assert rec.working_hours is None
    assert rec.remarks == "Office: Head Office"

    titles = [e.title for e in activity_log.entries]
    assert titles == ["Location Validation - exact", "Office Check-in"]
    assert "(15 minutes late)" in activity_log.entries[1].description


def test_check_in_seconds_after_start_is_stored_as_late(make_service, attendance_repo, head_office):
    now = datetime(2024, 3, 4, 9, 0, 30)
    result = make_service().check_in(office_request(head_office), now=now)

    assert result.success is True
    assert result.attendance_details.is_late is True
    assert result.attendance_details.late_minutes == 0
    rec = attendance_repo.get_for_user_and_date("u1", now.date())
    assert rec.status == AttendanceStatus.LATE


def test_on_time_check_in_is_present_with_early_login(make_service, attendance_repo, head_office):
    now = datetime(2024, 3, 4, 8, 50)
    result = make_service().check_in(office_request(head_office), now=now)

    assert result.success is True
    assert result.message == "Check-in successful for Office work"
    assert result.attendance_details.is_early_login is True
    assert result.attendance_details.early_login_minutes == 10
    assert attendance_repo.get_for_user_and_date("u1", now.date()).status == AttendanceStatus.PRESENT


def test_unknown_department_uses_default_timing(make_service, head_office, fixed_now):
    result = make_service().check_in(office_request(head_office, user_id="u2"), now=fixed_now)

    assert result.success is True
    assert result.attendance_details.expected_check_in_time == "9:00 AM"


def test_unknown_user_is_not_found(make_service, attendance_repo, head_office, fixed_now):
    result = make_service().check_in(office_request(head_office, user_id="nobody"), now=fixed_now)

    assert result.success is False
    assert result.failure_reason == FailureReason.NOT_FOUND
    assert result.recommendations
    assert attendance_repo.get_for_user_and_date("nobody", fixed_now.date()) is None


def test_inactive_user_is_not_found(make_service, head_office, fixed_now):
    result = make_service().check_in(office_request(head_office, user_id="gone"), now=fixed_now)

    assert result.failure_reason == FailureReason.NOT_FOUND


def test_second_check_in_same_day_is_duplicate(make_service, head_office, fixed_now):
    svc = make_service()

    first = svc.check_in(office_request(head_office), now=fixed_now)
    second = svc.check_in(office_request(head_office), now=fixed_now.replace(hour=11))

    assert first.success is True
    assert second.success is False
    assert second.failure_reason == FailureReason.DUPLICATE_CHECK_IN
    assert second.message == "You have already checked in today"


def test_duplicate_detected_by_storage_constraint(make_service, attendance_repo, head_office, fixed_now, monkeypatch):
    svc = make_service()
    svc.check_in(office_request(head_office), now=fixed_now)
    # Simulate the concurrent request that read before the first insert landed.
    monkeypatch.setattr(attendance_repo, "get_for_user_and_date", lambda user_id, work_date: None)

    result = svc.check_in(office_request(head_office), now=fixed_now)

    assert result.success is False
    assert result.failure_reason == FailureReason.DUPLICATE_CHECK_IN


def test_field_work_without_customer_or_photo_lists_both(make_service, attendance_repo, head_office, fixed_now):
    req = office_request(head_office, attendance_type=AttendanceType.FIELD_WORK)

    result = make_service().check_in(req, now=fixed_now)

    assert result.success is False
    assert result.failure_reason == FailureReason.VALIDATION_FAILED
    assert result.message == "Field work check-in requires: customer name, photo"
    assert len(result.recommendations) == 2
    assert result.location_validation is not None
    assert attendance_repo.get_for_user_and_date("u1", fixed_now.date()) is None


def test_field_work_missing_only_photo(make_service, head_office, fixed_now):
    req = office_request(head_office, attendance_type=AttendanceType.FIELD_WORK, customer_name="Acme Corp")

    result = make_service().check_in(req, now=fixed_now)

    assert result.message == "Field work check-in requires: photo"


def test_field_work_away_from_office_is_accepted_with_photo(
    make_service, attendance_repo, fake_photos, head_office, meters_north, fixed_now
):
    req = office_request(
        head_office,
        latitude=meters_north(head_office.latitude, 8000),
        attendance_type=AttendanceType.FIELD_WORK,
        customer_name="Acme Corp",
        image_data="aGVsbG8=",
    )

    result = make_service(photos=fake_photos).check_in(req, now=fixed_now)

    assert result.success is True
    assert result.message == "Check-in successful for Field Work work (15 minutes late)"
    assert result.warnings == ()
    assert fake_photos.calls == [("u1", fixed_now)]

    rec = attendance_repo.get_for_user_and_date("u1", fixed_now.date())
    assert rec.check_in_image_url == "https://cdn.example/photo.jpg"
    assert rec.location_validation_type == ValidationType.FAILED
    assert rec.is_within_office_radius is False
    assert rec.customer_name == "Acme Corp"
    assert rec.remarks == "Field work at Acme Corp"


def test_remote_without_reason_is_rejected(make_service, head_office, fixed_now):
    result = make_service().check_in(office_request(head_office, attendance_type=AttendanceType.REMOTE, reason="  "), now=fixed_now)

    assert result.success is False
    assert result.failure_reason == FailureReason.VALIDATION_FAILED
    assert result.message == "Reason is required for remote work"


def test_remote_with_reason_is_accepted_anywhere(make_service, attendance_repo, head_office, meters_north, fixed_now):
    req = office_request(
        head_office,
        latitude=meters_north(head_office.latitude, 20_000),
        attendance_type=AttendanceType.REMOTE,
        reason="Waiting for a delivery",
    )

    result = make_service().check_in(req, now=fixed_now)

    assert result.success is True
    rec = attendance_repo.get_for_user_and_date("u1", fixed_now.date())
    assert rec.attendance_type == AttendanceType.REMOTE
    assert rec.remarks == "Waiting for a delivery"


def test_office_check_in_two_km_away_is_location_rejected(make_service, attendance_repo, head_office, meters_north, fixed_now):
    req = office_request(head_office, latitude=meters_north(head_office.latitude, 2000), accuracy=10)

    result = make_service().check_in(req, now=fixed_now)

    assert result.success is False
    assert result.failure_reason == FailureReason.LOCATION_REJECTED
    assert result.message.startswith("Office check-in failed: Outside office premises")
    assert SWITCH_TO_REMOTE in result.recommendations
    assert result.location_validation.is_valid is False
    assert result.location_validation.distance_m == 2000
    assert attendance_repo.get_for_user_and_date("u1", fixed_now.date()) is None


def test_desktop_device_gets_mobile_hint(make_service, head_office, meters_north, fixed_now):
    req = office_request(
        head_office,
        latitude=meters_north(head_office.latitude, 2000),
        device_info=DeviceInfo(device_type="desktop", user_agent="Mozilla/5.0"),
    )

    result = make_service().check_in(req, now=fixed_now)

    assert any("mobile device" in r for r in result.recommendations)


def test_indoor_compensation_is_noted_in_remarks(make_service, attendance_repo, head_office, meters_north, fixed_now):
    req = office_request(head_office, latitude=meters_north(head_office.latitude, 220), accuracy=300)

    result = make_service().check_in(req, now=fixed_now)

    assert result.success is True
    assert "GPS accuracy may be limited indoors - this is normal" in result.recommendations
    rec = attendance_repo.get_for_user_and_date("u1", fixed_now.date())
    assert rec.remarks == "Indoor GPS detection | Office: Head Office"


class FailingPhotoStorage:
    def upload(self, image_data, *, user_id, taken_at):
        return UploadResult(success=False, error="HTTP 500")


class RaisingPhotoStorage:
    def upload(self, image_data, *, user_id, taken_at):
        raise RuntimeError("socket closed")


class SlowPhotoStorage:
    def __init__(self):
        self.release = threading.Event()

    def upload(self, image_data, *, user_id, taken_at):
        self.release.wait(timeout=5)
        return UploadResult(success=True, url="https://cdn.example/late.jpg")


def test_photo_upload_failure_is_a_warning(make_service, attendance_repo, head_office, fixed_now):
    result = make_service(photos=FailingPhotoStorage()).check_in(office_request(head_office, image_data="aGVsbG8="), now=fixed_now)

    assert result.success is True
    assert result.warnings == ("Photo upload failed; attendance was recorded without the photo",)
    assert attendance_repo.get_for_user_and_date("u1", fixed_now.date()).check_in_image_url is None


def test_photo_upload_exception_is_a_warning(make_service, head_office, fixed_now):
    result = make_service(photos=RaisingPhotoStorage()).check_in(office_request(head_office, image_data="aGVsbG8="), now=fixed_now)

    assert result.success is True
    assert len(result.warnings) == 1


def test_photo_upload_is_bounded_by_timeout(make_service, head_office, fixed_now):
    slow = SlowPhotoStorage()
    svc = make_service(photos=slow, photo_timeout_seconds=0.05)
    try:
        result = svc.check_in(office_request(head_office, image_data="aGVsbG8="), now=fixed_now)
    finally:
        slow.release.set()

    assert result.success is True
    assert result.warnings == ("Photo upload timed out; attendance was recorded without the photo",)


def test_close_shuts_down_the_upload_pool(make_service, fake_photos, head_office, fixed_now):
    svc = make_service(photos=fake_photos)
    svc.check_in(office_request(head_office, image_data="aGVsbG8="), now=fixed_now)
    pool = svc._photo_executor

    svc.close()
    svc.close()

    with pytest.raises(RuntimeError):
        pool.submit(print)

    # A later upload gets a fresh pool.
    result = svc.check_in(office_request(head_office, user_id="u2", image_data="aGVsbG8="), now=fixed_now)
    assert result.success is True
    assert result.warnings == ()
    assert len(fake_photos.calls) == 2
    svc.close()


def test_photo_without_storage_is_a_warning(make_service, head_office, fixed_now):
    result = make_service().check_in(office_request(head_office, image_data="aGVsbG8="), now=fixed_now)

    assert result.success is True
    assert result.warnings == ("Photo storage is not configured; the photo was not saved",)


def test_storage_error_becomes_system_error(make_service, attendance_repo, head_office, fixed_now, monkeypatch):
    def boom(record):
        raise ConnectionError("MySQL server has gone away")

    monkeypatch.setattr(attendance_repo, "create_checkin", boom)

    result = make_service().check_in(office_request(head_office), now=fixed_now)

    assert result.success is False
    assert result.failure_reason == FailureReason.SYSTEM_ERROR
    assert result.recommendations == ("Please try again or contact support",)


def test_activity_log_failure_does_not_fail_check_in(make_service, head_office, fixed_now):
    class BrokenActivity:
        def create(self, entry):
            raise RuntimeError("audit store down")

    result = make_service(activity=BrokenActivity()).check_in(office_request(head_office), now=fixed_now)

    assert result.success is True


def test_injected_clock_is_used_when_now_is_omitted(make_service, head_office):
    svc = make_service(clock=lambda: datetime(2024, 3, 4, 9, 42))

    result = svc.check_in(office_request(head_office))

    assert result.attendance_details.late_minutes == 42
