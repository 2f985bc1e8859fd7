from __future__ import annotations

import math
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional

import pytest

from src.geo_attendance.geo_attendance.attendance.model import AttendanceRecord, CheckOutUpdate
from src.geo_attendance.geo_attendance.attendance.service import AttendanceService
from src.geo_attendance.geo_attendance.core.constants import EARTH_RADIUS_M
from src.geo_attendance.geo_attendance.core.enums import Department
from src.geo_attendance.geo_attendance.core.exceptions import DuplicateCheckInError
from src.geo_attendance.geo_attendance.location.model import OfficeLocation
from src.geo_attendance.geo_attendance.location.validator import LocationValidator
from src.geo_attendance.geo_attendance.photos.storage import UploadResult
from src.geo_attendance.geo_attendance.timing.model import DepartmentTiming, TimingCatalogue
from src.geo_attendance.geo_attendance.timing.resolver import TimingResolver
from src.geo_attendance.geo_attendance.users.model import User

HEAD_OFFICE = OfficeLocation(
    office_id="hq",
    name="Head Office",
    latitude=13.0826802,
    longitude=80.2707184,
    radius_m=100,
)


def north_of(lat: float, meters: float) -> float:
    """Latitude `meters` due north (exact along a meridian for haversine)."""
    return lat + math.degrees(meters / EARTH_RADIUS_M)


class InMemoryUsers:
    def __init__(self, *users: User):
        self.users_by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.users_by_id.get(user_id)


class InMemoryAttendance:
    def __init__(self):
        self._by_user_date: dict[tuple[str, date], AttendanceRecord] = {}
        self._id = 0

    def get_for_user_and_date(self, user_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return self._by_user_date.get((user_id, work_date))

    def create_checkin(self, record: AttendanceRecord) -> int:
        key = (record.user_id, record.work_date)
        if key in self._by_user_date:
            raise DuplicateCheckInError("You have already checked in today", ["You can only check in once per day"])
        self._id += 1
        self._by_user_date[key] = replace(record, attendance_id=self._id)
        return self._id

    def update_checkout(self, *, attendance_id: int, update: CheckOutUpdate) -> bool:
        for key, rec in self._by_user_date.items():
            if rec.attendance_id == attendance_id:
                if rec.is_closed:
                    return False
                self._by_user_date[key] = replace(
                    rec,
                    check_out_time=update.check_out_time,
                    check_out_latitude=update.check_out_latitude,
                    check_out_longitude=update.check_out_longitude,
                    working_hours=update.working_hours,
                    overtime_hours=update.overtime_hours,
                    is_early_checkout=update.is_early_checkout,
                    early_checkout_minutes=update.early_checkout_minutes,
                    check_out_reason=update.check_out_reason,
                    ot_reason=update.ot_reason,
                    check_out_image_url=update.check_out_image_url,
                )
                return True
        return False

    def list_for_user_between(self, user_id: str, *, start_date: date, end_date: date):
        items = [r for (uid, d), r in self._by_user_date.items() if uid == user_id and start_date <= d <= end_date]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items

    def add(self, record: AttendanceRecord) -> None:
        self.create_checkin(record)


class InMemoryActivity:
    def __init__(self):
        self.entries = []

    def create(self, entry) -> int:
        self.entries.append(entry)
        return len(self.entries)


class FakePhotoStorage:
    def __init__(self, result: Optional[UploadResult] = None, error: Optional[Exception] = None):
        self.result = result or UploadResult(success=True, url="https://cdn.example/photo.jpg", public_id="p")
        self.error = error
        self.calls = []

    def upload(self, image_data: str, *, user_id: str, taken_at: datetime) -> UploadResult:
        self.calls.append((user_id, taken_at))
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def fixed_now() -> datetime:
    # Monday, 15 minutes after the sales check-in time.
    return datetime(2024, 3, 4, 9, 15, 0)


@pytest.fixture
def timing_resolver() -> TimingResolver:
    return TimingResolver(
        TimingCatalogue.from_timings(
            [
                DepartmentTiming(Department.OPERATIONS, "9:00 AM", "6:00 PM", 8),
                DepartmentTiming(Department.SALES, "9:00 AM", "5:00 PM", 8),
                DepartmentTiming(Department.HOUSEKEEPING, "8:00 AM", "5:00 PM", 8),
            ]
        )
    )


@pytest.fixture
def location_validator() -> LocationValidator:
    return LocationValidator([HEAD_OFFICE])


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers(
        User(user_id="u1", display_name="Asha", department="sales"),
        User(user_id="u2", display_name="Ravi", department="unknown-dept"),
        User(user_id="gone", display_name="Former", department="sales", is_active=False),
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def activity_log() -> InMemoryActivity:
    return InMemoryActivity()


@pytest.fixture
def make_service(attendance_repo, users, timing_resolver, location_validator, activity_log) -> Callable[..., AttendanceService]:
    def _make(photos=None, **kwargs) -> AttendanceService:
        return AttendanceService(
            kwargs.pop("attendance", attendance_repo),
            users,
            timing_resolver,
            location_validator,
            kwargs.pop("activity", activity_log),
            photos,
            **kwargs,
        )

    return _make


@pytest.fixture
def head_office() -> OfficeLocation:
    return HEAD_OFFICE


@pytest.fixture
def meters_north() -> Callable[[float, float], float]:
    return north_of


@pytest.fixture
def fake_photos() -> FakePhotoStorage:
    return FakePhotoStorage()
