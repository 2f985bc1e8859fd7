from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .activity.mysql_activity_repository import MySQLActivityLogRepository
from .attendance.factory import AttendanceRuleFactory
from .attendance.metrics import AttendanceMetricsService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_PHOTO_FOLDER, DEFAULT_PHOTO_UPLOAD_TIMEOUT_SECONDS
from .core.enums import Department
from .database.connection import DBConfig, DatabaseConnection
from .location.mysql_office_repository import MySQLOfficeLocationRepository
from .location.validator import LocationValidator
from .photos.storage import CloudinaryConfig, CloudinaryPhotoStorage, PhotoStorage
from .timing.model import TimingCatalogue
from .timing.mysql_timing_repository import MySQLDepartmentTimingRepository
from .timing.resolver import TimingResolver
from .users.mysql_user_repository import MySQLUserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    locations: LocationValidator
    timing: TimingResolver

    attendance_service: AttendanceService
    metrics_service: AttendanceMetricsService

    def close(self) -> None:
        self.attendance_service.close()


def build_photo_storage(cloudinary: Optional[Mapping[str, Any]], *, timeout_seconds: float) -> Optional[PhotoStorage]:
    """Cloudinary storage when fully configured, otherwise None (photos are skipped with a warning)."""
    if not cloudinary:
        return None
    cloud_name = cloudinary.get("cloud_name")
    api_key = cloudinary.get("api_key")
    api_secret = cloudinary.get("api_secret")
    if not (cloud_name and api_key and api_secret):
        logger.warning("[container] CLOUDINARY settings incomplete; photo uploads disabled")
        return None
    config = CloudinaryConfig(
        cloud_name=str(cloud_name),
        api_key=str(api_key),
        api_secret=str(api_secret),
        folder=str(cloudinary.get("folder") or DEFAULT_PHOTO_FOLDER),
    )
    return CloudinaryPhotoStorage(config, timeout_seconds=timeout_seconds)


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    default_department = Department.parse(getattr(settings, "DEFAULT_DEPARTMENT", None)) or Department.OPERATIONS
    photo_timeout = float(getattr(settings, "PHOTO_UPLOAD_TIMEOUT_SECONDS", DEFAULT_PHOTO_UPLOAD_TIMEOUT_SECONDS))

    # Reference catalogues are loaded once and shared read-only.
    offices = MySQLOfficeLocationRepository(conn).list_active()
    timings = MySQLDepartmentTimingRepository(conn).list_all()

    locations = LocationValidator(offices)
    timing = TimingResolver(TimingCatalogue.from_timings(timings, default_department=default_department))

    attendance_repo = MySQLAttendanceRepository(conn)
    attendance_service = AttendanceService(
        attendance_repo,
        MySQLUserRepository(conn),
        timing,
        locations,
        MySQLActivityLogRepository(conn),
        build_photo_storage(getattr(settings, "CLOUDINARY", None), timeout_seconds=photo_timeout),
        rule_factory=AttendanceRuleFactory(),
        photo_timeout_seconds=photo_timeout,
    )

    return Container(
        conn=conn,
        locations=locations,
        timing=timing,
        attendance_service=attendance_service,
        metrics_service=AttendanceMetricsService(attendance_repo),
    )
