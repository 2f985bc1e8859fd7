from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.enums import AttendanceStatus, AttendanceType, ValidationType
from ..core.exceptions import DuplicateCheckInError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from .model import AttendanceRecord, CheckOutUpdate
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, work_date, attendance_type, status,
    check_in_time, check_in_latitude, check_in_longitude, location_accuracy,
    is_late, late_minutes, is_early_login, early_login_minutes,
    location_validation_type, location_confidence, detected_office_id, distance_from_office,
    is_within_office_radius, reason, customer_name, check_in_image_url, remarks,
    check_out_time, check_out_latitude, check_out_longitude, check_out_image_url,
    working_hours, overtime_hours, is_early_checkout, early_checkout_minutes,
    check_out_reason, ot_reason
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    distance = r.get("distance_from_office")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=str(r["user_id"]),
        work_date=r["work_date"],
        attendance_type=AttendanceType(r["attendance_type"]),
        status=AttendanceStatus(r["status"]),
        check_in_time=r["check_in_time"],
        check_in_latitude=float(r["check_in_latitude"]),
        check_in_longitude=float(r["check_in_longitude"]),
        location_accuracy=float(r["location_accuracy"]),
        is_late=bool(r.get("is_late")),
        late_minutes=int(r.get("late_minutes") or 0),
        is_early_login=bool(r.get("is_early_login")),
        early_login_minutes=int(r.get("early_login_minutes") or 0),
        location_validation_type=ValidationType(r.get("location_validation_type") or ValidationType.FAILED.value),
        location_confidence=float(r.get("location_confidence") or 0),
        detected_office_id=r.get("detected_office_id"),
        distance_from_office=int(distance) if distance is not None else None,
        is_within_office_radius=bool(r.get("is_within_office_radius")),
        reason=r.get("reason"),
        customer_name=r.get("customer_name"),
        check_in_image_url=r.get("check_in_image_url"),
        remarks=r.get("remarks"),
        check_out_time=r.get("check_out_time"),
        check_out_latitude=as_float(r.get("check_out_latitude")),
        check_out_longitude=as_float(r.get("check_out_longitude")),
        check_out_image_url=r.get("check_out_image_url"),
        working_hours=as_float(r.get("working_hours")),
        overtime_hours=as_float(r.get("overtime_hours")),
        is_early_checkout=bool(r.get("is_early_checkout")),
        early_checkout_minutes=int(r.get("early_checkout_minutes") or 0),
        check_out_reason=r.get("check_out_reason"),
        ot_reason=r.get("ot_reason"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND work_date=%s
                """,
                (user_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_checkin(self, record: AttendanceRecord) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        user_id, work_date, attendance_type, status,
                        check_in_time, check_in_latitude, check_in_longitude, location_accuracy,
                        is_late, late_minutes, is_early_login, early_login_minutes,
                        location_validation_type, location_confidence, detected_office_id, distance_from_office,
                        is_within_office_radius, reason, customer_name, check_in_image_url, remarks
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.user_id,
                        record.work_date,
                        record.attendance_type.value,
                        record.status.value,
                        record.check_in_time,
                        record.check_in_latitude,
                        record.check_in_longitude,
                        record.location_accuracy,
                        int(record.is_late),
                        record.late_minutes,
                        int(record.is_early_login),
                        record.early_login_minutes,
                        record.location_validation_type.value,
                        record.location_confidence,
                        record.detected_office_id,
                        record.distance_from_office,
                        int(record.is_within_office_radius),
                        record.reason,
                        record.customer_name,
                        record.check_in_image_url,
                        record.remarks,
                    ),
                )
                return int(cur.lastrowid)
        except mysql_errors.IntegrityError as e:
            # uq_attendance_user_date: a concurrent check-in won the race.
            raise DuplicateCheckInError(
                "You have already checked in today",
                ["You can only check in once per day"],
            ) from e

    def update_checkout(self, *, attendance_id: int, update: CheckOutUpdate) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, check_out_latitude=%s, check_out_longitude=%s,
                    working_hours=%s, overtime_hours=%s,
                    is_early_checkout=%s, early_checkout_minutes=%s,
                    check_out_reason=%s, ot_reason=%s, check_out_image_url=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (
                    update.check_out_time,
                    update.check_out_latitude,
                    update.check_out_longitude,
                    update.working_hours,
                    update.overtime_hours,
                    int(update.is_early_checkout),
                    update.early_checkout_minutes,
                    update.check_out_reason,
                    update.ot_reason,
                    update.check_out_image_url,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def list_for_user_between(self, user_id: str, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date DESC
                """,
                (user_id, start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]
