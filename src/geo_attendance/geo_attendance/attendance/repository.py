from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, CheckOutUpdate


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, user_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(self, record: AttendanceRecord) -> int:
        """Insert a new open record.

        Raises DuplicateCheckInError when a record for (user, date) already exists.
        """

        raise NotImplementedError

    def update_checkout(self, *, attendance_id: int, update: CheckOutUpdate) -> bool:
        raise NotImplementedError

    def list_for_user_between(self, user_id: str, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
