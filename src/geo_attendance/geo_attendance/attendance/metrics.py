from __future__ import annotations

from datetime import date

from ..core.exceptions import ValidationError
from .model import AttendanceMetrics
from .repository import AttendanceRepository


class AttendanceMetricsService:
    """Use case: summarize a user's attendance over a date range."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def summarize(self, user_id: str, *, start: date, end: date) -> AttendanceMetrics:
        if end < start:
            raise ValidationError("End date must not be before start date", ["Swap the start and end dates"])

        records = self._attendance.list_for_user_between(user_id, start_date=start, end_date=end)

        total_days = len(records)
        total_working = sum(r.working_hours or 0.0 for r in records)
        total_overtime = sum(r.overtime_hours or 0.0 for r in records)
        late_arrivals = sum(1 for r in records if r.is_late)

        return AttendanceMetrics(
            total_days=total_days,
            total_working_hours=round(total_working, 2),
            total_overtime_hours=round(total_overtime, 2),
            average_working_hours=round(total_working / total_days, 2) if total_days else 0.0,
            late_arrivals=late_arrivals,
            punctuality_rate=round((total_days - late_arrivals) / total_days * 100) if total_days else 100,
        )
