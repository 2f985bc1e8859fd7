from __future__ import annotations

import logging
from datetime import datetime

from ..common.datetime_utils import floor_minutes_between, parse_12h_time, time_on
from ..core.enums import Department
from .model import DepartmentTiming, EarlyCheckoutResult, LatenessResult, TimingCatalogue, WorkingHoursResult

logger = logging.getLogger(__name__)


class TimingResolver:
    """Shift-window lookup plus lateness/overtime/early-checkout arithmetic.

    All deltas are whole minutes (floor) and never negative. Any instant
    after the expected time is late, even when the floored delta is 0.
    """

    def __init__(self, catalogue: TimingCatalogue):
        self._catalogue = catalogue

    @property
    def catalogue(self) -> TimingCatalogue:
        return self._catalogue

    def timing_for(self, department: object) -> DepartmentTiming:
        dept = Department.parse(department)
        if dept is None or dept not in self._catalogue.timings:
            logger.debug(
                "[timing] no timing for department %r, using %s",
                department,
                self._catalogue.default_department.value,
            )
        return self._catalogue.for_department(dept)

    def compute_lateness(self, check_in: datetime, expected_check_in_time: str) -> LatenessResult:
        expected = time_on(expected_check_in_time, check_in)
        late_minutes = floor_minutes_between(expected, check_in)
        early_minutes = floor_minutes_between(check_in, expected)
        return LatenessResult(
            is_late=check_in > expected,
            late_minutes=late_minutes,
            is_early_login=check_in < expected,
            early_login_minutes=early_minutes,
            expected_check_in=expected,
        )

    def compute_working_hours(self, check_in: datetime, check_out: datetime, standard_hours: float) -> WorkingHoursResult:
        total = floor_minutes_between(check_in, check_out)
        standard = max(int(round(float(standard_hours) * 60)), 0)
        return WorkingHoursResult(
            total_minutes=total,
            regular_minutes=min(total, standard),
            overtime_minutes=max(0, total - standard),
        )

    def compute_early_checkout(self, check_out: datetime, expected_check_out_time: str) -> EarlyCheckoutResult:
        if parse_12h_time(expected_check_out_time) is None:
            return EarlyCheckoutResult(is_early_checkout=False, early_checkout_minutes=0, expected_check_out=None)
        expected = time_on(expected_check_out_time, check_out)
        early = floor_minutes_between(check_out, expected)
        return EarlyCheckoutResult(
            is_early_checkout=early > 0,
            early_checkout_minutes=early,
            expected_check_out=expected,
        )
