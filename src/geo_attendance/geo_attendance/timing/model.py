from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from ..common.datetime_utils import normalize_12h
from ..core.constants import DEFAULT_CHECK_IN_TIME, DEFAULT_CHECK_OUT_TIME, DEFAULT_WORKING_HOURS
from ..core.enums import Department


@dataclass(frozen=True)
class DepartmentTiming:
    """Shift window of a department (12-hour clock strings)."""

    department: Department
    check_in_time: str
    check_out_time: str
    working_hours: float = DEFAULT_WORKING_HOURS

    @classmethod
    def create(
        cls,
        *,
        department: Department,
        check_in_time: object,
        check_out_time: object,
        working_hours: object = None,
    ) -> "DepartmentTiming":
        """Build a timing from stored values, normalizing the time strings.

        Corrupt strings fall back to the default window and a non-positive
        hour count falls back to the default standard hours.
        """
        try:
            hours = float(working_hours) if working_hours is not None else float(DEFAULT_WORKING_HOURS)
        except (TypeError, ValueError):
            hours = float(DEFAULT_WORKING_HOURS)
        if hours <= 0:
            hours = float(DEFAULT_WORKING_HOURS)

        return cls(
            department=department,
            check_in_time=normalize_12h(check_in_time, DEFAULT_CHECK_IN_TIME),
            check_out_time=normalize_12h(check_out_time, DEFAULT_CHECK_OUT_TIME),
            working_hours=hours,
        )


@dataclass(frozen=True)
class TimingCatalogue:
    """Read-only department → timing table with a default department."""

    timings: Mapping[Department, DepartmentTiming]
    default_department: Department = Department.OPERATIONS
    fallback: DepartmentTiming = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "timings", MappingProxyType(dict(self.timings)))
        fallback = self.timings.get(self.default_department) or DepartmentTiming(
            department=self.default_department,
            check_in_time=DEFAULT_CHECK_IN_TIME,
            check_out_time=DEFAULT_CHECK_OUT_TIME,
            working_hours=DEFAULT_WORKING_HOURS,
        )
        object.__setattr__(self, "fallback", fallback)

    @classmethod
    def from_timings(
        cls,
        timings: Iterable[DepartmentTiming],
        *,
        default_department: Department = Department.OPERATIONS,
    ) -> "TimingCatalogue":
        return cls({t.department: t for t in timings}, default_department=default_department)

    def for_department(self, department: object) -> DepartmentTiming:
        dept = Department.parse(department)
        if dept is None:
            return self.fallback
        return self.timings.get(dept, self.fallback)


@dataclass(frozen=True)
class LatenessResult:
    is_late: bool
    late_minutes: int
    is_early_login: bool
    early_login_minutes: int
    expected_check_in: datetime


@dataclass(frozen=True)
class WorkingHoursResult:
    total_minutes: int
    regular_minutes: int
    overtime_minutes: int

    @property
    def total_hours(self) -> float:
        return self.total_minutes / 60

    @property
    def regular_hours(self) -> float:
        return self.regular_minutes / 60

    @property
    def overtime_hours(self) -> float:
        return self.overtime_minutes / 60


@dataclass(frozen=True)
class EarlyCheckoutResult:
    is_early_checkout: bool
    early_checkout_minutes: int
    expected_check_out: Optional[datetime]
