from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from ..core.enums import AttendanceType
from .rules.base import AttendanceTypeRule
from .rules.field_work_rule import FieldWorkRule
from .rules.office_rule import OfficeRule
from .rules.remote_rule import RemoteRule


def _default_rules() -> Dict[AttendanceType, AttendanceTypeRule]:
    return {
        AttendanceType.OFFICE: OfficeRule(),
        AttendanceType.REMOTE: RemoteRule(),
        AttendanceType.FIELD_WORK: FieldWorkRule(),
    }


@dataclass
class AttendanceRuleFactory:
    """Factory Pattern: one rule per attendance type, every type covered."""

    rules: Dict[AttendanceType, AttendanceTypeRule] = field(default_factory=_default_rules)

    def __post_init__(self) -> None:
        missing = [t.value for t in AttendanceType if t not in self.rules]
        if missing:
            raise ValueError(f"No attendance rule for: {', '.join(missing)}")

    def for_type(self, attendance_type: AttendanceType) -> AttendanceTypeRule:
        return self.rules[attendance_type]
