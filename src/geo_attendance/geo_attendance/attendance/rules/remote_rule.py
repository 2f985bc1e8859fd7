from __future__ import annotations

from ...common.validators import is_blank
from ...core.exceptions import ValidationError
from ...location.model import LocationValidationResult
from ..model import CheckInRequest
from .base import AttendanceTypeRule


class RemoteRule(AttendanceTypeRule):
    """Remote work needs a reason."""

    def check(self, request: CheckInRequest, location: LocationValidationResult) -> None:
        if is_blank(request.reason):
            raise ValidationError(
                "Reason is required for remote work",
                ["Please provide a reason for working remotely today"],
            )
