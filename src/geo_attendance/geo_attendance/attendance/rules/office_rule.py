from __future__ import annotations

from ...core.exceptions import LocationRejectedError
from ...location.model import LocationValidationResult
from ..model import CheckInRequest
from .base import AttendanceTypeRule

SWITCH_TO_REMOTE = 'Consider using "Remote Work" if you are working from outside the office'


class OfficeRule(AttendanceTypeRule):
    """Office check-ins must fall inside a geofence."""

    def check(self, request: CheckInRequest, location: LocationValidationResult) -> None:
        if location.is_valid:
            return

        recommendations = list(location.recommendations)
        if request.device_info and request.device_info.device_type.lower() == "desktop":
            recommendations.append("Desktop browsers often report network location - use a mobile device for office check-in")
        recommendations.append(SWITCH_TO_REMOTE)
        raise LocationRejectedError(f"Office check-in failed: {location.message}", recommendations)
