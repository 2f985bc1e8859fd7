from __future__ import annotations

from ...common.validators import is_blank
from ...core.exceptions import ValidationError
from ...location.model import LocationValidationResult
from ..model import CheckInRequest
from .base import AttendanceTypeRule


class FieldWorkRule(AttendanceTypeRule):
    """Field work needs the visited customer and a photo."""

    def check(self, request: CheckInRequest, location: LocationValidationResult) -> None:
        missing: list[str] = []
        recommendations: list[str] = []

        if is_blank(request.customer_name):
            missing.append("customer name")
            recommendations.append("Please enter the customer name you are visiting")
        if is_blank(request.image_data):
            missing.append("photo")
            recommendations.append("Please capture a photo to verify your field work location")

        if missing:
            raise ValidationError(f"Field work check-in requires: {', '.join(missing)}", recommendations)
