from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.validators import is_blank, require_float, require_non_empty
from ..core.enums import AttendanceType, FailureReason
from ..core.exceptions import ValidationError
from ..location.model import LocationValidationResult
from ..location.validator import accuracy_recommendations
from ..container import Container
from .model import CheckInRequest, CheckInResult, CheckOutRequest, CheckOutResult, DeviceInfo

_STATUS_BY_REASON = {
    FailureReason.NOT_FOUND: 404,
    FailureReason.DUPLICATE_CHECK_IN: 409,
    FailureReason.NO_OPEN_CHECK_IN: 409,
    FailureReason.ALREADY_CHECKED_OUT: 409,
    FailureReason.VALIDATION_FAILED: 400,
    FailureReason.LOCATION_REJECTED: 422,
    FailureReason.SYSTEM_ERROR: 500,
}


def _optional_str(value: Any) -> Optional[str]:
    if is_blank(value):
        return None
    return str(value).strip()


def _optional_float(value: Any, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    return require_float(value, field_name)


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object", ["Send the request as application/json"])
    return data


def _parse_attendance_type(value: Any) -> AttendanceType:
    try:
        return AttendanceType(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in AttendanceType)
        raise ValidationError(f"Unknown attendance type: {value}", [f"Use one of: {allowed}"])


def _parse_device_info(value: Any) -> Optional[DeviceInfo]:
    if not isinstance(value, dict) or is_blank(value.get("type")):
        return None
    return DeviceInfo(
        device_type=str(value["type"]).strip(),
        user_agent=_optional_str(value.get("userAgent")),
        location_capability=_optional_str(value.get("locationCapability")),
    )


def parse_check_in_request(data: Dict[str, Any]) -> CheckInRequest:
    accuracy = require_float(data.get("accuracy"), "Accuracy")
    if accuracy < 0:
        raise ValidationError("Accuracy must not be negative", ["Send the accuracy reported by the device, in meters"])
    return CheckInRequest(
        user_id=require_non_empty(data.get("userId"), "User id"),
        latitude=require_float(data.get("latitude"), "Latitude"),
        longitude=require_float(data.get("longitude"), "Longitude"),
        accuracy=accuracy,
        attendance_type=_parse_attendance_type(require_non_empty(data.get("attendanceType"), "Attendance type")),
        reason=_optional_str(data.get("reason")),
        customer_name=_optional_str(data.get("customerName")),
        image_data=_optional_str(data.get("imageData")),
        device_info=_parse_device_info(data.get("deviceInfo")),
    )


def parse_check_out_request(data: Dict[str, Any]) -> CheckOutRequest:
    return CheckOutRequest(
        user_id=require_non_empty(data.get("userId"), "User id"),
        latitude=_optional_float(data.get("latitude"), "Latitude"),
        longitude=_optional_float(data.get("longitude"), "Longitude"),
        reason=_optional_str(data.get("reason")),
        ot_reason=_optional_str(data.get("otReason")),
        image_data=_optional_str(data.get("imageData")),
    )


def location_to_json(result: Optional[LocationValidationResult]) -> Optional[Dict[str, Any]]:
    if result is None:
        return None
    office = result.detected_office
    return {
        "isValid": result.is_valid,
        "confidence": result.confidence,
        "distance": result.distance_m,
        "detectedOffice": (
            {"id": office.office_id, "name": office.name, "distance": office.distance_m} if office else None
        ),
        "validationType": result.validation_type.value,
        "message": result.message,
        "recommendations": list(result.recommendations),
        "metadata": {
            "accuracy": result.metadata.accuracy_m,
            "effectiveRadius": result.metadata.effective_radius_m,
            "indoorDetection": result.metadata.indoor_detection,
            "confidenceFactors": list(result.metadata.confidence_factors),
        },
    }


def check_in_to_json(result: CheckInResult) -> Dict[str, Any]:
    details = result.attendance_details
    return {
        "success": result.success,
        "message": result.message,
        "error": result.failure_reason.value if result.failure_reason else None,
        "attendanceId": result.attendance_id,
        "locationValidation": location_to_json(result.location_validation),
        "attendanceDetails": (
            {
                "isLate": details.is_late,
                "lateMinutes": details.late_minutes,
                "isEarlyLogin": details.is_early_login,
                "earlyLoginMinutes": details.early_login_minutes,
                "expectedCheckInTime": details.expected_check_in_time,
                "actualCheckInTime": details.actual_check_in_time,
            }
            if details
            else None
        ),
        "recommendations": list(result.recommendations),
        "warnings": list(result.warnings),
    }


def check_out_to_json(result: CheckOutResult) -> Dict[str, Any]:
    return {
        "success": result.success,
        "message": result.message,
        "error": result.failure_reason.value if result.failure_reason else None,
        "attendanceId": result.attendance_id,
        "workingHours": result.working_hours,
        "overtimeHours": result.overtime_hours,
        "totalHours": result.total_hours,
        "isEarlyCheckout": result.is_early_checkout,
        "earlyCheckoutMinutes": result.early_checkout_minutes,
        "recommendations": list(result.recommendations),
        "warnings": list(result.warnings),
    }


def _status_for(result: CheckInResult | CheckOutResult) -> int:
    if result.success:
        return 200
    return _STATUS_BY_REASON.get(result.failure_reason, 400)


def _bad_request(e: ValidationError):
    return (
        jsonify(
            {
                "success": False,
                "message": e.message,
                "error": e.reason.value,
                "recommendations": list(e.recommendations),
            }
        ),
        400,
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="api_check_in")
    def api_check_in():
        try:
            req = parse_check_in_request(_json_body())
        except ValidationError as e:
            return _bad_request(e)
        result = container.attendance_service.check_in(req)
        return jsonify(check_in_to_json(result)), _status_for(result)

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="api_check_out")
    def api_check_out():
        try:
            req = parse_check_out_request(_json_body())
        except ValidationError as e:
            return _bad_request(e)
        result = container.attendance_service.check_out(req)
        return jsonify(check_out_to_json(result)), _status_for(result)

    @app.route("/api/attendance/metrics/<user_id>", methods=["GET"], endpoint="api_attendance_metrics")
    def api_attendance_metrics(user_id: str):
        try:
            start = parse_iso_date(require_non_empty(request.args.get("start"), "Start"))
            end = parse_iso_date(require_non_empty(request.args.get("end"), "End"))
            metrics = container.metrics_service.summarize(user_id, start=start, end=end)
        except ValueError:
            return _bad_request(ValidationError("Dates must use YYYY-MM-DD", ["Example: 2024-03-01"]))
        except ValidationError as e:
            return _bad_request(e)

        return jsonify(
            {
                "success": True,
                "userId": user_id,
                "start": start.isoformat(),
                "end": end.isoformat(),
                "totalDays": metrics.total_days,
                "totalWorkingHours": metrics.total_working_hours,
                "totalOvertimeHours": metrics.total_overtime_hours,
                "averageWorkingHours": metrics.average_working_hours,
                "lateArrivals": metrics.late_arrivals,
                "punctualityRate": metrics.punctuality_rate,
            }
        ), 200

    @app.route("/api/location/recommendations", methods=["GET"], endpoint="api_location_recommendations")
    def api_location_recommendations():
        try:
            accuracy = require_float(request.args.get("accuracy"), "Accuracy")
        except ValidationError as e:
            return _bad_request(e)
        return jsonify({"accuracy": accuracy, "recommendations": accuracy_recommendations(accuracy)}), 200
