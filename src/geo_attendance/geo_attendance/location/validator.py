from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from ..core.constants import (
    DEFAULT_OFFICE_RADIUS_M,
    INDOOR_ACCURACY_THRESHOLD_M,
    INDOOR_DISTANCE_MULTIPLIER,
    LOW_CONFIDENCE_THRESHOLD,
    MAX_ACCURACY_WIDENING_M,
    PRECISION_EXCELLENT_M,
    PRECISION_FAIR_M,
    PRECISION_GOOD_M,
    PRECISION_POOR_M,
)
from ..core.enums import ValidationType
from .geometry import haversine_distance_m
from .model import DetectedOffice, GeoFix, LocationMetadata, LocationValidationResult, OfficeLocation

# (upper accuracy bound, confidence multiplier, factor name)
_ACCURACY_TIERS: Tuple[Tuple[float, float, str], ...] = (
    (PRECISION_EXCELLENT_M, 1.0, "excellent_gps"),
    (PRECISION_GOOD_M, 0.95, "good_gps"),
    (PRECISION_FAIR_M, 0.85, "fair_gps"),
    (PRECISION_POOR_M, 0.7, "poor_gps"),
)
_VERY_POOR = (0.5, "very_poor_gps")


def _accuracy_tier(accuracy_m: float) -> Tuple[float, str]:
    for bound, multiplier, name in _ACCURACY_TIERS:
        if accuracy_m <= bound:
            return multiplier, name
    return _VERY_POOR


def accuracy_recommendations(accuracy_m: float) -> List[str]:
    """Guidance for the current GPS state, worst tier first."""
    if accuracy_m > PRECISION_POOR_M:
        return [
            "GPS accuracy is very poor - try these steps:",
            "Move to an open area away from buildings",
            "Restart your location services",
            "Check if location permissions are granted",
        ]
    if accuracy_m > PRECISION_FAIR_M:
        return [
            "GPS accuracy is limited - try these steps:",
            "Move closer to a window if indoors",
            "Wait a moment for GPS to improve",
        ]
    if accuracy_m > PRECISION_GOOD_M:
        return ["GPS accuracy is moderate - location detected successfully"]
    return ["Excellent GPS accuracy - location precisely detected"]


class LocationValidator:
    """Scores a GPS fix against the office geofences.

    The effective radius of an office is its configured radius widened by
    the reported accuracy, capped at ``max_widening_m``. Poor fixes
    (accuracy >= the indoor threshold) may additionally match up to
    ``radius * INDOOR_DISTANCE_MULTIPLIER``. The nearest matching office
    wins.
    """

    def __init__(self, offices: Iterable[OfficeLocation], *, max_widening_m: float = MAX_ACCURACY_WIDENING_M):
        self._offices: Tuple[OfficeLocation, ...] = tuple(offices)
        self._max_widening_m = max(0.0, float(max_widening_m))

    @property
    def offices(self) -> Sequence[OfficeLocation]:
        return self._offices

    def validate(self, fix: GeoFix) -> LocationValidationResult:
        if not self._offices:
            return LocationValidationResult.rejected(
                accuracy_m=fix.accuracy_m,
                message="No office locations configured",
                recommendations=("Contact administrator to configure office locations",),
                factor="no_office_locations",
            )

        ranked = sorted(
            ((haversine_distance_m(fix.latitude, fix.longitude, o.latitude, o.longitude), o) for o in self._offices),
            key=lambda pair: pair[0],
        )

        nearest = None
        for distance, office in ranked:
            result = self._score(fix, office, distance)
            if result.is_valid:
                return result
            if nearest is None:
                nearest = result
        return nearest

    def _score(self, fix: GeoFix, office: OfficeLocation, distance: float) -> LocationValidationResult:
        radius = float(office.radius_m) if office.radius_m and office.radius_m > 0 else float(DEFAULT_OFFICE_RADIUS_M)
        accuracy = max(0.0, float(fix.accuracy_m))
        effective = radius + min(accuracy, self._max_widening_m)
        indoor_ceiling = radius * INDOOR_DISTANCE_MULTIPLIER
        rounded = int(round(distance))

        factors: List[str] = []
        recommendations: List[str] = []

        if distance <= radius:
            validation_type = ValidationType.EXACT if accuracy <= PRECISION_FAIR_M else ValidationType.PROXIMITY_BASED
            factors.append("within_base_radius")
            message = f"Office location match at {office.name}. Distance: {rounded}m"
        elif distance <= effective:
            validation_type = ValidationType.PROXIMITY_BASED
            factors.append("within_accuracy_widened_radius")
            message = f"Close proximity to {office.name} within GPS accuracy. Distance: {rounded}m"
        elif accuracy >= INDOOR_ACCURACY_THRESHOLD_M and distance <= indoor_ceiling:
            validation_type = ValidationType.INDOOR_COMPENSATION
            effective = max(effective, indoor_ceiling)
            factors.append("indoor_gps_compensation")
            message = f"Indoor GPS detected. {office.name} validated with compensation. Distance: {rounded}m"
            recommendations.append("GPS accuracy may be limited indoors - this is normal")
        else:
            validation_type = ValidationType.FAILED
            message = f"Outside office premises. Distance: {rounded}m from {office.name} (limit: {int(round(radius))}m)"

        multiplier, tier_name = _accuracy_tier(accuracy)
        factors.append(tier_name)

        if validation_type is ValidationType.FAILED:
            confidence = 0.0
            if accuracy > PRECISION_POOR_M:
                recommendations.append("GPS accuracy is very poor - try moving to an open area")
                recommendations.append("Ensure location services are enabled")
            else:
                recommendations.append(f"Move closer to the office (currently {rounded}m from {office.name})")
            factors.append("outside_range")
        else:
            ratio = min(distance / effective, 1.0) if effective > 0 else 1.0
            confidence = round(max(0.0, min(1.0, (1.0 - 0.5 * ratio) * multiplier)), 3)
            if confidence < LOW_CONFIDENCE_THRESHOLD:
                recommendations.append("Try again near a window for a better GPS fix")
                factors.append("low_confidence")

        is_valid = validation_type is not ValidationType.FAILED
        return LocationValidationResult(
            is_valid=is_valid,
            confidence=confidence,
            distance_m=rounded,
            detected_office=DetectedOffice(office_id=office.office_id, name=office.name, distance_m=rounded) if is_valid else None,
            validation_type=validation_type,
            message=message,
            recommendations=tuple(recommendations),
            metadata=LocationMetadata(
                accuracy_m=accuracy,
                effective_radius_m=int(round(effective)),
                indoor_detection=validation_type is ValidationType.INDOOR_COMPENSATION,
                confidence_factors=tuple(factors),
            ),
        )
