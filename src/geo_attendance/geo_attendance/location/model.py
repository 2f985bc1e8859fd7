from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..core.constants import DEFAULT_OFFICE_RADIUS_M
from ..core.enums import ValidationType


@dataclass(frozen=True)
class OfficeLocation:
    """A physical site with a circular geofence."""

    office_id: str
    name: str
    latitude: float
    longitude: float
    radius_m: float = DEFAULT_OFFICE_RADIUS_M


@dataclass(frozen=True)
class GeoFix:
    """A reported GPS position with its horizontal accuracy (meters)."""

    latitude: float
    longitude: float
    accuracy_m: float


@dataclass(frozen=True)
class DetectedOffice:
    office_id: str
    name: str
    distance_m: int


@dataclass(frozen=True)
class LocationMetadata:
    accuracy_m: float
    effective_radius_m: int
    indoor_detection: bool
    confidence_factors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LocationValidationResult:
    """Outcome of scoring a fix against the office catalogue.

    Embedded into the attendance record; never persisted on its own.
    """

    is_valid: bool
    confidence: float
    distance_m: int
    detected_office: Optional[DetectedOffice]
    validation_type: ValidationType
    message: str
    recommendations: Tuple[str, ...] = ()
    metadata: LocationMetadata = field(default_factory=lambda: LocationMetadata(accuracy_m=0.0, effective_radius_m=0, indoor_detection=False))

    @classmethod
    def rejected(cls, *, accuracy_m: float, message: str, recommendations: Tuple[str, ...], factor: str) -> "LocationValidationResult":
        """A failed result that was not produced by scoring (e.g. empty office catalogue)."""
        return cls(
            is_valid=False,
            confidence=0.0,
            distance_m=0,
            detected_office=None,
            validation_type=ValidationType.FAILED,
            message=message,
            recommendations=recommendations,
            metadata=LocationMetadata(
                accuracy_m=accuracy_m,
                effective_radius_m=0,
                indoor_detection=False,
                confidence_factors=(factor,),
            ),
        )
