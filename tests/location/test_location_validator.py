from __future__ import annotations

import pytest

from src.geo_attendance.geo_attendance.core.enums import ValidationType
from src.geo_attendance.geo_attendance.location.geometry import haversine_distance_m
from src.geo_attendance.geo_attendance.location.model import GeoFix, OfficeLocation
from src.geo_attendance.geo_attendance.location.validator import LocationValidator, accuracy_recommendations


def test_haversine_one_degree_of_longitude_on_equator():
    assert haversine_distance_m(0, 0, 0, 1) == pytest.approx(111_194.93, abs=0.01)
    assert haversine_distance_m(10, 20, 10, 20) == 0


def test_office_center_with_good_accuracy_is_exact(location_validator, head_office):
    result = location_validator.validate(GeoFix(head_office.latitude, head_office.longitude, 5))

    assert result.is_valid is True
    assert result.validation_type == ValidationType.EXACT
    assert result.confidence == pytest.approx(1.0)
    assert result.distance_m == 0
    assert result.detected_office.office_id == "hq"
    assert result.recommendations == ()
    assert "excellent_gps" in result.metadata.confidence_factors


def test_five_km_away_fails(location_validator, head_office, meters_north):
    result = location_validator.validate(GeoFix(meters_north(head_office.latitude, 5000), head_office.longitude, 10))

    assert result.is_valid is False
    assert result.validation_type == ValidationType.FAILED
    assert result.confidence == 0
    assert result.distance_m == 5000
    assert result.detected_office is None
    assert result.recommendations == ("Move closer to the office (currently 5000m from Head Office)",)
    assert "outside_range" in result.metadata.confidence_factors


def test_accuracy_widened_radius_is_proximity_based(location_validator, head_office, meters_north):
    result = location_validator.validate(GeoFix(meters_north(head_office.latitude, 150), head_office.longitude, 80))

    assert result.is_valid is True
    assert result.validation_type == ValidationType.PROXIMITY_BASED
    assert result.metadata.effective_radius_m == 180
    # (1 - 0.5 * 150/180) * 0.85
    assert result.confidence == pytest.approx(0.496, abs=1e-3)
    assert "Try again near a window for a better GPS fix" in result.recommendations


def test_widening_is_capped(location_validator, head_office, meters_north):
    # 500m accuracy would widen to 600m without the cap; the indoor ceiling is 250m.
    result = location_validator.validate(GeoFix(meters_north(head_office.latitude, 400), head_office.longitude, 500))

    assert result.is_valid is False
    assert result.validation_type == ValidationType.FAILED


def test_inside_radius_with_poor_accuracy_is_not_exact(location_validator, head_office, meters_north):
    result = location_validator.validate(GeoFix(meters_north(head_office.latitude, 50), head_office.longitude, 150))

    assert result.is_valid is True
    assert result.validation_type == ValidationType.PROXIMITY_BASED
    assert result.confidence == pytest.approx(0.6125, abs=1e-3)


def test_indoor_compensation_for_poor_fix_near_office(location_validator, head_office, meters_north):
    result = location_validator.validate(GeoFix(meters_north(head_office.latitude, 220), head_office.longitude, 300))

    assert result.is_valid is True
    assert result.validation_type == ValidationType.INDOOR_COMPENSATION
    assert result.metadata.indoor_detection is True
    assert result.metadata.effective_radius_m == 250
    assert "GPS accuracy may be limited indoors - this is normal" in result.recommendations
    assert 0 <= result.confidence < 0.6


def test_indoor_compensation_has_a_ceiling(location_validator, head_office, meters_north):
    result = location_validator.validate(GeoFix(meters_north(head_office.latitude, 260), head_office.longitude, 300))

    assert result.is_valid is False
    assert result.validation_type == ValidationType.FAILED


def test_very_poor_accuracy_failure_recommends_open_area(location_validator, head_office, meters_north):
    result = location_validator.validate(GeoFix(meters_north(head_office.latitude, 5000), head_office.longitude, 1500))

    assert result.recommendations == (
        "GPS accuracy is very poor - try moving to an open area",
        "Ensure location services are enabled",
    )


def test_empty_catalogue_is_rejected():
    result = LocationValidator([]).validate(GeoFix(13.0, 80.0, 5))

    assert result.is_valid is False
    assert result.validation_type == ValidationType.FAILED
    assert result.metadata.confidence_factors == ("no_office_locations",)


def test_nearest_qualifying_office_wins(head_office, meters_north):
    annex = OfficeLocation("annex", "Annex", meters_north(head_office.latitude, 60), head_office.longitude, 100)
    validator = LocationValidator([head_office, annex])

    result = validator.validate(GeoFix(meters_north(head_office.latitude, 40), head_office.longitude, 5))

    assert result.detected_office.office_id == "annex"
    assert result.distance_m == 20


def test_nearest_office_outside_its_fence_loses_to_farther_match(head_office, meters_north):
    kiosk = OfficeLocation("kiosk", "Kiosk", meters_north(head_office.latitude, 80), head_office.longitude, 10)
    validator = LocationValidator([head_office, kiosk])

    # 30m from the kiosk (radius 10 + 5 accuracy) but 50m from the head office.
    result = validator.validate(GeoFix(meters_north(head_office.latitude, 50), head_office.longitude, 5))

    assert result.is_valid is True
    assert result.detected_office.office_id == "hq"


def test_failed_result_reports_nearest_office(head_office, meters_north):
    far = OfficeLocation("far", "Far Office", meters_north(head_office.latitude, 9000), head_office.longitude, 100)
    validator = LocationValidator([far, head_office])

    result = validator.validate(GeoFix(meters_north(head_office.latitude, 3000), head_office.longitude, 10))

    assert result.is_valid is False
    assert result.distance_m == 3000
    assert "Head Office" in result.message


@pytest.mark.parametrize("accuracy", [0, 5, 50, 150, 800, 5000])
def test_confidence_always_within_unit_interval(location_validator, head_office, meters_north, accuracy):
    for meters in (0, 30, 99, 120, 180, 240, 1000):
        result = location_validator.validate(GeoFix(meters_north(head_office.latitude, meters), head_office.longitude, accuracy))
        assert 0.0 <= result.confidence <= 1.0


@pytest.mark.parametrize(
    "accuracy, first",
    [
        (3, "Excellent GPS accuracy - location precisely detected"),
        (50, "GPS accuracy is moderate - location detected successfully"),
        (500, "GPS accuracy is limited - try these steps:"),
        (1500, "GPS accuracy is very poor - try these steps:"),
    ],
)
def test_accuracy_recommendations_tiers(accuracy, first):
    assert accuracy_recommendations(accuracy)[0] == first
