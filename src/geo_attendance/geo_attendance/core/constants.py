"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_M = 6_371_000

# Reported GPS accuracy tiers (meters).
PRECISION_EXCELLENT_M = 5
PRECISION_GOOD_M = 20
PRECISION_FAIR_M = 100
PRECISION_POOR_M = 1000

# Geofence widening: radius + min(accuracy, cap).
MAX_ACCURACY_WIDENING_M = 100
DEFAULT_OFFICE_RADIUS_M = 100

# Indoor compensation applies to poor fixes only, up to radius * multiplier.
INDOOR_ACCURACY_THRESHOLD_M = 200
INDOOR_DISTANCE_MULTIPLIER = 2.5

LOW_CONFIDENCE_THRESHOLD = 0.6

DEFAULT_CHECK_IN_TIME = "9:00 AM"
DEFAULT_CHECK_OUT_TIME = "6:00 PM"
DEFAULT_WORKING_HOURS = 8

DEFAULT_PHOTO_UPLOAD_TIMEOUT_SECONDS = 10
PHOTO_MAX_WIDTH = 800
PHOTO_MAX_HEIGHT = 600
DEFAULT_PHOTO_FOLDER = "attendance field images"
