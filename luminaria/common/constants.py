"""Application constants."""

import sys

USER_AGENT = "luminaria-locator/1.0 (+inventory lookup; contact: configured-email)"
EXIT_SUCCESS = 0
EXIT_BAD_INPUT = 2
EXIT_NOT_FOUND = 10
EXIT_HARD_FAIL = 20

SOURCE_EPSG = "EPSG:4326"
TARGET_EPSG = "EPSG:9377"

EARTH_RADIUS_KM = 6371.0
# Distance reported for records without coordinates and for empty inventories.
MAX_DISTANCE = sys.float_info.max

JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "source",
    "event",
    "status",
    "row",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
