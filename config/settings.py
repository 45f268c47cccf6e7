"""Configuration settings for Workout Mapper."""

import os
import math
import logging
from pathlib import Path
from typing import Tuple
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Logger for this module
logger = logging.getLogger(__name__)

# Base paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("WORKOUT_DATA_DIR", str(BASE_DIR / "data")))

# Durable snapshot of every logged workout
SNAPSHOT_FILE = Path(os.getenv("WORKOUT_SNAPSHOT_FILE", str(DATA_DIR / "workouts.json")))

# Skip unreadable snapshot records at boot instead of aborting
SKIP_CORRUPT_RECORDS = os.getenv("WORKOUT_SKIP_CORRUPT", "true").strip().lower() not in ("0", "false", "no")

# Map view
MAP_ZOOM_LEVEL = 15

# Flag to ensure deprecation warning is logged only once per process
_deprecation_warned = False


def _parse_position(lat_raw: str, lng_raw: str) -> Tuple[float, float]:
    try:
        lat, lng = float(lat_raw), float(lng_raw)
    except ValueError:
        raise ValueError(f"Home position is not numeric: {lat_raw!r}, {lng_raw!r}")

    if not (math.isfinite(lat) and math.isfinite(lng)) or abs(lat) > 90 or abs(lng) > 180:
        raise ValueError(f"Home position out of range: {lat}, {lng}")
    return lat, lng


def get_home_position() -> Tuple[float, float]:
    """Get the configured current position from environment variables.

    Prefers HOME_LATITUDE and HOME_LONGITUDE. If those are not set but the
    legacy HOME_LAT / HOME_LNG pair is present, uses it with a one-time
    deprecation warning.

    Returns:
        Tuple of (latitude, longitude)

    Raises:
        ValueError: If no usable position is configured
    """
    global _deprecation_warned

    lat = os.getenv("HOME_LATITUDE")
    lng = os.getenv("HOME_LONGITUDE")

    if lat and lng:
        return _parse_position(lat, lng)

    # Fallback to the legacy short names
    lat = os.getenv("HOME_LAT")
    lng = os.getenv("HOME_LNG")
    if lat and lng:
        if not _deprecation_warned:
            logger.warning(
                "HOME_LAT/HOME_LNG are deprecated. Please use HOME_LATITUDE and HOME_LONGITUDE instead. "
                "HOME_LAT/HOME_LNG will be removed in a future version."
            )
            _deprecation_warned = True
        return _parse_position(lat, lng)

    raise ValueError(
        "Current position not available. Set HOME_LATITUDE and HOME_LONGITUDE "
        "environment variables."
    )


# Map marker popups
class MarkerConfig:
    """Marker popup configuration constants."""

    POPUP_MAX_WIDTH = 250
    POPUP_MIN_WIDTH = 50
    POPUP_AUTO_CLOSE = False
    POPUP_CLOSE_ON_CLICK = False
    POPUP_CLASS_SUFFIX = "-popup"


# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = os.getenv("WORKOUT_LOG_FILE", "workout_mapper.log")

# Report generation
DEFAULT_LIST_FORMAT = "markdown"
