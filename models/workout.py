"""Data models for logged workouts."""

import math
import numbers
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, NamedTuple, Optional, Union

from models.errors import ValidationError

RUNNING = "running"
CYCLING = "cycling"
WORKOUT_KINDS = (RUNNING, CYCLING)

ICONS = {RUNNING: "🏃", CYCLING: "🚴‍♀️"}

MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

INVALID_INPUT_MESSAGE = "Input must be positive numbers"


class Coords(NamedTuple):
    """A (latitude, longitude) point on the map."""

    lat: float
    lng: float


def generate_workout_id() -> str:
    """Return a fresh opaque workout id."""
    return "id" + secrets.token_hex(8)


def describe(kind: str, created_at: datetime) -> str:
    """Build the human readable label, e.g. '🏃 Running on April 14'."""
    return f"{ICONS[kind]} {kind.capitalize()} on {MONTHS[created_at.month - 1]} {created_at.day}"


@dataclass(frozen=True)
class Workout(ABC):
    """A logged exercise session.

    Derived values are computed once in ``__post_init__`` and stored as
    regular fields, so equality and snapshots cover them too.
    """

    kind: ClassVar[str] = ""
    metric_unit: ClassVar[str] = ""

    id: str
    created_at: datetime
    coords: Coords
    distance: float  # km
    duration: float  # min
    description: str = field(init=False)

    def __post_init__(self):
        if not isinstance(self.coords, Coords):
            object.__setattr__(self, "coords", Coords(*self.coords))
        object.__setattr__(self, "description", describe(self.kind, self.created_at))

    @property
    @abstractmethod
    def derived_metric(self) -> float:
        """Pace for runs, speed for rides."""

    @property
    @abstractmethod
    def variant_value(self) -> float:
        """Cadence for runs, elevation gain for rides."""


@dataclass(frozen=True)
class Running(Workout):
    """A run; derived metric is pace in min/km."""

    kind: ClassVar[str] = RUNNING
    metric_unit: ClassVar[str] = "min/km"

    cadence: float  # steps/min
    pace: float = field(init=False)

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "pace", float(self.duration) / float(self.distance))

    @property
    def derived_metric(self) -> float:
        return self.pace

    @property
    def variant_value(self) -> float:
        return self.cadence


@dataclass(frozen=True)
class Cycling(Workout):
    """A ride; derived metric is speed in km/h."""

    kind: ClassVar[str] = CYCLING
    metric_unit: ClassVar[str] = "km/h"

    elevation_gain: float  # m, may be zero or negative
    speed: float = field(init=False)

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "speed", float(self.distance) * 60 / float(self.duration))

    @property
    def derived_metric(self) -> float:
        return self.speed

    @property
    def variant_value(self) -> float:
        return self.elevation_gain


WORKOUT_TYPES = {RUNNING: Running, CYCLING: Cycling}


def _is_finite(value) -> bool:
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond the float range
        return False


def require_finite(value, field_name: str) -> Union[int, float]:
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not _is_finite(value):
        raise ValidationError(f"{INVALID_INPUT_MESSAGE} ({field_name}: {value!r})", field=field_name)
    if isinstance(value, numbers.Integral):
        return int(value)
    return float(value)


def require_positive(value, field_name: str) -> Union[int, float]:
    value = require_finite(value, field_name)
    if value <= 0:
        raise ValidationError(f"{INVALID_INPUT_MESSAGE} ({field_name}: {value!r})", field=field_name)
    return value


def validate_coords(coords) -> Coords:
    """Check that coords is a finite (lat, lng) pair within map bounds."""
    try:
        lat, lng = coords
    except (TypeError, ValueError):
        raise ValidationError(f"Coordinates must be a (lat, lng) pair, got {coords!r}", field="coords")

    lat = require_finite(lat, "lat")
    lng = require_finite(lng, "lng")
    if abs(lat) > 90 or abs(lng) > 180:
        raise ValidationError(f"Coordinates out of range: {lat}, {lng}", field="coords")
    return Coords(float(lat), float(lng))


def create_running(coords, distance, duration, cadence,
                   created_at: Optional[datetime] = None) -> Running:
    """Validate input and build a Running workout.

    Args:
        coords: (lat, lng) where the run was logged
        distance: Distance in km, must be positive
        duration: Duration in minutes, must be positive
        cadence: Steps per minute, must be positive
        created_at: Creation time, defaults to now (local, timezone aware)

    Returns:
        Running workout with pace and description computed

    Raises:
        ValidationError: If any input is not a finite positive number
    """
    coords = validate_coords(coords)
    distance = require_positive(distance, "distance")
    duration = require_positive(duration, "duration")
    cadence = require_positive(cadence, "cadence")
    return Running(
        id=generate_workout_id(),
        created_at=created_at or datetime.now().astimezone(),
        coords=coords,
        distance=distance,
        duration=duration,
        cadence=cadence,
    )


def create_cycling(coords, distance, duration, elevation_gain,
                   created_at: Optional[datetime] = None) -> Cycling:
    """Validate input and build a Cycling workout.

    Elevation gain only has to be finite: zero and negative values (net
    descent) are accepted.

    Raises:
        ValidationError: If distance or duration is not a finite positive
            number, or elevation gain is not finite
    """
    coords = validate_coords(coords)
    distance = require_positive(distance, "distance")
    duration = require_positive(duration, "duration")
    elevation_gain = require_finite(elevation_gain, "elevation_gain")
    return Cycling(
        id=generate_workout_id(),
        created_at=created_at or datetime.now().astimezone(),
        coords=coords,
        distance=distance,
        duration=duration,
        elevation_gain=elevation_gain,
    )


def create_workout(kind: str, coords, distance, duration, variant_value,
                   created_at: Optional[datetime] = None) -> Workout:
    """Dispatch to the factory for ``kind``."""
    if kind == RUNNING:
        return create_running(coords, distance, duration, variant_value, created_at=created_at)
    if kind == CYCLING:
        return create_cycling(coords, distance, duration, variant_value, created_at=created_at)
    raise ValidationError(f"Unknown workout type: {kind!r}", field="kind")
