"""Data models for Workout Mapper."""

from .errors import (
    WorkoutMapperError,
    ValidationError,
    NotFoundError,
    DuplicateIdError,
    CorruptSnapshotError,
    PersistenceError,
    GeolocationError,
)
from .workout import (
    Coords,
    Workout,
    Running,
    Cycling,
    RUNNING,
    CYCLING,
    create_running,
    create_cycling,
    create_workout,
)

__all__ = [
    'Coords',
    'Workout',
    'Running',
    'Cycling',
    'RUNNING',
    'CYCLING',
    'create_running',
    'create_cycling',
    'create_workout',
    'WorkoutMapperError',
    'ValidationError',
    'NotFoundError',
    'DuplicateIdError',
    'CorruptSnapshotError',
    'PersistenceError',
    'GeolocationError',
]
