"""Workout store and snapshot persistence."""

from .workout_store import WorkoutStore
from .snapshot import SnapshotStore, workout_to_record, workout_from_record

__all__ = ['WorkoutStore', 'SnapshotStore', 'workout_to_record', 'workout_from_record']
