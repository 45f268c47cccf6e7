"""Shared pytest fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from maps.collaborators import InMemoryMap
from maps.marker_registry import MarkerRegistry
from storage.snapshot import SnapshotStore
from storage.workout_store import WorkoutStore
from sync.orchestrator import WorkoutOrchestrator


@pytest.fixture
def created_at():
    """A fixed local creation time: April 14, 09:30 at UTC+2."""
    return datetime(2024, 4, 14, 9, 30, 12, 345678, tzinfo=timezone(timedelta(hours=2)))


@pytest.fixture
def snapshot_path(tmp_path):
    return tmp_path / "data" / "workouts.json"


@pytest.fixture
def map_view():
    return InMemoryMap()


@pytest.fixture
def orchestrator(map_view, snapshot_path):
    return WorkoutOrchestrator(
        store=WorkoutStore(),
        markers=MarkerRegistry(map_view),
        snapshots=SnapshotStore(snapshot_path),
        map_view=map_view,
    )
