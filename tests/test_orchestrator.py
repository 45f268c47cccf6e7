"""Tests for the orchestrator keeping store, markers and snapshot in step."""

import asyncio
import json
import logging
from unittest.mock import MagicMock, patch

import pytest

from maps.collaborators import InMemoryMap, StaticGeolocation
from maps.marker_registry import MarkerRegistry
from models.errors import (
    CorruptSnapshotError,
    GeolocationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from models.workout import Coords, create_running
from storage.snapshot import SnapshotStore, workout_to_record
from storage.workout_store import WorkoutStore
from sync.orchestrator import WorkoutOrchestrator


def _snapshot_ids(path):
    return [record["id"] for record in json.loads(path.read_text(encoding="utf-8"))]


def test_log_workout_updates_all_three_views(orchestrator, map_view, snapshot_path):
    workout_id = orchestrator.log_workout("running", (10, 20), 5, 30, 180)

    workout = orchestrator.find(workout_id)
    assert workout.pace == pytest.approx(6.0)
    assert orchestrator.workouts == (workout,)
    assert orchestrator.markers.ids() == (workout_id,)
    marker = map_view.markers[orchestrator.markers.handle_for(workout_id)]
    assert marker.coords == Coords(10, 20)
    assert marker.popup.content == workout.description
    assert marker.popup.class_name == "running-popup"
    assert _snapshot_ids(snapshot_path) == [workout_id]
    assert not orchestrator.is_empty()


def test_logged_ids_are_unique(orchestrator):
    ids = [orchestrator.log_workout("cycling", (10, 20), 20, 60, 150) for _ in range(25)]
    assert len(set(ids)) == 25
    assert len(orchestrator.markers) == 25


def test_invalid_workout_changes_nothing(orchestrator, map_view, snapshot_path):
    orchestrator.log_workout("cycling", (10, 20), 20, 60, 150)
    snapshot_before = snapshot_path.read_bytes()
    workouts_before = orchestrator.workouts
    markers_before = dict(map_view.markers)

    with pytest.raises(ValidationError):
        orchestrator.log_workout("running", (10, 20), -1, 30, 180)

    assert orchestrator.workouts == workouts_before
    assert map_view.markers == markers_before
    assert len(orchestrator.markers) == 1
    assert snapshot_path.read_bytes() == snapshot_before


def test_invalid_first_workout_writes_no_snapshot(orchestrator, snapshot_path):
    with pytest.raises(ValidationError):
        orchestrator.log_workout("cycling", (10, 20), 20, 0, 150)
    assert not snapshot_path.exists()
    assert orchestrator.is_empty()


def test_map_failure_rolls_back_store(snapshot_path):
    failing_map = MagicMock()
    failing_map.place_marker.side_effect = RuntimeError("map not loaded")
    orchestrator = WorkoutOrchestrator(WorkoutStore(), MarkerRegistry(failing_map),
                                       SnapshotStore(snapshot_path))

    with pytest.raises(RuntimeError):
        orchestrator.log_workout("running", (10, 20), 5, 30, 180)

    assert orchestrator.is_empty()
    assert len(orchestrator.markers) == 0
    assert not snapshot_path.exists()


def test_remove_workout_updates_all_three_views(orchestrator, map_view, snapshot_path):
    first = orchestrator.log_workout("running", (10, 20), 5, 30, 180)
    second = orchestrator.log_workout("cycling", (10, 20), 20, 60, 150)

    removed = orchestrator.remove_workout(first)

    assert removed.id == first
    assert orchestrator.find(first) is None
    assert first not in orchestrator.markers
    assert orchestrator.markers.ids() == (second,)
    assert len(map_view.markers) == 1
    assert _snapshot_ids(snapshot_path) == [second]


def test_remove_unknown_id_changes_nothing(orchestrator, map_view, snapshot_path):
    orchestrator.log_workout("running", (10, 20), 5, 30, 180)
    snapshot_before = snapshot_path.read_bytes()

    with pytest.raises(NotFoundError):
        orchestrator.remove_workout("id-missing")

    assert len(orchestrator.workouts) == 1
    assert len(map_view.markers) == 1
    assert snapshot_path.read_bytes() == snapshot_before


def test_clear_all_empties_everything(orchestrator, map_view, snapshot_path):
    orchestrator.log_workout("running", (10, 20), 5, 30, 180)
    orchestrator.log_workout("cycling", (11, 21), 20, 60, 150)

    orchestrator.clear_all()

    assert orchestrator.is_empty()
    assert len(orchestrator.markers) == 0
    assert map_view.markers == {}
    assert json.loads(snapshot_path.read_text()) == []


@pytest.mark.parametrize("remove_index", [0, 1])
def test_log_two_remove_one_then_clear(orchestrator, remove_index):
    ids = [
        orchestrator.log_workout("running", (10, 20), 5, 30, 180),
        orchestrator.log_workout("cycling", (10, 20), 20, 60, 150),
    ]

    orchestrator.remove_workout(ids[remove_index])
    orchestrator.clear_all()

    assert orchestrator.workouts == ()
    assert orchestrator.markers.ids() == ()


def test_persistence_failure_keeps_in_memory_state(orchestrator, map_view):
    with patch.object(orchestrator.snapshots, "save", side_effect=PersistenceError("quota exceeded")):
        with pytest.raises(PersistenceError) as excinfo:
            orchestrator.log_workout("running", (10, 20), 5, 30, 180)

    workout_id = excinfo.value.workout_id
    assert orchestrator.find(workout_id) is not None
    assert workout_id in orchestrator.markers
    assert len(map_view.markers) == 1
    assert orchestrator.is_durable is False

    orchestrator.log_workout("cycling", (10, 20), 20, 60, 150)
    assert orchestrator.is_durable is True


def test_persistence_failure_on_remove_keeps_removal(orchestrator, snapshot_path):
    workout_id = orchestrator.log_workout("running", (10, 20), 5, 30, 180)

    with patch.object(orchestrator.snapshots, "save", side_effect=PersistenceError("disk full")):
        with pytest.raises(PersistenceError):
            orchestrator.remove_workout(workout_id)

    assert orchestrator.is_empty()
    assert len(orchestrator.markers) == 0
    assert _snapshot_ids(snapshot_path) == [workout_id]


def test_rehydrate_restores_store_and_markers(orchestrator, snapshot_path):
    first = orchestrator.log_workout("running", (10, 20), 5, 30, 180)
    second = orchestrator.log_workout("cycling", (30, 40), 20, 60, 150)
    original = orchestrator.workouts

    fresh_map = InMemoryMap()
    restarted = WorkoutOrchestrator(WorkoutStore(), MarkerRegistry(fresh_map), SnapshotStore(snapshot_path))

    assert restarted.rehydrate() == 2
    assert restarted.workouts == original
    assert [w.id for w in restarted.workouts] == [first, second]
    assert restarted.markers.ids() == (first, second)
    assert sorted(m.coords for m in fresh_map.markers.values()) == [Coords(10, 20), Coords(30, 40)]


def test_rehydrate_without_snapshot(orchestrator):
    assert orchestrator.rehydrate() == 0
    assert orchestrator.is_empty()


def test_rehydrate_replaces_previous_in_memory_state(orchestrator, map_view, snapshot_path):
    orchestrator.log_workout("running", (10, 20), 5, 30, 180)
    snapshot_path.write_text("[]")

    assert orchestrator.rehydrate() == 0
    assert map_view.markers == {}


def test_rehydrate_skips_bad_and_duplicate_records(orchestrator, snapshot_path, caplog):
    run = create_running((10, 20), 5, 30, 180)
    records = [workout_to_record(run), {"kind": "running"}, workout_to_record(run)]
    snapshot_path.parent.mkdir(parents=True)
    snapshot_path.write_text(json.dumps(records))

    with caplog.at_level(logging.WARNING):
        assert orchestrator.rehydrate() == 1

    assert orchestrator.workouts == (run,)
    assert len(orchestrator.markers) == 1
    assert "duplicated" in caplog.text


def test_rehydrate_survives_unreadable_snapshot(orchestrator, snapshot_path):
    snapshot_path.parent.mkdir(parents=True)
    snapshot_path.write_text("not json at all")

    assert orchestrator.rehydrate() == 0
    assert snapshot_path.read_text() == "not json at all"


def test_strict_rehydrate_raises(map_view, snapshot_path):
    snapshot_path.parent.mkdir(parents=True)
    snapshot_path.write_text('[{"kind": "cycling"}]')
    orchestrator = WorkoutOrchestrator(WorkoutStore(), MarkerRegistry(map_view),
                                       SnapshotStore(snapshot_path), skip_corrupt_records=False)

    with pytest.raises(CorruptSnapshotError):
        orchestrator.rehydrate()


def test_rehydrate_skips_record_with_out_of_range_number(orchestrator, snapshot_path):
    workout_id = orchestrator.log_workout("running", (10, 20), 5, 30, 180)
    records = json.loads(snapshot_path.read_text())
    huge = dict(records[0], id="idhuge", distance=10**400)
    snapshot_path.write_text(json.dumps(records + [huge]))

    assert orchestrator.rehydrate() == 1
    assert orchestrator.markers.ids() == (workout_id,)


def test_map_failure_during_rehydrate_keeps_store_and_markers_aligned(orchestrator, snapshot_path):
    first = orchestrator.log_workout("running", (10, 20), 5, 30, 180)
    orchestrator.log_workout("cycling", (30, 40), 20, 60, 150)

    flaky_map = MagicMock()
    flaky_map.place_marker.side_effect = ["marker-1", RuntimeError("map not loaded")]
    restarted = WorkoutOrchestrator(WorkoutStore(), MarkerRegistry(flaky_map), SnapshotStore(snapshot_path))

    with pytest.raises(RuntimeError):
        restarted.rehydrate()

    assert [w.id for w in restarted.workouts] == [first]
    assert restarted.markers.ids() == (first,)


def test_map_failure_during_clear_all_keeps_views_aligned(snapshot_path):
    flaky_map = MagicMock()
    flaky_map.place_marker.side_effect = ["marker-1", "marker-2"]
    flaky_map.remove_marker.side_effect = [None, RuntimeError("map not loaded")]
    orchestrator = WorkoutOrchestrator(WorkoutStore(), MarkerRegistry(flaky_map),
                                       SnapshotStore(snapshot_path))
    orchestrator.log_workout("running", (10, 20), 5, 30, 180)
    second = orchestrator.log_workout("cycling", (30, 40), 20, 60, 150)

    with pytest.raises(RuntimeError):
        orchestrator.clear_all()

    assert [w.id for w in orchestrator.workouts] == [second]
    assert orchestrator.markers.ids() == (second,)
    assert _snapshot_ids(snapshot_path) == [second]


def test_listeners_receive_workouts_and_empty_flag(orchestrator):
    calls = []
    orchestrator.subscribe(lambda workouts, is_empty: calls.append((len(workouts), is_empty)))

    workout_id = orchestrator.log_workout("running", (10, 20), 5, 30, 180)
    orchestrator.remove_workout(workout_id)
    orchestrator.log_workout("running", (10, 20), 5, 30, 180)
    orchestrator.clear_all()

    assert calls == [(1, False), (0, True), (1, False), (0, True)]


def test_failing_listener_does_not_break_mutation(orchestrator):
    orchestrator.subscribe(MagicMock(side_effect=RuntimeError("render failed")))
    workout_id = orchestrator.log_workout("running", (10, 20), 5, 30, 180)
    assert orchestrator.find(workout_id) is not None


def test_focus_workout_pans_map(orchestrator, map_view):
    workout_id = orchestrator.log_workout("cycling", (45.5, 9.2), 20, 60, 150)

    orchestrator.focus_workout(workout_id)

    assert map_view.view == (Coords(45.5, 9.2), 15)


def test_focus_unknown_workout(orchestrator):
    with pytest.raises(NotFoundError):
        orchestrator.focus_workout("id-missing")


def test_center_on_current_position(orchestrator, map_view):
    coords = asyncio.run(orchestrator.center_on_current_position(StaticGeolocation(Coords(1.5, 2.5))))

    assert coords == Coords(1.5, 2.5)
    assert map_view.view == (Coords(1.5, 2.5), 15)


def test_geolocation_failure_is_not_fatal(orchestrator, map_view):
    workout_id = orchestrator.log_workout("running", (10, 20), 5, 30, 180)

    class DeniedGeolocation:
        async def request_current_position(self):
            raise GeolocationError("User denied Geolocation")

    assert asyncio.run(orchestrator.center_on_current_position(DeniedGeolocation())) is None
    assert map_view.view is None
    assert orchestrator.find(workout_id) is not None
