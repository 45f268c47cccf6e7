"""Single entry point for changing workout state.

Every mutation goes through :class:`WorkoutOrchestrator`, which keeps the
workout store, the marker registry and the snapshot file in step.
"""

import logging
from typing import Callable, List, Optional, Tuple

from config import settings
from maps.collaborators import GeolocationCollaborator, MapCollaborator
from maps.marker_registry import MarkerRegistry
from models.errors import (
    CorruptSnapshotError,
    DuplicateIdError,
    GeolocationError,
    NotFoundError,
    PersistenceError,
)
from models.workout import Coords, Workout, create_workout
from storage.snapshot import SnapshotStore
from storage.workout_store import WorkoutStore

logger = logging.getLogger(__name__)

# Called with (workouts, is_empty) after each change
Listener = Callable[[Tuple[Workout, ...], bool], None]


class WorkoutOrchestrator:
    """Applies adds, removals and clears to store, markers and snapshot together.

    Validation or map failures leave all three views untouched. A failed
    snapshot write keeps the new in-memory state and is reported as a
    PersistenceError; ``is_durable`` stays False until a later save succeeds.
    """

    def __init__(self, store: WorkoutStore, markers: MarkerRegistry,
                 snapshots: SnapshotStore, map_view: Optional[MapCollaborator] = None,
                 skip_corrupt_records: bool = settings.SKIP_CORRUPT_RECORDS,
                 zoom_level: int = settings.MAP_ZOOM_LEVEL):
        self.store = store
        self.markers = markers
        self.snapshots = snapshots
        self.map_view = map_view if map_view is not None else markers.map_view
        self.skip_corrupt_records = skip_corrupt_records
        self.zoom_level = zoom_level
        self.is_durable = True
        self._listeners: List[Listener] = []

    @property
    def workouts(self) -> Tuple[Workout, ...]:
        return self.store.list()

    def is_empty(self) -> bool:
        return self.store.is_empty()

    def find(self, workout_id: str) -> Optional[Workout]:
        return self.store.find_by_id(workout_id)

    def subscribe(self, listener: Listener) -> None:
        """Register a view callback, called with (workouts, is_empty) after each change."""
        self._listeners.append(listener)

    def log_workout(self, kind: str, coords, distance, duration, variant_value) -> str:
        """Create a workout and add it to every view.

        Args:
            kind: 'running' or 'cycling'
            coords: (lat, lng) where the workout was logged
            distance: Distance in km
            duration: Duration in minutes
            variant_value: Cadence for runs, elevation gain for rides

        Returns:
            Id of the new workout

        Raises:
            ValidationError: If the input is invalid; nothing is changed
            PersistenceError: If the snapshot write failed; the workout is
                still live in memory and its id is on the error
        """
        workout = create_workout(kind, coords, distance, duration, variant_value)

        self.store.add(workout)
        try:
            self._attach(workout)
        except Exception:
            self.store.remove_by_id(workout.id)
            raise

        logger.info(f"Logged {workout.description} ({workout.distance} km, {workout.duration} min)")
        self._save(workout_id=workout.id)
        return workout.id

    def remove_workout(self, workout_id: str) -> Workout:
        """Remove one workout from every view.

        Returns:
            The removed workout

        Raises:
            NotFoundError: If the id is unknown; nothing is changed
            PersistenceError: If the snapshot write failed after removal
        """
        if workout_id not in self.store:
            logger.info(f"Ignoring removal of unknown workout {workout_id}")
            raise NotFoundError(workout_id)

        self.markers.detach(workout_id)
        workout = self.store.remove_by_id(workout_id)

        logger.info(f"Removed {workout.description} ({workout_id})")
        self._save(workout_id=workout_id)
        return workout

    def clear_all(self) -> None:
        """Remove every workout and marker and save an empty snapshot."""
        count = len(self.store)
        try:
            self._clear_views()
        except Exception:
            logger.error(f"Clear stopped with {len(self.store)} of {count} workouts left on the map")
            self._save()
            raise

        logger.info(f"Cleared {count} workouts")
        self._save()

    def rehydrate(self) -> int:
        """Rebuild store and markers from the saved snapshot.

        Bad records are skipped unless ``skip_corrupt_records`` is off. An
        unreadable snapshot is logged and treated as empty. The snapshot file
        itself is not rewritten.

        Returns:
            Number of workouts restored
        """
        self._clear_views()

        try:
            restored = self.snapshots.load(strict=not self.skip_corrupt_records)
        except CorruptSnapshotError as e:
            if not self.skip_corrupt_records:
                raise
            logger.error(f"Starting without saved workouts: {e}")
            restored = []

        for workout in restored:
            try:
                self.store.add(workout)
            except DuplicateIdError as e:
                if not self.skip_corrupt_records:
                    raise CorruptSnapshotError(str(e))
                logger.warning(f"Skipping duplicated snapshot record: {e}")
                continue
            try:
                self._attach(workout)
            except Exception:
                self.store.remove_by_id(workout.id)
                raise

        logger.info(f"Restored {len(self.store)} workouts")
        self._notify()
        return len(self.store)

    def focus_workout(self, workout_id: str) -> Workout:
        """Pan the map to a workout's position.

        Raises:
            NotFoundError: If the id is unknown
        """
        workout = self.store.find_by_id(workout_id)
        if workout is None:
            raise NotFoundError(workout_id)
        self.map_view.pan_to(workout.coords, self.zoom_level)
        return workout

    async def center_on_current_position(self, geolocation: GeolocationCollaborator) -> Optional[Coords]:
        """Ask for the current position once and center the map on it.

        Failure is logged and leaves the map where it is. Workout state is
        never touched.
        """
        try:
            coords = await geolocation.request_current_position()
        except GeolocationError as e:
            logger.warning(f"Could not get current position: {e}")
            return None

        self.map_view.pan_to(coords, self.zoom_level)
        logger.info(f"Map centered on {coords.lat:.5f}, {coords.lng:.5f}")
        return coords

    def _clear_views(self) -> None:
        try:
            self.markers.clear()
        except Exception:
            # Keep the workouts whose markers could not be removed
            for workout in self.store.list():
                if workout.id not in self.markers:
                    self.store.remove_by_id(workout.id)
            raise
        self.store.clear()

    def _attach(self, workout: Workout) -> None:
        self.markers.attach(workout.id, workout.coords, workout.description, kind=workout.kind)

    def _save(self, workout_id: Optional[str] = None) -> None:
        try:
            self.snapshots.save(self.store.list())
        except PersistenceError as e:
            self.is_durable = False
            logger.warning(f"Workouts not saved, changes will be lost on restart: {e}")
            self._notify()
            raise PersistenceError(str(e), workout_id=workout_id) from e

        self.is_durable = True
        self._notify()

    def _notify(self) -> None:
        workouts = self.store.list()
        is_empty = not workouts
        for listener in list(self._listeners):
            try:
                listener(workouts, is_empty)
            except Exception as e:
                logger.error(f"View listener {listener!r} failed: {e}")
