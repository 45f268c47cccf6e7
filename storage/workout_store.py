"""In-memory ordered collection of live workouts."""

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from models.errors import DuplicateIdError, NotFoundError
from models.workout import Workout

logger = logging.getLogger(__name__)


class WorkoutStore:
    """Authoritative list of live workouts, oldest first.

    Ids are unique; lookups go through an id index kept next to the list.
    """

    def __init__(self):
        self._workouts: List[Workout] = []
        self._index: Dict[str, Workout] = {}

    def add(self, workout: Workout) -> None:
        """Append a workout.

        Raises:
            DuplicateIdError: If a workout with the same id is already stored
        """
        if workout.id in self._index:
            raise DuplicateIdError(workout.id)
        self._workouts.append(workout)
        self._index[workout.id] = workout

    def remove_by_id(self, workout_id: str) -> Workout:
        """Remove and return the workout with ``workout_id``.

        Raises:
            NotFoundError: If no such workout is stored
        """
        workout = self._index.pop(workout_id, None)
        if workout is None:
            raise NotFoundError(workout_id)
        self._workouts.remove(workout)
        return workout

    def clear(self) -> None:
        self._workouts.clear()
        self._index.clear()

    def find_by_id(self, workout_id: str) -> Optional[Workout]:
        return self._index.get(workout_id)

    def list(self) -> Tuple[Workout, ...]:
        """Read-only snapshot of the stored workouts in insertion order."""
        return tuple(self._workouts)

    def is_empty(self) -> bool:
        return not self._workouts

    def __len__(self) -> int:
        return len(self._workouts)

    def __iter__(self) -> Iterator[Workout]:
        return iter(self.list())

    def __contains__(self, workout_id) -> bool:
        return workout_id in self._index
