"""Correspondence between workout ids and map markers."""

import logging
from typing import Any, Dict, Optional, Tuple

from config.settings import MarkerConfig
from maps.collaborators import MapCollaborator, Popup
from models.errors import DuplicateIdError, NotFoundError
from models.workout import Coords

logger = logging.getLogger(__name__)


class MarkerRegistry:
    """Keeps exactly one map marker per registered workout id.

    Markers are looked up by workout id only. Two workouts logged at the same
    point each keep their own marker.
    """

    def __init__(self, map_view: MapCollaborator):
        """Initialize marker registry.

        Args:
            map_view: Map collaborator that places and removes markers
        """
        self.map_view = map_view
        self._handles: Dict[str, Any] = {}

    def attach(self, workout_id: str, coords: Coords, popup_content: str,
               kind: Optional[str] = None) -> Any:
        """Place a marker for ``workout_id`` and record its handle.

        Args:
            workout_id: Id of the workout the marker belongs to
            coords: Marker position
            popup_content: Text shown in the marker popup
            kind: Workout kind, used for the popup CSS class

        Returns:
            The handle returned by the map collaborator

        Raises:
            DuplicateIdError: If the id already has a marker
        """
        if workout_id in self._handles:
            raise DuplicateIdError(workout_id, "marker registry")

        popup = Popup(
            content=popup_content,
            class_name=f"{kind}{MarkerConfig.POPUP_CLASS_SUFFIX}" if kind else None,
        )
        handle = self.map_view.place_marker(coords, popup)
        self._handles[workout_id] = handle
        logger.debug(f"Attached marker {handle!r} for workout {workout_id}")
        return handle

    def detach(self, workout_id: str) -> None:
        """Remove the marker of ``workout_id`` from the map and the registry.

        Raises:
            NotFoundError: If the id has no marker
        """
        if workout_id not in self._handles:
            raise NotFoundError(workout_id, "marker registry")

        self.map_view.remove_marker(self._handles[workout_id])
        del self._handles[workout_id]
        logger.debug(f"Detached marker for workout {workout_id}")

    def clear(self) -> None:
        for workout_id in list(self._handles):
            self.detach(workout_id)

    def handle_for(self, workout_id: str) -> Optional[Any]:
        return self._handles.get(workout_id)

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, workout_id) -> bool:
        return workout_id in self._handles
