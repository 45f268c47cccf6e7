"""Boundaries to the map and geolocation services.

The real map widget and position source live outside this package. The
Protocols below describe what the marker registry and the orchestrator need
from them; the in-memory classes are headless stand-ins used by the CLI and
the tests.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Tuple

from config import settings
from models.errors import GeolocationError
from models.workout import Coords

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Popup:
    """Popup attached to a map marker."""

    content: str
    class_name: Optional[str] = None
    max_width: int = settings.MarkerConfig.POPUP_MAX_WIDTH
    min_width: int = settings.MarkerConfig.POPUP_MIN_WIDTH
    auto_close: bool = settings.MarkerConfig.POPUP_AUTO_CLOSE
    close_on_click: bool = settings.MarkerConfig.POPUP_CLOSE_ON_CLICK


class MapCollaborator(Protocol):
    """Map overlay operations; handles are opaque to callers."""

    def place_marker(self, coords: Coords, popup: Popup) -> Any:
        ...

    def remove_marker(self, handle: Any) -> None:
        ...

    def pan_to(self, coords: Coords, zoom_level: int) -> None:
        ...


class GeolocationCollaborator(Protocol):
    """Source of the user's current position."""

    async def request_current_position(self) -> Coords:
        ...


@dataclass(frozen=True)
class MapMarker:
    """Marker as recorded by InMemoryMap."""

    coords: Coords
    popup: Popup


class InMemoryMap:
    """Headless map keeping markers in a dict keyed by integer handle."""

    def __init__(self):
        self.markers: Dict[int, MapMarker] = {}
        self.view: Optional[Tuple[Coords, int]] = None
        self._handles = itertools.count(1)

    def place_marker(self, coords: Coords, popup: Popup) -> int:
        handle = next(self._handles)
        self.markers[handle] = MapMarker(Coords(*coords), popup)
        logger.debug(f"Placed marker {handle} at {coords}")
        return handle

    def remove_marker(self, handle: int) -> None:
        if self.markers.pop(handle, None) is None:
            raise KeyError(f"No marker with handle {handle}")
        logger.debug(f"Removed marker {handle}")

    def pan_to(self, coords: Coords, zoom_level: int) -> None:
        self.view = (Coords(*coords), zoom_level)


class StaticGeolocation:
    """Resolves the position configured in the environment.

    Args:
        position: Fixed position; when omitted the configured home position
            is read on each request
    """

    def __init__(self, position: Optional[Coords] = None):
        self.position = position

    async def request_current_position(self) -> Coords:
        if self.position is not None:
            return self.position
        try:
            lat, lng = settings.get_home_position()
        except ValueError as e:
            raise GeolocationError(str(e)) from e
        return Coords(lat, lng)
