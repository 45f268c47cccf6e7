"""Map collaborators and the workout marker registry."""

from .collaborators import (
    Popup,
    MapCollaborator,
    GeolocationCollaborator,
    InMemoryMap,
    StaticGeolocation,
)
from .marker_registry import MarkerRegistry

__all__ = [
    'Popup',
    'MapCollaborator',
    'GeolocationCollaborator',
    'InMemoryMap',
    'StaticGeolocation',
    'MarkerRegistry',
]
