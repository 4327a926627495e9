"""Device location sources used for clock-in/out."""

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


class LocationUnavailable(Exception):
    """Raised when the device cannot (or may not) report its position."""

    pass


class LocationProvider:
    """Interface for a one-shot position lookup; called fresh on every attempt."""

    def get_current_position(self) -> Coordinates:
        raise NotImplementedError


class StaticLocationProvider(LocationProvider):
    """Always reports the same position; None models a denied permission."""

    def __init__(self, coordinates: Optional[Coordinates]):
        self.coordinates = coordinates

    def get_current_position(self) -> Coordinates:
        if self.coordinates is None:
            raise LocationUnavailable("Location permission not granted")
        return self.coordinates
