from .currency import format_currency
from .location import Coordinates, LocationProvider, LocationUnavailable, StaticLocationProvider

__all__ = [
    "format_currency",
    "Coordinates",
    "LocationProvider",
    "LocationUnavailable",
    "StaticLocationProvider",
]
