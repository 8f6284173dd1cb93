"""Great-circle distance and geofence types."""
import math
from dataclasses import dataclass
from typing import NamedTuple, Union

EARTH_RADIUS_METERS = 6371000

class Coordinates(NamedTuple):
    """A (latitude, longitude) pair in decimal degrees."""
    latitude: float
    longitude: float

def haversine_distance(a: Coordinates, b: Coordinates) -> float:
    """Calculate distance between two GPS points in meters."""
    lat1_rad = math.radians(a.latitude)
    lat2_rad = math.radians(b.latitude)
    delta_lat = math.radians(b.latitude - a.latitude)
    delta_lon = math.radians(b.longitude - a.longitude)

    h = (math.sin(delta_lat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) *
         math.sin(delta_lon / 2) ** 2)
    # rounding can push h just past 1 for antipodal points
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_METERS * c

@dataclass(frozen=True)
class NoGeofence:
    """Session accepts check-ins from anywhere."""

@dataclass(frozen=True)
class Geofence:
    """Circular region a check-in position must fall within."""
    center: Coordinates
    radius_meters: float

    def distance_to(self, position: Coordinates) -> float:
        return haversine_distance(position, self.center)

    def contains(self, position: Coordinates) -> bool:
        # the boundary itself counts as inside
        return self.distance_to(position) <= self.radius_meters

SessionGeofence = Union[NoGeofence, Geofence]
