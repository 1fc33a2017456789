"""Great-circle distance model.

Distances are straight-line (spherical earth) approximations. Route geometry
is out of scope for the planner.
"""

import math
from typing import Tuple


#: Mean earth radius used by the spherical approximation (km)
EARTH_RADIUS_KM = 6371.0

#: Minimum planning distance (km); avoids zero-distance candidates
MIN_DISTANCE_KM = 1


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Args:
        lat1: Latitude of point 1 in decimal degrees
        lon1: Longitude of point 1 in decimal degrees
        lat2: Latitude of point 2 in decimal degrees
        lon2: Longitude of point 2 in decimal degrees

    Returns:
        Distance in kilometers (unrounded, may be 0)
    """
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance_km(a: Tuple[float, float], b: Tuple[float, float]) -> int:
    """
    Planning distance between two (lat, lng) points.

    Rounded to the nearest km and floored at MIN_DISTANCE_KM so that no
    candidate has a zero distance.

    Args:
        a: (latitude, longitude) of the first point
        b: (latitude, longitude) of the second point

    Returns:
        Whole kilometers, at least MIN_DISTANCE_KM
    """
    # Half-kilometers round up
    return max(MIN_DISTANCE_KM, math.floor(haversine_km(a[0], a[1], b[0], b[1]) + 0.5))


class DistanceModel:
    """Yard-to-customer distance lookup with memoization.

    Distances are symmetric and deterministic, so results are cached per
    unordered point pair for the lifetime of the instance.
    """

    def __init__(self):
        self._cache = {}

    def distance_km(self, a: Tuple[float, float], b: Tuple[float, float]) -> int:
        key = (a, b) if a <= b else (b, a)
        if key not in self._cache:
            self._cache[key] = distance_km(*key)
        return self._cache[key]

    def between(self, yard, customer) -> int:
        """Distance from a yard to a customer (both with lat/lng)."""
        return self.distance_km((yard.lat, yard.lng), (customer.lat, customer.lng))

    def __len__(self) -> int:
        return len(self._cache)
