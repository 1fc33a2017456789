"""Network geometry for the rake allocation planner."""

from .distance import DistanceModel, distance_km, haversine_km

__all__ = [
    "DistanceModel",
    "distance_km",
    "haversine_km",
]
