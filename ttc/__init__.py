"""Time-to-collision estimators."""

from ttc.camera import compute_ttc_camera, ttc_from_distance_ratio
from ttc.lidar import closest_distance, compute_ttc_lidar
from ttc.statistics import REDUCERS, ClosestDistanceReducer, distance_ratios, median_lower

__all__ = [
    "REDUCERS",
    "ClosestDistanceReducer",
    "closest_distance",
    "compute_ttc_camera",
    "compute_ttc_lidar",
    "distance_ratios",
    "median_lower",
    "ttc_from_distance_ratio",
]
