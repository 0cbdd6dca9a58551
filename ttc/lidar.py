"""Range-based time-to-collision from the closest in-lane lidar points."""

from __future__ import annotations

from typing import Sequence

from contracts import TTC_UNDEFINED, RangePoint, is_undefined
from log_config.logger import get_logger
from ttc.statistics import ClosestDistanceReducer

logger = get_logger(__name__)


def closest_distance(
    points: Sequence[RangePoint],
    lane_width: float = 4.0,
    reducer: ClosestDistanceReducer = ClosestDistanceReducer(),
) -> float:
    """Robust closest forward distance of the points with ``|y| <= lane_width / 2``.

    NaN when no point lies in the ego lane.
    """
    half_width = lane_width / 2.0
    in_lane = [point.x for point in points if abs(point.y) <= half_width]
    if not in_lane:
        return TTC_UNDEFINED
    return reducer(in_lane)


def compute_ttc_lidar(
    prev_points: Sequence[RangePoint],
    curr_points: Sequence[RangePoint],
    frame_rate: float,
    lane_width: float = 4.0,
    reducer: ClosestDistanceReducer = ClosestDistanceReducer(),
) -> float:
    """Constant-velocity TTC from two consecutive lidar measurements.

    ``TTC = d_curr * dT / (d_prev - d_curr)`` with ``dT = 1 / frame_rate``.
    A receding object gives a negative TTC, which is returned as is.

    Returns:
        TTC in seconds, or NaN when either set (or its in-lane subset) is
        empty, the distances are equal, or the frame rate is not positive
    """
    if not prev_points or not curr_points:
        return TTC_UNDEFINED
    if frame_rate <= 0:
        logger.warning(f"Cannot compute lidar TTC with frame rate {frame_rate}")
        return TTC_UNDEFINED

    d_prev = closest_distance(prev_points, lane_width, reducer)
    d_curr = closest_distance(curr_points, lane_width, reducer)
    if is_undefined(d_prev) or is_undefined(d_curr):
        logger.debug("No lidar points inside the ego lane")
        return TTC_UNDEFINED

    delta = d_prev - d_curr
    if delta == 0:
        return TTC_UNDEFINED
    dT = 1.0 / frame_rate
    return d_curr * dT / delta
