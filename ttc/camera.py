"""Vision-based time-to-collision from keypoint scale change."""

from __future__ import annotations

from typing import Sequence

from contracts import TTC_UNDEFINED, Correspondence, Keypoint, is_undefined
from log_config.logger import get_logger
from ttc.statistics import distance_ratios, median_lower

logger = get_logger(__name__)


def ttc_from_distance_ratio(median_ratio: float, frame_rate: float) -> float:
    """``TTC = -dT / (1 - ratio)``; NaN for a ratio of exactly 1 or a non-positive frame rate."""
    if frame_rate <= 0:
        logger.warning(f"Cannot compute camera TTC with frame rate {frame_rate}")
        return TTC_UNDEFINED
    if is_undefined(median_ratio) or median_ratio == 1.0:
        return TTC_UNDEFINED
    dT = 1.0 / frame_rate
    return -dT / (1.0 - median_ratio)


def compute_ttc_camera(
    prev_keypoints: Sequence[Keypoint],
    curr_keypoints: Sequence[Keypoint],
    correspondences: Sequence[Correspondence],
    frame_rate: float,
    min_dist: float = 100.0,
) -> float:
    """TTC from the median ratio of pairwise keypoint distances between frames."""
    ratios = distance_ratios(prev_keypoints, curr_keypoints, correspondences, min_dist)
    if not ratios:
        logger.debug(f"No distance ratios from {len(correspondences)} correspondences")
        return TTC_UNDEFINED
    return ttc_from_distance_ratio(median_lower(ratios), frame_rate)
