"""Robust statistics shared by the TTC estimators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from contracts import Correspondence, Keypoint
from fusion.keypoints import keypoint_at

REDUCERS = ("min", "percentile", "median", "trimmed_mean")


def median_lower(values: Sequence[float]) -> float:
    """Median of ``values``; for an even count the lower of the two middle elements."""
    if not values:
        return float("nan")
    ordered = sorted(values)
    n = len(ordered)
    if n % 2 == 0:
        return float(ordered[n // 2 - 1])
    return float(ordered[n // 2])


@dataclass(frozen=True)
class ClosestDistanceReducer:
    """Reduce the forward distances of in-lane points to one closest-distance value.

    ``percentile`` (default) takes the ``percentile``-th percentile with
    linear interpolation, ``trimmed_mean`` averages the distances
    after dropping ``trim_fraction`` of the points on each side, ``median``
    uses :func:`median_lower`, ``min`` is the raw minimum.
    """

    method: str = "percentile"
    percentile: float = 10.0
    trim_fraction: float = 0.1

    def __post_init__(self) -> None:
        if self.method not in REDUCERS:
            raise ValueError(f"Unknown reducer {self.method!r}, expected one of {REDUCERS}")
        if not 0.0 <= self.percentile <= 100.0:
            raise ValueError(f"percentile must be in [0, 100], got {self.percentile}")
        if not 0.0 <= self.trim_fraction < 0.5:
            raise ValueError(f"trim_fraction must be in [0, 0.5), got {self.trim_fraction}")

    def __call__(self, distances: Sequence[float]) -> float:
        if len(distances) == 0:
            return float("nan")
        values = np.sort(np.asarray(distances, dtype=float))
        if self.method == "min":
            return float(values[0])
        if self.method == "median":
            return median_lower(values.tolist())
        if self.method == "trimmed_mean":
            k = int(len(values) * self.trim_fraction)
            trimmed = values[k : len(values) - k]
            return float(trimmed.mean())
        return float(np.percentile(values, self.percentile))


def distance_ratios(
    prev_keypoints: Sequence[Keypoint],
    curr_keypoints: Sequence[Keypoint],
    correspondences: Sequence[Correspondence],
    min_dist: float = 100.0,
) -> List[float]:
    """Ratios of current to previous pixel distance over all unordered correspondence pairs.

    Pairs whose previous distance is within float epsilon of zero, or whose
    current distance is below ``min_dist``, are skipped.
    """
    if len(correspondences) < 2:
        return []
    curr = np.array([keypoint_at(curr_keypoints, m.curr_idx, "current").pt for m in correspondences], dtype=float)
    prev = np.array([keypoint_at(prev_keypoints, m.prev_idx, "previous").pt for m in correspondences], dtype=float)

    i, j = np.triu_indices(len(correspondences), k=1)
    dist_curr = np.linalg.norm(curr[i] - curr[j], axis=1)
    dist_prev = np.linalg.norm(prev[i] - prev[j], axis=1)

    keep = (dist_prev > np.finfo(float).eps) & (dist_curr >= min_dist)
    return (dist_curr[keep] / dist_prev[keep]).tolist()

