"""Range ROI crop applied to raw lidar scans before clustering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from contracts import RangePoint


@dataclass(frozen=True)
class RangeCrop:
    min_x: float = 2.0
    max_x: float = 20.0
    max_y: float = 2.0
    min_z: float = -1.5
    max_z: float = -0.9
    min_r: float = 0.1

    def contains(self, point: RangePoint) -> bool:
        return (
            self.min_x <= point.x <= self.max_x
            and abs(point.y) <= self.max_y
            and self.min_z <= point.z <= self.max_z
            and point.r >= self.min_r
        )


def crop_range_points(points: Sequence[RangePoint], crop: RangeCrop) -> List[RangePoint]:
    """Keep the points inside the crop box, preserving their order."""
    return [point for point in points if crop.contains(point)]
