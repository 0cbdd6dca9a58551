"""Core data contracts for range points, keypoints, regions, and frames."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

# Current region id -> previous region id
AssociationMap = Dict[int, int]

# Sentinel for a time-to-collision that cannot be computed
TTC_UNDEFINED = float("nan")


def is_undefined(ttc: float) -> bool:
    """True for the NaN sentinel of a TTC that could not be computed."""
    return math.isnan(ttc)


@dataclass(frozen=True)
class RangePoint:
    x: float  # forward (m)
    y: float  # left (m)
    z: float  # up (m)
    r: float = 0.0  # reflectivity


@dataclass(frozen=True)
class Keypoint:
    x: float
    y: float
    index: int
    size: float = 0.0
    response: float = 0.0

    @property
    def pt(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Correspondence:
    prev_idx: int
    curr_idx: int
    distance: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned pixel rectangle with half-open containment."""

    x: float
    y: float
    width: float
    height: float

    def contains(self, u: float, v: float) -> bool:
        return self.x <= u < self.x + self.width and self.y <= v < self.y + self.height

    def shrink(self, factor: float) -> "Rect":
        """Move every side inward by ``factor / 2`` of the matching dimension."""
        if factor == 0.0:
            return self
        return Rect(
            x=self.x + factor * self.width / 2.0,
            y=self.y + factor * self.height / 2.0,
            width=self.width * (1.0 - factor),
            height=self.height * (1.0 - factor),
        )

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


@dataclass
class Region:
    region_id: int
    roi: Rect
    class_id: int = -1
    confidence: float = 0.0
    range_points: List[RangePoint] = field(default_factory=list)
    correspondences: List[Correspondence] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "region_id": self.region_id,
            "roi": list(self.roi.to_tuple()),
            "class_id": self.class_id,
            "confidence": self.confidence,
            "n_range_points": len(self.range_points),
            "n_correspondences": len(self.correspondences),
        }


@dataclass
class Frame:
    frame_index: int
    keypoints: List[Keypoint]
    regions: List[Region]
    range_points: List[RangePoint] = field(default_factory=list)

    def region_by_id(self, region_id: int) -> Region:
        for region in self.regions:
            if region.region_id == region_id:
                return region
        raise KeyError(region_id)
