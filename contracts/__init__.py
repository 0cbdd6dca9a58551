"""Shared data contracts for range/camera TTC fusion."""

from .types import (
    TTC_UNDEFINED,
    AssociationMap,
    Correspondence,
    Frame,
    Keypoint,
    RangePoint,
    Rect,
    Region,
    is_undefined,
)

__all__ = [
    "AssociationMap",
    "Correspondence",
    "Frame",
    "Keypoint",
    "RangePoint",
    "Rect",
    "Region",
    "TTC_UNDEFINED",
    "is_undefined",
]
