"""Adapters from OpenCV front-end outputs to the shared contracts."""

from __future__ import annotations

from typing import Iterable, List, Sequence

import cv2

from contracts.types import Correspondence, Keypoint, Rect


def keypoints_from_cv(keypoints: Sequence[cv2.KeyPoint]) -> List[Keypoint]:
    """Convert detector keypoints, using the list position as the frame-local index."""
    return [
        Keypoint(
            x=float(kp.pt[0]),
            y=float(kp.pt[1]),
            index=i,
            size=float(kp.size),
            response=float(kp.response),
        )
        for i, kp in enumerate(keypoints)
    ]


def correspondences_from_cv(matches: Iterable[cv2.DMatch]) -> List[Correspondence]:
    """Convert matcher output where queryIdx is the previous and trainIdx the current frame."""
    return [
        Correspondence(prev_idx=int(m.queryIdx), curr_idx=int(m.trainIdx), distance=float(m.distance))
        for m in matches
    ]


def rect_from_cv(rect: Sequence[float]) -> Rect:
    """Build a Rect from an OpenCV style ``(x, y, w, h)`` tuple."""
    x, y, w, h = rect
    return Rect(x=float(x), y=float(y), width=float(w), height=float(h))
