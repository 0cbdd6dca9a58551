"""Attribution of keypoint correspondences to a region with outlier rejection."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from contracts import Correspondence, Keypoint, Region
from exceptions import FrameDataError
from log_config.logger import get_logger

logger = get_logger(__name__)


def keypoint_at(keypoints: Sequence[Keypoint], index: int, frame: str) -> Keypoint:
    if not 0 <= index < len(keypoints):
        raise FrameDataError(
            f"Correspondence references {frame} keypoint {index} but the frame has {len(keypoints)}"
        )
    return keypoints[index]


def cluster_kpt_matches_with_roi(
    region: Region,
    prev_keypoints: Sequence[Keypoint],
    curr_keypoints: Sequence[Keypoint],
    correspondences: Sequence[Correspondence],
    distance_ratio: float = 0.7,
) -> List[Correspondence]:
    """Append the correspondences of ``region`` whose match distance is not an outlier.

    A correspondence belongs to the region when its current keypoint lies in
    the (unshrunk) ROI. Candidates with a distance at or above
    ``distance_ratio`` times the candidate mean are rejected.

    Returns:
        The correspondences appended to the region
    """
    candidates: List[Correspondence] = []
    for match in correspondences:
        kpt = keypoint_at(curr_keypoints, match.curr_idx, "current")
        if region.roi.contains(kpt.x, kpt.y):
            candidates.append(match)

    if not candidates:
        logger.debug(f"Region {region.region_id}: no correspondences inside ROI")
        return []

    mean_dist = float(np.mean([match.distance for match in candidates]))
    threshold = distance_ratio * mean_dist
    kept = [match for match in candidates if match.distance < threshold]
    region.correspondences.extend(kept)

    logger.debug(
        f"Region {region.region_id}: kept {len(kept)}/{len(candidates)} correspondences "
        f"(mean distance {mean_dist:.2f}, threshold {threshold:.2f})"
    )
    return kept
