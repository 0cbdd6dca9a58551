"""Assignment of lidar points to detected regions via image projection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from calib.calibration import SensorCalibration
from contracts import RangePoint, Region
from fusion.projection import project_points
from log_config.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClusteringStats:
    assigned: int
    ambiguous: int
    unmatched: int
    behind_camera: int


def cluster_lidar_with_roi(
    regions: Sequence[Region],
    range_points: Sequence[RangePoint],
    shrink_factor: float,
    calibration: SensorCalibration,
) -> ClusteringStats:
    """Append each lidar point to the single region whose shrunk ROI encloses it.

    A point enclosed by several regions, or by none, is discarded. Points
    behind the camera plane never project and are discarded as well.

    Args:
        regions: Regions of the frame, mutated in place
        range_points: Lidar points of the same frame
        shrink_factor: Fraction in [0, 1) removed from each ROI dimension
        calibration: Lidar-to-image transform chain

    Returns:
        Counts of assigned and discarded points
    """
    if not 0.0 <= shrink_factor < 1.0:
        raise ValueError(f"shrink_factor must be in [0, 1), got {shrink_factor}")

    shrunk = [region.roi.shrink(shrink_factor) for region in regions]
    uv, valid = project_points(range_points, calibration)

    assigned = ambiguous = unmatched = 0
    for i, point in enumerate(range_points):
        if not valid[i]:
            continue
        u, v = uv[i]
        enclosing: List[Region] = [
            region for region, roi in zip(regions, shrunk) if roi.contains(u, v)
        ]
        if len(enclosing) == 1:
            enclosing[0].range_points.append(point)
            assigned += 1
        elif enclosing:
            ambiguous += 1
        else:
            unmatched += 1

    stats = ClusteringStats(
        assigned=assigned,
        ambiguous=ambiguous,
        unmatched=unmatched,
        behind_camera=int(len(range_points) - valid.sum()),
    )
    logger.debug(
        f"Clustered {len(range_points)} lidar points into {len(regions)} regions: "
        f"{stats.assigned} assigned, {stats.ambiguous} ambiguous, "
        f"{stats.unmatched} unmatched, {stats.behind_camera} behind camera"
    )
    return stats
