"""Projection of lidar points into rectified camera pixels."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from calib.calibration import SensorCalibration
from contracts import RangePoint


def project_point(point: RangePoint, calibration: SensorCalibration) -> Optional[Tuple[float, float]]:
    """Project one point through ``P_rect * R_rect * RT``.

    Returns None when the depth component is not positive, i.e. the point
    lies on or behind the camera plane and has no meaningful pixel.
    """
    X = np.array([point.x, point.y, point.z, 1.0], dtype=float)
    Y = calibration.chain @ X
    w = Y[2]
    if w <= 0:
        return None
    return float(Y[0] / w), float(Y[1] / w)


def project_points(
    points: Sequence[RangePoint], calibration: SensorCalibration
) -> Tuple[np.ndarray, np.ndarray]:
    """Vectorised projection.

    Returns:
        (uv, valid) where uv is (N, 2) pixel coordinates and valid is a
        boolean mask of points in front of the camera. Rows of uv for
        invalid points are NaN.
    """
    n = len(points)
    uv = np.full((n, 2), np.nan, dtype=float)
    if n == 0:
        return uv, np.zeros(0, dtype=bool)
    X = np.ones((4, n), dtype=float)
    X[0] = [p.x for p in points]
    X[1] = [p.y for p in points]
    X[2] = [p.z for p in points]
    Y = calibration.chain @ X
    valid = Y[2] > 0
    uv[valid, 0] = Y[0, valid] / Y[2, valid]
    uv[valid, 1] = Y[1, valid] / Y[2, valid]
    return uv, valid
