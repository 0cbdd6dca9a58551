"""Synthetic approaching-vehicle scene for demos and tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from app.frame_io import FramePair
from calib.calibration import SensorCalibration
from contracts import Correspondence, Frame, Keypoint, RangePoint, Rect, Region
from fusion.projection import project_point

# Vehicle rear face in lidar coordinates (lidar 1.73 m above ground)
VEHICLE_HALF_WIDTH_M = 1.0
VEHICLE_Z_RANGE_M = (-1.73, -0.3)


@dataclass(frozen=True)
class SceneConfig:
    frame_rate: float = 10.0
    prev_distance_m: float = 10.0
    closing_speed_mps: float = 5.0
    lidar_points: int = 80
    range_noise_m: float = 0.0
    keypoints: int = 60
    pixel_noise: float = 0.0
    outlier_fraction: float = 0.2
    adjacent_vehicle: bool = True
    adjacent_offset_m: float = 3.5
    adjacent_distance_m: float = 12.0
    seed: int = 7


@dataclass(frozen=True)
class SimulatedScene:
    pair: FramePair
    calibration: SensorCalibration
    ttc_true: float
    lead_region_id: int = 0
    adjacent_region_id: int = 1


def simple_calibration(
    focal_px: float = 700.0, cx: float = 620.0, cy: float = 190.0
) -> SensorCalibration:
    """Forward camera at the lidar origin (x forward, y left, z up -> z forward, x right, y down)."""
    p_rect = np.array([[focal_px, 0.0, cx, 0.0], [0.0, focal_px, cy, 0.0], [0.0, 0.0, 1.0, 0.0]])
    rt = np.array([[0.0, -1.0, 0.0, 0.0], [0.0, 0.0, -1.0, 0.0], [1.0, 0.0, 0.0, 0.0]])
    return SensorCalibration(p_rect=p_rect, r_rect=np.eye(3), rt=rt)


def _vehicle_roi(calibration: SensorCalibration, distance: float, lateral: float, pad_px: float = 4.0) -> Rect:
    corners = [
        project_point(RangePoint(distance, lateral + dy, z), calibration)
        for dy in (-VEHICLE_HALF_WIDTH_M, VEHICLE_HALF_WIDTH_M)
        for z in VEHICLE_Z_RANGE_M
    ]
    us = [c[0] for c in corners]
    vs = [c[1] for c in corners]
    return Rect(
        x=min(us) - pad_px,
        y=min(vs) - pad_px,
        width=max(us) - min(us) + 2 * pad_px,
        height=max(vs) - min(vs) + 2 * pad_px,
    )


def _rear_face_points(
    rng: np.random.Generator, n: int, distance: float, lateral: float, noise: float
) -> List[RangePoint]:
    ys = rng.uniform(-0.9, 0.9, n) + lateral
    zs = rng.uniform(-1.4, -0.95, n)
    xs = distance + (rng.normal(0.0, noise, n) if noise > 0 else np.zeros(n))
    return [RangePoint(float(x), float(y), float(z), 0.5) for x, y, z in zip(xs, ys, zs)]


def _project_features(
    calibration: SensorCalibration, features: np.ndarray, distance: float, lateral: float
) -> np.ndarray:
    return np.array(
        [project_point(RangePoint(distance, lateral + dy, z), calibration) for dy, z in features]
    )


def simulate_frame_pair(config: SceneConfig = SceneConfig()) -> SimulatedScene:
    """Lead vehicle closing at constant speed, optional static vehicle in the next lane."""
    rng = np.random.default_rng(config.seed)
    calibration = simple_calibration()
    dt = 1.0 / config.frame_rate
    d_prev = config.prev_distance_m
    d_curr = d_prev - config.closing_speed_mps * dt
    ttc_true = d_curr * dt / (d_prev - d_curr) if d_prev != d_curr else float("nan")

    vehicles: List[Tuple[int, float, float, float]] = [(0, 0.0, d_prev, d_curr)]
    if config.adjacent_vehicle:
        d_adj = config.adjacent_distance_m
        vehicles.append((1, config.adjacent_offset_m, d_adj, d_adj))

    frames = []
    keypoints_prev: List[Tuple[float, float]] = []
    keypoints_curr: List[Tuple[float, float]] = []
    distances: List[float] = []
    for region_id, lateral, dp, dc in vehicles:
        features = np.column_stack(
            [
                rng.uniform(-0.95 * VEHICLE_HALF_WIDTH_M, 0.95 * VEHICLE_HALF_WIDTH_M, config.keypoints),
                rng.uniform(VEHICLE_Z_RANGE_M[0] + 0.05, VEHICLE_Z_RANGE_M[1] - 0.05, config.keypoints),
            ]
        )
        uv_prev = _project_features(calibration, features, dp, lateral)
        uv_curr = _project_features(calibration, features, dc, lateral)
        if config.pixel_noise > 0:
            uv_prev = uv_prev + rng.normal(0.0, config.pixel_noise, uv_prev.shape)
            uv_curr = uv_curr + rng.normal(0.0, config.pixel_noise, uv_curr.shape)

        roi_curr = _vehicle_roi(calibration, dc, lateral)
        outliers = rng.random(config.keypoints) < config.outlier_fraction
        for k in range(config.keypoints):
            u_c, v_c = uv_curr[k]
            if outliers[k]:
                # Wrong match somewhere inside the same object
                u_c = rng.uniform(roi_curr.x, roi_curr.x + roi_curr.width)
                v_c = rng.uniform(roi_curr.y, roi_curr.y + roi_curr.height)
                distances.append(float(rng.uniform(60.0, 100.0)))
            else:
                distances.append(float(rng.uniform(5.0, 15.0)))
            keypoints_prev.append((float(uv_prev[k][0]), float(uv_prev[k][1])))
            keypoints_curr.append((float(u_c), float(v_c)))

    for frame_index, keypoints, pick in ((0, keypoints_prev, 2), (1, keypoints_curr, 3)):
        regions = []
        points: List[RangePoint] = []
        for vehicle in vehicles:
            region_id, lateral, distance = vehicle[0], vehicle[1], vehicle[pick]
            regions.append(
                Region(region_id=region_id, roi=_vehicle_roi(calibration, distance, lateral), class_id=2, confidence=0.9)
            )
            points.extend(_rear_face_points(rng, config.lidar_points, distance, lateral, config.range_noise_m))
        frames.append(
            Frame(
                frame_index=frame_index,
                keypoints=[Keypoint(x=u, y=v, index=i) for i, (u, v) in enumerate(keypoints)],
                regions=regions,
                range_points=points,
            )
        )

    correspondences = [
        Correspondence(prev_idx=i, curr_idx=i, distance=distances[i]) for i in range(len(distances))
    ]
    pair = FramePair(
        previous=frames[0],
        current=frames[1],
        correspondences=correspondences,
        frame_rate=config.frame_rate,
    )
    return SimulatedScene(pair=pair, calibration=calibration, ttc_true=ttc_true)
