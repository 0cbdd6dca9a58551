"""Lidar-to-camera calibration matrices and their loaders."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Sequence

import numpy as np
import yaml

from exceptions import InvalidCalibrationError
from log_config.logger import get_logger

logger = get_logger(__name__)


def _as_matrix(name: str, value: Any) -> np.ndarray:
    try:
        matrix = np.asarray(value, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidCalibrationError(f"{name} is not numeric: {e}", matrix_name=name)
    if not np.all(np.isfinite(matrix)):
        raise InvalidCalibrationError(f"{name} contains non-finite values", matrix_name=name)
    return matrix


def _to_homogeneous(name: str, matrix: np.ndarray) -> np.ndarray:
    """Embed a 3x3 rotation or a 3x4 rigid transform into a 4x4 matrix."""
    if matrix.shape == (4, 4):
        return matrix
    out = np.eye(4, dtype=float)
    if matrix.shape == (3, 3):
        out[:3, :3] = matrix
    elif matrix.shape == (3, 4):
        out[:3, :] = matrix
    else:
        raise InvalidCalibrationError(
            f"{name} must be 3x3, 3x4 or 4x4, got {matrix.shape}", matrix_name=name
        )
    return out


@dataclass(frozen=True, eq=False)
class SensorCalibration:
    """Fixed transform chain mapping lidar points into rectified image pixels.

    Attributes:
        p_rect: 3x4 projection matrix of the rectified camera
        r_rect: 4x4 rectifying rotation (a 3x3 input is embedded)
        rt: 4x4 lidar-to-camera extrinsic (a 3x4 input is embedded)
    """

    p_rect: np.ndarray
    r_rect: np.ndarray
    rt: np.ndarray
    chain: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        p_rect = _as_matrix("P_rect", self.p_rect)
        if p_rect.shape != (3, 4):
            raise InvalidCalibrationError(f"P_rect must be 3x4, got {p_rect.shape}", matrix_name="P_rect")
        r_rect = _to_homogeneous("R_rect", _as_matrix("R_rect", self.r_rect))
        rt = _to_homogeneous("RT", _as_matrix("RT", self.rt))
        object.__setattr__(self, "p_rect", p_rect)
        object.__setattr__(self, "r_rect", r_rect)
        object.__setattr__(self, "rt", rt)
        object.__setattr__(self, "chain", p_rect @ r_rect @ rt)

    @classmethod
    def from_dict(cls, data: Dict[str, Sequence]) -> "SensorCalibration":
        missing = [key for key in ("P_rect", "R_rect", "RT") if key not in data]
        if missing:
            raise InvalidCalibrationError(
                f"Missing calibration matrices: {', '.join(missing)}", matrix_name=missing[0]
            )
        return cls(
            p_rect=_reshape_flat("P_rect", data["P_rect"]),
            r_rect=_reshape_flat("R_rect", data["R_rect"]),
            rt=_reshape_flat("RT", data["RT"]),
        )

    def to_dict(self) -> Dict[str, list]:
        return {
            "P_rect": self.p_rect.tolist(),
            "R_rect": self.r_rect.tolist(),
            "RT": self.rt.tolist(),
        }


def _reshape_flat(name: str, value: Any) -> np.ndarray:
    """Reshape a flat row of 9, 12 or 16 values; 2-D input is returned as is."""
    matrix = _as_matrix(name, value)
    if matrix.ndim == 2:
        return matrix
    sizes = {9: (3, 3), 12: (3, 4), 16: (4, 4)}
    if matrix.size not in sizes:
        raise InvalidCalibrationError(f"{name} has {matrix.size} values", matrix_name=name)
    return matrix.reshape(sizes[matrix.size])


def load_kitti_calibration(path: Path, camera: str = "P2") -> SensorCalibration:
    """Load a KITTI ``calib.txt`` file.

    Args:
        path: Path to the calibration text file
        camera: Projection matrix key of the camera to project into

    Returns:
        SensorCalibration built from ``camera``, ``R0_rect`` and ``Tr_velo_to_cam``

    Raises:
        InvalidCalibrationError: If the file is missing or a matrix is malformed
    """
    path = Path(path)
    if not path.exists():
        raise InvalidCalibrationError(f"Calibration file not found: {path}")

    logger.info(f"Loading KITTI calibration from {path}")
    values: Dict[str, np.ndarray] = {}
    for line in path.read_text().splitlines():
        if ":" not in line:
            continue
        key, raw = line.split(":", 1)
        try:
            values[key.strip()] = np.array([float(x) for x in raw.split()], dtype=float)
        except ValueError as e:
            raise InvalidCalibrationError(f"Malformed row {key.strip()}: {e}", matrix_name=key.strip())

    return SensorCalibration.from_dict(
        {
            "P_rect": _require(values, camera),
            "R_rect": _require(values, "R0_rect"),
            "RT": _require(values, "Tr_velo_to_cam"),
        }
    )


def load_calibration_yaml(path: Path) -> SensorCalibration:
    """Load ``P_rect``, ``R_rect`` and ``RT`` from a YAML document."""
    path = Path(path)
    if not path.exists():
        raise InvalidCalibrationError(f"Calibration file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise InvalidCalibrationError(f"Failed to parse calibration file: {e}")
    if not isinstance(data, dict):
        raise InvalidCalibrationError(f"Calibration file {path} is not a mapping")
    return SensorCalibration.from_dict(data)


def load_calibration(path: Path) -> SensorCalibration:
    path = Path(path)
    if path.suffix.lower() in (".yaml", ".yml"):
        return load_calibration_yaml(path)
    return load_kitti_calibration(path)


def _require(values: Dict[str, np.ndarray], key: str) -> np.ndarray:
    if key not in values:
        raise InvalidCalibrationError(f"Missing calibration matrix: {key}", matrix_name=key)
    return values[key]
