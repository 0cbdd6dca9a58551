"""Calibration module."""

from .calibration import (
    SensorCalibration,
    load_calibration,
    load_calibration_yaml,
    load_kitti_calibration,
)

__all__ = [
    "SensorCalibration",
    "load_calibration",
    "load_calibration_yaml",
    "load_kitti_calibration",
]
