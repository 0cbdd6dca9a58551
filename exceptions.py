"""Custom exception classes for the TTC fusion core."""

from __future__ import annotations

from typing import Optional


class TTCFusionError(Exception):
    """Base exception for all TTC fusion errors."""

    pass


class ConfigError(TTCFusionError):
    """Base exception for configuration errors."""

    pass


class InvalidConfigError(ConfigError):
    """Raised when configuration file is invalid or corrupted."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when configuration fails schema validation."""

    def __init__(self, message: str, validation_errors: Optional[list] = None):
        self.validation_errors = validation_errors or []
        super().__init__(message)


class CalibrationError(TTCFusionError):
    """Base exception for calibration-related errors."""

    pass


class InvalidCalibrationError(CalibrationError):
    """Raised when calibration matrices are missing or have the wrong shape."""

    def __init__(self, message: str, matrix_name: Optional[str] = None):
        self.matrix_name = matrix_name
        super().__init__(message)


class FrameDataError(TTCFusionError):
    """Raised when frame data violates its contract (bad indices, malformed files)."""

    def __init__(self, message: str, frame_index: Optional[int] = None):
        self.frame_index = frame_index
        super().__init__(message)
