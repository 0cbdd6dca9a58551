"""Configuration loading for the TTC fusion core."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from configs.validator import validate_config
from exceptions import InvalidConfigError
from fusion.roi import RangeCrop
from log_config.logger import get_logger
from ttc.statistics import ClosestDistanceReducer

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).with_name("default.yaml")


@dataclass(frozen=True)
class ClusteringConfig:
    shrink_factor: float
    crop_enabled: bool
    crop: RangeCrop


@dataclass(frozen=True)
class KeypointsConfig:
    distance_ratio: float


@dataclass(frozen=True)
class AssociationConfig:
    strategy: str


@dataclass(frozen=True)
class LidarTTCConfig:
    lane_width: float
    reducer: str
    percentile: float
    trim_fraction: float

    def build_reducer(self) -> ClosestDistanceReducer:
        return ClosestDistanceReducer(
            method=self.reducer,
            percentile=self.percentile,
            trim_fraction=self.trim_fraction,
        )


@dataclass(frozen=True)
class CameraTTCConfig:
    min_dist: float


@dataclass(frozen=True)
class PipelineConfig:
    frame_rate: float
    latency_warn_ms: float


@dataclass(frozen=True)
class AppConfig:
    clustering: ClusteringConfig
    keypoints: KeypointsConfig
    association: AssociationConfig
    lidar_ttc: LidarTTCConfig
    camera_ttc: CameraTTCConfig
    pipeline: PipelineConfig


def config_from_dict(data: Optional[Dict[str, Any]]) -> AppConfig:
    """Validate a configuration mapping and build the typed config.

    Missing sections and keys take their schema defaults.

    Raises:
        ConfigValidationError: If the mapping fails schema validation
        InvalidConfigError: If the validated values cannot build the config
    """
    data = {} if data is None else data
    validate_config(data)

    try:
        clustering_data = data["clustering"]
        clustering = ClusteringConfig(
            shrink_factor=float(clustering_data["shrink_factor"]),
            crop_enabled=bool(clustering_data["crop_enabled"]),
            crop=RangeCrop(**clustering_data["crop"]),
        )
        keypoints = KeypointsConfig(**data["keypoints"])
        association = AssociationConfig(**data["association"])
        lidar_ttc = LidarTTCConfig(**data["lidar_ttc"])
        lidar_ttc.build_reducer()
        camera_ttc = CameraTTCConfig(**data["camera_ttc"])
        pipeline = PipelineConfig(**data["pipeline"])
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Failed to construct configuration objects: {e}")
        raise InvalidConfigError(f"Failed to construct configuration: {e}")

    return AppConfig(
        clustering=clustering,
        keypoints=keypoints,
        association=association,
        lidar_ttc=lidar_ttc,
        camera_ttc=camera_ttc,
        pipeline=pipeline,
    )


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    path = Path(path)
    logger.info(f"Loading configuration from {path}")
    if not path.exists():
        raise InvalidConfigError(f"Configuration file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration: {e}")
        raise InvalidConfigError(f"Failed to parse configuration file: {e}")

    if data is not None and not isinstance(data, dict):
        raise InvalidConfigError(f"Configuration root must be a mapping, got {type(data).__name__}")

    config = config_from_dict(data)
    logger.info(
        f"Configuration loaded successfully: shrink={config.clustering.shrink_factor}, "
        f"association={config.association.strategy}, frame_rate={config.pipeline.frame_rate}Hz"
    )
    return config


def default_config() -> AppConfig:
    """Schema defaults, without reading any file."""
    return config_from_dict({})


__all__ = [
    "AppConfig",
    "AssociationConfig",
    "CameraTTCConfig",
    "ClusteringConfig",
    "KeypointsConfig",
    "LidarTTCConfig",
    "PipelineConfig",
    "DEFAULT_CONFIG_PATH",
    "config_from_dict",
    "default_config",
    "load_config",
]
