"""Configuration validation using JSON Schema."""

from __future__ import annotations

import copy
from typing import Any, Dict

import jsonschema
from jsonschema import Draft7Validator, validators

from exceptions import ConfigValidationError
from log_config.logger import get_logger

logger = get_logger(__name__)

# JSON Schema for default.yaml configuration
CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "clustering": {
            "type": "object",
            "default": {},
            "properties": {
                "shrink_factor": {"type": "number", "minimum": 0.0, "exclusiveMaximum": 1.0, "default": 0.10},
                "crop_enabled": {"type": "boolean", "default": True},
                "crop": {
                    "type": "object",
                    "default": {},
                    "properties": {
                        "min_x": {"type": "number", "default": 2.0},
                        "max_x": {"type": "number", "default": 20.0},
                        "max_y": {"type": "number", "minimum": 0.0, "default": 2.0},
                        "min_z": {"type": "number", "default": -1.5},
                        "max_z": {"type": "number", "default": -0.9},
                        "min_r": {"type": "number", "minimum": 0.0, "default": 0.1},
                    },
                },
            },
        },
        "keypoints": {
            "type": "object",
            "default": {},
            "properties": {
                "distance_ratio": {"type": "number", "exclusiveMinimum": 0.0, "default": 0.7},
            },
        },
        "association": {
            "type": "object",
            "default": {},
            "properties": {
                "strategy": {"type": "string", "enum": ["argmax", "hungarian"], "default": "argmax"},
            },
        },
        "lidar_ttc": {
            "type": "object",
            "default": {},
            "properties": {
                "lane_width": {"type": "number", "exclusiveMinimum": 0.0, "default": 4.0},
                "reducer": {
                    "type": "string",
                    "enum": ["min", "percentile", "median", "trimmed_mean"],
                    "default": "percentile",
                },
                "percentile": {"type": "number", "minimum": 0.0, "maximum": 100.0, "default": 10.0},
                "trim_fraction": {"type": "number", "minimum": 0.0, "exclusiveMaximum": 0.5, "default": 0.1},
            },
        },
        "camera_ttc": {
            "type": "object",
            "default": {},
            "properties": {
                "min_dist": {"type": "number", "minimum": 0.0, "default": 100.0},
            },
        },
        "pipeline": {
            "type": "object",
            "default": {},
            "properties": {
                "frame_rate": {"type": "number", "exclusiveMinimum": 0.0, "default": 10.0},
                "latency_warn_ms": {"type": "number", "minimum": 0.0, "default": 100.0},
            },
        },
    },
}


def extend_with_default(validator_class):
    """Extend JSON Schema validator to set default values."""
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if validator.is_type(instance, "object"):
            for prop, subschema in properties.items():
                if "default" in subschema:
                    instance.setdefault(prop, copy.deepcopy(subschema["default"]))

        for error in validate_properties(validator, properties, instance, schema):
            yield error

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultValidatingValidator = extend_with_default(Draft7Validator)


def validate_config(config: Dict[str, Any]) -> None:
    """Validate configuration against JSON Schema, filling in defaults.

    Args:
        config: Configuration dictionary, updated in place with defaults

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    try:
        validator = DefaultValidatingValidator(CONFIG_SCHEMA)
        errors = list(validator.iter_errors(config))

        if errors:
            error_messages = []
            for error in errors:
                path = " -> ".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")

            logger.error(f"Configuration validation failed with {len(errors)} errors")
            for msg in error_messages:
                logger.error(f"  - {msg}")

            raise ConfigValidationError(
                f"Configuration validation failed with {len(errors)} error(s). See logs for details.",
                validation_errors=error_messages,
            )

        logger.debug("Configuration validation passed")

    except jsonschema.exceptions.SchemaError as e:
        logger.error(f"Invalid schema: {e}")
        raise ConfigValidationError(f"Invalid schema definition: {e}")


__all__ = ["validate_config", "CONFIG_SCHEMA"]
