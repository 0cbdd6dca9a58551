"""Logging configuration."""

from .logger import configure_file_logging, get_logger, log_performance, logger

__all__ = ["logger", "get_logger", "log_performance", "configure_file_logging"]
