"""Utility functions for configuration, logging, and helpers."""

from image_dedupe.utils.config import Config
from image_dedupe.utils.logger import daily_log_file, setup_logger

__all__ = ["Config", "daily_log_file", "setup_logger"]
