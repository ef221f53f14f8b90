"""
Core utilities and configuration for featureweave.

This package provides the logging configuration and the environment-backed
settings shared by the resolution engine and the plugin loader.
"""

from featureweave.core.config import Settings, settings
from featureweave.core.logging_config import get_logger, setup_logging

__all__ = ["Settings", "settings", "get_logger", "setup_logging"]
