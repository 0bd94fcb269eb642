"""
Core package: settings, logging, calendar dates and the error hierarchy.
"""

from orderflow.core.config import EnvironmentMode, Settings, get_logger, get_settings, setup_logging

__all__ = ["get_settings", "Settings", "EnvironmentMode", "setup_logging", "get_logger"]
