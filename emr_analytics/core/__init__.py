"""
Core module: Configuration, logging, diagnostics, and exception handling.
"""

from .config import AnalyticsConfig, Config, ViewConfig, config
from .diagnostics import Diagnostic, Diagnostics
from .exceptions import (
    ConfigurationError,
    DataValidationError,
    EmrAnalyticsError,
    InvalidFormatError,
)

__all__ = [
    "Config",
    "AnalyticsConfig",
    "ViewConfig",
    "config",
    "Diagnostic",
    "Diagnostics",
    "EmrAnalyticsError",
    "InvalidFormatError",
    "DataValidationError",
    "ConfigurationError",
]
