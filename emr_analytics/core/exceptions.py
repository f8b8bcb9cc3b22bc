"""
Custom exceptions for the cluster analytics core.

Only ingestion can fail loudly. Computation over already-imported records
resolves bad values to sentinels and reports them through Diagnostics instead.
"""

from typing import Optional, Sequence


class EmrAnalyticsError(Exception):
    """Base exception for the package."""
    pass


class InvalidFormatError(EmrAnalyticsError):
    """Raised when uploaded text is not a JSON object or array."""
    pass


class DataValidationError(EmrAnalyticsError):
    """Raised when an uploaded entry fails field-level validation."""

    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        fields: Sequence[str] = (),
    ):
        super().__init__(message)
        self.index = index
        self.fields = tuple(fields)


class ConfigurationError(EmrAnalyticsError):
    """Raised when configuration or filter parameters are invalid."""
    pass
