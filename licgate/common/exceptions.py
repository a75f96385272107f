"""
Custom exceptions for the licensing engine.
"""

from __future__ import annotations


class LicgateError(Exception):
    """Base class for all licgate errors."""


class ConfigurationError(LicgateError):
    """Raised when configuration values cannot be read or parsed."""


class LicenseInitializationError(LicgateError):
    """Raised when the license manager cannot be constructed."""


class CacheError(LicgateError):
    """Raised when the license cache cannot be created or written."""


class TransportError(LicgateError):
    """Exception for failures talking to the validation backend."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FeatureAccessError(LicgateError):
    """Exception raised when a gated function is called without entitlement."""

    def __init__(self, message: str, feature_id: str | None = None) -> None:
        super().__init__(message)
        self.feature_id = feature_id
