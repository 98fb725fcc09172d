# recorder/core/errors.py
from __future__ import annotations

__all__ = ["RecorderError", "CatalogError", "ConfigValidationError"]



class RecorderError(Exception):
    """Base class for errors raised by the recorder core."""



class CatalogError(RecorderError):
    """Raised by catalog adapters when a lookup cannot be answered."""

    def __init__(self, message: str, *, slug: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.slug = slug
        self.status = status



class ConfigValidationError(RecorderError):
    """Raised when the effective configuration does not match the config schema."""
