"""
Layout Errors

Every failure inside the engine is one of three kinds. Components raise the
matching exception; the API facade turns it into an explicit error result.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """Failure categories surfaced to callers."""
    VALIDATION = "validation"  # Missing or malformed input fields
    REFERENCE = "reference"    # Edge/parent points at an unknown node id
    NUMERIC = "numeric"        # A computed position or size is not finite


class LayoutError(Exception):
    """Base class for all layout failures."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        d: Dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.details:
            d["details"] = self.details
        return d


class ValidationError(LayoutError):
    """Input is missing a required field or has the wrong shape."""

    kind = ErrorKind.VALIDATION


class EdgeReferenceError(LayoutError):
    """An edge endpoint or parentId does not resolve to a node in the graph."""

    kind = ErrorKind.REFERENCE


class NumericError(LayoutError):
    """A computed coordinate or size is NaN or infinite."""

    kind = ErrorKind.NUMERIC
