"""
Validation Error Types for Schema Validation.

Provides structured error handling for validation failures:
- ValidationErrorType: The kind of failure (null, missing, invalid, custom)
- InternalValidationError: Raised inside the engine, accumulates the field path
- ValidationError: Public exception raised by validate()
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ValidationErrorType(str, Enum):
    """Kind of validation failure."""

    NULL_VALUE = "null"  # Non-nullable field holds None
    MISSING_FIELD = "missing"  # Required field absent
    INVALID_TYPE = "invalid"  # Structural mismatch
    CUSTOM = "custom"  # Custom validator rejected the value or crashed


def format_path(path: List[str]) -> str:
    """
    Join path segments into a dotted field path.

    Index-only segments (``[1]``) are attached to the previous segment
    without a dot.

    Example:
        >>> format_path(["bars[1]", "description"])
        'bars[1].description'
    """
    result = ""
    for segment in path:
        if result and not segment.startswith("["):
            result += "."
        result += segment
    return result


class InternalValidationError(Exception):
    """
    Error raised while the engine recurses through a value.

    Each enclosing frame that owns the failing field prepends its
    segment to ``path`` before re-raising. ``index`` holds the position
    of the failing element while unwinding out of an array, until the
    field that owns the array folds it into its segment.
    """

    def __init__(self, message: str, error_type: ValidationErrorType):
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.path: List[str] = []
        self.index: Optional[int] = None

    def attribute_to(self, key: str) -> None:
        """Prepend ``key`` (fused with a pending index) to the path."""
        if self.index is not None:
            key = f"{key}[{self.index}]"
            self.index = None
        self.path.insert(0, key)

    def attribute_to_index(self, index: int) -> None:
        """Record the array position of the failing element."""
        self.index = index

    def flush_index(self) -> None:
        """Fold a pending index into the path (top-level arrays)."""
        if self.index is not None:
            self.path.insert(0, f"[{self.index}]")
            self.index = None

    def __repr__(self) -> str:
        return (
            f"InternalValidationError(message={self.message!r}, "
            f"error_type={self.error_type.value!r}, path={self.path!r})"
        )


class ValidationError(Exception):
    """
    Exception raised when input validation fails.

    Validation is fail-fast: the error describes the first failure met,
    fields being checked in declaration order.

    Attributes:
        message: Full message, prefixed with the field path when known
        reason: Message without the field path
        error_type: ValidationErrorType of the failure
        path: Path segments from the root value to the failing field
        field: Last path segment, or None for a root-level failure
    """

    def __init__(
        self,
        message: str,
        error_type: ValidationErrorType,
        path: Optional[List[str]] = None,
    ):
        self.reason = message
        self.error_type = error_type
        self.path = list(path or [])
        self.field: Optional[str] = self.path[-1] if self.path else None
        if self.path:
            message = f"{format_path(self.path)}: {message}"
        self.message = message
        super().__init__(message)

    @classmethod
    def from_internal(cls, error: InternalValidationError) -> "ValidationError":
        error.flush_index()
        return cls(error.message, error.error_type, error.path)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation (e.g. for HTTP 422 bodies)."""
        return {
            "field": self.field,
            "path": format_path(self.path) if self.path else None,
            "error": self.error_type.value,
            "message": self.message,
        }

    def __repr__(self) -> str:
        return (
            f"ValidationError(field={self.field!r}, "
            f"error_type={self.error_type.value!r}, message={self.message!r})"
        )


class SchemaDefinitionError(ValueError):
    """Raised when a schema document cannot be turned into registered types."""
