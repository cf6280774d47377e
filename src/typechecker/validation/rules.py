"""
Field Rules for Schema Validation.

A Rule is the validation contract attached to one field of one declared
class:

    Rule(expected_type=list, array_type=str, nullable=True)

Rules carry no validation logic; the engine in validators.py reads them.
"""

import datetime
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

ARRAY_TYPES = (list, tuple)


class OnFailure(str, Enum):
    """Local failure policy of a single field."""

    PROPAGATE = "propagate"  # Raise (default)
    IGNORE = "ignore"  # Leave the field unset
    SET_NULL = "set_null"  # Set the field to None


_ON_FAILURE_ALIASES = {
    "setNull": OnFailure.SET_NULL,
    "set-null": OnFailure.SET_NULL,
}


def parse_on_failure(value: Any) -> OnFailure:
    """
    Normalize an on_failure setting.

    Unknown values fall back to PROPAGATE so that a typo never
    silently swallows validation errors.
    """
    if value is None:
        return OnFailure.PROPAGATE
    if isinstance(value, OnFailure):
        return value
    if value in _ON_FAILURE_ALIASES:
        return _ON_FAILURE_ALIASES[value]
    try:
        return OnFailure(value)
    except ValueError:
        logger.debug("Unknown on_failure value %r, using 'propagate'", value)
        return OnFailure.PROPAGATE


def is_type_handle(value: Any) -> bool:
    """Whether value can be used as an expected type."""
    return isinstance(value, type) and value is not Any


def is_array_type(value: Any) -> bool:
    return is_type_handle(value) and issubclass(value, ARRAY_TYPES)


def is_date_type(value: Any) -> bool:
    return is_type_handle(value) and issubclass(value, datetime.date)


@dataclass(frozen=True)
class Rule:
    """
    Validation contract for one field.

    Attributes:
        expected_type: Class the value must conform to
        array_type: Element class when expected_type is list/tuple
        required: Field must be present on the input
        nullable: Field may hold None
        on_failure: Policy applied when this field fails
        custom_validator: Predicate run after structural validation
    """

    expected_type: Any
    array_type: Optional[Any] = None
    required: bool = True
    nullable: bool = False
    on_failure: OnFailure = OnFailure.PROPAGATE
    custom_validator: Optional[Callable[[Any], bool]] = None

    def __repr__(self) -> str:
        name = getattr(self.expected_type, "__name__", repr(self.expected_type))
        attrs = [f"expected_type={name}"]
        if self.array_type is not None:
            attrs.append(f"array_type={getattr(self.array_type, '__name__', self.array_type)}")
        if not self.required:
            attrs.append("required=False")
        if self.nullable:
            attrs.append("nullable=True")
        if self.on_failure is not OnFailure.PROPAGATE:
            attrs.append(f"on_failure={self.on_failure.value!r}")
        if self.custom_validator is not None:
            attrs.append("custom_validator=...")
        return f"Rule({', '.join(attrs)})"

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        result = {
            "type": getattr(self.expected_type, "__name__", repr(self.expected_type)),
            "required": self.required,
            "nullable": self.nullable,
            "on_failure": self.on_failure.value,
        }
        if self.array_type is not None:
            result["items"] = getattr(self.array_type, "__name__", repr(self.array_type))
        if self.custom_validator is not None:
            result["validator"] = getattr(
                self.custom_validator, "__qualname__", repr(self.custom_validator)
            )
        return result
