"""
Schema validation core.

Validates untyped input against field rules registered per class:
- Type validation (str, int, float, bool, dict, list, date/datetime, classes)
- Required / nullable field handling
- Per-field failure policy (propagate, ignore, set_null)
- Nested object and array validation with path reporting
- Parent classes validated before subclasses
- Custom validator predicates

Example:
    >>> from typechecker.validation import Rule, default_registry, validate
    >>> class Foo:
    ...     pass
    >>> default_registry.register(Foo, "name", Rule(expected_type=str))
    True
    >>> validate({"name": "hello", "extra": 1}, Foo).extra
    1
"""

from .errors import (
    InternalValidationError,
    SchemaDefinitionError,
    ValidationError,
    ValidationErrorType,
    format_path,
)
from .registry import SchemaRegistry, default_registry
from .rules import OnFailure, Rule, parse_on_failure
from .validators import kind_of, serialize_value, validate, validate_input

__all__ = [
    "InternalValidationError",
    "SchemaDefinitionError",
    "ValidationError",
    "ValidationErrorType",
    "format_path",
    "SchemaRegistry",
    "default_registry",
    "OnFailure",
    "Rule",
    "parse_on_failure",
    "kind_of",
    "serialize_value",
    "validate",
    "validate_input",
]
