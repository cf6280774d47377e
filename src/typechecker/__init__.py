"""
typechecker: validate untyped input against declared classes.

    >>> from typing import List
    >>> from typechecker import checked, check_field, validate
    >>> @checked
    ... class Bar:
    ...     description: str = check_field()
    >>> @checked
    ... class Foo:
    ...     name: str = check_field()
    ...     bars: List[Bar] = check_field(required=False)
    >>> validate({"name": "n", "bars": [{"description": 4}]}, Foo)
    Traceback (most recent call last):
    ...
    typechecker.validation.errors.ValidationError: bars[0].description: Expecting string, received integer 4
"""

__version__ = "0.3.0"

from .settings import ValidatorSettings, get_settings, resolve_settings
from .validation import (
    OnFailure,
    Rule,
    SchemaDefinitionError,
    SchemaRegistry,
    ValidationError,
    ValidationErrorType,
    default_registry,
    validate,
)
from .declarations import check_field, checked, register_field, type_checked
from .yaml_schema import load_schemas

__all__ = [
    "__version__",
    "ValidatorSettings",
    "get_settings",
    "resolve_settings",
    "OnFailure",
    "Rule",
    "SchemaDefinitionError",
    "SchemaRegistry",
    "ValidationError",
    "ValidationErrorType",
    "default_registry",
    "validate",
    "check_field",
    "checked",
    "register_field",
    "type_checked",
    "load_schemas",
]
