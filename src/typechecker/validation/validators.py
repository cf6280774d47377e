"""
Validation engine.

Implements the recursive validation of untyped input (parsed JSON/YAML,
keyword arguments...) against classes declared in a SchemaRegistry:
- Parent classes validated before their subclasses
- Required / nullable field enforcement
- Per-field failure policy (propagate, ignore, set_null)
- Arrays of typed elements with index reporting (``hobbies[0]``)
- Dates and primitive kinds
- Custom validator predicates
- Pass-through of undeclared keys

Validation is fail-fast: the first failure, in field declaration order,
is raised unless the field's failure policy absorbs it.
"""

import json
import logging
from typing import Any, Callable, Mapping, NamedTuple, Optional

from .errors import InternalValidationError, ValidationError, ValidationErrorType
from .registry import SchemaRegistry, default_registry
from .rules import ARRAY_TYPES, OnFailure, Rule, is_array_type, is_date_type, is_type_handle
from ..settings import ValidatorSettings, settings_or_default

logger = logging.getLogger(__name__)

NULL_VALUE_MESSAGE = "Field can't be null"
MISSING_FIELD_MESSAGE = "Field is required"
INVALID_VALUE_MESSAGE = "Invalid value received"
CUSTOM_VALIDATOR_CRASHED_MESSAGE = "An error occurred while performing custom validation"

# Kind names used in error messages
KIND_NAMES = {
    str: "string",
    bool: "boolean",
    int: "integer",
    float: "number",
    dict: "object",
}


class _Context(NamedTuple):
    registry: SchemaRegistry
    settings: ValidatorSettings


def validate(
    value: Any,
    expected_type: Any,
    array_type: Any = None,
    *,
    registry: Optional[SchemaRegistry] = None,
    settings: Optional[ValidatorSettings] = None,
) -> Any:
    """
    Validate a value against an expected type.

    Returns a new instance of expected_type for declared classes, a new
    list for arrays and the value itself for primitives and dates.

    Args:
        value: Untyped input
        expected_type: Class to validate against (list for arrays)
        array_type: Element class when expected_type is list/tuple
        registry: Schema registry (defaults to the process-wide one)
        settings: Engine settings (defaults to environment-resolved ones)

    Returns:
        The validated value

    Raises:
        ValidationError: On the first validation failure

    Example:
        >>> validate({"name": "n", "bar": {"description": "d"}}, Foo)
        <Foo object>
        >>> validate([{"description": 4}], list, Bar)
        ValidationError: [0].description: Expecting string, received integer 4
    """
    context = _Context(
        registry if registry is not None else default_registry,
        settings_or_default(settings),
    )
    try:
        return validate_input(value, expected_type, array_type, None, context, 0)
    except InternalValidationError as error:
        raise ValidationError.from_internal(error) from None
    except RecursionError:
        # Interpreter limit reached before max_depth
        raise ValidationError(
            "Maximum validation depth exceeded", ValidationErrorType.INVALID_TYPE
        ) from None


def validate_input(
    value: Any,
    expected_type: Any,
    array_type: Any,
    custom_validator: Optional[Callable[[Any], bool]],
    context: _Context,
    depth: int,
) -> Any:
    """Validate one value, raising InternalValidationError on failure."""
    if depth > context.settings.max_depth:
        raise InternalValidationError(
            f"Maximum validation depth of {context.settings.max_depth} exceeded",
            ValidationErrorType.INVALID_TYPE,
        )

    parent = context.registry.parent_of(expected_type)
    if parent is not None:
        value = validate_input(value, parent, None, None, context, depth)

    # Non-class expected types disable validation
    if not is_type_handle(expected_type):
        return value

    fields = context.registry.lookup(expected_type)
    if fields is not None or parent is not None:
        result = _validate_object(value, expected_type, fields or {}, context, depth)
    else:
        result = _validate_simple(value, expected_type, array_type, context, depth)

    return _run_custom_validator(result, custom_validator)


def _validate_object(
    value: Any,
    expected_type: type,
    fields: Mapping[str, Rule],
    context: _Context,
    depth: int,
) -> Any:
    source = _own_fields(value)
    instance = _instantiate(expected_type)

    for key, rule in fields.items():
        if source is not None and key in source:
            field_value = source[key]
            if field_value is None:
                if rule.nullable:
                    setattr(instance, key, None)
                else:
                    error = InternalValidationError(
                        NULL_VALUE_MESSAGE, ValidationErrorType.NULL_VALUE
                    )
                    error.attribute_to(key)
                    _apply_failure_policy(instance, key, rule, error)
                continue

            try:
                validated = validate_input(
                    field_value,
                    rule.expected_type,
                    rule.array_type,
                    rule.custom_validator,
                    context,
                    depth + 1,
                )
            except InternalValidationError as error:
                error.attribute_to(key)
                _apply_failure_policy(instance, key, rule, error)
            else:
                setattr(instance, key, validated)

        elif rule.required:
            error = InternalValidationError(
                MISSING_FIELD_MESSAGE, ValidationErrorType.MISSING_FIELD
            )
            error.attribute_to(key)
            _apply_failure_policy(instance, key, rule, error)

    if source is None:
        raise InternalValidationError(
            f"Expecting an instance of {expected_type.__name__}, "
            f"received {serialize_value(value, context.settings.max_value_length)}",
            ValidationErrorType.INVALID_TYPE,
        )

    for key, item in source.items():
        if key in fields or not isinstance(key, str):
            continue
        if key.startswith("__") and key.endswith("__"):
            logger.debug("Not copying reserved key %r onto %s", key, expected_type.__name__)
            continue
        try:
            setattr(instance, key, item)
        except AttributeError as e:
            # Read-only property or __slots__ without the key
            logger.debug("Not copying key %r onto %s: %s", key, expected_type.__name__, e)

    return instance


def _apply_failure_policy(
    instance: Any, key: str, rule: Rule, error: InternalValidationError
) -> None:
    if rule.on_failure is OnFailure.SET_NULL:
        setattr(instance, key, None)
    elif rule.on_failure is not OnFailure.IGNORE:
        raise error


def _validate_simple(
    value: Any,
    expected_type: type,
    array_type: Any,
    context: _Context,
    depth: int,
) -> Any:
    # Anything is an object
    if expected_type is object:
        return value

    if is_array_type(expected_type):
        if not isinstance(value, ARRAY_TYPES):
            _raise_invalid_type("array", value, context)
        items = []
        for index, item in enumerate(value):
            if array_type is None:
                items.append(item)
                continue
            try:
                items.append(validate_input(item, array_type, None, None, context, depth + 1))
            except InternalValidationError as error:
                error.attribute_to_index(index)
                raise
        return tuple(items) if issubclass(expected_type, tuple) else items

    if is_date_type(expected_type):
        if not isinstance(value, expected_type):
            _raise_invalid_type("date", value, context)
        return value

    if not _matches_kind(value, expected_type):
        _raise_invalid_type(
            KIND_NAMES.get(expected_type, expected_type.__name__), value, context
        )
    return value


def _matches_kind(value: Any, expected_type: type) -> bool:
    if isinstance(value, bool) and expected_type in (int, float):
        return False
    if expected_type is float:
        return isinstance(value, (int, float))
    if expected_type is dict:
        return isinstance(value, Mapping)
    return isinstance(value, expected_type)


def _run_custom_validator(value: Any, custom_validator: Optional[Callable[[Any], bool]]) -> Any:
    if custom_validator is None:
        return value
    try:
        valid = custom_validator(value)
    except InternalValidationError:
        raise
    except Exception:
        logger.warning(CUSTOM_VALIDATOR_CRASHED_MESSAGE, exc_info=True)
        raise InternalValidationError(
            CUSTOM_VALIDATOR_CRASHED_MESSAGE, ValidationErrorType.CUSTOM
        ) from None
    if valid is not True:
        raise InternalValidationError(INVALID_VALUE_MESSAGE, ValidationErrorType.CUSTOM)
    return value


def _raise_invalid_type(expected_kind: str, value: Any, context: _Context) -> None:
    raise InternalValidationError(
        f"Expecting {expected_kind}, received {kind_of(value)} "
        f"{serialize_value(value, context.settings.max_value_length)}",
        ValidationErrorType.INVALID_TYPE,
    )


def _own_fields(value: Any) -> Optional[Mapping[str, Any]]:
    """Keys of a mapping or attributes of an instance, None for anything else."""
    if isinstance(value, Mapping):
        return value
    if value is None or isinstance(value, type):
        return None
    try:
        return vars(value)
    except TypeError:
        return None


def _instantiate(expected_type: type) -> Any:
    try:
        return expected_type()
    except TypeError:
        # Constructor needs arguments, every field is set afterwards
        return expected_type.__new__(expected_type)


def kind_of(value: Any) -> str:
    """Name of the runtime kind of a value, as used in error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, ARRAY_TYPES):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def serialize_value(value: Any, max_length: int) -> str:
    """JSON rendering of a value for error messages, cut at max_length."""
    try:
        text = json.dumps(value, default=repr)
    except (TypeError, ValueError):
        text = repr(value)
    if len(text) > max_length:
        text = text[: max_length - 3] + "..."
    return text
