"""
Declaring checked classes and checked functions.

Fields are declared in the class body with ``check_field()`` markers and
registered by the ``@checked`` class decorator. The expected type comes
from the ``type`` argument or from the field annotation:

    @checked
    class Foo:
        name: str = check_field()
        age: int = check_field(required=False)
        hobbies: List[str] = check_field(nullable=True)
        bar: Bar = check_field()
        bars: List[Bar] = check_field(required=False)

Functions opt into argument validation with ``@type_checked``:

    @type_checked(foo=Foo, tags=(list, str))
    def handle(foo, tags=None):
        ...
"""

import functools
import inspect
import logging
import types
import typing
from typing import Any, Callable, Dict, Optional, Tuple

from .validation import OnFailure, Rule, SchemaRegistry, default_registry, validate

logger = logging.getLogger(__name__)

_MISSING = object()


class FieldCheck:
    """Marker left in a class body by check_field(), consumed by @checked."""

    def __init__(
        self,
        type: Any = _MISSING,
        array_type: Any = None,
        required: bool = True,
        nullable: bool = False,
        on_failure: Any = None,
        custom_validator: Optional[Callable[[Any], bool]] = None,
    ):
        self.type = type
        self.array_type = array_type
        self.required = required
        self.nullable = nullable
        self.on_failure = on_failure
        self.custom_validator = custom_validator

    def __repr__(self) -> str:
        return f"FieldCheck(type={self.type!r}, required={self.required}, nullable={self.nullable})"


def check_field(
    type: Any = _MISSING,
    *,
    array_type: Any = None,
    required: bool = True,
    nullable: bool = False,
    on_failure: Any = None,
    custom_validator: Optional[Callable[[Any], bool]] = None,
) -> Any:
    """
    Declare a checked field in a class body.

    Args:
        type: Expected type, defaults to the field annotation
        array_type: Element type of list fields, defaults to the annotation argument
        required: Field must be present on the input
        nullable: Field may be None
        on_failure: "propagate" (default), "ignore" or "set_null"
        custom_validator: Predicate run on the value after type validation

    Returns:
        A FieldCheck marker, removed from the class by @checked
    """
    return FieldCheck(
        type=type,
        array_type=array_type,
        required=required,
        nullable=nullable,
        on_failure=on_failure,
        custom_validator=custom_validator,
    )


def unwrap_annotation(annotation: Any) -> Tuple[Any, Any]:
    """
    Split an annotation into (expected_type, array_type).

    Examples:
        >>> unwrap_annotation(List[str])
        (<class 'list'>, <class 'str'>)
        >>> unwrap_annotation(Optional[Bar])
        (<class 'Bar'>, None)
    """
    if annotation is typing.Any:
        return object, None

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Union or origin is types.UnionType:
        members = [arg for arg in args if arg is not type(None)]
        if len(members) == 1:
            return unwrap_annotation(members[0])
        # Unions are not supported, the rule will be skipped
        return annotation, None

    if origin in (list, tuple) and args:
        item_type, nested_items = unwrap_annotation(args[0])
        if nested_items is not None:
            logger.debug("Elements of nested array %r will not be checked", annotation)
        return origin, item_type
    if origin is not None:
        return origin, None
    return annotation, None


def _class_annotations(cls: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except Exception as e:
        logger.debug("Could not resolve annotations of %s: %s", cls.__qualname__, e)
        return dict(inspect.get_annotations(cls))


def register_field(
    cls: type,
    name: str,
    type: Any,
    *,
    array_type: Any = None,
    required: bool = True,
    nullable: bool = False,
    on_failure: Any = None,
    custom_validator: Optional[Callable[[Any], bool]] = None,
    registry: Optional[SchemaRegistry] = None,
) -> bool:
    """
    Register a field rule explicitly.

    Returns:
        True if the rule was stored, False if it was skipped
    """
    registry = registry if registry is not None else default_registry
    rule = Rule(
        expected_type=type,
        array_type=array_type,
        required=required,
        nullable=nullable,
        on_failure=on_failure if on_failure is not None else OnFailure.PROPAGATE,
        custom_validator=custom_validator,
    )
    return registry.register(cls, name, rule)


def checked(cls: Optional[type] = None, *, registry: Optional[SchemaRegistry] = None):
    """
    Class decorator registering every check_field() of the class body.

    Can be used bare (``@checked``) or with a registry
    (``@checked(registry=my_registry)``).
    """

    def decorator(cls: type) -> type:
        markers = [
            (name, value) for name, value in vars(cls).items() if isinstance(value, FieldCheck)
        ]
        annotations = _class_annotations(cls) if markers else {}

        for name, marker in markers:
            delattr(cls, name)
            if marker.type is not _MISSING:
                expected_type, inferred_items = unwrap_annotation(marker.type)
            else:
                expected_type, inferred_items = unwrap_annotation(annotations.get(name))
            array_type = marker.array_type if marker.array_type is not None else inferred_items
            register_field(
                cls,
                name,
                expected_type,
                array_type=array_type,
                required=marker.required,
                nullable=marker.nullable,
                on_failure=marker.on_failure,
                custom_validator=marker.custom_validator,
                registry=registry,
            )
        return cls

    if cls is not None:
        return decorator(cls)
    return decorator


def type_checked(*, registry: Optional[SchemaRegistry] = None, **param_types: Any):
    """
    Validate named arguments before calling the decorated function.

    Each keyword maps a parameter name to an expected type, or to a
    ``(list, element_type)`` tuple for arrays. Validated values replace
    the arguments. Parameters that were not passed are not validated.

    Raises:
        TypeError: At decoration time, if a name is not a parameter
        ValidationError: At call time, if an argument is invalid
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)
        unknown = sorted(set(param_types) - set(signature.parameters))
        if unknown:
            raise TypeError(f"{func.__qualname__}() has no parameter(s) {', '.join(unknown)}")

        checks = {}
        for name, handle in param_types.items():
            if isinstance(handle, tuple):
                expected_type, array_type = handle
            else:
                expected_type, array_type = handle, None
            checks[name] = (expected_type, array_type)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            bound = signature.bind(*args, **kwargs)
            for name, (expected_type, array_type) in checks.items():
                if name in bound.arguments:
                    bound.arguments[name] = validate(
                        bound.arguments[name], expected_type, array_type, registry=registry
                    )
            return func(*bound.args, **bound.kwargs)

        return wrapper

    return decorator
