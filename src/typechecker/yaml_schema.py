"""
Declaring checked classes from YAML schema documents.

A schema document lists types, their optional parent and their fields.
Each type becomes a new class registered in the schema registry:

    types:
      Parent:
        fields:
          property1: {type: str}
      Child:
        extends: Parent
        description: A child record
        fields:
          tags: {type: list, items: str, nullable: true}
          created: {type: datetime, required: false}
          score:
            type: float
            on_failure: set_null
            validator: "my_package.checks:positive"
          note: str          # shorthand for {type: str}

Type names are builtin names (see BUILTIN_TYPES), other types of the same
document, or importable ``module:Class`` references.

Example:
    >>> from typechecker.yaml_schema import load_schemas
    >>> types = load_schemas(Path("schema.yaml"))
    >>> validate({"property1": "a"}, types["Parent"])
"""

import datetime
import importlib
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Set, Union

import yaml

from .validation import Rule, SchemaDefinitionError, SchemaRegistry, default_registry
from .validation.rules import OnFailure

logger = logging.getLogger(__name__)

BUILTIN_TYPES: Dict[str, type] = {
    "str": str,
    "string": str,
    "int": int,
    "integer": int,
    "float": float,
    "number": float,
    "bool": bool,
    "boolean": bool,
    "list": list,
    "array": list,
    "dict": dict,
    "date": datetime.date,
    "datetime": datetime.datetime,
    "object": object,
    "any": object,
}

FIELD_KEYS = {"type", "items", "required", "nullable", "on_failure", "validator"}
TYPE_KEYS = {"extends", "description", "fields"}

ON_FAILURE_VALUES = {
    "propagate": OnFailure.PROPAGATE,
    "ignore": OnFailure.IGNORE,
    "set_null": OnFailure.SET_NULL,
    "setNull": OnFailure.SET_NULL,
}

DEFAULT_MODULE = "typechecker.schemas"


def import_object(reference: str) -> Any:
    """
    Import ``module:attribute`` (e.g. 'my_package.checks:positive').

    Raises:
        SchemaDefinitionError: If the reference is malformed or cannot be imported
    """
    module_path, sep, attribute = reference.partition(":")
    if not sep or not module_path or not attribute:
        raise SchemaDefinitionError(
            f"Invalid reference '{reference}': expected 'module:attribute'"
        )
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise SchemaDefinitionError(f"Cannot import module '{module_path}': {e}") from e

    target: Any = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise SchemaDefinitionError(
                f"Module '{module_path}' has no attribute '{attribute}'"
            ) from e
    return target


def load_document(source: Union[str, Path, Mapping[str, Any]]) -> Mapping[str, Any]:
    """
    Load a schema document.

    Args:
        source: Parsed mapping, Path to a YAML/JSON file, or YAML text

    Raises:
        SchemaDefinitionError: If the document cannot be read or parsed
    """
    if isinstance(source, Mapping):
        return source

    if isinstance(source, Path):
        if not source.exists():
            raise SchemaDefinitionError(f"Schema file not found: {source}")
        text = source.read_text(encoding="utf-8")
    else:
        text = source

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SchemaDefinitionError(f"Invalid YAML syntax: {e}") from e

    if not isinstance(document, Mapping):
        raise SchemaDefinitionError(
            f"Schema document must be a mapping, got {type(document).__name__}"
        )
    return document


class _SchemaBuilder:
    """Creates the classes of one document, parents first, then registers fields."""

    def __init__(self, types_section: Mapping[str, Any], module: str):
        self._types = types_section
        self._module = module
        self._classes: Dict[str, type] = {}
        self._building: Set[str] = set()

    def build_all(self) -> Dict[str, type]:
        for name in self._types:
            self._build(name)
        return self._classes

    def _build(self, name: str) -> type:
        if name in self._classes:
            return self._classes[name]
        if name in self._building:
            raise SchemaDefinitionError(f"Circular 'extends' chain through type '{name}'")

        config = self._types[name]
        if config is None:
            config = {}
        if not isinstance(config, Mapping):
            raise SchemaDefinitionError(f"Type '{name}' must be a mapping")
        unknown = set(config) - TYPE_KEYS
        if unknown:
            raise SchemaDefinitionError(
                f"Unknown key(s) for type '{name}': {', '.join(sorted(unknown))}"
            )

        self._building.add(name)
        parent = config.get("extends")
        bases = (self._resolve_parent(name, parent),) if parent else (object,)
        self._building.discard(name)

        cls = type(name, bases, {"__module__": self._module, "__doc__": config.get("description")})
        self._classes[name] = cls
        return cls

    def _resolve_parent(self, name: str, parent: Any) -> type:
        if not isinstance(parent, str):
            raise SchemaDefinitionError(f"'extends' of type '{name}' must be a type name")
        if parent in self._types:
            return self._build(parent)
        if ":" in parent:
            target = import_object(parent)
            if isinstance(target, type):
                return target
        raise SchemaDefinitionError(f"Type '{name}' extends unknown type '{parent}'")

    def resolve_type(self, reference: Any, owner: str) -> type:
        if not isinstance(reference, str):
            raise SchemaDefinitionError(f"Type of {owner} must be a type name")
        if reference in self._classes:
            return self._classes[reference]
        if reference in BUILTIN_TYPES:
            return BUILTIN_TYPES[reference]
        if ":" in reference:
            target = import_object(reference)
            if isinstance(target, type):
                return target
            raise SchemaDefinitionError(f"'{reference}' used by {owner} is not a class")
        raise SchemaDefinitionError(f"Unknown type '{reference}' for {owner}")

    def build_rule(self, owner: str, config: Any) -> Rule:
        if isinstance(config, str):
            config = {"type": config}
        if not isinstance(config, Mapping):
            raise SchemaDefinitionError(f"Field {owner} must be a type name or a mapping")

        unknown = set(config) - FIELD_KEYS
        if unknown:
            raise SchemaDefinitionError(
                f"Unknown key(s) for field {owner}: {', '.join(sorted(unknown))}"
            )
        if "type" not in config:
            raise SchemaDefinitionError(f"Field {owner} has no type")

        expected_type = self.resolve_type(config["type"], owner)
        array_type = None
        if config.get("items") is not None:
            array_type = self.resolve_type(config["items"], f"{owner} items")

        for flag in ("required", "nullable"):
            if flag in config and not isinstance(config[flag], bool):
                raise SchemaDefinitionError(f"'{flag}' of field {owner} must be true or false")

        on_failure = config.get("on_failure", "propagate")
        if on_failure not in ON_FAILURE_VALUES:
            raise SchemaDefinitionError(
                f"Invalid on_failure '{on_failure}' for field {owner}. "
                f"Must be one of: {', '.join(ON_FAILURE_VALUES)}"
            )

        custom_validator = None
        if config.get("validator") is not None:
            custom_validator = import_object(str(config["validator"]))
            if not callable(custom_validator):
                raise SchemaDefinitionError(
                    f"Validator '{config['validator']}' of field {owner} is not callable"
                )

        return Rule(
            expected_type=expected_type,
            array_type=array_type,
            required=config.get("required", True),
            nullable=config.get("nullable", False),
            on_failure=ON_FAILURE_VALUES[on_failure],
            custom_validator=custom_validator,
        )


def load_schemas(
    source: Union[str, Path, Mapping[str, Any]],
    registry: Optional[SchemaRegistry] = None,
) -> Dict[str, type]:
    """
    Create and register the classes described by a schema document.

    Args:
        source: Parsed mapping, Path to a YAML/JSON file, or YAML text
        registry: Target registry (defaults to the process-wide one)

    Returns:
        Mapping of type name to created class, in document order

    Raises:
        SchemaDefinitionError: If the document is malformed or references
            unknown types, modules or validators
    """
    registry = registry if registry is not None else default_registry
    document = load_document(source)

    types_section = document.get("types")
    if not isinstance(types_section, Mapping) or not types_section:
        raise SchemaDefinitionError("Schema document must define a non-empty 'types' mapping")

    module = document.get("module", DEFAULT_MODULE)
    builder = _SchemaBuilder(types_section, str(module))
    classes = builder.build_all()

    # Rules are built before anything is registered so that a bad document
    # leaves the registry untouched
    pending = []
    for name, cls in classes.items():
        fields = (types_section[name] or {}).get("fields") or {}
        if not isinstance(fields, Mapping):
            raise SchemaDefinitionError(f"'fields' of type '{name}' must be a mapping")
        for field_name, field_config in fields.items():
            owner = f"'{name}.{field_name}'"
            pending.append((cls, str(field_name), builder.build_rule(owner, field_config)))

    for cls, field_name, rule in pending:
        registry.register(cls, field_name, rule)

    logger.info(
        "Loaded %d schema type(s) with %d field(s): %s",
        len(classes),
        len(pending),
        ", ".join(classes),
    )
    return {name: classes[name] for name in types_section}
