"""
Schema Registry.

Process-wide table mapping a declared class to its ordered
``{field_name: Rule}`` entry. Entries only hold the fields registered
directly on a class; parent classes keep their own entries and are
linked at lookup time through the class MRO.

Registration is expected to happen once, before the first validation.
It is serialized with a lock, while lookups read plain dicts without
locking. ``freeze()`` seals the registry once initialization is over.
"""

import logging
import threading
from dataclasses import replace
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

from .rules import Rule, is_array_type, is_type_handle, parse_on_failure
from ..settings import get_settings

logger = logging.getLogger(__name__)


def _type_name(value) -> str:
    return getattr(value, "__qualname__", None) or repr(value)


class SchemaRegistry:
    """
    Registry of field rules per declared class.

    Example:
        >>> registry = SchemaRegistry()
        >>> registry.register(Foo, "name", Rule(expected_type=str))
        True
        >>> registry.lookup(Foo)
        mappingproxy({'name': Rule(expected_type=str)})
    """

    def __init__(self):
        self._entries: Dict[type, Dict[str, Rule]] = {}
        self._lock = threading.Lock()
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, declared_type: type, field_name: str, rule: Rule) -> bool:
        """
        Register the rule of one field.

        Rules whose expected type is not a class are skipped (the field
        is left unchecked) and reported in the log. An array_type is
        kept only for list/tuple fields and when it is itself a class.

        Args:
            declared_type: Class owning the field
            field_name: Attribute / key name
            rule: Validation contract of the field

        Returns:
            True if the rule was stored, False if it was skipped

        Raises:
            TypeError: If declared_type is not a class
            RuntimeError: If the registry is frozen
        """
        if not is_type_handle(declared_type):
            raise TypeError(f"Cannot register fields on non-class {declared_type!r}")

        owner = f"{_type_name(declared_type)}.{field_name}"
        if not is_type_handle(rule.expected_type):
            level = logging.WARNING if get_settings().warn_on_invalid_rules else logging.DEBUG
            logger.log(
                level,
                "Skipping validation of %s: expected type %r is not a class",
                owner,
                rule.expected_type,
            )
            return False

        rule = replace(rule, on_failure=parse_on_failure(rule.on_failure))
        if rule.array_type is not None:
            if not is_array_type(rule.expected_type):
                logger.debug("Dropping array type of non-array field %s", owner)
                rule = replace(rule, array_type=None)
            elif not is_type_handle(rule.array_type):
                level = logging.WARNING if get_settings().warn_on_invalid_rules else logging.DEBUG
                logger.log(
                    level,
                    "Items of %s will not be checked: array type %r is not a class",
                    owner,
                    rule.array_type,
                )
                rule = replace(rule, array_type=None)

        with self._lock:
            if self._frozen:
                raise RuntimeError(f"Cannot register {owner}: schema registry is frozen")
            # Copy-on-write, lookups read without the lock
            fields = dict(self._entries.get(declared_type, {}))
            fields[field_name] = rule
            self._entries[declared_type] = fields
        logger.debug("Registered %s: %r", owner, rule)
        return True

    def lookup(self, declared_type) -> Optional[Mapping[str, Rule]]:
        """Return the fields registered directly on a class, or None."""
        try:
            fields = self._entries.get(declared_type)
        except TypeError:
            # Unhashable expected types never have entries
            return None
        if fields is None:
            return None
        return MappingProxyType(fields)

    def parent_of(self, declared_type) -> Optional[type]:
        """Nearest ancestor of a class (excluding object) that has an entry."""
        if not is_type_handle(declared_type):
            return None
        for base in declared_type.__mro__[1:]:
            if base is object:
                break
            if base in self._entries:
                return base
        return None

    def freeze(self) -> None:
        """Reject any further registration."""
        with self._lock:
            self._frozen = True

    def clear(self) -> None:
        with self._lock:
            if self._frozen:
                raise RuntimeError("Cannot clear a frozen schema registry")
            self._entries = {}

    def __contains__(self, declared_type) -> bool:
        return self.lookup(declared_type) is not None

    def __iter__(self) -> Iterator[type]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SchemaRegistry(types={[_type_name(t) for t in self._entries]})"


default_registry = SchemaRegistry()
