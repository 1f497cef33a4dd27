"""
Immutable-style record support.

Applications that keep their state in persistent (copy-on-write) maps can
hand those maps to ``denormalize``. Such containers are recognised by an
explicit marker: they subclass ``PersistentMapping`` or are registered with
``PersistentMapping.register``. They are never probed structurally.

Invariants:
    - ``set`` never mutates; it returns a new instance
    - Denormalizing a persistent record threads every new instance through
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from .schema.base import resolve_schema

if TYPE_CHECKING:
    from .schema.base import Schema, UnvisitFn


class PersistentMapping(Mapping):
    """Read-only mapping whose updates return new instances."""

    @abstractmethod
    def set(self, key: Any, value: Any) -> PersistentMapping:
        """Return a copy of this mapping with ``key`` bound to ``value``."""

    def has(self, key: Any) -> bool:
        return key in self

    def get_in(self, path: Iterable[Any], default: Any = None) -> Any:
        """Follow ``path`` through nested mappings."""
        current: Any = self
        for step in path:
            if not isinstance(current, Mapping) or step not in current:
                return default
            current = current[step]
        return current


def is_immutable(value: Any) -> bool:
    """Whether ``value`` carries the persistent-mapping marker."""
    return isinstance(value, PersistentMapping)


def denormalize_immutable(
    schema: Mapping[str, Schema],
    record: PersistentMapping,
    unvisit: UnvisitFn,
) -> PersistentMapping:
    """Unvisit the declared fields of a persistent record.

    Each resolved field is written with ``set`` and the returned instance is
    carried forward to the next field.
    """
    result = record
    for field_name, nested_schema in schema.items():
        if result.has(field_name):
            resolved = resolve_schema(nested_schema, result)
            result = result.set(field_name, unvisit(result.get(field_name), resolved))
    return result
