"""
Schema variant model.

A schema is one of a closed set of shapes:

- a ``SchemaNode`` instance (entity, object, array, values or union schema)
- a one-element ``list``/``tuple`` (array shorthand)
- a ``dict`` of field name to schema (object shorthand)
- a callable returning a schema (dynamic resolver)

``classify()`` maps any schema to its ``SchemaKind`` so that the visitor and
unvisitor dispatch in exactly one place.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from .entity import EntitySchema

Schema = Union["SchemaNode", list, tuple, dict, Callable[..., Any]]

# visit(value, parent, key, schema, add_entity, visited_entities)
VisitFn = Callable[..., Any]
# unvisit(value, schema)
UnvisitFn = Callable[[Any, "Schema"], Any]
# add_entity(schema, processed_entity, raw_input, parent, key)
AddEntityFn = Callable[["EntitySchema", dict, Any, Any, Any], None]
# entity type -> str(id) -> raw inputs already visited
VisitedEntities = dict[str, dict[str, list[Any]]]
# get_entity(id_or_record, schema)
GetEntityFn = Callable[[Any, "EntitySchema"], Any]


class SchemaKind(Enum):
    """Shape of a schema definition."""

    ENTITY = "entity"
    NODE = "node"
    ARRAY_SHORTHAND = "array_shorthand"
    OBJECT_SHORTHAND = "object_shorthand"
    RESOLVER = "resolver"


class SchemaNode(ABC):
    """Base class for schema instances."""

    is_entity = False

    @abstractmethod
    def normalize(
        self,
        input: Any,
        parent: Any,
        key: Any,
        visit: VisitFn,
        add_entity: AddEntityFn,
        visited_entities: VisitedEntities,
    ) -> Any:
        """Flatten ``input`` and return its normalized form."""

    @abstractmethod
    def denormalize(self, input: Any, unvisit: UnvisitFn) -> Any:
        """Rebuild the nested form of ``input``."""


def classify(schema: Any) -> SchemaKind:
    """Return the kind of ``schema``.

    Raises:
        TypeError: If ``schema`` is none of the supported shapes
    """
    if isinstance(schema, SchemaNode):
        return SchemaKind.ENTITY if schema.is_entity else SchemaKind.NODE
    if isinstance(schema, (list, tuple)):
        return SchemaKind.ARRAY_SHORTHAND
    if isinstance(schema, Mapping):
        return SchemaKind.OBJECT_SHORTHAND
    if callable(schema):
        return SchemaKind.RESOLVER
    raise TypeError(f"Unsupported schema definition: {type(schema).__name__}")


def resolve_schema(schema: Any, input: Any) -> Any:
    """Call a dynamic resolver with ``input``; other schemas are returned as-is."""
    if classify(schema) is SchemaKind.RESOLVER:
        return schema(input)
    return schema


def is_container(value: Any) -> bool:
    """Whether ``value`` may hold entities (mapping or sequence)."""
    return isinstance(value, (Mapping, list, tuple))


def describe_kind(value: Any) -> str:
    """Human-readable kind used in error messages."""
    if value is None:
        return "None"
    if isinstance(value, (list, tuple)):
        return "a list"
    return type(value).__name__
