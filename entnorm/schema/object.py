"""
Object schemas.

A plain ``dict`` of field name -> schema is shorthand for an unnamed
structure; ``ObjectSchema`` wraps the same behaviour in a class that can be
extended with ``define()``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..immutable import denormalize_immutable, is_immutable
from .base import AddEntityFn, SchemaNode, UnvisitFn, VisitedEntities, VisitFn, resolve_schema


def normalize(
    schema: Mapping[str, Any],
    input: Any,
    parent: Any,
    key: Any,
    visit: VisitFn,
    add_entity: AddEntityFn,
    visited_entities: VisitedEntities,
) -> Any:
    """Normalize declared fields of a shallow copy of ``input``.

    Fields that normalize to None are dropped.
    """
    if not isinstance(input, Mapping):
        return input

    output = dict(input)
    for field_name, field_schema in schema.items():
        value = visit(
            input.get(field_name),
            input,
            field_name,
            resolve_schema(field_schema, input),
            add_entity,
            visited_entities,
        )
        if value is None:
            output.pop(field_name, None)
        else:
            output[field_name] = value
    return output


def denormalize(schema: Mapping[str, Any], input: Any, unvisit: UnvisitFn) -> Any:
    if is_immutable(input):
        return denormalize_immutable(schema, input, unvisit)
    if not isinstance(input, Mapping):
        return input

    output = dict(input)
    for field_name, field_schema in schema.items():
        if output.get(field_name) is not None:
            output[field_name] = unvisit(output[field_name], resolve_schema(field_schema, output))
    return output


class ObjectSchema(SchemaNode):
    """Unnamed structure whose fields hold entities.

    Example:
        >>> ObjectSchema({"users": [user], "next_page": page})
    """

    def __init__(self, definition: Mapping[str, Any]) -> None:
        self.schema: dict[str, Any] = {}
        self.define(definition)

    def define(self, definition: Mapping[str, Any]) -> None:
        """Merge field declarations into this schema."""
        self.schema = {**self.schema, **definition}

    def normalize(
        self,
        input: Any,
        parent: Any,
        key: Any,
        visit: VisitFn,
        add_entity: AddEntityFn,
        visited_entities: VisitedEntities,
    ) -> dict[str, Any]:
        return normalize(self.schema, input, parent, key, visit, add_entity, visited_entities)

    def denormalize(self, input: Any, unvisit: UnvisitFn) -> Any:
        return denormalize(self.schema, input, unvisit)
