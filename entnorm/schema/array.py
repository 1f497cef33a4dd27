"""
Array schemas.

``[schema]`` is shorthand for a list of values sharing one schema. The full
``ArraySchema`` additionally supports several member schemas chosen by a
discriminator, and drops members that normalize to None.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..errors import SchemaError
from .base import AddEntityFn, Schema, UnvisitFn, VisitedEntities, VisitFn
from .polymorphic import PolymorphicSchema, SchemaAttribute


def validate_schema(definition: Any) -> Schema:
    """Unwrap a one-element list shorthand.

    Raises:
        SchemaError: If the shorthand does not hold exactly one schema
    """
    if isinstance(definition, (list, tuple)):
        if len(definition) != 1:
            raise SchemaError(
                f"Expected schema definition to be a single schema, but found {len(definition)}.",
                found=len(definition),
            )
        return definition[0]
    return definition


def get_values(input: Any) -> list[Any]:
    if isinstance(input, Mapping):
        return list(input.values())
    return list(input)


def normalize(
    schema: Any,
    input: Any,
    parent: Any,
    key: Any,
    visit: VisitFn,
    add_entity: AddEntityFn,
    visited_entities: VisitedEntities,
) -> list[Any]:
    """Normalize each member with the shorthand's schema.

    Members keep the caller's parent and key.
    """
    member_schema = validate_schema(schema)
    return [
        visit(value, parent, key, member_schema, add_entity, visited_entities)
        for value in get_values(input)
    ]


def denormalize(schema: Any, input: Any, unvisit: UnvisitFn) -> Any:
    member_schema = validate_schema(schema)
    if isinstance(input, (list, tuple)):
        return [unvisit(entity_or_id, member_schema) for entity_or_id in input]
    return input


class ArraySchema(PolymorphicSchema):
    """List of entities, optionally of several types.

    Example:
        >>> ArraySchema({"admins": admin, "users": user}, "type")
    """

    def __init__(self, definition: Schema, schema_attribute: SchemaAttribute | None = None) -> None:
        super().__init__(definition, schema_attribute)

    def normalize(
        self,
        input: Any,
        parent: Any,
        key: Any,
        visit: VisitFn,
        add_entity: AddEntityFn,
        visited_entities: VisitedEntities,
    ) -> list[Any]:
        key = "" if key is None else key
        normalized = (
            self.normalize_value(value, parent, key, visit, add_entity, visited_entities)
            for value in get_values(input)
        )
        return [value for value in normalized if value is not None]

    def denormalize(self, input: Any, unvisit: UnvisitFn) -> Any:
        if isinstance(input, (list, tuple)):
            return [self.denormalize_value(value, unvisit) for value in input]
        return input
