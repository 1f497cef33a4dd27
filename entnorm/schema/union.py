"""Single value that may be one of several entity types."""

from __future__ import annotations

from typing import Any

from ..errors import SchemaConstructionError
from .base import AddEntityFn, Schema, UnvisitFn, VisitedEntities, VisitFn
from .polymorphic import PolymorphicSchema, SchemaAttribute


class UnionSchema(PolymorphicSchema):
    """Polymorphic single value.

    Example:
        >>> owner = UnionSchema({"user": user, "group": group}, "type")
    """

    def __init__(self, definition: dict[str, Schema], schema_attribute: SchemaAttribute) -> None:
        if not schema_attribute:
            raise SchemaConstructionError(
                'Expected option "schema_attribute" not found on UnionSchema.',
                schema_type="Union",
            )
        super().__init__(definition, schema_attribute)

    def normalize(
        self,
        input: Any,
        parent: Any,
        key: Any,
        visit: VisitFn,
        add_entity: AddEntityFn,
        visited_entities: VisitedEntities,
    ) -> Any:
        key = "" if key is None else key
        return self.normalize_value(input, parent, key, visit, add_entity, visited_entities)

    def denormalize(self, input: Any, unvisit: UnvisitFn) -> Any:
        return self.denormalize_value(input, unvisit)
