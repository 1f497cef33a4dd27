"""Map of arbitrary keys to entities."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .base import AddEntityFn, Schema, UnvisitFn, VisitedEntities, VisitFn
from .polymorphic import PolymorphicSchema, SchemaAttribute


class ValuesSchema(PolymorphicSchema):
    """Mapping whose values share one schema, or pick one by discriminator.

    Each value is normalized with the input mapping as its parent and its own
    key, so ``id_attribute`` functions can derive ids from the key.
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
    ) -> Any:
        if not isinstance(input, Mapping):
            return input
        return {
            input_key: self.normalize_value(
                value, input, input_key, visit, add_entity, visited_entities
            )
            for input_key, value in input.items()
            if value is not None
        }

    def denormalize(self, input: Any, unvisit: UnvisitFn) -> Any:
        if not isinstance(input, Mapping):
            return input
        return {
            input_key: self.denormalize_value(entity_or_id, unvisit)
            for input_key, entity_or_id in input.items()
        }
