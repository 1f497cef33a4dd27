"""
Shared machinery for container schemas that may hold several entity types.

A polymorphic schema is built either from a single schema, or from a mapping
of name -> schema plus a discriminator (``schema_attribute``) that picks the
name for each value. Multi-schema containers store their members as
``{"id": <id>, "schema": <name>}`` tags so the right schema can be found again
on the way back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Union

from ..config import get_settings
from ..errors import SchemaResolutionError
from .base import AddEntityFn, Schema, SchemaNode, UnvisitFn, VisitedEntities, VisitFn

logger = logging.getLogger(__name__)

SchemaAttribute = Union[str, Callable[[Any, Any, Any], Any]]


def _attribute_getter(attribute: str) -> Callable[[Any, Any, Any], Any]:
    def get_attribute(input: Any, parent: Any, key: Any) -> Any:
        return input.get(attribute) if isinstance(input, Mapping) else None

    return get_attribute


class PolymorphicSchema(SchemaNode):
    """Base class for Array, Values and Union schemas.

    Attributes:
        schema: The single member schema, or a name -> schema mapping
    """

    def __init__(self, definition: Schema, schema_attribute: SchemaAttribute | None = None) -> None:
        self._schema_attribute: Callable[[Any, Any, Any], Any] | None = None
        if schema_attribute:
            self._schema_attribute = (
                _attribute_getter(schema_attribute)
                if isinstance(schema_attribute, str)
                else schema_attribute
            )
        self.schema: Any = definition

    @property
    def is_single_schema(self) -> bool:
        return self._schema_attribute is None

    def define(self, definition: Schema) -> None:
        """Replace the member definition."""
        self.schema = definition

    def get_schema_attribute(self, input: Any, parent: Any, key: Any) -> Any:
        if self._schema_attribute is None:
            return None
        return self._schema_attribute(input, parent, key)

    def infer_schema(self, input: Any, parent: Any, key: Any) -> Schema | None:
        """Pick the member schema for ``input``.

        Returns None when the discriminator yields nothing usable, unless
        strict discrimination is configured.
        """
        if self.is_single_schema:
            return self.schema

        attribute = self.get_schema_attribute(input, parent, key)
        schema = self.schema.get(attribute) if attribute else None
        if schema is None and get_settings().strict_discriminator:
            raise SchemaResolutionError(attribute, sorted(self.schema))
        return schema

    def normalize_value(
        self,
        value: Any,
        parent: Any,
        key: Any,
        visit: VisitFn,
        add_entity: AddEntityFn,
        visited_entities: VisitedEntities,
    ) -> Any:
        schema = self.infer_schema(value, parent, key)
        if schema is None:
            logger.debug(f"No schema for value at key {key!r}, passing through")
            return value

        normalized = visit(value, parent, key, schema, add_entity, visited_entities)

        if self.is_single_schema or normalized is None:
            return normalized

        return {"id": normalized, "schema": self.get_schema_attribute(value, parent, key)}

    def denormalize_value(self, value: Any, unvisit: UnvisitFn) -> Any:
        if self.is_single_schema:
            return unvisit(value, self.schema)

        if not isinstance(value, Mapping):
            return value

        schema_key = value.get("schema")
        if not schema_key:
            return value

        schema = self.schema.get(schema_key)
        if schema is None:
            logger.debug(f"Unknown schema {schema_key!r} in tag, passing through")
            return value

        id = value.get("id")
        return unvisit(value if id is None else id, schema)
