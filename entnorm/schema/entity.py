"""
Entity schema.

An entity is a record type with an identity. Normalizing an entity stores a
flat copy of it under ``entities[key][str(id)]`` and returns its id;
denormalizing looks the id back up and rebuilds the nested fields.

Invariants:
    - The id is always read from the raw input, never from the processed copy
    - Normalization never mutates the input
    - ``define()`` merges new nested fields into existing ones

Example:
    >>> user = EntitySchema("users")
    >>> article = EntitySchema("articles", {"author": user})
    >>> user.define({"articles": [article]})
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from typing import Any, Union

from ..config import get_settings
from ..errors import SchemaConstructionError, ValidationError
from ..immutable import denormalize_immutable, is_immutable
from .base import (
    AddEntityFn,
    SchemaNode,
    UnvisitFn,
    VisitedEntities,
    VisitFn,
    describe_kind,
    is_container,
    resolve_schema,
)

logger = logging.getLogger(__name__)

IdAttribute = Union[str, Callable[[Any, Any, Any], Any]]


@dataclass(frozen=True)
class EntityOptions:
    """Pluggable strategies for an entity schema.

    Attributes:
        id_attribute: Field name holding the id, or ``fn(input, parent, key)``
        merge_strategy: ``fn(existing, incoming)`` used on id collisions
        process_strategy: ``fn(input, parent, key)`` returning the record to store
        fallback_strategy: ``fn(id, schema)`` substitute for a missing record
        validate_strategy: ``fn(input)`` returning False to reject an input
    """

    id_attribute: IdAttribute | None = None
    merge_strategy: Callable[[dict, dict], dict] | None = None
    process_strategy: Callable[[Any, Any, Any], dict] | None = None
    fallback_strategy: Callable[[Any, EntitySchema], Any] | None = None
    validate_strategy: Callable[[Any], bool] | None = None


def _default_get_id(id_attribute: str) -> Callable[[Any, Any, Any], Any]:
    def get_id(input: Any, parent: Any, key: Any) -> Any:
        return input.get(id_attribute) if isinstance(input, Mapping) else None

    return get_id


def _default_merge(existing: dict, incoming: dict) -> dict:
    return {**existing, **incoming}


def _default_process(input: Any, parent: Any, key: Any) -> dict:
    return dict(input)


def _default_fallback(id: Any, schema: EntitySchema) -> Any:
    return None


class EntitySchema(SchemaNode):
    """Schema for an identified record type.

    Attributes:
        key: Entity type name, used as the bucket in the entity store
        schema: Nested field name -> schema
    """

    is_entity = True

    def __init__(
        self,
        key: str,
        definition: Mapping[str, Any] | None = None,
        options: EntityOptions | None = None,
        **option_overrides: Any,
    ) -> None:
        if not key or not isinstance(key, str):
            raise SchemaConstructionError(
                f"Expected a string key for Entity, but found {key!r}.",
                schema_type="Entity",
            )

        if options is None:
            options = EntityOptions(**option_overrides)
        elif option_overrides:
            options = replace(options, **option_overrides)

        id_attribute = options.id_attribute
        if id_attribute is None:
            id_attribute = get_settings().default_id_attribute

        self._key = key
        self._id_attribute = id_attribute
        self._get_id = id_attribute if callable(id_attribute) else _default_get_id(id_attribute)
        self._merge_strategy = options.merge_strategy or _default_merge
        self._process_strategy = options.process_strategy or _default_process
        self._fallback_strategy = options.fallback_strategy or _default_fallback
        self._validate_strategy = options.validate_strategy
        self.schema: dict[str, Any] = {}
        self.define(definition or {})

    @property
    def key(self) -> str:
        """Entity type name."""
        return self._key

    @property
    def id_attribute(self) -> IdAttribute:
        return self._id_attribute

    def define(self, definition: Mapping[str, Any]) -> None:
        """Merge nested field declarations into this schema."""
        self.schema = {**self.schema, **definition}

    def get_id(self, input: Any, parent: Any, key: Any) -> Any:
        return self._get_id(input, parent, key)

    def merge(self, existing: dict, incoming: dict) -> dict:
        return self._merge_strategy(existing, incoming)

    def fallback(self, id: Any, schema: EntitySchema) -> Any:
        return self._fallback_strategy(id, schema)

    def validate(self, input: Any) -> Any:
        """Check that ``input`` can be stored as this entity.

        Raises:
            ValidationError: If input is not a mapping or the validate
                strategy rejects it
        """
        if not isinstance(input, Mapping):
            received = describe_kind(input)
            article = "" if received in ("None", "a list") else "type "
            raise ValidationError(
                f'Expected a mapping for entity "{self.key}", but received {article}{received}.',
                entity_key=self.key,
                received=received,
            )
        if self._validate_strategy is not None and not self._validate_strategy(input):
            raise ValidationError(
                f'Validation failed for entity "{self.key}".',
                entity_key=self.key,
                received=type(input).__name__,
            )
        return input

    def normalize(
        self,
        input: Any,
        parent: Any,
        key: Any,
        visit: VisitFn,
        add_entity: AddEntityFn,
        visited_entities: VisitedEntities,
    ) -> Any:
        """Store ``input`` as a flat record and return its id."""
        input = self.validate(input)
        id = self.get_id(input, parent, key)

        seen = visited_entities.setdefault(self.key, {}).setdefault(str(id), [])
        if any(entity is input for entity in seen):
            logger.debug(f"Already visiting {self.key}:{id}, returning id")
            return id
        seen.append(input)

        processed = self._process_strategy(input, parent, key)

        for field_name, nested_schema in self.schema.items():
            if field_name in processed and is_container(processed[field_name]):
                processed[field_name] = visit(
                    processed[field_name],
                    processed,
                    field_name,
                    resolve_schema(nested_schema, input),
                    add_entity,
                    visited_entities,
                )

        add_entity(self, processed, input, parent, key)
        return id

    def denormalize(self, entity: Any, unvisit: UnvisitFn) -> Any:
        """Resolve the nested fields of a working copy.

        Mutable records are patched in place so that references handed out
        while they were being built see the final state. Persistent records
        are rebuilt through ``set``.
        """
        if is_immutable(entity):
            return denormalize_immutable(self.schema, entity, unvisit)

        for field_name, nested_schema in self.schema.items():
            if field_name in entity:
                entity[field_name] = unvisit(entity[field_name], resolve_schema(nested_schema, entity))
        return entity

    def __repr__(self) -> str:
        return f"EntitySchema(key={self.key!r}, fields={sorted(self.schema)})"
