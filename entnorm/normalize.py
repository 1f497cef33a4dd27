"""
Normalization: nested data -> flat entity store.

This module provides:
- visit: Recursive visitor dispatching on the schema kind
- EntityStoreBuilder: Accumulates entities, merging id collisions
- normalize: Public entry point

Invariants:
    - Every call builds a fresh store and visited-entities tracker
    - Store ids are strings regardless of the id type in the input
    - The input is never mutated
    - A validation error aborts the call; no partial store is returned

Example:
    >>> user = EntitySchema("users")
    >>> article = EntitySchema("articles", {"author": user})
    >>> normalize({"id": "123", "author": {"id": "1", "name": "Paul"}}, article).to_dict()
    {'result': '123', 'entities': {'users': {'1': {...}}, 'articles': {'123': {..., 'author': '1'}}}}
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .config import get_settings, recursion_guard
from .errors import ValidationError
from .schema import array as array_schema
from .schema import object as object_schema
from .schema.base import (
    AddEntityFn,
    SchemaKind,
    VisitedEntities,
    classify,
    describe_kind,
    is_container,
    resolve_schema,
)
from .schema.entity import EntitySchema

logger = logging.getLogger(__name__)

EntitiesMap = dict[str, dict[str, Any]]


@dataclass
class NormalizedSchema:
    """Result of normalizing a value.

    Attributes:
        result: Skeleton of the input with entities replaced by ids
        entities: Entity store, type key -> str(id) -> flat record
    """

    result: Any
    entities: EntitiesMap = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"result": self.result, "entities": self.entities}


def visit(
    value: Any,
    parent: Any,
    key: Any,
    schema: Any,
    add_entity: AddEntityFn,
    visited_entities: VisitedEntities,
) -> Any:
    """Normalize ``value`` according to ``schema``.

    Scalars and None are returned unchanged; they are never entities. A
    resolver in schema position is called with the value itself; field
    resolvers are resolved by their entity or object against the record.
    """
    if not is_container(value):
        return value

    kind = classify(schema)
    if kind is SchemaKind.ARRAY_SHORTHAND:
        return array_schema.normalize(schema, value, parent, key, visit, add_entity, visited_entities)
    if kind is SchemaKind.OBJECT_SHORTHAND:
        return object_schema.normalize(schema, value, parent, key, visit, add_entity, visited_entities)
    if kind is SchemaKind.RESOLVER:
        return visit(value, parent, key, resolve_schema(schema, value), add_entity, visited_entities)
    return schema.normalize(value, parent, key, visit, add_entity, visited_entities)


class EntityStoreBuilder:
    """Collects normalized entities for a single normalize call.

    Instances are passed to the visitor as ``add_entity``.
    """

    def __init__(self, entities: EntitiesMap | None = None) -> None:
        self.entities: EntitiesMap = entities if entities is not None else {}

    def __call__(
        self,
        schema: EntitySchema,
        processed_entity: dict,
        value: Any,
        parent: Any,
        key: Any,
    ) -> None:
        bucket = self.entities.setdefault(schema.key, {})
        id = str(schema.get_id(value, parent, key))

        if id in bucket:
            logger.debug(f"Merging duplicate entity {schema.key}:{id}")
            bucket[id] = schema.merge(bucket[id], processed_entity)
        else:
            bucket[id] = processed_entity


def normalize(input: Any, schema: Any) -> NormalizedSchema:
    """Normalize nested data according to a schema.

    Args:
        input: Data to normalize (a mapping, list or tuple)
        schema: Schema describing the data

    Returns:
        NormalizedSchema with ``result`` and ``entities``

    Raises:
        ValidationError: If input is not object-like or an entity rejects it
    """
    if not isinstance(input, (Mapping, list, tuple)):
        raise ValidationError(
            f'Unexpected input given to normalize. Expected type to be "object", '
            f'found "{describe_kind(input)}".',
            received=describe_kind(input),
        )

    add_entity = EntityStoreBuilder()
    visited_entities: VisitedEntities = {}

    with recursion_guard(get_settings()):
        result = visit(input, input, None, schema, add_entity, visited_entities)

    record_count = sum(len(bucket) for bucket in add_entity.entities.values())
    logger.debug(f"Normalized {len(add_entity.entities)} entity types ({record_count} records)")
    return NormalizedSchema(result=result, entities=add_entity.entities)
