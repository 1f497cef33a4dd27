"""
Denormalization: flat entity store -> nested data.

This module provides:
- get_entities: Entity getter over a plain or persistent store
- EagerUnvisitor: Default strategy that materializes the whole graph
- DenormalizeOptions: Hook to replace the strategy
- denormalize: Public entry point

Cycles are rebuilt by registering each entity's working copy in a per-call
cache before its nested fields are resolved. A reference met deeper in the
recursion resolves to that same copy, which is complete by the time the
outermost call returns. Shared (non-cyclic) references resolve to the same
instance too.

Invariants:
    - Every call owns its cache and in-progress set
    - Stored records are copied, never mutated
    - Missing entities never raise; they fall back or pass through
    - A cycle through a persistent record raises CircularReferenceError
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from .config import get_settings, recursion_guard
from .errors import CircularReferenceError
from .immutable import is_immutable
from .schema import array as array_schema
from .schema import object as object_schema
from .schema.base import GetEntityFn, SchemaKind, UnvisitFn, classify, resolve_schema
from .schema.entity import EntitySchema

logger = logging.getLogger(__name__)

CreateUnvisitFn = Callable[[Any, GetEntityFn], UnvisitFn]


@dataclass(frozen=True)
class DenormalizeOptions:
    """Options for denormalize.

    Attributes:
        create_unvisit: ``fn(entities, get_entity) -> unvisit`` replacing the
            eager strategy, e.g. to build lazy proxies
    """

    create_unvisit: CreateUnvisitFn | None = None


def get_entities(entities: Any) -> GetEntityFn:
    """Create a getter returning the stored record for an id.

    Mappings passed in place of an id are returned unchanged: they are
    already-denormalized data.
    """
    persistent_store = is_immutable(entities)

    def get_entity(entity_or_id: Any, schema: EntitySchema) -> Any:
        if isinstance(entity_or_id, Mapping):
            return entity_or_id

        if persistent_store:
            return entities.get_in([schema.key, str(entity_or_id)])

        bucket = entities.get(schema.key)
        if bucket is None:
            return None
        return bucket.get(str(entity_or_id))

    return get_entity


class EagerUnvisitor:
    """Default unvisit strategy.

    Resolves every nested entity immediately. Callable as
    ``unvisit(value, schema)``.
    """

    def __init__(self, get_entity: GetEntityFn) -> None:
        self._get_entity = get_entity
        self._cache: dict[str, dict[str, Any]] = {}
        self._in_progress: set[str] = set()

    def __call__(self, value: Any, schema: Any) -> Any:
        if value is None:
            return value

        kind = classify(schema)
        if kind is SchemaKind.ARRAY_SHORTHAND:
            return array_schema.denormalize(schema, value, self)
        if kind is SchemaKind.OBJECT_SHORTHAND:
            return object_schema.denormalize(schema, value, self)
        if kind is SchemaKind.RESOLVER:
            return self(value, resolve_schema(schema, value))
        if kind is SchemaKind.ENTITY:
            return self.unvisit_entity(value, schema)
        return schema.denormalize(value, self)

    def unvisit_entity(self, id_or_entity: Any, schema: EntitySchema) -> Any:
        entity = self._get_entity(id_or_entity, schema)

        if entity is None:
            entity = schema.fallback(id_or_entity, schema)
            if entity is not None:
                logger.debug(f"Using fallback for missing entity {schema.key}:{id_or_entity}")

        if not isinstance(entity, Mapping):
            return entity

        if isinstance(id_or_entity, Mapping):
            # Already-denormalized data is keyed by object identity.
            entity_id = f"<object {id(id_or_entity):#x}>"
        else:
            entity_id = str(id_or_entity)

        cache = self._cache.setdefault(schema.key, {})
        cache_key = f"{schema.key}:{entity_id}"

        if cache_key in self._in_progress:
            if is_immutable(entity):
                raise CircularReferenceError(schema.key, entity_id)
            logger.debug(f"Circular reference to {cache_key}, returning placeholder")
            return cache[entity_id]

        if entity_id in cache:
            return cache[entity_id]

        self._in_progress.add(cache_key)
        try:
            working_copy = entity if is_immutable(entity) else dict(entity)
            cache[entity_id] = working_copy
            cache[entity_id] = schema.denormalize(working_copy, self)
        finally:
            self._in_progress.discard(cache_key)

        return cache[entity_id]


def create_eager_unvisit(entities: Any, get_entity: GetEntityFn) -> UnvisitFn:
    """Build the default eager unvisit function.

    ``entities`` is unused here; custom strategies receive it as well.
    """
    return EagerUnvisitor(get_entity)


def denormalize(
    input: Any,
    schema: Any,
    entities: Any,
    options: DenormalizeOptions | None = None,
) -> Any:
    """Rebuild nested data from a normalized result.

    Args:
        input: Normalized result (ids, tags or a skeleton holding them)
        schema: Schema describing the data
        entities: Entity store produced by normalize
        options: Optional strategy override

    Returns:
        The denormalized data, or None if input is None

    Raises:
        CircularReferenceError: If a persistent record refers back to itself

    Example:
        >>> entities = {"articles": {"123": {"id": "123", "author": "1"}},
        ...             "users": {"1": {"id": "1", "name": "Paul"}}}
        >>> denormalize("123", article, entities)
        {'id': '123', 'author': {'id': '1', 'name': 'Paul'}}
    """
    if input is None:
        return input

    get_entity = get_entities(entities)
    create_unvisit = (options.create_unvisit if options else None) or create_eager_unvisit
    unvisit = create_unvisit(entities, get_entity)

    with recursion_guard(get_settings()):
        return unvisit(input, schema)
