"""
Schema definitions for entnorm.

This package provides the schema variants used to describe nested data:
- EntitySchema: Identified record stored in the entity store
- ObjectSchema: Unnamed structure of fields
- ArraySchema: List of values, optionally polymorphic
- ValuesSchema: Map of arbitrary keys to values, optionally polymorphic
- UnionSchema: Single polymorphic value

The short aliases (``Entity``, ``Array``, ``Object``, ``Union``, ``Values``)
allow the namespace style:

    >>> from entnorm import schema
    >>> user = schema.Entity("users")
    >>> article = schema.Entity("articles", {"author": user, "comments": [comment]})

Invariants:
    - Bare ``[schema]`` and ``{field: schema}`` literals behave like Array/Object
    - Entity and Object definitions are extended with ``define()``, never replaced
"""

from .array import ArraySchema
from .base import Schema, SchemaKind, SchemaNode, classify, resolve_schema
from .entity import EntityOptions, EntitySchema
from .object import ObjectSchema
from .polymorphic import PolymorphicSchema
from .union import UnionSchema
from .values import ValuesSchema

Entity = EntitySchema
Array = ArraySchema
Object = ObjectSchema
Union = UnionSchema
Values = ValuesSchema

__all__ = [
    # Schema classes
    "EntitySchema",
    "ArraySchema",
    "ObjectSchema",
    "UnionSchema",
    "ValuesSchema",
    "PolymorphicSchema",
    "EntityOptions",
    # Aliases
    "Entity",
    "Array",
    "Object",
    "Union",
    "Values",
    # Variant model
    "Schema",
    "SchemaKind",
    "SchemaNode",
    "classify",
    "resolve_schema",
]
