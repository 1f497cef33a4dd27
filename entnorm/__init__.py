"""
entnorm - Normalize nested data into a flat entity store and back.

This package provides:
- Schema definitions (EntitySchema, ArraySchema, ObjectSchema, UnionSchema, ValuesSchema)
- normalize: nested data -> {result, entities}
- denormalize: {result, entities} -> nested data
- PersistentMapping marker for copy-on-write records

Example:
    >>> from entnorm import denormalize, normalize, schema
    >>>
    >>> user = schema.Entity("users")
    >>> article = schema.Entity("articles", {"author": user})
    >>>
    >>> data = normalize({"id": "123", "author": {"id": "1", "name": "Paul"}}, article)
    >>> data.result
    '123'
    >>> denormalize(data.result, article, data.entities)
    {'id': '123', 'author': {'id': '1', 'name': 'Paul'}}

Invariants:
    - No state survives between calls
    - Store ids are always strings
    - Circular references denormalize to shared instances

Version: 1.0.0
"""

__version__ = "1.0.0"

from . import schema
from .config import Settings, configure, get_settings
from .denormalize import DenormalizeOptions, denormalize
from .errors import (
    CircularReferenceError,
    EntnormError,
    SchemaConstructionError,
    SchemaError,
    SchemaResolutionError,
    ValidationError,
)
from .immutable import PersistentMapping
from .normalize import NormalizedSchema, normalize
from .schema import (
    ArraySchema,
    EntityOptions,
    EntitySchema,
    ObjectSchema,
    PolymorphicSchema,
    UnionSchema,
    ValuesSchema,
)

__all__ = [
    # Version
    "__version__",
    # Functions
    "normalize",
    "denormalize",
    "NormalizedSchema",
    "DenormalizeOptions",
    # Schema types
    "schema",
    "EntitySchema",
    "ArraySchema",
    "ObjectSchema",
    "UnionSchema",
    "ValuesSchema",
    "PolymorphicSchema",
    "EntityOptions",
    "PersistentMapping",
    # Configuration
    "Settings",
    "get_settings",
    "configure",
    # Errors
    "EntnormError",
    "SchemaConstructionError",
    "SchemaError",
    "ValidationError",
    "CircularReferenceError",
    "SchemaResolutionError",
]
