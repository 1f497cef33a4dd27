"""
Error types for entnorm.

This module defines all exception types raised by the library:
- EntnormError: Base exception
- SchemaConstructionError: Invalid schema definition at build time
- SchemaError: Schema shape unusable during traversal
- ValidationError: Input rejected during normalization
- CircularReferenceError: Cycle through an immutable-style record
- SchemaResolutionError: Discriminator selected no schema (strict mode)

Invariants:
    - All errors inherit from EntnormError
    - Errors include context for debugging
    - Nothing is raised for missing entities during denormalization
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class EntnormError(Exception):
    """Base exception for all entnorm errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "ENTNORM_ERROR"
        self.details = details or {}


class SchemaConstructionError(EntnormError, ValueError):
    """A schema could not be built.

    Raised when:
    - Entity key is missing or not a string
    - Union schema is built without a schema attribute
    """

    def __init__(self, message: str, schema_type: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="SCHEMA_CONSTRUCTION_ERROR",
            details={"schema_type": schema_type},
        )
        self.schema_type = schema_type


class SchemaError(EntnormError):
    """A schema definition cannot be used for traversal.

    Raised when a list shorthand holds more than one schema.
    """

    def __init__(self, message: str, found: Optional[int] = None) -> None:
        super().__init__(message, code="SCHEMA_ERROR", details={"found": found})
        self.found = found


class ValidationError(EntnormError, ValueError):
    """Normalization input was rejected.

    Raised when:
    - The top-level input is not a mapping or sequence
    - An entity value is not a mapping
    - A custom validate strategy rejects the input

    Attributes:
        entity_key: Entity type that rejected the value (None for top level)
        received: Human-readable kind of the rejected value
    """

    def __init__(
        self,
        message: str,
        entity_key: Optional[str] = None,
        received: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"entity_key": entity_key, "received": received},
        )
        self.entity_key = entity_key
        self.received = received


class CircularReferenceError(EntnormError):
    """Cycle detected while rebuilding an immutable-style entity.

    Immutable records cannot be patched in place, so a record that refers
    back to itself (directly or indirectly) cannot be denormalized.
    """

    def __init__(self, entity_key: str, entity_id: Any) -> None:
        super().__init__(
            f'Circular reference detected for immutable entity "{entity_key}" '
            f'with ID "{entity_id}". Circular references are not supported '
            f"with immutable records.",
            code="CIRCULAR_REFERENCE",
            details={"entity_key": entity_key, "entity_id": entity_id},
        )
        self.entity_key = entity_key
        self.entity_id = entity_id


class SchemaResolutionError(EntnormError):
    """Discriminator did not select a schema.

    Only raised when ``Settings.strict_discriminator`` is enabled; by default
    such values pass through untouched.
    """

    def __init__(self, attribute: Any, available: Optional[list[str]] = None) -> None:
        available = available or []
        msg = f"No schema found for discriminator value {attribute!r}"
        if available:
            msg += f". Expected one of: {', '.join(available)}"
        super().__init__(
            msg,
            code="SCHEMA_RESOLUTION_ERROR",
            details={"attribute": attribute, "available": available},
        )
        self.attribute = attribute
        self.available = available
