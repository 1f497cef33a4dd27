"""
Configuration for entnorm.

Settings are read from ``ENTNORM_*`` environment variables through
pydantic-settings. A single process-wide instance is built lazily on first
use and can be replaced with ``configure()``.

Invariants:
    - Every setting has a default that reproduces the lenient behaviour
    - Settings never change the shape of the entity store
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

_global_settings: Settings | None = None
_settings_lock = threading.Lock()

# Calls currently inside recursion_guard, and the limit to restore after the last one.
_guard_lock = threading.Lock()
_guard_depth = 0
_guard_restore: int | None = None


class Settings(BaseSettings):
    """Library configuration loaded from environment."""

    default_id_attribute: str = Field(
        default="id",
        min_length=1,
        description="Id field for entities built without id_attribute",
    )
    strict_discriminator: bool = Field(
        default=False,
        description="Raise when a discriminator selects no schema",
    )
    recursion_limit: int | None = Field(
        default=None,
        gt=0,
        description="Interpreter recursion limit applied during a call (None=unchanged)",
    )

    model_config = {"env_prefix": "ENTNORM_"}


def get_settings() -> Settings:
    """Get the process-wide settings."""
    global _global_settings
    with _settings_lock:
        if _global_settings is None:
            _global_settings = Settings()
        return _global_settings


def configure(**overrides: Any) -> Settings:
    """Replace the process-wide settings.

    Unspecified values still come from the environment.

    Example:
        >>> configure(strict_discriminator=True)
    """
    global _global_settings
    settings = Settings(**overrides)
    with _settings_lock:
        _global_settings = settings
    return settings


def reset_settings() -> None:
    """Reset the process-wide settings (for testing only)."""
    global _global_settings
    with _settings_lock:
        _global_settings = None


@contextmanager
def recursion_guard(settings: Settings | None = None) -> Iterator[None]:
    """Raise the interpreter recursion limit while any guarded call runs.

    The limit is process-wide, so overlapping calls share it: it is only
    ever raised while guarded calls are active, and the limit seen by the
    first caller is restored when the last one exits.
    """
    global _guard_depth, _guard_restore
    settings = settings or get_settings()
    limit = settings.recursion_limit
    if limit is None:
        yield
        return

    with _guard_lock:
        if _guard_depth == 0:
            _guard_restore = sys.getrecursionlimit()
        _guard_depth += 1
        current = sys.getrecursionlimit()
        if limit > current:
            logger.warning(f"Raising recursion limit from {current} to {limit}")
            sys.setrecursionlimit(limit)
    try:
        yield
    finally:
        with _guard_lock:
            _guard_depth -= 1
            if _guard_depth == 0:
                sys.setrecursionlimit(_guard_restore)
                _guard_restore = None
