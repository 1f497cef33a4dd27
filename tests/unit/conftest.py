"""
Shared fixtures for unit tests.
"""

from typing import Any

import pytest

from entnorm.config import reset_settings
from entnorm.immutable import PersistentMapping


class FrozenMap(PersistentMapping):
    """Minimal copy-on-write mapping standing in for an application's records."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = dict(data or {})

    def __getitem__(self, key: Any) -> Any:
        return self._data[key]

    def __iter__(self):
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def set(self, key: Any, value: Any) -> "FrozenMap":
        data = dict(self._data)
        data[key] = value
        return FrozenMap(data)

    def __repr__(self) -> str:
        return f"FrozenMap({self._data!r})"


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate each test from ENTNORM_* variables and cached settings."""
    for name in ("ENTNORM_DEFAULT_ID_ATTRIBUTE", "ENTNORM_STRICT_DISCRIMINATOR", "ENTNORM_RECURSION_LIMIT"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def frozen_map():
    """Factory for persistent records."""
    return FrozenMap
