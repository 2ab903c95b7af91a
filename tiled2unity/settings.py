"""Durable key-value store interface used for the last vertex scale."""
from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

LAST_VERTEX_SCALE_KEY = "export.lastVertexScale"


class SettingsStore(Protocol):
    def get(self, key_path: str, default: Any = None) -> Any:
        ...

    def set_and_persist(self, key_path: str, value: Any) -> None:
        ...


class MemorySettings:
    """Non-durable store for tests and embedding hosts without a settings file."""

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self.values: Dict[str, Any] = dict(values or {})
        self.persist_count = 0

    def get(self, key_path: str, default: Any = None) -> Any:
        return self.values.get(key_path, default)

    def set_and_persist(self, key_path: str, value: Any) -> None:
        self.values[key_path] = value
        self.persist_count += 1
