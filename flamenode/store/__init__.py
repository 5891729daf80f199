"""Node store and cache implementations."""

from .base import BaseCache, BaseNodeStore, serialize
from .memory import MemoryCache, MemoryNodeStore
from .database import DatabaseManager, DuckDBCache, DuckDBNodeStore

__all__ = [
    "BaseCache",
    "BaseNodeStore",
    "serialize",
    "MemoryCache",
    "MemoryNodeStore",
    "DatabaseManager",
    "DuckDBCache",
    "DuckDBNodeStore",
]
