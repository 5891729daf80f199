"""
In-memory node store and cache.

Used for dry runs and tests, where nothing needs to outlive the process.
"""

import copy
from typing import Any, Dict, List, Optional, Set

from .base import BaseCache, BaseNodeStore


class MemoryNodeStore(BaseNodeStore):
    """Node store backed by a plain dictionary."""

    def __init__(self):
        self.nodes: Dict[str, Dict[str, Any]] = {}
        self.touched: Set[str] = set()

    def create_node(self, record: Dict[str, Any]) -> None:
        self.nodes[record["id"]] = record
        self.touched.add(record["id"])

    def get_node(self, node_id: str) -> Optional[Dict[str, Any]]:
        return self.nodes.get(node_id)

    def touch_node(self, node_id: str) -> None:
        self.touched.add(node_id)

    def list_nodes(self, node_type: Optional[str] = None) -> List[Dict[str, Any]]:
        if node_type is None:
            return list(self.nodes.values())
        return [node for node in self.nodes.values() if node["internal"]["type"] == node_type]


class MemoryCache(BaseCache):
    """Cache backed by a plain dictionary. Values are deep-copied on the way in and out."""

    def __init__(self):
        self._values: Dict[str, Any] = {}

    async def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._values.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)
