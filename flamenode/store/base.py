"""
Node store and cache interfaces for Flamenode.

The normalizer only talks to these abstractions. Id and digest generation
live on the base class so every store produces identical values for
identical input.
"""

import hashlib
import json
import uuid
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, Optional

# Namespace for deterministic node ids.
NODE_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "flamenode")


def json_default(value: Any) -> Any:
    """`json.dumps` fallback for values produced by normalization."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if hasattr(value, "model_dump"):
        return value.model_dump()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize(value: Any) -> str:
    """Serialize a node snapshot the way it is stored in `internal.content`."""
    return json.dumps(value, default=json_default, ensure_ascii=False)


class BaseNodeStore(ABC):
    """
    Abstract node store the normalized graph is written into.
    """

    def create_node_id(self, namespaced: str) -> str:
        """
        Derive a node id from a namespacing string.

        Returns:
            A UUID string that is a pure function of `namespaced`
        """
        return str(uuid.uuid5(NODE_ID_NAMESPACE, namespaced))

    def create_content_digest(self, content: Any) -> str:
        """
        Hash a node's content for change detection.

        Strings are hashed as-is; everything else through its canonical
        (sorted, compact) JSON form.
        """
        if isinstance(content, str):
            payload = content
        else:
            payload = json.dumps(content, sort_keys=True, separators=(",", ":"),
                                 default=json_default, ensure_ascii=False)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    @abstractmethod
    def create_node(self, record: Dict[str, Any]) -> None:
        """Persist a flattened node record (see `Node.to_record`)."""
        pass

    @abstractmethod
    def get_node(self, node_id: str) -> Optional[Dict[str, Any]]:
        """Return the record for `node_id`, or None when it does not exist."""
        pass

    @abstractmethod
    def touch_node(self, node_id: str) -> None:
        """Mark an existing node as still in use in the current run."""
        pass


class BaseCache(ABC):
    """
    Abstract asynchronous key/value cache.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        pass
