"""
Node models for Flamenode.

A node is the universal output unit handed to the node store. Structural
fields (id, parent, children, internal) are declared; the content-specific
fields of each node live in `data` and are flattened into the record the
node store receives.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class NodeInternal(BaseModel):
    """Bookkeeping block of a node."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(
        ...,
        description="GraphQL type name of the node"
    )

    content: str = Field(
        ...,
        description="Serialized snapshot of the node content"
    )

    content_digest: str = Field(
        ...,
        alias="contentDigest",
        description="Deterministic hash used for change detection"
    )

    media_type: Optional[str] = Field(
        None,
        alias="mediaType",
        description="Set on content nodes so text transformers can pick them up"
    )


class Node(BaseModel):
    """
    A normalized node ready to be created in the node store.
    """

    id: str = Field(
        ...,
        description="Globally unique, deterministic node id"
    )

    parent: Optional[str] = Field(
        None,
        description="Id of the owning node, None for root nodes"
    )

    children: List[str] = Field(
        default_factory=list,
        description="Ids of nodes owned by this node"
    )

    internal: NodeInternal

    data: Dict[str, Any] = Field(
        default_factory=dict,
        description="Content fields of the node"
    )

    @property
    def type(self) -> str:
        return self.internal.type

    def to_record(self) -> Dict[str, Any]:
        """Flatten into the record shape the node store persists."""
        record = dict(self.data)
        record.update({
            "id": self.id,
            "parent": self.parent,
            "children": list(self.children),
            "internal": self.internal.model_dump(by_alias=True, exclude_none=True),
        })
        return record


class FileRef(BaseModel):
    """
    Reference to a file node produced by the remote-file materializer.
    """

    id: str = Field(
        ...,
        description="Id of the file node in the node store"
    )

    url: str = Field(
        ...,
        description="Remote URL the file was materialized from"
    )

    path: Optional[str] = Field(
        None,
        description="Local path of the downloaded file"
    )

    content_type: Optional[str] = Field(
        None,
        description="Content type reported by the remote server"
    )

    size: Optional[int] = Field(
        None,
        description="Size of the downloaded file in bytes"
    )
