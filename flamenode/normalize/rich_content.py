"""
Rich-content extraction.

Editor fields (markdown, WYSIWYG) are turned into standalone content nodes
with `internal.mediaType` set, so markdown and HTML transformers in the host
build can pick them up.
"""

from typing import Any, Dict, List, Mapping

from ..models.node import Node, NodeInternal
from ..models.schema import FieldType
from ..store.base import BaseNodeStore
from .keys import get_valid_key, pascal_case

NODE_LINK_SUFFIX = "___NODE"


def content_node_type(media_type: str) -> str:
    return f"Flamelink{pascal_case(media_type)}ContentNode"


def prepare_editor_content_node(field_type: FieldType, key: str, editor_content: Any,
                                parent_id: str, store: BaseNodeStore) -> Node:
    """
    Build the content node for one editor field.

    The id depends on the parent id, the field key and the field type, so
    several editor fields on one entry never collide.
    """
    media_type = field_type.media_type
    content = editor_content if isinstance(editor_content, str) else str(editor_content)

    return Node(
        id=store.create_node_id(f"flamelink-content-{parent_id}-{key}-{field_type.value}"),
        parent=parent_id,
        children=[],
        internal=NodeInternal(
            type=content_node_type(media_type),
            media_type=media_type,
            content=content,
            content_digest=store.create_content_digest(content),
        ),
        data={"content": content},
    )


def extract_rich_content(field_types: Mapping[str, str], entry: Dict[str, Any],
                         parent_id: str, store: BaseNodeStore) -> List[Node]:
    """
    Detach editor fields of `entry` into content nodes.

    `entry` must already be key-sanitized; it is modified in place: each
    extracted field is replaced by a `<key>___NODE` link to its content node.

    Returns:
        The content nodes, in schema field order
    """
    nodes: List[Node] = []

    for raw_key, tag in field_types.items():
        field_type = FieldType.from_tag(tag)
        if field_type is None or field_type.media_type is None:
            continue

        key = get_valid_key(raw_key)
        editor_content = entry.get(key)
        if not editor_content:
            continue

        content_node = prepare_editor_content_node(field_type, key, editor_content, parent_id, store)
        entry[f"{key}{NODE_LINK_SUFFIX}"] = content_node.id
        del entry[key]
        nodes.append(content_node)

    return nodes
