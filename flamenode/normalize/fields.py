"""
Structural field expansion.

Fieldsets and repeaters hold nested entries. Each nested entry becomes a node
of its own, typed by the content type plus the path of keys leading to it,
so every nesting level gets a distinct GraphQL type. Leaf fields stay inline
on their owner.
"""

import logging
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from ..models.node import Node, NodeInternal
from ..models.schema import FieldType, SchemaField
from ..store.base import serialize
from .coercion import check_content_entry_types
from .keys import get_valid_key, pascal_case, prepare_keys
from .rich_content import NODE_LINK_SUFFIX, extract_rich_content

FIELDSET_SUFFIX = "Fieldset"
REPEATER_SUFFIX = "Repeater"
REPEATER_ITEM_SUFFIX = "RepeaterItem"


# Path encoding: `_0` is a literal underscore, `_1` starts a path segment and
# `_2` marks a key whose first letter was already upper case.
ESCAPED_UNDERSCORE = "_0"
SEGMENT_SEPARATOR = "_1"
UPPER_MARKER = "_2"


def _encode_segment(key: str) -> str:
    escaped = key.replace("_", ESCAPED_UNDERSCORE)
    if escaped[:1].isupper():
        return f"{UPPER_MARKER}{escaped}"
    return escaped[:1].upper() + escaped[1:]


def nested_type_name(content_type: str, path: Sequence[str], suffix: str) -> str:
    """
    Type name for a nested node.

    `("hero", "cta")` under `blogPost` gives `FlamelinkBlogPost_1Hero_1CtaFieldset`.
    The encoding is reversible, so distinct (content type, path) pairs never
    share a name.
    """
    segments = "".join(f"{SEGMENT_SEPARATOR}{_encode_segment(key)}" for key in path)
    return f"Flamelink{pascal_case(content_type)}{segments}{suffix}"


def sanitized_field_types(fields: Sequence[SchemaField]) -> Dict[str, str]:
    return {get_valid_key(field.key): field.type for field in fields}


class FieldExpander:
    """
    Splits the composite fields of one entry into child node subtrees.
    """

    def __init__(self, context, content_type: str, locale: str):
        """
        Initialize the expander.

        Args:
            context: NormalizeContext of the current run
            content_type: Schema id of the root entry
            locale: Locale of the root entry
        """
        self.context = context
        self.store = context.store
        self.content_type = content_type
        self.locale = locale

    async def expand(self, fields: Sequence[SchemaField], entry: Dict[str, Any], parent_id: str,
                     namespace: str, path: Tuple[str, ...] = ()) -> Tuple[List[str], List[Node]]:
        """
        Expand the fieldset and repeater fields of a key-sanitized entry.

        `entry` is modified in place: every expanded field is replaced by a
        `<key>___NODE` link. A fieldset links to its node; a repeater links to
        the list of its item nodes, not to the collection node.

        Args:
            fields: Schema fields describing `entry`
            entry: The owner's prepared entry
            parent_id: Node id of the owner
            namespace: Namespacing string the owner's id was derived from
            path: Keys leading from the root entry to the owner

        Returns:
            Tuple of (ids to add to the owner's children, nodes to emit)
        """
        child_ids: List[str] = []
        nodes: List[Node] = []

        for field in fields:
            field_type = field.field_type
            if field_type is None or not field_type.is_structural:
                continue

            key = get_valid_key(field.key)
            value = entry.get(key)

            if field_type is FieldType.FIELDSET and isinstance(value, Mapping):
                node, descendants = await self._expand_fieldset(
                    field, key, value, parent_id, namespace, path + (key,)
                )
                entry[f"{key}{NODE_LINK_SUFFIX}"] = node.id
                child_ids.append(node.id)

            elif field_type is FieldType.REPEATER and isinstance(value, list):
                node, descendants = await self._expand_repeater(
                    field, key, value, parent_id, namespace, path + (key,)
                )
                entry[f"{key}{NODE_LINK_SUFFIX}"] = list(node.children)
                child_ids.append(node.id)

            else:
                continue

            del entry[key]
            nodes.extend(descendants)
            nodes.append(node)

        return child_ids, nodes

    async def _expand_fieldset(self, field: SchemaField, key: str, value: Mapping, parent_id: str,
                               namespace: str, path: Tuple[str, ...]) -> Tuple[Node, List[Node]]:
        fieldset_namespace = f"{namespace}-{key}"
        return await self._build_nested_node(
            fields=field.options,
            raw_entry=value,
            node_namespace=fieldset_namespace,
            parent_id=parent_id,
            node_type=nested_type_name(self.content_type, path, FIELDSET_SUFFIX),
            path=path,
        )

    async def _expand_repeater(self, field: SchemaField, key: str, items: List[Any], parent_id: str,
                               namespace: str, path: Tuple[str, ...]) -> Tuple[Node, List[Node]]:
        repeater_namespace = f"{namespace}-{key}"
        collection_id = self.store.create_node_id(f"{repeater_namespace}-collection")
        item_type = nested_type_name(self.content_type, path, REPEATER_ITEM_SUFFIX)

        item_ids: List[str] = []
        nodes: List[Node] = []
        for index, item in enumerate(items):
            if not isinstance(item, Mapping):
                logging.warning(
                    f"Skipping non-object item {index} of repeater '{key}' on {self.content_type}"
                )
                continue

            item_node, descendants = await self._build_nested_node(
                fields=field.options,
                raw_entry=item,
                node_namespace=f"{repeater_namespace}-{index}",
                parent_id=collection_id,
                node_type=item_type,
                path=path,
            )
            item_ids.append(item_node.id)
            nodes.extend(descendants)
            nodes.append(item_node)

        snapshot = {"field": key, "items": item_ids}
        collection = Node(
            id=collection_id,
            parent=parent_id,
            children=item_ids,
            internal=NodeInternal(
                type=nested_type_name(self.content_type, path, REPEATER_SUFFIX),
                content=serialize(snapshot),
                content_digest=self.store.create_content_digest(snapshot),
            ),
            data={
                "flamelink_locale": self.locale,
                "flamelink_field": key,
                f"items{NODE_LINK_SUFFIX}": list(item_ids),
            },
        )
        await self.context.images.resolve_entry_images(collection.data, collection.id)
        return collection, nodes

    async def _build_nested_node(self, fields: Sequence[SchemaField], raw_entry: Mapping, node_namespace: str,
                                 parent_id: str, node_type: str, path: Tuple[str, ...]) -> Tuple[Node, List[Node]]:
        node_id = self.store.create_node_id(node_namespace)
        field_types = sanitized_field_types(fields)

        # Nested keys may already be sanitized by the owner, so sanitize first
        # and coerce against sanitized keys.
        prepped = check_content_entry_types(field_types, prepare_keys(raw_entry))

        child_ids, descendants = await self.expand(fields, prepped, node_id, node_namespace, path)
        content_nodes = extract_rich_content(field_types, prepped, node_id, self.store)

        node = Node(
            id=node_id,
            parent=parent_id,
            children=[content_node.id for content_node in content_nodes] + child_ids,
            internal=NodeInternal(
                type=node_type,
                content=serialize(prepped),
                content_digest=self.store.create_content_digest(prepped),
            ),
            data={**prepped, "flamelink_locale": self.locale},
        )
        await self.context.images.resolve_entry_images(node.data, node.id)

        return node, descendants + content_nodes
