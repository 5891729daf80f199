"""
Top-level node assemblers.

Each assembler turns one raw record (a content entry, a navigation tree or
the globals) into nodes and creates them in the context's node store. They
keep no state between calls.
"""

import logging
from typing import Any, List, Mapping, Optional

from ..exceptions import NormalizationError
from ..models.node import Node, NodeInternal
from ..models.schema import Schema
from ..store.base import serialize
from .coercion import check_content_entry_types, check_navigation_types
from .fields import FieldExpander
from .keys import pascal_case, prepare_keys
from .rich_content import extract_rich_content
from .timestamps import parse_timestamps

SOURCE_ID_FIELD = "flamelink_id"
LOCALE_FIELD = "flamelink_locale"
GLOBALS_NODE_TYPE = "FlamelinkGlobals"


def entry_node_type(schema_id: str) -> str:
    return f"Flamelink{pascal_case(schema_id)}Content"


def navigation_node_type(navigation_id: str) -> str:
    return f"Flamelink{pascal_case(navigation_id)}Navigation"


def _build_root_node(context, node_id: str, prepped: Mapping[str, Any], node_type: str,
                     children: List[str], locale: Optional[str] = None) -> Node:
    data = dict(prepped)
    if locale is not None:
        data[LOCALE_FIELD] = locale

    return Node(
        id=node_id,
        parent=None,
        children=children,
        internal=NodeInternal(
            type=node_type,
            content=serialize(prepped),
            content_digest=context.store.create_content_digest(prepped),
        ),
        data=data,
    )


def _emit(context, nodes: List[Node]) -> List[Node]:
    for node in nodes:
        context.store.create_node(node.to_record())
    return nodes


async def process_content_entry(schema: Schema, locale: str, entry: Mapping[str, Any], context) -> List[Node]:
    """
    Normalize one content entry into its node subtree and create the nodes.

    Args:
        schema: Schema the entry conforms to
        locale: Locale the entry was fetched for
        entry: Raw entry as delivered by the CMS
        context: NormalizeContext of the current run

    Returns:
        All emitted nodes; the root entry node comes last

    Raises:
        NormalizationError: If the entry carries no id
    """
    field_types = schema.field_types()
    # Timestamps first, so string fields holding one coerce the datetime.
    prepped = prepare_keys(check_content_entry_types(field_types, parse_timestamps(entry)))

    if not isinstance(prepped, Mapping):
        raise NormalizationError(
            f"Entry of schema '{schema.id}' in locale '{locale}' is not an object",
            {"type": type(entry).__name__},
        )

    source_id = prepped.get(SOURCE_ID_FIELD)
    if source_id in (None, ""):
        raise NormalizationError(
            f"Entry of schema '{schema.id}' in locale '{locale}' has no id"
        )

    namespace = f"flamelink-entry-{locale}-{source_id}"
    node_id = context.store.create_node_id(namespace)

    expander = FieldExpander(context, content_type=schema.id, locale=locale)
    nested_ids, nested_nodes = await expander.expand(schema.fields, prepped, node_id, namespace)
    content_nodes = extract_rich_content(field_types, prepped, node_id, context.store)

    entry_node = _build_root_node(
        context,
        node_id,
        prepped,
        entry_node_type(schema.id),
        children=[content_node.id for content_node in content_nodes] + nested_ids,
        locale=locale,
    )

    # download & link local images
    await context.images.resolve_entry_images(entry_node.data, entry_node.id)

    return _emit(context, nested_nodes + content_nodes + [entry_node])


def process_navigation(locale: str, nav: Mapping[str, Any], context) -> Node:
    """
    Normalize one navigation tree into a single node and create it.

    Items stay embedded as nested data; no child nodes are split off.
    """
    prepped = prepare_keys(check_navigation_types(nav))
    navigation_id = prepped.get(SOURCE_ID_FIELD)
    if not navigation_id:
        raise NormalizationError(f"Navigation in locale '{locale}' has no id")

    node = _build_root_node(
        context,
        context.store.create_node_id(f"flamelink-nav-{locale}-{navigation_id}"),
        prepped,
        navigation_node_type(navigation_id),
        children=[],
        locale=locale,
    )
    _emit(context, [node])
    return node


def process_globals(globals_data: Mapping[str, Any], context) -> Node:
    """
    Normalize the globals record into the single, well-known globals node.
    """
    prepped = prepare_keys(globals_data or {})

    node = _build_root_node(
        context,
        context.store.create_node_id("flamelink-globals"),
        prepped,
        GLOBALS_NODE_TYPE,
        children=[],
    )
    _emit(context, [node])
    logging.debug(f"Created globals node {node.id}")
    return node
