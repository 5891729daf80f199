"""
Sourcing pipeline for Flamenode.

Fetches everything a run needs from a source and feeds it through the
assemblers: globals first, then every locale concurrently, with schemas,
entries and navigation trees fanned out inside each locale.
"""

import asyncio
import logging
import time
from typing import Any, List, Optional

from .config import SourceOptions
from .models import Node, Schema
from .normalize import process_content_entry, process_globals, process_navigation
from .sources import BaseSource, keyed_records


async def source_nodes(source: BaseSource, context, options: Optional[SourceOptions] = None,
                       verbose: bool = False) -> List[Node]:
    """
    Source and normalize all configured content.

    Args:
        source: Source delivering the raw records
        context: NormalizeContext of this run
        options: What to source; everything when None
        verbose: Log run timings

    Returns:
        Every node created during the run
    """
    options = options or SourceOptions()
    started = time.perf_counter()
    nodes: List[Node] = []

    if options.globals:
        globals_data = await source.get_globals()
        if globals_data:
            nodes.append(process_globals(globals_data, context))

    locales = await source.get_locales(options.locales)
    logging.info(f"Sourcing {len(locales)} locale(s): {', '.join(locales)}")

    per_locale = await asyncio.gather(
        *(_source_locale(source, context, options, locale) for locale in locales)
    )
    for locale_nodes in per_locale:
        nodes.extend(locale_nodes)

    if verbose:
        logging.info(f"Sourced {len(nodes)} nodes in {time.perf_counter() - started:.2f}s")

    return nodes


async def _source_locale(source: BaseSource, context, options: SourceOptions, locale: str) -> List[Node]:
    nodes: List[Node] = []

    if options.content is not False:
        schemas = await source.get_schemas()
        per_schema = await asyncio.gather(
            *(_source_schema(source, context, options, schema, locale) for schema in schemas)
        )
        for schema_nodes in per_schema:
            nodes.extend(schema_nodes)

    if options.navigation is not False:
        nodes.extend(await _source_navigation(source, context, options, locale))

    logging.info(f"Locale {locale}: {len(nodes)} nodes")
    return nodes


async def _source_schema(source: BaseSource, context, options: SourceOptions,
                         schema: Schema, locale: str) -> List[Node]:
    schema_options = options.content_options(schema.id)
    if schema_options is None:
        return []

    content = await source.get_content_entry(
        schema.id, locale=locale, populate=bool(schema_options.get("populate", True))
    )
    if not content:
        return []

    entries = [content] if schema.is_single else list(keyed_records(content).values())
    per_entry = await asyncio.gather(
        *(process_content_entry(schema, locale, entry, context) for entry in entries)
    )

    nodes = [node for entry_nodes in per_entry for node in entry_nodes]
    logging.info(f"Locale {locale}: {len(entries)} entries of '{schema.id}'")
    return nodes


async def _source_navigation(source: BaseSource, context, options: SourceOptions,
                             locale: str) -> List[Node]:
    if isinstance(options.navigation, list):
        navs = await asyncio.gather(
            *(source.get_navigation(key, locale=locale) for key in options.navigation)
        )
        trees: List[Any] = []
        for key, nav in zip(options.navigation, navs):
            if nav is None:
                logging.warning(f"Navigation '{key}' has no data for locale {locale}")
                continue
            trees.append(nav)
    else:
        trees = list(keyed_records(await source.get_navigation(locale=locale)).values())

    return [process_navigation(locale, nav, context) for nav in trees]
