#!/usr/bin/env python3
"""
Flamenode - Flamelink content sourcing engine

Main entry point for Flamenode. This orchestrator wires the configured
source, the DuckDB node store and media cache and the media materializer
together and runs the sourcing pipeline once.
"""

import asyncio
import json
import logging
import sys
import argparse
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from flamenode.config import ConfigManager, validate_firebase_config
from flamenode.context import NormalizeContext
from flamenode.media import RemoteFileMaterializer
from flamenode.models import Node
from flamenode.pipeline import source_nodes
from flamenode.sources import BaseSource, FlamelinkRestSource, MockSource
from flamenode.store import DatabaseManager, DuckDBCache, DuckDBNodeStore, serialize


def setup_logging(config: ConfigManager, verbose: bool = False):
    """Configure logging for the application."""
    level_name = "DEBUG" if verbose else config.get("logging.level", "INFO")
    level = getattr(logging, level_name.upper())
    format_str = config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = config.log_filename

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )


def create_source(source_type: str, config: ConfigManager) -> BaseSource:
    """
    Build the content source selected on the command line.

    Args:
        source_type: 'flamelink' or 'mock'
        config: Loaded configuration

    Returns:
        The source instance
    """
    if source_type == "mock":
        return MockSource()

    firebase = validate_firebase_config(config)
    return FlamelinkRestSource(
        database_url=firebase["database_url"],
        storage_bucket=firebase["storage_bucket"],
        auth_token=firebase["auth_token"],
        environment=config.environment,
        timeout=float(firebase.get("timeout", 30.0)),
    )


def write_output(nodes: List[Node], output_file: str):
    """
    Write the emitted nodes as a JSON array of node records.

    Args:
        nodes: Nodes created during the run
        output_file: Path of the JSON file
    """
    file_path = Path(output_file)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    records = [json.loads(serialize(node.to_record())) for node in nodes]
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(records, f, ensure_ascii=False, indent=2)

    logging.info(f"Wrote {len(records)} nodes to {output_file}")


async def run_pipeline(args: argparse.Namespace, config: ConfigManager) -> List[Node]:
    """
    Execute one sourcing run.

    Args:
        args: Parsed command line arguments
        config: Loaded configuration

    Returns:
        The nodes created during the run
    """
    source = create_source(args.source, config)
    options = config.source_options()
    download = config.download_media and not args.no_download
    run_started = datetime.now()

    with DatabaseManager(config.database_filename) as db:
        db.initialize_database()
        logging.info("Database initialized")

        store = DuckDBNodeStore(db)
        cache = DuckDBCache(db)
        materializer: Optional[RemoteFileMaterializer] = None
        if download:
            materializer = RemoteFileMaterializer(
                store,
                cache_dir=config.media_cache_dir,
                timeout=float(config.get("media.timeout", 30.0)),
            )

        context = NormalizeContext(
            store=store,
            cache=cache,
            materializer=materializer,
            supported_image_types=tuple(config.supported_image_types),
        )

        try:
            nodes = await source_nodes(source, context, options, verbose=args.verbose)
        finally:
            await source.close()
            if materializer is not None:
                await materializer.close()

        if args.prune:
            store.delete_stale_nodes(run_started)

        # Summary of results
        node_types = {}
        for node in nodes:
            node_types[node.type] = node_types.get(node.type, 0) + 1

        logging.info("Summary of nodes by type:")
        for node_type, count in sorted(node_types.items()):
            logging.info(f"  {node_type}: {count}")

    output_file = args.output or config.get("paths.output_file")
    if output_file:
        write_output(nodes, output_file)

    return nodes


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Flamenode - Flamelink content sourcing engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --source mock --output nodes.json   # Dry run against sample content
  python main.py                                     # Source from the configured Flamelink project
  python main.py --no-download --prune               # Skip media downloads, drop stale nodes
        """
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="Path to the configuration file (default: config.yaml)"
    )

    parser.add_argument(
        "--source",
        choices=["flamelink", "mock"],
        default="flamelink",
        help="Content source to use (default: flamelink)"
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Write the created nodes to this JSON file"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output and run timings"
    )

    parser.add_argument(
        "--no-download",
        action="store_true",
        help="Do not download images or link local files"
    )

    parser.add_argument(
        "--prune",
        action="store_true",
        help="Delete stored nodes that were not created or touched in this run"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="Flamenode 0.1.0"
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    args = parse_arguments(argv)
    config = ConfigManager(args.config)
    setup_logging(config, args.verbose)

    logging.info("Flamenode - Flamelink content sourcing engine")

    try:
        nodes = asyncio.run(run_pipeline(args, config))
        logging.info(f"Pipeline completed. Created {len(nodes)} nodes.")

    except KeyboardInterrupt:
        logging.info("Pipeline interrupted by user")
        print("\nPipeline interrupted.")

    except Exception as e:
        logging.error(f"Pipeline failed: {e}")
        print(f"\nPipeline failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
