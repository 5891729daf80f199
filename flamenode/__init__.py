"""
Flamenode: Flamelink content sourcing engine.

Fetches entries, navigation trees and globals from a Flamelink CMS and
normalizes them into a graph of nodes with stable ids.
"""

__version__ = "0.1.0"
__author__ = "Flamenode Project"

# Import main components
from .exceptions import (
    FlamenodeError,
    ConfigurationError,
    RemoteFetchError,
    NormalizationError,
    MediaDownloadError
)
from .models import FieldType, Schema, SchemaField, Node, NodeInternal, FileRef
from .context import NormalizeContext
from .store import DatabaseManager, MemoryNodeStore, MemoryCache, DuckDBNodeStore, DuckDBCache
from .media import RemoteFileMaterializer
from .sources import BaseSource, MockSource, FlamelinkRestSource
from .pipeline import source_nodes

__all__ = [
    "FlamenodeError",
    "ConfigurationError",
    "RemoteFetchError",
    "NormalizationError",
    "MediaDownloadError",
    "FieldType",
    "Schema",
    "SchemaField",
    "Node",
    "NodeInternal",
    "FileRef",
    "NormalizeContext",
    "DatabaseManager",
    "MemoryNodeStore",
    "MemoryCache",
    "DuckDBNodeStore",
    "DuckDBCache",
    "RemoteFileMaterializer",
    "BaseSource",
    "MockSource",
    "FlamelinkRestSource",
    "source_nodes"
]
