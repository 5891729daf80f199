"""Data models for Flamenode."""

from .schema import DataKind, FieldType, Schema, SchemaField, field_type_map
from .node import FileRef, Node, NodeInternal

__all__ = [
    "DataKind",
    "FieldType",
    "Schema",
    "SchemaField",
    "field_type_map",
    "FileRef",
    "Node",
    "NodeInternal",
]
