"""
Schema models for Flamenode.

This module defines the content-type definitions delivered by the CMS and the
closed set of field types the normalizer understands.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class DataKind(str, Enum):
    """The runtime kind a field value is coerced to."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"


class FieldType(str, Enum):
    """
    Every field type tag a Flamelink schema can declare.

    Each member knows the data kind its values coerce to and, for editor
    fields, the media type of the content node extracted from it.
    """

    AUTOCOMPLETE = "autocomplete"
    BOOLEAN = "boolean"
    CHECKBOX = "checkbox"
    COLOR = "color"
    DATE = "date"
    DATETIME_LOCAL = "datetime-local"
    EMAIL = "email"
    FIELDSET = "fieldset"
    LINKED_TEXT = "linked-text"
    LOCATION = "location"
    MARKDOWN_EDITOR = "markdown-editor"
    MEDIA = "media"
    NUMBER = "number"
    PASSWORD = "password"
    RADIO = "radio"
    RANGE = "range"
    REPEATER = "repeater"
    SELECT = "select"
    SELECT_RELATIONAL = "select-relational"
    TAG = "tag"
    TEXT = "text"
    TEXTAREA = "textarea"
    TIME = "time"
    TREE_RELATIONAL = "tree-relational"
    WYSIWYG = "wysiwyg"
    WYSIWYG_CKE = "wysiwyg-cke"

    @property
    def data_kind(self) -> DataKind:
        return _DATA_KINDS[self]

    @property
    def media_type(self) -> Optional[str]:
        """Media type of the extracted content node, if this is an editor field."""
        return _MEDIA_TYPES.get(self)

    @property
    def is_structural(self) -> bool:
        return self in (FieldType.FIELDSET, FieldType.REPEATER)

    @classmethod
    def from_tag(cls, tag: Optional[str]) -> Optional["FieldType"]:
        """Look up a tag, returning None for tags this version does not know."""
        try:
            return cls(tag)
        except ValueError:
            return None


_DATA_KINDS: Dict[FieldType, DataKind] = {
    FieldType.AUTOCOMPLETE: DataKind.STRING,
    FieldType.BOOLEAN: DataKind.BOOLEAN,
    FieldType.CHECKBOX: DataKind.STRING,
    FieldType.COLOR: DataKind.STRING,
    FieldType.DATE: DataKind.STRING,
    FieldType.DATETIME_LOCAL: DataKind.STRING,
    FieldType.EMAIL: DataKind.STRING,
    FieldType.FIELDSET: DataKind.OBJECT,
    FieldType.LINKED_TEXT: DataKind.STRING,
    FieldType.LOCATION: DataKind.OBJECT,
    FieldType.MARKDOWN_EDITOR: DataKind.STRING,
    FieldType.MEDIA: DataKind.OBJECT,
    FieldType.NUMBER: DataKind.NUMBER,
    FieldType.PASSWORD: DataKind.STRING,
    FieldType.RADIO: DataKind.STRING,
    FieldType.RANGE: DataKind.STRING,
    FieldType.REPEATER: DataKind.OBJECT,
    FieldType.SELECT: DataKind.OBJECT,
    FieldType.SELECT_RELATIONAL: DataKind.OBJECT,
    FieldType.TAG: DataKind.OBJECT,
    FieldType.TEXT: DataKind.STRING,
    FieldType.TEXTAREA: DataKind.STRING,
    FieldType.TIME: DataKind.STRING,
    FieldType.TREE_RELATIONAL: DataKind.OBJECT,
    FieldType.WYSIWYG: DataKind.STRING,
    FieldType.WYSIWYG_CKE: DataKind.STRING,
}

_MEDIA_TYPES: Dict[FieldType, str] = {
    FieldType.MARKDOWN_EDITOR: "text/markdown",
    FieldType.WYSIWYG: "text/html",
    FieldType.WYSIWYG_CKE: "text/html",
}


class SchemaField(BaseModel):
    """
    A single field of a content schema.

    The `type` is kept as the raw tag so schemas containing tags unknown to
    this version still load; use `field_type` for the resolved enum member.
    """

    key: str = Field(
        ...,
        description="The field key as it appears in raw entries"
    )

    type: str = Field(
        ...,
        description="The field type tag (e.g. 'text', 'fieldset', 'repeater')"
    )

    options: List['SchemaField'] = Field(
        default_factory=list,
        description="Nested fields for composite types (fieldset, repeater)"
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_choice_options(cls, data: Any) -> Any:
        # `select`-like fields reuse `options` for their choices; only
        # composite fields carry nested field definitions there.
        if isinstance(data, dict) and data.get("type") not in ("fieldset", "repeater"):
            data = {key: value for key, value in data.items() if key != "options"}
        return data

    @property
    def field_type(self) -> Optional[FieldType]:
        return FieldType.from_tag(self.type)


class Schema(BaseModel):
    """
    A named content type with its ordered field list.
    """

    id: str = Field(
        ...,
        description="The schema key, also used to derive node type names"
    )

    type: str = Field(
        "collection",
        description="Either 'single' or 'collection'"
    )

    enabled: bool = Field(
        True,
        description="Disabled schemas are not sourced"
    )

    fields: List[SchemaField] = Field(
        default_factory=list,
        description="Ordered field definitions"
    )

    @property
    def is_single(self) -> bool:
        return self.type == "single"

    def field_types(self) -> Dict[str, str]:
        """Map of field key to declared type tag."""
        return field_type_map(self.fields)


def field_type_map(fields: List[SchemaField]) -> Dict[str, str]:
    """Build a key -> type tag map from a list of schema fields."""
    return {field.key: field.type for field in fields}


SchemaField.model_rebuild()
