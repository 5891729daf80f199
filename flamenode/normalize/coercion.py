"""
Type coercion for content entries and navigation trees.

Raw values are coerced to the data kind their schema field declares. The
coercer is lenient: values that cannot be parsed as numbers
become NaN instead of raising, so partial data keeps flowing.
"""

import json
import math
import re
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from ..models.schema import DataKind, FieldType

FLOAT_PREFIX_RX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
INT_PREFIX_RX = re.compile(r"^[+-]?\d+")

NAVIGATION_STRING_FIELDS = ("id", "uuid", "title", "component", "cssClass", "parentIndex", "url")
NAVIGATION_LIST_FIELDS = ("items", "children")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_string(value: Any) -> str:
    """
    Generic to-string conversion, defaulting to an empty string.

    Booleans and integral floats render the way the CMS writes them
    (`true`, `42`) rather than Python's `True`, `42.0`.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, list):
        return ",".join(to_string(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    try:
        return str(value)
    except Exception:
        return ""


def parse_float(value: Any) -> float:
    """
    Parse the leading floating point number of `value`.

    Mirrors JavaScript's `parseFloat`: `"42px"` gives 42.0, anything without a
    numeric prefix gives NaN.
    """
    if _is_number(value):
        return float(value)
    if value is None or isinstance(value, (bool, Mapping)):
        return math.nan

    text = to_string(value).strip()
    if text.lstrip("+-").startswith("Infinity"):
        return -math.inf if text.startswith("-") else math.inf

    match = FLOAT_PREFIX_RX.match(text)
    if not match:
        return math.nan
    return float(match.group(0))


def parse_int(value: Any) -> Any:
    """Parse the leading integer of `value`, NaN when there is none."""
    if _is_number(value):
        if isinstance(value, float) and not math.isfinite(value):
            return math.nan
        return int(value)
    if value is None or isinstance(value, (bool, Mapping)):
        return math.nan

    match = INT_PREFIX_RX.match(to_string(value).strip())
    if not match:
        return math.nan
    return int(match.group(0))


def _target_kind(key: str, value: Any, field_types: Mapping[str, str]) -> Optional[DataKind]:
    if key == "order":
        return DataKind.NUMBER

    field_type = FieldType.from_tag(field_types.get(key))
    if field_type is not None:
        return field_type.data_kind

    # Numbers under undeclared keys are stringified so mixed legacy data
    # keeps a single GraphQL type.
    if _is_number(value):
        return DataKind.STRING
    return None


def check_content_entry_types(field_types: Mapping[str, str], entry: Any) -> Any:
    """
    Coerce the values of `entry` to the kinds declared in `field_types`.

    Args:
        field_types: Map of raw field key to field type tag
        entry: Raw entry; non-mappings are returned unchanged

    Returns:
        A new mapping with coerced values
    """
    if not isinstance(entry, Mapping):
        return entry

    new_entry: Dict[str, Any] = dict(entry)
    for key, value in entry.items():
        kind = _target_kind(key, value, field_types)

        if kind is DataKind.STRING:
            value = to_string(value)
        elif kind is DataKind.NUMBER:
            value = parse_float(value)
        # boolean and object kinds pass through unchanged

        if isinstance(value, list):
            value = [check_content_entry_types({}, item) for item in value]

        new_entry[key] = value

    return new_entry


def check_navigation_types(nav: Any) -> Any:
    """
    Normalize the well-known fields of a navigation tree.

    Items and children are walked recursively.
    """
    if not isinstance(nav, Mapping):
        return nav

    new_nav: Dict[str, Any] = dict(nav)
    for key, value in nav.items():
        if key in NAVIGATION_STRING_FIELDS:
            if not isinstance(value, str):
                value = to_string(value)
        elif key in NAVIGATION_LIST_FIELDS:
            if not isinstance(value, list):
                value = []
        elif key == "newWindow":
            if not isinstance(value, bool):
                value = bool(value)
        elif key == "order":
            if not _is_number(value):
                value = parse_int(value)

        if isinstance(value, list):
            value = [check_navigation_types(item) for item in value]

        new_nav[key] = value

    return new_nav
