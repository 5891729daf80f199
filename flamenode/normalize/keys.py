"""
Field key sanitization.

Keys coming from the CMS can contain characters that are not valid GraphQL
names or collide with the structural fields every node carries. The
sanitizer maps them to safe identifiers. Adapted from the approach taken by
`gatsby-source-wordpress`.
"""

import re
from typing import Any, List, Mapping

from .timestamps import parse_timestamps

# Structural fields every node carries.
RESERVED_FIELDS = ("id", "children", "parent", "fields", "internal", "__meta__")
CONFLICT_FIELD_PREFIX = "flamelink_"

NAME_RX = re.compile(r"^[_a-zA-Z][_a-zA-Z0-9]*$")
FIRST_CHAR_RX = re.compile(r"^[_a-zA-Z]")
INVALID_CHARS_RX = re.compile(r"-|__|:|\.|\s")
NON_NAME_CHARS_RX = re.compile(r"[^_a-zA-Z0-9]")
WORD_SPLIT_RX = re.compile(r"[^A-Za-z0-9]+")


def _replace_invalid_chars(key: str) -> str:
    key = INVALID_CHARS_RX.sub("_", key)
    return NON_NAME_CHARS_RX.sub("_", key)


def get_valid_key(key: Any) -> str:
    """
    Return a GraphQL-safe version of `key`.

    Args:
        key: Any string-coercible field key

    Returns:
        A key matching ``^[_a-zA-Z][_a-zA-Z0-9]*$`` that is not reserved
    """
    nkey = str(key)

    if not NAME_RX.match(nkey):
        nkey = _replace_invalid_chars(nkey)

    # Prefix if first character isn't a letter or underscore.
    if not FIRST_CHAR_RX.match(nkey):
        nkey = f"{CONFLICT_FIELD_PREFIX}{nkey}"

    if nkey in RESERVED_FIELDS:
        nkey = _replace_invalid_chars(f"{CONFLICT_FIELD_PREFIX}{nkey}")

    return nkey


def _prepare_keys(entry: Any) -> Any:
    if not isinstance(entry, Mapping):
        return entry

    new_entry = {}
    for key, value in entry.items():
        if isinstance(value, list):
            value = [_prepare_keys(item) for item in value]
        new_entry[get_valid_key(key)] = value

    return new_entry


def prepare_keys(entry: Any) -> Any:
    """
    Sanitize the keys of an entry and normalize its timestamps.

    Mappings found inside sequence values are sanitized recursively. Values
    that are not mappings are returned unchanged (apart from timestamps).
    """
    return _prepare_keys(parse_timestamps(entry))


def pascal_case(value: Any) -> str:
    """
    Turn an arbitrary string into a PascalCase type-name fragment.

    `blog-post` -> `BlogPost`, `text/markdown` -> `TextMarkdown`,
    `blogPost` -> `BlogPost`.
    """
    words: List[str] = [word for word in WORD_SPLIT_RX.split(str(value)) if word]
    return "".join(word[0].upper() + word[1:] for word in words)
