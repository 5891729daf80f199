"""
Backend timestamp normalization.

Firestore timestamps arrive as mappings with `_seconds` and `_nanoseconds`
(or `seconds`/`nanoseconds` when serialized by other clients). They are
replaced by timezone-aware UTC datetimes.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Tuple

_TIMESTAMP_KEYS = (("_seconds", "_nanoseconds"), ("seconds", "nanoseconds"))


def _timestamp_parts(value: Mapping) -> Optional[Tuple[Any, Any]]:
    for seconds_key, nanos_key in _TIMESTAMP_KEYS:
        if seconds_key in value and nanos_key in value:
            return value[seconds_key], value[nanos_key]
    return None


def is_timestamp(value: Any) -> bool:
    """True when `value` looks like a serialized backend timestamp."""
    if not isinstance(value, Mapping):
        return False
    parts = _timestamp_parts(value)
    if parts is None:
        return False
    seconds, nanos = parts
    return all(
        isinstance(part, (int, float)) and not isinstance(part, bool)
        for part in (seconds, nanos)
    )


def to_datetime(value: Mapping) -> datetime:
    """Convert a serialized timestamp mapping into a UTC datetime."""
    seconds, nanos = _timestamp_parts(value)
    epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
    return epoch + timedelta(seconds=seconds, microseconds=nanos // 1000)


def parse_timestamps(value: Any) -> Any:
    """
    Recursively replace every timestamp-shaped mapping inside `value`.

    Returns a new structure; the input is left untouched.
    """
    if is_timestamp(value):
        return to_datetime(value)
    if isinstance(value, Mapping):
        return {key: parse_timestamps(item) for key, item in value.items()}
    if isinstance(value, list):
        return [parse_timestamps(item) for item in value]
    return value
