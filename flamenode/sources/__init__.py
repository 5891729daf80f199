"""Content sources delivering raw CMS records."""

from .base import BaseSource, keyed_records
from .mock import MockSource
from .firebase import FlamelinkRestSource

__all__ = ["BaseSource", "keyed_records", "MockSource", "FlamelinkRestSource"]
