"""Content normalization engine: raw CMS records in, node graph out."""

from .keys import get_valid_key, pascal_case, prepare_keys
from .timestamps import parse_timestamps
from .coercion import check_content_entry_types, check_navigation_types
from .images import ImageResolution, ImageResolver, locate_image_fields
from .rich_content import extract_rich_content
from .fields import FieldExpander
from .assemblers import process_content_entry, process_globals, process_navigation

__all__ = [
    "get_valid_key",
    "pascal_case",
    "prepare_keys",
    "parse_timestamps",
    "check_content_entry_types",
    "check_navigation_types",
    "ImageResolution",
    "ImageResolver",
    "locate_image_fields",
    "extract_rich_content",
    "FieldExpander",
    "process_content_entry",
    "process_globals",
    "process_navigation",
]
