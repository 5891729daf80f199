"""
Unit tests for key sanitization and timestamp normalization.
"""

import unittest
from datetime import datetime, timezone

from flamenode.normalize.keys import (
    CONFLICT_FIELD_PREFIX,
    NAME_RX,
    RESERVED_FIELDS,
    get_valid_key,
    pascal_case,
    prepare_keys,
)
from flamenode.normalize.timestamps import is_timestamp, parse_timestamps


class TestGetValidKey(unittest.TestCase):
    """Test single key sanitization."""

    def test_valid_keys_unchanged(self):
        for key in ("title", "_private", "heroImage2", "snake_case"):
            self.assertEqual(get_valid_key(key), key)

    def test_invalid_characters_replaced(self):
        self.assertEqual(get_valid_key("hero-image"), "hero_image")
        self.assertEqual(get_valid_key("a.b"), "a_b")
        self.assertEqual(get_valid_key("a:b"), "a_b")
        self.assertEqual(get_valid_key("first name"), "first_name")

    def test_leading_digit_prefixed(self):
        self.assertEqual(get_valid_key("1column"), "flamelink_1column")
        self.assertEqual(get_valid_key(42), "flamelink_42")

    def test_reserved_fields_prefixed(self):
        self.assertEqual(get_valid_key("id"), "flamelink_id")
        self.assertEqual(get_valid_key("parent"), "flamelink_parent")
        self.assertEqual(get_valid_key("children"), "flamelink_children")
        self.assertEqual(get_valid_key("internal"), "flamelink_internal")
        self.assertEqual(get_valid_key("fields"), "flamelink_fields")

    def test_output_is_always_a_valid_name(self):
        """Every output matches the identifier pattern and is never reserved."""
        keys = [
            "id", "__meta__", "hero-image", "ümlaut", "a/b", "1", "", "@home",
            "with space", "x--y", "é-1", "%", "children", "::", "_",
        ]
        for key in keys:
            valid = get_valid_key(key)
            self.assertRegex(valid, NAME_RX, msg=f"key {key!r} gave {valid!r}")
            self.assertNotIn(valid, RESERVED_FIELDS)

    def test_idempotent(self):
        for key in ("id", "__meta__", "hero-image", "1column", "@home", "title"):
            once = get_valid_key(key)
            self.assertEqual(get_valid_key(once), once)

    def test_meta_key_is_prefixed(self):
        self.assertTrue(get_valid_key("__meta__").startswith(CONFLICT_FIELD_PREFIX))


class TestPrepareKeys(unittest.TestCase):
    """Test entry-level key sanitization."""

    def test_top_level_keys_sanitized(self):
        prepped = prepare_keys({"id": "1", "hero-image": None, "title": "Hi"})

        self.assertEqual(prepped, {"flamelink_id": "1", "hero_image": None, "title": "Hi"})

    def test_mappings_in_lists_sanitized(self):
        prepped = prepare_keys({"images": [{"id": "m1", "content-type": "x"}, "plain"]})

        self.assertEqual(prepped["images"][0], {"flamelink_id": "m1", "content_type": "x"})
        self.assertEqual(prepped["images"][1], "plain")

    def test_nested_mapping_values_left_for_their_owner(self):
        """Fieldset values are sanitized when they are expanded, not here."""
        prepped = prepare_keys({"author": {"first-name": "Jane"}})

        self.assertEqual(prepped["author"], {"first-name": "Jane"})

    def test_non_mapping_passthrough(self):
        self.assertEqual(prepare_keys("text"), "text")
        self.assertIsNone(prepare_keys(None))

    def test_input_not_mutated(self):
        entry = {"id": "1", "items": [{"id": "a"}]}
        prepare_keys(entry)

        self.assertEqual(entry, {"id": "1", "items": [{"id": "a"}]})

    def test_idempotent(self):
        entry = {"id": "1", "hero-image": [{"id": "m"}], "__meta__": {"x": 1}}
        once = prepare_keys(entry)

        self.assertEqual(prepare_keys(once), once)

    def test_timestamps_converted(self):
        prepped = prepare_keys({"__meta__": {"createdDate": {"_seconds": 0, "_nanoseconds": 0}}})

        meta = prepped[get_valid_key("__meta__")]
        self.assertEqual(meta["createdDate"], datetime(1970, 1, 1, tzinfo=timezone.utc))


class TestTimestamps(unittest.TestCase):
    """Test backend timestamp detection and conversion."""

    def test_detection(self):
        self.assertTrue(is_timestamp({"_seconds": 1, "_nanoseconds": 0}))
        self.assertTrue(is_timestamp({"seconds": 1, "nanoseconds": 0}))
        self.assertFalse(is_timestamp({"_seconds": "1", "_nanoseconds": 0}))
        self.assertFalse(is_timestamp({"_seconds": 1}))
        self.assertFalse(is_timestamp(1577836800))

    def test_conversion_keeps_microseconds(self):
        value = parse_timestamps({"_seconds": 1577836800, "_nanoseconds": 500000000})

        self.assertEqual(value, datetime(2020, 1, 1, 0, 0, 0, 500000, tzinfo=timezone.utc))

    def test_recursive_conversion(self):
        value = parse_timestamps({"history": [{"at": {"seconds": 60, "nanoseconds": 0}}]})

        self.assertEqual(value["history"][0]["at"], datetime(1970, 1, 1, 0, 1, tzinfo=timezone.utc))


class TestPascalCase(unittest.TestCase):
    """Test type-name fragments."""

    def test_pascal_case(self):
        self.assertEqual(pascal_case("blogPost"), "BlogPost")
        self.assertEqual(pascal_case("blog-post"), "BlogPost")
        self.assertEqual(pascal_case("main_navigation"), "MainNavigation")
        self.assertEqual(pascal_case("text/markdown"), "TextMarkdown")


if __name__ == "__main__":
    unittest.main()
