"""
Unit tests for content and navigation type coercion.
"""

import math
import unittest
from datetime import datetime, timezone

from flamenode.normalize.coercion import (
    check_content_entry_types,
    check_navigation_types,
    parse_float,
    parse_int,
    to_string,
)


class TestToString(unittest.TestCase):
    """Test the generic to-string conversion."""

    def test_scalars(self):
        self.assertEqual(to_string(None), "")
        self.assertEqual(to_string("x"), "x")
        self.assertEqual(to_string(True), "true")
        self.assertEqual(to_string(False), "false")
        self.assertEqual(to_string(42), "42")
        self.assertEqual(to_string(42.0), "42")
        self.assertEqual(to_string(4.5), "4.5")
        self.assertEqual(to_string(math.nan), "NaN")

    def test_collections(self):
        self.assertEqual(to_string([1, "a", None]), "1,a,")
        self.assertEqual(to_string({"b": 1, "a": 2}), '{"a":2,"b":1}')

    def test_datetime(self):
        value = datetime(2020, 1, 1, tzinfo=timezone.utc)
        self.assertEqual(to_string(value), "2020-01-01T00:00:00+00:00")


class TestParseNumbers(unittest.TestCase):
    """Test lenient number parsing."""

    def test_parse_float(self):
        self.assertEqual(parse_float("42"), 42.0)
        self.assertEqual(parse_float(" 4.5 "), 4.5)
        self.assertEqual(parse_float("42px"), 42.0)
        self.assertEqual(parse_float("-1e3"), -1000.0)
        self.assertEqual(parse_float(".5"), 0.5)
        self.assertEqual(parse_float(7), 7.0)
        self.assertEqual(parse_float("Infinity"), math.inf)

    def test_parse_float_nan(self):
        for value in ("abc", "", None, True, {"a": 1}, []):
            self.assertTrue(math.isnan(parse_float(value)), msg=repr(value))

    def test_parse_int(self):
        self.assertEqual(parse_int("7"), 7)
        self.assertEqual(parse_int("7.9"), 7)
        self.assertEqual(parse_int(3.2), 3)
        self.assertTrue(math.isnan(parse_int("x")))
        self.assertTrue(math.isnan(parse_int(None)))


class TestCheckContentEntryTypes(unittest.TestCase):
    """Test schema-driven entry coercion."""

    def setUp(self):
        self.field_types = {
            "title": "text",
            "rating": "number",
            "published": "boolean",
            "location": "location",
            "tags": "tag",
        }

    def test_number_fields_parsed(self):
        entry = check_content_entry_types(self.field_types, {"rating": "42"})

        self.assertEqual(entry["rating"], 42)
        self.assertIsInstance(entry["rating"], float)

    def test_unparseable_number_becomes_nan(self):
        entry = check_content_entry_types(self.field_types, {"rating": "n/a"})

        self.assertTrue(math.isnan(entry["rating"]))

    def test_string_fields_stringified(self):
        entry = check_content_entry_types(self.field_types, {"title": 1234})

        self.assertEqual(entry["title"], "1234")

    def test_boolean_and_object_pass_through(self):
        """Boolean and object kinds keep their raw value even when it disagrees."""
        entry = check_content_entry_types(
            self.field_types,
            {"published": "yes", "location": "Oslo", "tags": ["a", "b"]}
        )

        self.assertEqual(entry["published"], "yes")
        self.assertEqual(entry["location"], "Oslo")
        self.assertEqual(entry["tags"], ["a", "b"])

    def test_order_is_always_numeric(self):
        entry = check_content_entry_types({}, {"order": "3"})

        self.assertEqual(entry["order"], 3.0)

    def test_undeclared_numbers_stringified(self):
        entry = check_content_entry_types({}, {"legacyCount": 5, "legacyFlag": True})

        self.assertEqual(entry["legacyCount"], "5")
        self.assertIs(entry["legacyFlag"], True)

    def test_list_items_coerced(self):
        entry = check_content_entry_types(
            self.field_types, {"gallery": [{"size": 1024, "order": "2"}, "plain"]}
        )

        self.assertEqual(entry["gallery"][0], {"size": "1024", "order": 2.0})
        self.assertEqual(entry["gallery"][1], "plain")

    def test_input_not_mutated(self):
        raw = {"rating": "1"}
        check_content_entry_types(self.field_types, raw)

        self.assertEqual(raw, {"rating": "1"})

    def test_non_mapping_passthrough(self):
        self.assertEqual(check_content_entry_types(self.field_types, "x"), "x")


class TestCheckNavigationTypes(unittest.TestCase):
    """Test navigation tree normalization."""

    def test_navigation_fields(self):
        nav = check_navigation_types({
            "id": 7,
            "title": None,
            "items": [
                {"id": 1, "order": "2", "newWindow": 1, "url": "/a", "children": None},
            ],
        })

        self.assertEqual(nav["id"], "7")
        self.assertEqual(nav["title"], "")
        item = nav["items"][0]
        self.assertEqual(item["id"], "1")
        self.assertEqual(item["order"], 2)
        self.assertIs(item["newWindow"], True)
        self.assertEqual(item["children"], [])

    def test_missing_items_default_to_empty(self):
        nav = check_navigation_types({"id": "main", "items": "broken"})

        self.assertEqual(nav["items"], [])

    def test_nested_children_normalized(self):
        nav = check_navigation_types({
            "id": "main",
            "items": [{"id": 1, "children": [{"id": 2, "order": "x", "newWindow": 0}]}],
        })

        child = nav["items"][0]["children"][0]
        self.assertEqual(child["id"], "2")
        self.assertTrue(math.isnan(child["order"]))
        self.assertIs(child["newWindow"], False)

    def test_numeric_order_kept(self):
        nav = check_navigation_types({"order": 4})

        self.assertEqual(nav["order"], 4)


if __name__ == "__main__":
    unittest.main()
