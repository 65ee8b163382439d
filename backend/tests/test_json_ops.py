"""Unit tests for JSON containment and dialect rendering of JSON predicates."""

import unittest

from sqlalchemy import literal
from sqlalchemy.dialects import postgresql, sqlite

from app.db.json_ops import json_contains, json_document_contains, json_number, json_text
from app.models.cell import Cell


class JsonContainmentTests(unittest.TestCase):
    def test_objects_contain_subsets(self) -> None:
        self.assertTrue(json_document_contains({"a": 1, "b": {"c": 2, "d": 3}}, {"b": {"c": 2}}))
        self.assertFalse(json_document_contains({"a": 1}, {"a": 2}))
        self.assertFalse(json_document_contains({"a": 1}, {"b": 1}))

    def test_arrays_contain_elements_regardless_of_order(self) -> None:
        self.assertTrue(json_document_contains([1, 2, 3], [3, 1]))
        self.assertTrue(json_document_contains([{"a": 1, "b": 2}], [{"a": 1}]))
        self.assertTrue(json_document_contains(["x", "y"], "x"))
        self.assertFalse(json_document_contains({"a": [1, 2]}, {"a": 1}))

    def test_scalars_compare_without_bool_number_mixing(self) -> None:
        self.assertTrue(json_document_contains("17", "17"))
        self.assertFalse(json_document_contains(1, True))
        self.assertFalse(json_document_contains([1], True))
        self.assertTrue(json_document_contains(True, True))


class JsonRenderingTests(unittest.TestCase):
    def test_postgresql_uses_jsonb_operators(self) -> None:
        dialect = postgresql.dialect()
        self.assertIn("#>> '{}'", str(json_text(Cell.value).compile(dialect=dialect)))
        self.assertIn("jsonb_typeof", str(json_number(Cell.value).compile(dialect=dialect)))
        self.assertIn("@>", str(json_contains(Cell.value, literal('"a"')).compile(dialect=dialect)))

    def test_sqlite_uses_json1_functions(self) -> None:
        dialect = sqlite.dialect()
        self.assertIn("json_extract", str(json_text(Cell.value).compile(dialect=dialect)))
        self.assertIn("json_type", str(json_number(Cell.value).compile(dialect=dialect)))
        self.assertIn("json_contains(", str(json_contains(Cell.value, literal('"a"')).compile(dialect=dialect)))


if __name__ == "__main__":
    unittest.main()
