"""Unit tests for the column type vocabulary and the operator table."""

import unittest

from app.coercion.predicates import (
    PREDICATE_TABLE,
    PredicateKind,
    ValueFormat,
    escape_like,
    format_comparison_value,
    get_predicate_rule,
    operators_for,
)
from app.schema.column_types import (
    COLUMN_TYPE_FAMILIES,
    ColumnType,
    FilterOperator,
    TypeFamily,
    parse_column_type,
    parse_filter_operator,
)


class ColumnTypeParsingTests(unittest.TestCase):
    def test_exact_values_and_synonyms(self) -> None:
        self.assertEqual(parse_column_type("number"), ColumnType.NUMBER)
        self.assertEqual(parse_column_type("customArray"), ColumnType.CUSTOM_ARRAY)
        self.assertEqual(parse_column_type("CUSTOMARRAY"), ColumnType.CUSTOM_ARRAY)
        self.assertEqual(parse_column_type(" INT "), ColumnType.INTEGER)
        self.assertEqual(parse_column_type("bool"), ColumnType.BOOLEAN)
        self.assertEqual(parse_column_type("timestamp"), ColumnType.DATETIME)
        self.assertEqual(parse_column_type(ColumnType.JSON), ColumnType.JSON)

    def test_unknown_types_are_none(self) -> None:
        self.assertIsNone(parse_column_type("money"))
        self.assertIsNone(parse_column_type(""))
        self.assertIsNone(parse_column_type(None))

    def test_operator_names_are_exact(self) -> None:
        self.assertEqual(parse_filter_operator("Contains"), FilterOperator.CONTAINS)
        self.assertEqual(parse_filter_operator("is_not_empty"), FilterOperator.IS_NOT_EMPTY)
        self.assertIsNone(parse_filter_operator("like"))
        self.assertIsNone(parse_filter_operator(None))

    def test_family_tables_are_exhaustive(self) -> None:
        self.assertEqual(set(COLUMN_TYPE_FAMILIES), set(ColumnType))
        self.assertEqual(set(PREDICATE_TABLE), set(TypeFamily))


class PredicateTableTests(unittest.TestCase):
    def test_contains_is_structural_for_json_and_substring_elsewhere(self) -> None:
        json_rule = get_predicate_rule("contains", "json")
        self.assertEqual(json_rule.kind, PredicateKind.MEMBERSHIP)
        self.assertEqual(json_rule.value_format, ValueFormat.JSON_DOCUMENT)

        text_rule = get_predicate_rule("contains", "text")
        self.assertEqual(text_rule.kind, PredicateKind.WILDCARD)
        self.assertEqual(text_rule.value_format, ValueFormat.CONTAINS_PATTERN)
        self.assertTrue(get_predicate_rule("not_contains", "email").negate)

    def test_ranges_only_for_numeric_and_date_families(self) -> None:
        self.assertEqual(get_predicate_rule("between", "number").kind, PredicateKind.RANGE)
        self.assertTrue(get_predicate_rule("not_between", "date").negate)
        self.assertIsNone(get_predicate_rule("between", "text"))
        self.assertIsNone(get_predicate_rule("between", "boolean"))

    def test_unsupported_pairs_are_none(self) -> None:
        self.assertIsNone(get_predicate_rule("regex", "number"))
        self.assertIsNone(get_predicate_rule("today", "text"))
        self.assertIsNone(get_predicate_rule("contains", "money"))
        self.assertIsNone(get_predicate_rule("bogus", "text"))

    def test_every_type_supports_emptiness(self) -> None:
        for column_type in ColumnType:
            with self.subTest(column_type=column_type):
                operators = operators_for(column_type)
                self.assertIn(FilterOperator.IS_EMPTY, operators)
                self.assertIn(FilterOperator.IS_NOT_EMPTY, operators)

    def test_boolean_operator_list(self) -> None:
        self.assertEqual(
            operators_for("boolean"),
            [FilterOperator.EQUALS, FilterOperator.NOT_EQUALS, FilterOperator.IS_EMPTY, FilterOperator.IS_NOT_EMPTY],
        )
        self.assertEqual(operators_for("money"), [])

    def test_date_equality_compares_calendar_day(self) -> None:
        self.assertEqual(get_predicate_rule("equals", "datetime").kind, PredicateKind.CALENDAR_DAY)
        self.assertEqual(get_predicate_rule("last_month", "date").kind, PredicateKind.DATE_BUCKET)
        self.assertEqual(get_predicate_rule("before", "time").kind, PredicateKind.LESS_THAN)


class ComparisonValueTests(unittest.TestCase):
    def test_wildcard_patterns_escape_user_text(self) -> None:
        self.assertEqual(escape_like("50%_off\\"), "50\\%\\_off\\\\")
        contains = get_predicate_rule("contains", "text")
        starts = get_predicate_rule("starts_with", "text")
        ends = get_predicate_rule("ends_with", "text")
        self.assertEqual(format_comparison_value(contains, "50%"), "%50\\%%")
        self.assertEqual(format_comparison_value(starts, "ab"), "ab%")
        self.assertEqual(format_comparison_value(ends, "ab"), "%ab")

    def test_equality_leaves_value_as_is(self) -> None:
        self.assertEqual(format_comparison_value(get_predicate_rule("equals", "number"), 5), 5)

    def test_json_documents_serialize(self) -> None:
        rule = get_predicate_rule("contains", "json")
        self.assertEqual(format_comparison_value(rule, {"a": [1, 2]}), '{"a":[1,2]}')
        self.assertEqual(format_comparison_value(get_predicate_rule("equals", "reference"), "17"), '"17"')


if __name__ == "__main__":
    unittest.main()
