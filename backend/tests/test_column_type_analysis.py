"""Tests for type change analysis, policy validation and duration estimates."""

from __future__ import annotations

import unittest

from sqlalchemy import create_engine, delete
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.models.base import Base
from app.models.cell import Cell
from app.models.column import Column
from app.models.row import Row
from app.models.table import Table
from app.schemas.columns import TypeChangeOptions
from app.services.column_type_analysis import (
    analyze_type_change,
    estimate_type_change_duration,
    validate_type_change_options,
)
from app.services.column_type_change import TypeChangeError


class TypeChangeAnalysisTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        cls.SessionLocal = sessionmaker(bind=cls.engine, autoflush=False, autocommit=False, future=True)
        Base.metadata.create_all(cls.engine)

    @classmethod
    def tearDownClass(cls) -> None:
        Base.metadata.drop_all(cls.engine)
        cls.engine.dispose()

    def setUp(self) -> None:
        self.db: Session = self.SessionLocal()
        self.db.execute(delete(Cell))
        self.db.execute(delete(Row))
        self.db.execute(delete(Column))
        self.db.execute(delete(Table))
        self.db.commit()

        table = Table(tenant_id=1, database_id=1, name="Analysis")
        self.db.add(table)
        self.db.flush()
        column = Column(table_id=table.id, name="amount", type="text", position=0)
        self.db.add(column)
        self.db.flush()
        for value in ["abc", "123", "45.6", None, "", "x", "y", "z", "w", "v"]:
            row = Row(table_id=table.id)
            self.db.add(row)
            self.db.flush()
            self.db.add(Cell(row_id=row.id, column_id=column.id, value=value))
        self.db.commit()
        self.column_id = column.id

    def tearDown(self) -> None:
        self.db.close()

    def test_counts_outcomes_without_writing(self) -> None:
        analysis = analyze_type_change(self.db, self.column_id, "integer")

        self.assertEqual(analysis.old_type, "text")
        self.assertEqual(analysis.new_type, "integer")
        self.assertEqual(analysis.total_cells, 10)
        self.assertEqual(analysis.empty_cells, 2)
        self.assertEqual(analysis.convertible_cells, 4)
        self.assertEqual(analysis.lossy_cells, 1)
        self.assertEqual(analysis.failing_cells, 6)
        self.assertEqual(len(analysis.sample_failures), 5)
        self.assertEqual(analysis.sample_failures[0].value, "abc")
        self.assertEqual(analysis.sample_lossy[0].new_value, 45)
        self.assertEqual(analysis.estimate.display_text, "About 1 second")

        column = self.db.get(Column, self.column_id)
        self.assertEqual(column.type, "text")

    def test_missing_column_returns_none(self) -> None:
        self.assertIsNone(analyze_type_change(self.db, 999_999, "number"))

    def test_unknown_type_raises(self) -> None:
        with self.assertRaises(TypeChangeError) as ctx:
            analyze_type_change(self.db, self.column_id, "money")
        self.assertEqual(ctx.exception.code, "INVALID_COLUMN_TYPE")


class TypeChangeValidationTests(unittest.TestCase):
    def test_clean_change_needs_only_confirmation(self) -> None:
        self.assertTrue(validate_type_change_options(TypeChangeOptions(confirmed=True), failing_count=0, lossy_count=0).valid)

        unconfirmed = validate_type_change_options(TypeChangeOptions(), failing_count=0, lossy_count=0)
        self.assertFalse(unconfirmed.valid)
        self.assertEqual(unconfirmed.errors, ["The type change must be confirmed"])

    def test_failures_need_exactly_one_strategy(self) -> None:
        missing = validate_type_change_options(TypeChangeOptions(confirmed=True), failing_count=3, lossy_count=0)
        self.assertFalse(missing.valid)
        self.assertIn("3 cells cannot be converted", missing.errors[0])

        both = validate_type_change_options(
            TypeChangeOptions(delete_incompatible=True, convert_to_null=True, confirmed=True),
            failing_count=3,
            lossy_count=0,
        )
        self.assertFalse(both.valid)
        self.assertIn("not both", both.errors[0])

        for options in (
            TypeChangeOptions(delete_incompatible=True, confirmed=True),
            TypeChangeOptions(convert_to_null=True, confirmed=True),
        ):
            self.assertTrue(validate_type_change_options(options, failing_count=3, lossy_count=0).valid)

    def test_lossy_conversions_need_acceptance(self) -> None:
        rejected = validate_type_change_options(TypeChangeOptions(confirmed=True), failing_count=0, lossy_count=2)
        self.assertFalse(rejected.valid)
        self.assertIn("lose precision", rejected.errors[0])
        accepted = validate_type_change_options(
            TypeChangeOptions(accept_loss=True, confirmed=True),
            failing_count=0,
            lossy_count=2,
        )
        self.assertTrue(accepted.valid)

    def test_reports_every_problem(self) -> None:
        result = validate_type_change_options(TypeChangeOptions(), failing_count=1, lossy_count=1)
        self.assertEqual(len(result.errors), 3)


class DurationEstimateTests(unittest.TestCase):
    def test_display_text_scales_with_duration(self) -> None:
        cases = [
            (0, 0, "Less than 1 second"),
            (1, 1, "About 1 second"),
            (250, 3, "About 3 seconds"),
            (6_000, 60, "About 1 minute"),
            (6_100, 61, "About 2 minutes"),
            (360_000, 3_600, "About 1.0 hours"),
            (540_000, 5_400, "About 1.5 hours"),
        ]
        for cell_count, seconds, text in cases:
            with self.subTest(cell_count=cell_count):
                estimate = estimate_type_change_duration(cell_count)
                self.assertEqual(estimate.seconds, seconds)
                self.assertEqual(estimate.display_text, text)

    def test_throughput_is_configurable(self) -> None:
        self.assertEqual(estimate_type_change_duration(100, cells_per_second=10).seconds, 10)
        with self.assertRaises(ValueError):
            estimate_type_change_duration(100, cells_per_second=0)


if __name__ == "__main__":
    unittest.main()
