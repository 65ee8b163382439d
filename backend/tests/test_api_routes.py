"""Route-level tests for row queries and column type changes."""

from __future__ import annotations

import unittest

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, delete, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.dependencies import get_db
from app.main import app
from app.models.base import Base
from app.models.cell import Cell
from app.models.column import Column
from app.models.column_type_change_log import ColumnTypeChangeLog
from app.models.row import Row
from app.models.table import Table


class ApiRouteTests(unittest.TestCase):
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

        def override_get_db():
            db = cls.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls) -> None:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(cls.engine)
        cls.engine.dispose()

    def setUp(self) -> None:
        self.db: Session = self.SessionLocal()
        self.db.execute(delete(ColumnTypeChangeLog))
        self.db.execute(delete(Cell))
        self.db.execute(delete(Row))
        self.db.execute(delete(Column))
        self.db.execute(delete(Table))
        self.db.commit()

        table = Table(tenant_id=1, database_id=1, name="Routes")
        self.db.add(table)
        self.db.flush()
        column = Column(table_id=table.id, name="amount", type="text", position=0)
        self.db.add(column)
        self.db.flush()
        for value in ["10", "abc", "2.5"]:
            row = Row(table_id=table.id)
            self.db.add(row)
            self.db.flush()
            self.db.add(Cell(row_id=row.id, column_id=column.id, value=value))
        self.db.commit()
        self.table_id = table.id
        self.column_id = column.id

    def tearDown(self) -> None:
        self.db.close()

    def test_row_query_returns_envelope(self) -> None:
        response = self.client.post(
            f"/tables/{self.table_id}/rows/query",
            json={"filters": [{"column_id": self.column_id, "operator": "contains", "value": "ab"}]},
        )
        self.assertEqual(response.status_code, 200)
        payload = response.json()["data"]
        self.assertEqual(payload["total"], 1)
        self.assertEqual(payload["items"][0]["cells"][0]["value"], "abc")

    def test_row_query_unknown_table_is_404(self) -> None:
        response = self.client.post("/tables/999999/rows/query", json={})
        self.assertEqual(response.status_code, 404)

    def test_analysis_endpoint(self) -> None:
        response = self.client.get(f"/columns/{self.column_id}/type-change/analysis", params={"new_type": "integer"})
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["failing_cells"], 1)
        self.assertEqual(data["lossy_cells"], 1)

    def test_invalid_policy_is_422_and_nothing_changes(self) -> None:
        response = self.client.post(
            f"/columns/{self.column_id}/type-change",
            json={"new_type": "integer", "options": {"confirmed": True}},
        )
        self.assertEqual(response.status_code, 422)
        self.assertEqual(len(response.json()["detail"]["errors"]), 2)
        self.assertEqual(self.db.scalar(select(Column.type).where(Column.id == self.column_id)), "text")

    def test_unknown_type_is_422(self) -> None:
        response = self.client.post(
            f"/columns/{self.column_id}/type-change",
            json={"new_type": "money", "options": {"confirmed": True}},
        )
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["detail"]["code"], "INVALID_COLUMN_TYPE")

    def test_type_change_applies_policy(self) -> None:
        response = self.client.post(
            f"/columns/{self.column_id}/type-change",
            json={
                "new_type": "integer",
                "options": {"delete_incompatible": True, "accept_loss": True, "confirmed": True},
            },
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["column"]["type"], "integer")
        self.assertEqual(data["stats"]["deleted"], 1)
        self.assertEqual(data["stats"]["lossy"], 1)

    def test_missing_column_is_404(self) -> None:
        response = self.client.post(
            "/columns/999999/type-change",
            json={"new_type": "number", "options": {"confirmed": True}},
        )
        self.assertEqual(response.status_code, 404)


if __name__ == "__main__":
    unittest.main()
