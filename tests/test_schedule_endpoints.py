from __future__ import annotations

import unittest
from collections.abc import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import Base, get_db
from app.main import app
from app.models import Employee


def _sqlite_session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


class ScheduleEndpointsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session_factory = _sqlite_session_factory()
        with self.session_factory() as db:
            db.add_all([Employee(id=1, name="Lin", position="Pharmacist"), Employee(id=2, name="Wang")])
            db.commit()

        def _override() -> Generator[Session, None, None]:
            db = self.session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = _override
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def _create(self, employee_id: int, day: str, shift: str, leave_type: str | None = None):
        return self.client.post(
            "/api/schedules",
            json={"employee_id": employee_id, "day_date": day, "shift": shift, "leave_type": leave_type},
        )

    def test_create_and_list_in_range(self) -> None:
        created = self._create(1, "2026-03-02", "evening")
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()["employee_name"], "Lin")
        self._create(1, "2026-03-02", "morning", "sick")
        self._create(2, "2026-04-01", "morning")

        response = self.client.get(
            "/api/schedules",
            params={"start_date": "2026-03-01", "end_date": "2026-03-31"},
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual([item["shift"] for item in body], ["morning", "evening"])
        self.assertEqual(body[0]["leave_type"], "sick")

    def test_duplicate_assignment_is_conflict(self) -> None:
        self._create(1, "2026-03-02", "morning")
        response = self._create(1, "2026-03-02", "morning", "overtime")

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"]["code"], "CONFLICT")

    def test_unknown_employee_is_404(self) -> None:
        response = self._create(99, "2026-03-02", "morning")
        self.assertEqual(response.status_code, 404)

    def test_date_bounds_must_come_together(self) -> None:
        response = self.client.get("/api/schedules", params={"start_date": "2026-03-01"})
        self.assertEqual(response.status_code, 422)

        response = self.client.get(
            "/api/schedules",
            params={"start_date": "2026-03-31", "end_date": "2026-03-01"},
        )
        self.assertEqual(response.status_code, 422)

    def test_update_can_clear_leave_type(self) -> None:
        schedule_id = self._create(1, "2026-03-02", "morning", "personal").json()["id"]

        response = self.client.patch(f"/api/schedules/{schedule_id}", json={"leave_type": None})

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()["leave_type"])

    def test_update_into_taken_slot_is_conflict(self) -> None:
        self._create(1, "2026-03-02", "morning")
        other_id = self._create(1, "2026-03-02", "afternoon").json()["id"]

        response = self.client.patch(f"/api/schedules/{other_id}", json={"shift": "morning"})
        self.assertEqual(response.status_code, 409)

    def test_delete_schedule(self) -> None:
        schedule_id = self._create(2, "2026-03-02", "morning").json()["id"]

        self.assertEqual(self.client.delete(f"/api/schedules/{schedule_id}").status_code, 204)
        self.assertEqual(self.client.delete(f"/api/schedules/{schedule_id}").status_code, 404)

    def test_by_date_and_buckets(self) -> None:
        self._create(1, "2026-03-02", "morning")
        self._create(2, "2026-03-02", "morning", "overtime")
        self._create(2, "2026-03-03", "evening", "sick")
        params = {"start_date": "2026-03-01", "end_date": "2026-03-31"}

        by_date = self.client.get("/api/schedules/by-date", params=params).json()
        self.assertEqual(sorted(by_date), ["2026-03-02", "2026-03-03"])
        self.assertEqual(len(by_date["2026-03-02"]["morning"]), 2)
        self.assertEqual(by_date["2026-03-02"]["evening"], [])

        buckets = self.client.get("/api/schedules/buckets", params=params).json()
        first_morning = buckets[0]["shifts"][0]
        self.assertEqual(first_morning["shift"], "morning")
        self.assertEqual(first_morning["shift_hours"], 3.5)
        self.assertEqual([item["employee_name"] for item in first_morning["regular"]], ["Lin"])
        self.assertEqual([item["employee_id"] for item in first_morning["overtime"]], ["2"])
        self.assertEqual(len(buckets[1]["shifts"][2]["sick"]), 1)


if __name__ == "__main__":
    unittest.main()
