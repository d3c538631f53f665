from __future__ import annotations

import unittest
from collections.abc import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import Base, get_db
from app.main import app
from app.models import AuditLog


def _sqlite_session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


class ShiftConfigEndpointsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session_factory = _sqlite_session_factory()

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

    def test_effective_times_default_without_configs(self) -> None:
        response = self.client.get("/api/shift-configs/effective")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual([item["shift"] for item in body], ["morning", "afternoon", "evening"])
        self.assertEqual(body[0]["start_time"], "08:30")
        self.assertEqual(body[0]["hours"], 3.5)

    def test_upsert_creates_then_updates(self) -> None:
        created = self.client.post(
            "/api/shift-configs",
            json={"shift": "afternoon", "start_time": "14:00", "end_time": "18:30"},
            headers={"X-Actor-Id": "pharmacist-1"},
        )
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()["created_by"], "pharmacist-1")

        updated = self.client.post(
            "/api/shift-configs",
            json={"shift": "afternoon", "start_time": "14:30", "end_time": "18:30"},
        )
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.json()["id"], created.json()["id"])
        self.assertEqual(updated.json()["updated_by"], "system")

        effective = self.client.get("/api/shift-configs/effective").json()
        self.assertEqual(effective[1]["start_time"], "14:30")
        self.assertEqual(effective[1]["hours"], 4.0)

        with self.session_factory() as db:
            actions = list(db.scalars(select(AuditLog.action).order_by(AuditLog.id)).all())
        self.assertEqual(actions, ["SHIFT_CONFIG_CREATED", "SHIFT_CONFIG_UPDATED"])

    def test_reversed_window_is_rejected(self) -> None:
        response = self.client.post(
            "/api/shift-configs",
            json={"shift": "evening", "start_time": "21:00", "end_time": "19:00"},
        )

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["error"]["code"], "INVALID_TIME_RANGE")

    def test_malformed_time_is_rejected(self) -> None:
        response = self.client.post(
            "/api/shift-configs",
            json={"shift": "evening", "start_time": "25:00", "end_time": "26:00"},
        )

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["error"]["code"], "VALIDATION_ERROR")

    def test_partial_update_checked_against_stored_bound(self) -> None:
        self.client.post(
            "/api/shift-configs",
            json={"shift": "morning", "start_time": "08:00", "end_time": "12:00"},
        )

        response = self.client.patch("/api/shift-configs/morning", json={"start_time": "12:30"})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["error"]["code"], "INVALID_TIME_RANGE")

        response = self.client.patch("/api/shift-configs/morning", json={"end_time": "12:30"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["end_time"], "12:30")

    def test_update_unknown_shift_config_is_404(self) -> None:
        response = self.client.patch("/api/shift-configs/evening", json={"end_time": "21:00"})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["code"], "NOT_FOUND")

    def test_delete_deactivates_and_defaults_return(self) -> None:
        self.client.post(
            "/api/shift-configs",
            json={"shift": "evening", "start_time": "18:30", "end_time": "21:30"},
        )

        response = self.client.delete("/api/shift-configs/evening")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["is_active"])

        self.assertEqual(self.client.get("/api/shift-configs").json(), [])
        effective = self.client.get("/api/shift-configs/effective").json()
        self.assertEqual(effective[2]["start_time"], "19:00")

        reactivated = self.client.post(
            "/api/shift-configs",
            json={"shift": "evening", "start_time": "18:30", "end_time": "21:30"},
        )
        self.assertEqual(reactivated.status_code, 200)
        self.assertTrue(reactivated.json()["is_active"])


if __name__ == "__main__":
    unittest.main()
