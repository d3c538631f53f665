from __future__ import annotations

import unittest
from collections.abc import Generator
from datetime import date
from io import BytesIO

from fastapi.testclient import TestClient
from openpyxl import load_workbook
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import Base, get_db
from app.main import app
from app.models import Employee, EmployeeSchedule, LeaveType, ShiftName, ShiftTimeConfig


def _sqlite_session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def _schedule(employee_id: int, day: date, shift: ShiftName, leave_type: LeaveType | None = None):
    return EmployeeSchedule(employee_id=employee_id, day_date=day, shift=shift, leave_type=leave_type)


class MonthlyReportEndpointsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session_factory = _sqlite_session_factory()
        with self.session_factory() as db:
            db.add_all([Employee(id=1, name="Lin"), Employee(id=2, name="Wang")])
            db.flush()
            db.add_all(
                [
                    _schedule(1, date(2026, 3, 2), ShiftName.MORNING),
                    _schedule(1, date(2026, 3, 3), ShiftName.MORNING, LeaveType.SICK),
                    _schedule(2, date(2026, 3, 2), ShiftName.AFTERNOON),
                    _schedule(2, date(2026, 3, 2), ShiftName.EVENING, LeaveType.OVERTIME),
                    _schedule(2, date(2026, 3, 3), ShiftName.AFTERNOON, LeaveType.PERSONAL),
                    _schedule(2, date(2026, 4, 1), ShiftName.MORNING),
                ]
            )
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

    def test_monthly_hours_rows_and_summary(self) -> None:
        response = self.client.get("/api/reports/monthly-hours", params={"year": 2026, "month": 3})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual([row["name"] for row in body["rows"]], ["Lin", "Wang"])
        lin, wang = body["rows"]
        self.assertEqual(lin["hours"], "3.5")
        self.assertEqual(lin["sick_leave_hours"], "3.5")
        self.assertEqual(lin["overtime_hours"], "0.0")
        self.assertEqual(wang["hours"], "3.0")
        self.assertEqual(wang["overtime_hours"], "1.5")
        self.assertEqual(wang["personal_leave_hours"], "3.0")
        self.assertEqual(body["summary"]["grand_total_hours"], "14.5")

    def test_configured_shift_length_is_used(self) -> None:
        with self.session_factory() as db:
            db.add(ShiftTimeConfig(shift=ShiftName.MORNING, start_time="08:00", end_time="12:00"))
            db.commit()

        body = self.client.get("/api/reports/monthly-hours", params={"year": 2026, "month": 3}).json()

        self.assertEqual(body["rows"][0]["hours"], "4.0")

    def test_empty_month(self) -> None:
        body = self.client.get("/api/reports/monthly-hours", params={"year": 2025, "month": 1}).json()

        self.assertEqual(body["rows"], [])
        self.assertEqual(body["summary"]["grand_total_hours"], "0.0")

    def test_month_out_of_range_is_rejected(self) -> None:
        response = self.client.get("/api/reports/monthly-hours", params={"year": 2026, "month": 13})
        self.assertEqual(response.status_code, 422)

    def test_xlsx_export(self) -> None:
        response = self.client.get(
            "/api/reports/monthly-hours.xlsx",
            params={"year": 2026, "month": 3, "include_daily_sheet": True},
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn("attachment;", response.headers["content-disposition"])
        self.assertIn("monthly-hours-2026-03-", response.headers["content-disposition"])

        workbook = load_workbook(BytesIO(response.content))
        self.assertEqual(workbook.sheetnames, ["Monthly Hours", "Overtime", "Daily Shifts"])

        hours_sheet = workbook["Monthly Hours"]
        names = [row[1] for row in hours_sheet.iter_rows(min_row=5, max_row=6, values_only=True)]
        self.assertEqual(names, ["Lin", "Wang"])

        overtime_rows = list(workbook["Overtime"].iter_rows(min_row=2, values_only=True))
        self.assertEqual(overtime_rows, [("2", "Wang", 1.5, 0, 1, 1)])


if __name__ == "__main__":
    unittest.main()
