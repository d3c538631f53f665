from __future__ import annotations

from datetime import date
import unittest

from app.enums import LeaveType, ShiftName
from app.services.employee_refs import EmployeeInfo
from app.services.monthly_hours import (
    calculate_monthly_hours,
    format_hours,
    month_bounds,
    round_hours,
    summarize_monthly_hours,
)
from app.services.schedule_aggregation import ScheduleAssignment, aggregate_schedules
from app.services.shift_times import default_shift_times


def _assignment(ref, day: date, shift: ShiftName, leave_type: LeaveType | None = None):
    return ScheduleAssignment(employee_ref=ref, day_date=day, shift=shift, leave_type=leave_type)


class MonthlyHoursTests(unittest.TestCase):
    def setUp(self) -> None:
        self.shift_times = default_shift_times()

    def test_sick_and_regular_morning_shifts(self) -> None:
        buckets = aggregate_schedules(
            [
                _assignment("7", date(2026, 3, 2), ShiftName.MORNING),
                _assignment("7", date(2026, 3, 3), ShiftName.MORNING, LeaveType.SICK),
            ],
            self.shift_times,
        )
        rows = calculate_monthly_hours(buckets, directory={"7": EmployeeInfo(id="7", name="Lin")})

        self.assertEqual(len(rows), 1)
        row = rows[0]
        self.assertEqual(row.name, "Lin")
        self.assertEqual(row.hours, "3.5")
        self.assertEqual(row.sick_leave_hours, "3.5")
        self.assertEqual(row.overtime_hours, "0.0")
        self.assertEqual(row.personal_leave_hours, "0.0")
        self.assertEqual(row.sick_occurrences, 1)

    def test_rows_sorted_by_regular_hours_with_stable_ties(self) -> None:
        day = date(2026, 3, 2)
        buckets = aggregate_schedules(
            [
                _assignment({"_id": "1", "name": "First"}, day, ShiftName.EVENING),
                _assignment({"_id": "2", "name": "Second"}, day, ShiftName.AFTERNOON),
                _assignment({"_id": "3", "name": "Third"}, day, ShiftName.EVENING),
            ],
            self.shift_times,
        )
        rows = calculate_monthly_hours(buckets)

        self.assertEqual([row.name for row in rows], ["Second", "First", "Third"])

    def test_month_filter_ignores_other_months(self) -> None:
        buckets = aggregate_schedules(
            [
                _assignment("1", date(2026, 2, 28), ShiftName.MORNING),
                _assignment("1", date(2026, 3, 1), ShiftName.AFTERNOON),
            ],
            self.shift_times,
        )
        rows = calculate_monthly_hours(buckets, year=2026, month=3)

        self.assertEqual(rows[0].hours, "3.0")
        self.assertEqual(rows[0].name, "Employee 1")

    def test_summary_totals(self) -> None:
        day = date(2026, 3, 2)
        buckets = aggregate_schedules(
            [
                _assignment("1", day, ShiftName.MORNING),
                _assignment("1", day, ShiftName.EVENING, LeaveType.OVERTIME),
                _assignment("2", day, ShiftName.AFTERNOON, LeaveType.PERSONAL),
            ],
            self.shift_times,
        )
        summary = summarize_monthly_hours(calculate_monthly_hours(buckets))

        self.assertEqual(summary.total_regular_hours, "3.5")
        self.assertEqual(summary.total_overtime_hours, "1.5")
        self.assertEqual(summary.total_personal_leave_hours, "3.0")
        self.assertEqual(summary.total_sick_leave_hours, "0.0")
        self.assertEqual(summary.grand_total_hours, "8.0")

    def test_rounding_is_half_up(self) -> None:
        self.assertEqual(format_hours(2.25), "2.3")
        self.assertEqual(format_hours(0), "0.0")
        self.assertEqual(round_hours(2.75), 2.8)

    def test_month_bounds(self) -> None:
        self.assertEqual(month_bounds(2024, 2), (date(2024, 2, 1), date(2024, 2, 29)))

    def test_empty_input(self) -> None:
        self.assertEqual(calculate_monthly_hours({}), [])
        self.assertEqual(summarize_monthly_hours([]).grand_total_hours, "0.0")


if __name__ == "__main__":
    unittest.main()
