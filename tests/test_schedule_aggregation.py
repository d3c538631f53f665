from __future__ import annotations

from datetime import date
import unittest

from app.enums import LeaveType, ShiftName
from app.services.schedule_aggregation import (
    ScheduleAssignment,
    aggregate_schedules,
    find_duplicate_assignments,
    fold_employee_hours,
    overtime_assignments_by_employee,
)
from app.services.shift_times import SHIFT_ORDER, default_shift_times


def _assignment(ref, day: int, shift: ShiftName, leave_type: LeaveType | None = None, id: str | None = None):
    return ScheduleAssignment(
        employee_ref=ref,
        day_date=date(2026, 3, day),
        shift=shift,
        leave_type=leave_type,
        id=id,
    )


class ScheduleAggregationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.shift_times = default_shift_times()

    def test_every_date_gets_all_three_shifts(self) -> None:
        buckets = aggregate_schedules([_assignment("1", 3, ShiftName.EVENING)], self.shift_times)

        self.assertEqual(list(buckets), [date(2026, 3, 3)])
        self.assertEqual(tuple(buckets[date(2026, 3, 3)]), SHIFT_ORDER)
        self.assertEqual(buckets[date(2026, 3, 3)][ShiftName.MORNING].assignments, [])
        self.assertEqual(buckets[date(2026, 3, 3)][ShiftName.EVENING].shift_hours, 1.5)

    def test_leave_types_are_split_into_categories(self) -> None:
        assignments = [
            _assignment("1", 2, ShiftName.MORNING),
            _assignment("2", 2, ShiftName.MORNING, LeaveType.SICK),
            _assignment("3", 2, ShiftName.MORNING, LeaveType.PERSONAL),
            _assignment("4", 2, ShiftName.MORNING, LeaveType.OVERTIME),
        ]
        bucket = aggregate_schedules(assignments, self.shift_times)[date(2026, 3, 2)][ShiftName.MORNING]

        self.assertEqual([item.employee_id for item in bucket.regular], ["1"])
        self.assertEqual([item.employee_id for item in bucket.sick], ["2"])
        self.assertEqual([item.employee_id for item in bucket.personal], ["3"])
        self.assertEqual([item.employee_id for item in bucket.overtime], ["4"])

    def test_hours_are_conserved(self) -> None:
        assignments = [
            _assignment("1", 2, ShiftName.MORNING),
            _assignment("1", 2, ShiftName.AFTERNOON, LeaveType.OVERTIME),
            _assignment("2", 3, ShiftName.EVENING, LeaveType.SICK),
            _assignment("2", 4, ShiftName.MORNING, LeaveType.PERSONAL),
            _assignment({"_id": "3", "name": "Chen"}, 4, ShiftName.AFTERNOON),
        ]
        totals = fold_employee_hours(aggregate_schedules(assignments, self.shift_times))

        folded = sum(entry.total_hours for entry in totals.values())
        self.assertAlmostEqual(folded, 3.5 + 3.0 + 1.5 + 3.5 + 3.0)
        self.assertEqual(totals["2"].sick_occurrences, 1)
        self.assertEqual(totals["3"].name, "Chen")

    def test_duplicates_are_counted_and_reported(self) -> None:
        assignments = [
            _assignment("1", 2, ShiftName.MORNING, id="a"),
            _assignment("1", 2, ShiftName.MORNING, id="b"),
        ]
        self.assertEqual(find_duplicate_assignments(assignments), [("1", date(2026, 3, 2), ShiftName.MORNING)])

        with self.assertLogs("app.schedule_aggregation", level="WARNING") as logs:
            buckets = aggregate_schedules(assignments, self.shift_times)

        self.assertIn("schedule_duplicate_assignments", logs.output[0])
        self.assertEqual(fold_employee_hours(buckets)["1"].regular_hours, 7.0)

    def test_unrecognized_employee_reference_is_skipped(self) -> None:
        assignments = [
            _assignment(None, 2, ShiftName.MORNING, id="bad"),
            _assignment({"name": "No id"}, 2, ShiftName.MORNING, id="bad-2"),
            _assignment({"$oid": "65a1"}, 2, ShiftName.MORNING, id="good"),
        ]
        with self.assertLogs("app.schedule_aggregation", level="WARNING") as logs:
            buckets = aggregate_schedules(assignments, self.shift_times)

        self.assertEqual(len(logs.output), 2)
        self.assertEqual(
            [item.id for item in buckets[date(2026, 3, 2)][ShiftName.MORNING].assignments],
            ["good"],
        )

    def test_overtime_assignments_grouped_by_normalized_id(self) -> None:
        assignments = [
            _assignment("65a1", 2, ShiftName.EVENING, LeaveType.OVERTIME),
            _assignment({"_id": {"$oid": "65a1"}}, 3, ShiftName.EVENING, LeaveType.OVERTIME),
            _assignment("65a1", 4, ShiftName.MORNING),
        ]
        grouped = overtime_assignments_by_employee(assignments)

        self.assertEqual(list(grouped), ["65a1"])
        self.assertEqual(len(grouped["65a1"]), 2)

    def test_empty_input(self) -> None:
        self.assertEqual(aggregate_schedules([], self.shift_times), {})
        self.assertEqual(fold_employee_hours({}), {})


if __name__ == "__main__":
    unittest.main()
