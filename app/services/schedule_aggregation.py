from __future__ import annotations

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from app.enums import LeaveType, ShiftName
from app.services.employee_refs import employee_name_from_ref, normalize_employee_id
from app.services.shift_times import SHIFT_ORDER, ShiftTimesMap, shift_hours_for

logger = logging.getLogger("app.schedule_aggregation")


@dataclass(frozen=True)
class ScheduleAssignment:
    employee_ref: Any
    day_date: date
    shift: ShiftName
    leave_type: LeaveType | None = None
    id: str | None = None

    @property
    def employee_id(self) -> str | None:
        return normalize_employee_id(self.employee_ref).employee_id

    @property
    def employee_name(self) -> str | None:
        return employee_name_from_ref(self.employee_ref)


def classify_leave_type(assignment: ScheduleAssignment) -> LeaveType | None:
    if assignment.leave_type is None:
        return None
    return LeaveType(assignment.leave_type)


@dataclass
class ShiftBucket:
    shift: ShiftName
    shift_hours: float
    assignments: list[ScheduleAssignment] = field(default_factory=list)

    def _of_type(self, leave_type: LeaveType | None) -> list[ScheduleAssignment]:
        return [item for item in self.assignments if classify_leave_type(item) == leave_type]

    @property
    def regular(self) -> list[ScheduleAssignment]:
        return self._of_type(None)

    @property
    def overtime(self) -> list[ScheduleAssignment]:
        return self._of_type(LeaveType.OVERTIME)

    @property
    def personal(self) -> list[ScheduleAssignment]:
        return self._of_type(LeaveType.PERSONAL)

    @property
    def sick(self) -> list[ScheduleAssignment]:
        return self._of_type(LeaveType.SICK)

    @property
    def total_hours(self) -> float:
        return self.shift_hours * len(self.assignments)


DailyShiftBuckets = dict[date, dict[ShiftName, ShiftBucket]]


@dataclass
class EmployeeHoursTotals:
    employee_id: str
    name: str | None = None
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    personal_leave_hours: float = 0.0
    sick_leave_hours: float = 0.0
    sick_occurrences: int = 0

    @property
    def total_hours(self) -> float:
        return self.regular_hours + self.overtime_hours + self.personal_leave_hours + self.sick_leave_hours


def _has_valid_employee(assignment: ScheduleAssignment) -> bool:
    result = normalize_employee_id(assignment.employee_ref)
    if result.ok:
        return True
    logger.warning(
        "schedule_record_skipped",
        extra={
            "schedule_id": assignment.id,
            "day_date": assignment.day_date.isoformat(),
            "shift": ShiftName(assignment.shift).value,
            "reason": result.reason,
        },
    )
    return False


def group_schedules_by_date(
    assignments: Iterable[ScheduleAssignment],
) -> dict[date, dict[ShiftName, list[ScheduleAssignment]]]:
    grouped: dict[date, dict[ShiftName, list[ScheduleAssignment]]] = {}
    for assignment in sorted(assignments, key=lambda item: item.day_date):
        day_shifts = grouped.get(assignment.day_date)
        if day_shifts is None:
            day_shifts = {shift: [] for shift in SHIFT_ORDER}
            grouped[assignment.day_date] = day_shifts
        day_shifts[ShiftName(assignment.shift)].append(assignment)
    return grouped


def find_duplicate_assignments(
    assignments: Iterable[ScheduleAssignment],
) -> list[tuple[str, date, ShiftName]]:
    keys = Counter(
        (assignment.employee_id, assignment.day_date, ShiftName(assignment.shift))
        for assignment in assignments
        if assignment.employee_id is not None
    )
    return [key for key, count in keys.items() if count > 1]  # type: ignore[misc]


def aggregate_schedules(
    assignments: Iterable[ScheduleAssignment],
    shift_times: ShiftTimesMap,
) -> DailyShiftBuckets:
    """Bucket assignments by date and shift, split by leave type.

    Duplicates of the same employee/date/shift are kept and counted
    separately; they are only reported through a warning.
    """
    valid = [assignment for assignment in assignments if _has_valid_employee(assignment)]

    duplicates = find_duplicate_assignments(valid)
    if duplicates:
        logger.warning(
            "schedule_duplicate_assignments",
            extra={
                "count": len(duplicates),
                "keys": [f"{emp}/{day.isoformat()}/{shift.value}" for emp, day, shift in duplicates],
            },
        )

    hours_by_shift = {shift: shift_hours_for(shift_times, shift) for shift in SHIFT_ORDER}

    buckets: DailyShiftBuckets = {}
    for day_date, day_shifts in group_schedules_by_date(valid).items():
        day_buckets: dict[ShiftName, ShiftBucket] = {}
        for shift, shift_assignments in day_shifts.items():
            day_buckets[shift] = ShiftBucket(
                shift=shift,
                shift_hours=hours_by_shift[shift],
                assignments=list(shift_assignments),
            )
        buckets[day_date] = day_buckets
    return buckets


def fold_employee_hours(
    buckets: DailyShiftBuckets,
    *,
    names: Mapping[str, str] | None = None,
) -> dict[str, EmployeeHoursTotals]:
    totals: dict[str, EmployeeHoursTotals] = {}

    def _totals_for(assignment: ScheduleAssignment) -> EmployeeHoursTotals:
        employee_id = normalize_employee_id(assignment.employee_ref).unwrap()
        entry = totals.get(employee_id)
        if entry is None:
            entry = EmployeeHoursTotals(employee_id=employee_id)
            totals[employee_id] = entry
        if entry.name is None:
            entry.name = (names or {}).get(employee_id) or assignment.employee_name
        return entry

    for day_date in sorted(buckets):
        for shift in SHIFT_ORDER:
            bucket = buckets[day_date].get(shift)
            if bucket is None:
                continue
            for assignment in bucket.assignments:
                entry = _totals_for(assignment)
                leave_type = classify_leave_type(assignment)
                if leave_type is None:
                    entry.regular_hours += bucket.shift_hours
                elif leave_type == LeaveType.OVERTIME:
                    entry.overtime_hours += bucket.shift_hours
                elif leave_type == LeaveType.PERSONAL:
                    entry.personal_leave_hours += bucket.shift_hours
                else:
                    entry.sick_leave_hours += bucket.shift_hours
                    entry.sick_occurrences += 1
    return totals


def overtime_assignments_by_employee(
    assignments: Iterable[ScheduleAssignment],
) -> dict[str, list[ScheduleAssignment]]:
    grouped: dict[str, list[ScheduleAssignment]] = defaultdict(list)
    for assignment in assignments:
        if assignment.leave_type != LeaveType.OVERTIME:
            continue
        if not _has_valid_employee(assignment):
            continue
        grouped[assignment.employee_id].append(assignment)  # type: ignore[index]
    return dict(grouped)
