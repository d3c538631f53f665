from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Literal

from app.enums import OvertimeStatus, ShiftName
from app.services.employee_refs import (
    EmployeeInfo,
    employee_name_from_ref,
    employee_position_from_ref,
    fallback_employee_name,
    normalize_employee_id,
)
from app.services.monthly_hours import round_hours
from app.services.schedule_aggregation import ScheduleAssignment, overtime_assignments_by_employee
from app.services.shift_times import ShiftTimesMap, defaults_for, shift_hours_for

logger = logging.getLogger("app.overtime_merge")

OvertimeSource = Literal["manual", "schedule"]


@dataclass(frozen=True)
class IndependentOvertime:
    employee_ref: Any
    day_date: date
    hours: float
    status: OvertimeStatus = OvertimeStatus.PENDING
    description: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class MergedOvertimeEntry:
    id: str
    source: OvertimeSource
    day_date: date
    hours: float
    description: str
    status: OvertimeStatus
    shift: ShiftName | None = None


@dataclass(frozen=True)
class OvertimeMonthlyStat:
    employee_id: str
    name: str
    overtime_hours: float
    independent_record_count: int = 0
    schedule_record_count: int = 0

    @property
    def total_record_count(self) -> int:
        return self.independent_record_count + self.schedule_record_count


@dataclass
class EmployeeOvertimeGroup:
    employee_id: str
    name: str
    position: str | None = None
    records: list[IndependentOvertime] = field(default_factory=list)
    schedule_records: list[ScheduleAssignment] = field(default_factory=list)
    independent_hours: float = 0.0
    schedule_hours: float = 0.0
    total_hours: float = 0.0
    schedule_record_count: int = 0
    latest_date: date | None = None
    entries: list[MergedOvertimeEntry] = field(default_factory=list)


def reconcile_schedule_hours(
    *,
    independent_hours: float,
    local_schedule_hours: float,
    stats_total_hours: float | None,
) -> float:
    """Pick the schedule-derived overtime figure shown for one employee.

    The monthly statistic, when present, is authoritative: it may cover
    records outside the merged window, so its total minus the independent
    hours replaces the locally summed schedule hours (never below zero).
    """
    if stats_total_hours is None:
        return local_schedule_hours
    return max(0.0, stats_total_hours - independent_hours)


def _valid_independent_records(
    records: Iterable[IndependentOvertime],
) -> list[tuple[str, IndependentOvertime]]:
    valid: list[tuple[str, IndependentOvertime]] = []
    for record in records:
        result = normalize_employee_id(record.employee_ref)
        if not result.ok:
            logger.warning(
                "overtime_record_skipped",
                extra={"overtime_record_id": record.id, "reason": result.reason},
            )
            continue
        valid.append((result.employee_id, record))  # type: ignore[arg-type]
    return valid


def _schedule_entry(assignment: ScheduleAssignment, shift_times: ShiftTimesMap) -> MergedOvertimeEntry:
    shift = ShiftName(assignment.shift)
    window = shift_times.get(shift) or defaults_for(shift)
    return MergedOvertimeEntry(
        id=f"schedule-{assignment.id or 'unknown'}",
        source="schedule",
        day_date=assignment.day_date,
        hours=shift_hours_for(shift_times, shift),
        description=f"{shift.value} shift ({window.start}-{window.end})",
        # Scheduled overtime comes from an assignment, not a review workflow.
        status=OvertimeStatus.APPROVED,
        shift=shift,
    )


def _independent_entry(record: IndependentOvertime) -> MergedOvertimeEntry:
    return MergedOvertimeEntry(
        id=f"independent-{record.id or 'unknown'}",
        source="manual",
        day_date=record.day_date,
        hours=float(record.hours),
        description=record.description or "-",
        status=OvertimeStatus(record.status),
    )


def merge_overtime_records(
    independent_records: Iterable[IndependentOvertime],
    schedule_assignments: Iterable[ScheduleAssignment],
    shift_times: ShiftTimesMap,
    *,
    directory: Mapping[str, EmployeeInfo] | None = None,
    monthly_stats: Iterable[OvertimeMonthlyStat] | None = None,
) -> list[EmployeeOvertimeGroup]:
    """Combine manual and schedule-derived overtime into one group per employee.

    Groups are created for every employee seen in the monthly statistics, the
    schedule overtime or the independent records, and returned ordered by
    ``total_hours`` descending (ties keep first-seen order). Records with an
    unrecognizable employee reference are skipped individually.
    """
    directory = directory or {}
    stats_by_employee = {stat.employee_id: stat for stat in monthly_stats or []}
    independent = _valid_independent_records(independent_records)
    scheduled = overtime_assignments_by_employee(schedule_assignments)

    groups: dict[str, EmployeeOvertimeGroup] = {}

    def _group_for(employee_id: str, ref: Any = None) -> EmployeeOvertimeGroup:
        group = groups.get(employee_id)
        if group is None:
            info = directory.get(employee_id)
            stat = stats_by_employee.get(employee_id)
            name = (
                (info.name if info else None)
                or employee_name_from_ref(ref)
                or (stat.name if stat else None)
                or fallback_employee_name(employee_id)
            )
            position = (info.position if info else None) or employee_position_from_ref(ref)
            group = EmployeeOvertimeGroup(employee_id=employee_id, name=name, position=position)
            groups[employee_id] = group
        return group

    for employee_id in stats_by_employee:
        _group_for(employee_id)
    for employee_id, assignments in scheduled.items():
        _group_for(employee_id, assignments[0].employee_ref)
    for employee_id, record in independent:
        _group_for(employee_id, record.employee_ref)

    for employee_id, record in independent:
        group = groups[employee_id]
        group.records.append(record)
        group.independent_hours += float(record.hours)

    for employee_id, assignments in scheduled.items():
        group = groups[employee_id]
        group.schedule_records.extend(assignments)
        group.schedule_hours += sum(shift_hours_for(shift_times, item.shift) for item in assignments)
        group.schedule_record_count = len(assignments)

    for employee_id, group in groups.items():
        stat = stats_by_employee.get(employee_id)
        if stat is not None:
            group.schedule_hours = reconcile_schedule_hours(
                independent_hours=group.independent_hours,
                local_schedule_hours=group.schedule_hours,
                stats_total_hours=stat.overtime_hours,
            )
            group.schedule_record_count = stat.schedule_record_count
        group.total_hours = group.independent_hours + group.schedule_hours

        entries = [_independent_entry(record) for record in group.records]
        entries.extend(_schedule_entry(item, shift_times) for item in group.schedule_records)
        entries.sort(key=lambda entry: entry.day_date)
        group.entries = entries
        group.latest_date = entries[-1].day_date if entries else None

    return sorted(groups.values(), key=lambda group: group.total_hours, reverse=True)


def compute_monthly_overtime_stats(
    independent_records: Iterable[IndependentOvertime],
    schedule_assignments: Iterable[ScheduleAssignment],
    shift_times: ShiftTimesMap,
    *,
    directory: Mapping[str, EmployeeInfo] | None = None,
) -> list[OvertimeMonthlyStat]:
    directory = directory or {}
    hours: dict[str, float] = {}
    names: dict[str, str] = {}
    independent_counts: dict[str, int] = {}
    schedule_counts: dict[str, int] = {}

    def _track(employee_id: str, ref: Any) -> None:
        if employee_id not in hours:
            hours[employee_id] = 0.0
            independent_counts[employee_id] = 0
            schedule_counts[employee_id] = 0
            info = directory.get(employee_id)
            names[employee_id] = (
                (info.name if info else None)
                or employee_name_from_ref(ref)
                or fallback_employee_name(employee_id)
            )

    for employee_id, record in _valid_independent_records(independent_records):
        if OvertimeStatus(record.status) != OvertimeStatus.APPROVED:
            continue
        _track(employee_id, record.employee_ref)
        hours[employee_id] += float(record.hours)
        independent_counts[employee_id] += 1

    for employee_id, assignments in overtime_assignments_by_employee(schedule_assignments).items():
        _track(employee_id, assignments[0].employee_ref)
        for assignment in assignments:
            hours[employee_id] += shift_hours_for(shift_times, assignment.shift)
            schedule_counts[employee_id] += 1

    stats = [
        OvertimeMonthlyStat(
            employee_id=employee_id,
            name=names[employee_id],
            overtime_hours=round_hours(total),
            independent_record_count=independent_counts[employee_id],
            schedule_record_count=schedule_counts[employee_id],
        )
        for employee_id, total in hours.items()
    ]
    stats.sort(key=lambda stat: stat.overtime_hours, reverse=True)
    return stats
