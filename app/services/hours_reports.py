from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session

from app.models import LeaveType, OvertimeStatus
from app.services.employees import build_employee_directory, list_employees
from app.services.monthly_hours import (
    EmployeeMonthlyHours,
    MonthlyHoursSummary,
    calculate_monthly_hours,
    month_bounds,
    summarize_monthly_hours,
)
from app.services.overtime_merge import (
    EmployeeOvertimeGroup,
    OvertimeMonthlyStat,
    compute_monthly_overtime_stats,
    merge_overtime_records,
)
from app.services.overtime_records import list_overtime_records, record_to_independent
from app.services.schedule_aggregation import DailyShiftBuckets, aggregate_schedules
from app.services.schedules import list_schedule_assignments
from app.services.shift_configs import load_shift_times

logger = logging.getLogger("app.hours_reports")


@dataclass(frozen=True)
class MonthlyHoursReport:
    year: int
    month: int
    rows: list[EmployeeMonthlyHours]
    summary: MonthlyHoursSummary


def _employee_directory(db: Session):
    return build_employee_directory(list_employees(db, include_inactive=True))


def build_daily_buckets(db: Session, *, start_date: date, end_date: date) -> DailyShiftBuckets:
    assignments = list_schedule_assignments(db, start_date=start_date, end_date=end_date)
    return aggregate_schedules(assignments, load_shift_times(db))


def build_monthly_hours_report(db: Session, *, year: int, month: int) -> MonthlyHoursReport:
    start_date, end_date = month_bounds(year, month)
    buckets = build_daily_buckets(db, start_date=start_date, end_date=end_date)
    rows = calculate_monthly_hours(buckets, year=year, month=month, directory=_employee_directory(db))
    summary = summarize_monthly_hours(rows)
    logger.info(
        "monthly_hours_report_built",
        extra={"year": year, "month": month, "employee_count": len(rows), "day_count": len(buckets)},
    )
    return MonthlyHoursReport(year=year, month=month, rows=rows, summary=summary)


def build_monthly_overtime_stats(db: Session, *, year: int, month: int) -> list[OvertimeMonthlyStat]:
    start_date, end_date = month_bounds(year, month)
    records = list_overtime_records(
        db,
        status_filter=OvertimeStatus.APPROVED,
        start_date=start_date,
        end_date=end_date,
    )
    assignments = list_schedule_assignments(
        db,
        start_date=start_date,
        end_date=end_date,
        leave_type=LeaveType.OVERTIME,
    )
    return compute_monthly_overtime_stats(
        [record_to_independent(record) for record in records],
        assignments,
        load_shift_times(db),
        directory=_employee_directory(db),
    )


def build_overtime_groups(
    db: Session,
    *,
    year: int,
    month: int,
    employee_id: int | None = None,
    include_monthly_stats: bool = True,
) -> list[EmployeeOvertimeGroup]:
    start_date, end_date = month_bounds(year, month)
    records = list_overtime_records(db, employee_id=employee_id, start_date=start_date, end_date=end_date)
    assignments = list_schedule_assignments(
        db,
        start_date=start_date,
        end_date=end_date,
        leave_type=LeaveType.OVERTIME,
    )
    if employee_id is not None:
        assignments = [item for item in assignments if item.employee_id == str(employee_id)]

    stats = build_monthly_overtime_stats(db, year=year, month=month) if include_monthly_stats else None
    if stats is not None and employee_id is not None:
        stats = [stat for stat in stats if stat.employee_id == str(employee_id)]

    # The stats count approved manual hours only, while the merge subtracts every
    # listed manual record, so pending hours lower the reconciled schedule_hours.
    # total_hours can then be less than the sum of the listed entries.
    return merge_overtime_records(
        [record_to_independent(record) for record in records],
        assignments,
        load_shift_times(db),
        directory=_employee_directory(db),
        monthly_stats=stats,
    )
