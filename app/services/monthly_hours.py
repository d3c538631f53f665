from __future__ import annotations

from calendar import monthrange
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from app.services.employee_refs import EmployeeInfo, fallback_employee_name
from app.services.schedule_aggregation import DailyShiftBuckets, fold_employee_hours


@dataclass(frozen=True)
class EmployeeMonthlyHours:
    employee_id: str
    name: str
    hours: str
    overtime_hours: str
    personal_leave_hours: str
    sick_leave_hours: str
    sick_occurrences: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MonthlyHoursSummary:
    total_regular_hours: str
    total_overtime_hours: str
    total_personal_leave_hours: str
    total_sick_leave_hours: str
    grand_total_hours: str


def round_hours(value: float, places: int = 1) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def format_hours(value: float) -> str:
    """One decimal digit, half-up, as display text (``3.5``, ``0.0``)."""
    return f"{Decimal(repr(float(value))).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)}"


def month_bounds(year: int, month: int) -> tuple[date, date]:
    days_in_month = monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, days_in_month)


def _buckets_in_month(buckets: DailyShiftBuckets, year: int | None, month: int | None) -> DailyShiftBuckets:
    if year is None or month is None:
        return buckets
    start, end = month_bounds(year, month)
    return {day_date: shifts for day_date, shifts in buckets.items() if start <= day_date <= end}


def calculate_monthly_hours(
    buckets: DailyShiftBuckets,
    *,
    year: int | None = None,
    month: int | None = None,
    directory: Mapping[str, EmployeeInfo] | None = None,
) -> list[EmployeeMonthlyHours]:
    names = {employee_id: info.name for employee_id, info in (directory or {}).items()}
    totals = fold_employee_hours(_buckets_in_month(buckets, year, month), names=names)

    rows = [
        EmployeeMonthlyHours(
            employee_id=employee_id,
            name=entry.name or fallback_employee_name(employee_id),
            hours=format_hours(entry.regular_hours),
            overtime_hours=format_hours(entry.overtime_hours),
            personal_leave_hours=format_hours(entry.personal_leave_hours),
            sick_leave_hours=format_hours(entry.sick_leave_hours),
            sick_occurrences=entry.sick_occurrences,
        )
        for employee_id, entry in totals.items()
    ]
    # list.sort is stable: equal hours keep first-seen order.
    rows.sort(key=lambda row: float(row.hours), reverse=True)
    return rows


def summarize_monthly_hours(rows: Iterable[EmployeeMonthlyHours]) -> MonthlyHoursSummary:
    regular = overtime = personal = sick = Decimal("0")
    for row in rows:
        regular += Decimal(row.hours)
        overtime += Decimal(row.overtime_hours)
        personal += Decimal(row.personal_leave_hours)
        sick += Decimal(row.sick_leave_hours)
    return MonthlyHoursSummary(
        total_regular_hours=f"{regular:.1f}",
        total_overtime_hours=f"{overtime:.1f}",
        total_personal_leave_hours=f"{personal:.1f}",
        total_sick_leave_hours=f"{sick:.1f}",
        grand_total_hours=f"{regular + overtime + personal + sick:.1f}",
    )
