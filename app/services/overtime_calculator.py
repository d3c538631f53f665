from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.enums import ShiftName
from app.services.shift_configs import load_shift_times
from app.services.shift_times import (
    SHIFT_ORDER,
    ShiftTimesMap,
    defaults_for,
    minutes_to_hhmm,
    time_to_minutes,
)
from app.settings import get_business_timezone

logger = logging.getLogger("app.overtime_calculator")

FALLBACK_SHIFT = ShiftName.EVENING


@dataclass(frozen=True)
class OvertimeCalculation:
    hours: float
    minutes: int
    nearest_shift: ShiftName
    shift_end_time: str
    current_time: str
    calculation_details: str

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["nearest_shift"] = self.nearest_shift.value
        return payload


def current_hhmm(now: datetime | None = None) -> str:
    local_now = now or datetime.now(get_business_timezone())
    return f"{local_now.hour:02d}:{local_now.minute:02d}"


def _fallback_result(current_time: str, reason: str) -> OvertimeCalculation:
    return OvertimeCalculation(
        hours=0.0,
        minutes=0,
        nearest_shift=FALLBACK_SHIFT,
        shift_end_time="",
        current_time=current_time,
        calculation_details=f"Shift times unavailable ({reason}); enter overtime hours manually.",
    )


def find_nearest_ended_shift(input_minutes: int, shift_times: ShiftTimesMap) -> ShiftName:
    """Shift whose end is the latest one not after ``input_minutes``.

    Shifts missing from the map use their default window. Before the first
    end of the day the morning shift is used.
    """
    candidate: ShiftName | None = None
    candidate_end = -1
    for shift in SHIFT_ORDER:
        window = shift_times.get(shift) or defaults_for(shift)
        end_minutes = time_to_minutes(window.end)
        if end_minutes <= input_minutes and end_minutes > candidate_end:
            candidate = shift
            candidate_end = end_minutes
    return candidate or ShiftName.MORNING


def calculate_overtime_hours(
    current_time: str | None = None,
    shift_times: ShiftTimesMap | None = None,
    *,
    now: datetime | None = None,
) -> OvertimeCalculation:
    """Estimate overtime worked after the most recent shift end.

    ``current_time`` is ``HH:MM``; when omitted the wall clock in the business
    timezone is used. A malformed ``current_time`` raises ``InvalidTimeFormat``;
    a missing shift map yields a zero-hour result instead of an error, and a
    shift absent from a partial map falls back to its default window.
    """
    time_input = current_time if current_time is not None else current_hhmm(now)
    input_minutes = time_to_minutes(time_input)

    if not shift_times:
        logger.warning("overtime_calculation_fallback", extra={"current_time": time_input})
        return _fallback_result(time_input, "no shift configuration")

    nearest_shift = find_nearest_ended_shift(input_minutes, shift_times)
    window = shift_times.get(nearest_shift) or defaults_for(nearest_shift)
    end_minutes = time_to_minutes(window.end)

    overtime_minutes = max(0, input_minutes - end_minutes)
    hours = round(overtime_minutes / 60, 2)

    if overtime_minutes == 0:
        details = (
            f"Time {time_input} is not after the {nearest_shift.value} shift "
            f"({window.start}-{window.end}) end at {window.end}; no overtime (0 hours)."
        )
    else:
        details = (
            f"Time {time_input} is {overtime_minutes} minutes after the {nearest_shift.value} shift "
            f"({window.start}-{window.end}) ended at {window.end}; overtime {hours} hours."
        )

    return OvertimeCalculation(
        hours=hours,
        minutes=overtime_minutes,
        nearest_shift=nearest_shift,
        shift_end_time=window.end,
        current_time=minutes_to_hhmm(input_minutes),
        calculation_details=details,
    )


def estimate_overtime_hours(
    db: Session,
    current_time: str | None = None,
    *,
    now: datetime | None = None,
) -> OvertimeCalculation:
    try:
        shift_times = load_shift_times(db)
    except SQLAlchemyError:
        logger.exception("overtime_shift_times_unavailable")
        shift_times = None
    return calculate_overtime_hours(current_time, shift_times, now=now)


def describe_overtime(result: OvertimeCalculation) -> str:
    if not result.shift_end_time:
        return f"Overtime until {result.current_time}"
    return f"Overtime until {result.current_time} (after {result.nearest_shift.value} shift, {result.hours} h)"
