from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import NamedTuple, Protocol

from app.enums import ShiftName
from app.errors import InvalidTimeFormat, InvalidTimeRange

logger = logging.getLogger("app.shift_times")

TIME_PATTERN = re.compile(r"([0-1]?[0-9]|2[0-3]):[0-5][0-9]")

SHIFT_ORDER: tuple[ShiftName, ...] = (ShiftName.MORNING, ShiftName.AFTERNOON, ShiftName.EVENING)


class ShiftWindow(NamedTuple):
    start: str
    end: str


ShiftTimesMap = dict[ShiftName, ShiftWindow]


class ShiftConfigLike(Protocol):
    shift: ShiftName
    start_time: str
    end_time: str
    is_active: bool


_DEFAULT_WINDOWS: dict[ShiftName, ShiftWindow] = {
    ShiftName.MORNING: ShiftWindow("08:30", "12:00"),
    ShiftName.AFTERNOON: ShiftWindow("15:00", "18:00"),
    ShiftName.EVENING: ShiftWindow("19:00", "20:30"),
}


def defaults_for(shift: ShiftName) -> ShiftWindow:
    return _DEFAULT_WINDOWS[ShiftName(shift)]


def default_shift_times() -> ShiftTimesMap:
    return {shift: defaults_for(shift) for shift in SHIFT_ORDER}


def is_valid_time(value: object) -> bool:
    return isinstance(value, str) and TIME_PATTERN.fullmatch(value) is not None


def time_to_minutes(value: str) -> int:
    if not is_valid_time(value):
        raise InvalidTimeFormat(value)
    hour_str, minute_str = value.split(":")
    return int(hour_str) * 60 + int(minute_str)


def minutes_to_hhmm(minutes: int) -> str:
    value = max(0, int(minutes)) % (24 * 60)
    return f"{value // 60:02d}:{value % 60:02d}"


def compute_shift_hours(start: str, end: str) -> float:
    """Length of a shift window in hours, unrounded."""
    start_minutes = time_to_minutes(start)
    end_minutes = time_to_minutes(end)
    return (end_minutes - start_minutes) / 60


def is_valid_range(start: str, end: str) -> bool:
    if not is_valid_time(start) or not is_valid_time(end):
        return False
    return time_to_minutes(start) < time_to_minutes(end)


def ensure_valid_range(start: str, end: str) -> None:
    # Same-day windows only; an end before the start is rejected, never wrapped past midnight.
    if time_to_minutes(start) >= time_to_minutes(end):
        raise InvalidTimeRange(start, end)


def get_effective_times(shift: ShiftName, configs: Iterable[ShiftConfigLike] = ()) -> ShiftWindow:
    """Return the active configured window for ``shift``, else the built-in default.

    An active config whose stored window is malformed is ignored with a
    warning, so callers always get a usable window.
    """
    shift = ShiftName(shift)
    for config in configs:
        if ShiftName(config.shift) != shift or not config.is_active:
            continue
        if is_valid_range(config.start_time, config.end_time):
            return ShiftWindow(config.start_time, config.end_time)
        logger.warning(
            "shift_config_invalid_window",
            extra={
                "shift": shift.value,
                "start_time": config.start_time,
                "end_time": config.end_time,
            },
        )
    return defaults_for(shift)


def build_shift_times_map(configs: Iterable[ShiftConfigLike] = ()) -> ShiftTimesMap:
    config_list = list(configs)
    shift_times: ShiftTimesMap = {}
    for shift in SHIFT_ORDER:
        shift_times[shift] = get_effective_times(shift, config_list)
    return shift_times


def shift_hours_for(shift_times: ShiftTimesMap, shift: ShiftName) -> float:
    window = shift_times.get(ShiftName(shift)) or defaults_for(shift)
    return compute_shift_hours(window.start, window.end)
