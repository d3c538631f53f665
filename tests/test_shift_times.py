from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import subprocess
import sys
import unittest

from app.enums import ShiftName
from app.errors import InvalidTimeFormat, InvalidTimeRange
from app.services.shift_times import (
    ShiftWindow,
    build_shift_times_map,
    compute_shift_hours,
    default_shift_times,
    ensure_valid_range,
    get_effective_times,
    is_valid_range,
    is_valid_time,
    shift_hours_for,
    time_to_minutes,
)


@dataclass
class _Config:
    shift: ShiftName
    start_time: str
    end_time: str
    is_active: bool = True


class ShiftTimesTests(unittest.TestCase):
    def test_compute_shift_hours_for_defaults(self) -> None:
        self.assertEqual(compute_shift_hours("08:30", "12:00"), 3.5)
        self.assertEqual(compute_shift_hours("15:00", "18:00"), 3.0)
        self.assertEqual(compute_shift_hours("19:00", "20:30"), 1.5)

    def test_single_digit_hour_is_accepted(self) -> None:
        self.assertTrue(is_valid_time("8:30"))
        self.assertEqual(time_to_minutes("8:30"), 510)

    def test_malformed_times_raise_invalid_time_format(self) -> None:
        for value in ("25:00", "9:5", "", "12:60", "noon"):
            with self.subTest(value=value):
                with self.assertRaises(InvalidTimeFormat):
                    compute_shift_hours(value, "12:00")

    def test_range_must_be_increasing(self) -> None:
        ensure_valid_range("08:30", "12:00")
        with self.assertRaises(InvalidTimeRange):
            ensure_valid_range("12:00", "12:00")
        with self.assertRaises(InvalidTimeRange):
            ensure_valid_range("22:00", "02:00")

    def test_is_valid_range(self) -> None:
        self.assertTrue(is_valid_range("08:30", "12:00"))
        self.assertTrue(is_valid_range("8:30", "12:00"))
        self.assertFalse(is_valid_range("12:00", "12:00"))
        self.assertFalse(is_valid_range("20:30", "19:00"))
        for start, end in (("25:00", "26:00"), ("9:5", "12:00"), ("08:30", "noon"), ("", "")):
            with self.subTest(start=start, end=end):
                self.assertFalse(is_valid_range(start, end))

    def test_missing_config_falls_back_to_defaults(self) -> None:
        self.assertEqual(get_effective_times(ShiftName.MORNING), ShiftWindow("08:30", "12:00"))
        self.assertEqual(build_shift_times_map([]), default_shift_times())

    def test_active_config_overrides_default(self) -> None:
        configs = [_Config(ShiftName.AFTERNOON, "14:00", "18:30")]
        shift_times = build_shift_times_map(configs)

        self.assertEqual(shift_times[ShiftName.AFTERNOON], ShiftWindow("14:00", "18:30"))
        self.assertEqual(shift_times[ShiftName.MORNING], ShiftWindow("08:30", "12:00"))
        self.assertEqual(shift_hours_for(shift_times, ShiftName.AFTERNOON), 4.5)

    def test_inactive_or_invalid_config_is_ignored(self) -> None:
        configs = [
            _Config(ShiftName.MORNING, "07:00", "11:00", is_active=False),
            _Config(ShiftName.EVENING, "21:00", "19:00"),
        ]
        with self.assertLogs("app.shift_times", level="WARNING") as logs:
            shift_times = build_shift_times_map(configs)

        self.assertEqual(shift_times[ShiftName.MORNING], ShiftWindow("08:30", "12:00"))
        self.assertEqual(shift_times[ShiftName.EVENING], ShiftWindow("19:00", "20:30"))
        self.assertIn("shift_config_invalid_window", logs.output[0])

    def test_core_imports_without_database_layer(self) -> None:
        code = (
            "import sys\n"
            "import app.services.overtime_merge, app.services.monthly_hours\n"
            "assert 'app.db' not in sys.modules, 'app.db'\n"
            "assert 'sqlalchemy' not in sys.modules, 'sqlalchemy'\n"
        )
        completed = subprocess.run(
            [sys.executable, "-c", code],
            cwd=Path(__file__).resolve().parents[1],
            capture_output=True,
            text=True,
        )
        self.assertEqual(completed.returncode, 0, completed.stderr)

    def test_models_reexport_enums(self) -> None:
        from app import enums, models

        self.assertIs(models.ShiftName, enums.ShiftName)
        self.assertIs(models.LeaveType, enums.LeaveType)
        self.assertIs(models.OvertimeStatus, enums.OvertimeStatus)


if __name__ == "__main__":
    unittest.main()
