from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from app.enums import ShiftName
from app.services.monthly_hours import EmployeeMonthlyHours, MonthlyHoursSummary
from app.services.overtime_merge import OvertimeMonthlyStat
from app.services.schedule_aggregation import DailyShiftBuckets
from app.services.shift_times import SHIFT_ORDER

HOURS_HEADERS = [
    "Employee ID",
    "Name",
    "Regular Hours",
    "Overtime Hours",
    "Personal Leave Hours",
    "Sick Leave Hours",
    "Sick Occurrences",
]

OVERTIME_HEADERS = [
    "Employee ID",
    "Name",
    "Overtime Hours",
    "Manual Records",
    "Schedule Records",
    "Total Records",
]

DAILY_HEADERS = ["Date", "Shift", "Shift Hours", "Regular", "Overtime", "Personal Leave", "Sick Leave"]

HEADER_FILL = PatternFill(fill_type="solid", fgColor="0B4F73")
META_LABEL_FILL = PatternFill(fill_type="solid", fgColor="EAF4F9")
META_VALUE_FILL = PatternFill(fill_type="solid", fgColor="F8FCFF")
ZEBRA_FILL = PatternFill(fill_type="solid", fgColor="F7FBFE")
SUCCESS_FILL = PatternFill(fill_type="solid", fgColor="E6F4EA")
SUMMARY_FILL = PatternFill(fill_type="solid", fgColor="E9F1F7")

HEADER_FONT = Font(bold=True, color="FFFFFF")
BOLD_FONT = Font(bold=True, color="0F172A")
TITLE_FONT = Font(bold=True, color="0B4F73", size=14)
MUTED_FONT = Font(color="334155")

THIN_SIDE = Side(style="thin", color="D5E2EC")
THIN_BORDER = Border(left=THIN_SIDE, right=THIN_SIDE, top=THIN_SIDE, bottom=THIN_SIDE)


def _style_header(ws: Worksheet, row: int = 1) -> None:
    for cell in ws[row]:
        if cell.value is None:
            continue
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        cell.border = THIN_BORDER


def _auto_width(ws: Worksheet) -> None:
    for column_cells in ws.iter_cols(min_row=1, max_row=ws.max_row, min_col=1, max_col=ws.max_column):
        max_len = 0
        col_letter = get_column_letter(column_cells[0].column)
        for cell in column_cells:
            if cell.coordinate in ws.merged_cells:
                continue
            value = "" if cell.value is None else str(cell.value)
            max_len = max(max_len, len(value))
        ws.column_dimensions[col_letter].width = min(max_len + 2, 45)


def _merge_title(ws: Worksheet, row: int, text: str, *, width: int) -> None:
    ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=width)
    cell = ws.cell(row=row, column=1, value=text)
    cell.font = TITLE_FONT
    cell.alignment = Alignment(horizontal="left", vertical="center")


def _style_metadata_rows(ws: Worksheet, *, start_row: int, end_row: int) -> None:
    for row_idx in range(start_row, end_row + 1):
        label_cell = ws.cell(row=row_idx, column=1)
        value_cell = ws.cell(row=row_idx, column=2)
        label_cell.font = BOLD_FONT
        label_cell.fill = META_LABEL_FILL
        label_cell.alignment = Alignment(horizontal="left", vertical="center")
        label_cell.border = THIN_BORDER

        value_cell.font = MUTED_FONT
        value_cell.fill = META_VALUE_FILL
        value_cell.alignment = Alignment(horizontal="left", vertical="center")
        value_cell.border = THIN_BORDER


def _style_table_region(
    ws: Worksheet,
    *,
    header_row: int,
    data_start_row: int,
    data_end_row: int,
    width: int,
    highlight_col: int | None = None,
) -> None:
    ws.freeze_panes = f"A{header_row + 1}"
    if data_end_row < data_start_row:
        return

    ws.auto_filter.ref = f"A{header_row}:{get_column_letter(width)}{data_end_row}"
    for row_idx in range(data_start_row, data_end_row + 1):
        zebra = row_idx % 2 == 0
        for col_idx in range(1, width + 1):
            cell = ws.cell(row=row_idx, column=col_idx)
            cell.border = THIN_BORDER
            if zebra:
                cell.fill = ZEBRA_FILL
            if isinstance(cell.value, (int, float)):
                cell.alignment = Alignment(horizontal="center", vertical="center")
            else:
                cell.alignment = Alignment(horizontal="left", vertical="center")

        if highlight_col is not None:
            highlight = ws.cell(row=row_idx, column=highlight_col)
            if highlight.value not in {None, "", 0, 0.0}:
                highlight.fill = SUCCESS_FILL
                highlight.font = Font(bold=True, color="166534")


def _append_hours_sheet(
    ws: Worksheet,
    *,
    year: int,
    month: int,
    rows: list[EmployeeMonthlyHours],
    summary: MonthlyHoursSummary,
) -> None:
    width = len(HOURS_HEADERS)
    _merge_title(ws, 1, f"Monthly Hours {year}-{month:02d}", width=width)
    ws.append(["Period", f"{year}-{month:02d}"])
    ws.append(["Employees", len(rows)])
    _style_metadata_rows(ws, start_row=2, end_row=3)

    ws.append(HOURS_HEADERS)
    header_row = ws.max_row
    _style_header(ws, header_row)

    for row in rows:
        ws.append(
            [
                row.employee_id,
                row.name,
                float(row.hours),
                float(row.overtime_hours),
                float(row.personal_leave_hours),
                float(row.sick_leave_hours),
                row.sick_occurrences,
            ]
        )
    data_end_row = ws.max_row
    _style_table_region(
        ws,
        header_row=header_row,
        data_start_row=header_row + 1,
        data_end_row=data_end_row,
        width=width,
        highlight_col=4,
    )

    summary_start = data_end_row + 2
    ws.cell(row=summary_start, column=1, value="Total Regular Hours")
    ws.cell(row=summary_start, column=2, value=float(summary.total_regular_hours))
    ws.append(["Total Overtime Hours", float(summary.total_overtime_hours)])
    ws.append(["Total Personal Leave Hours", float(summary.total_personal_leave_hours)])
    ws.append(["Total Sick Leave Hours", float(summary.total_sick_leave_hours)])
    ws.append(["Grand Total Hours", float(summary.grand_total_hours)])
    _style_metadata_rows(ws, start_row=summary_start, end_row=ws.max_row)
    for row_idx in range(summary_start, ws.max_row + 1):
        ws.cell(row=row_idx, column=2).fill = SUMMARY_FILL

    _auto_width(ws)


def _append_overtime_sheet(ws: Worksheet, stats: Iterable[OvertimeMonthlyStat]) -> None:
    ws.append(OVERTIME_HEADERS)
    _style_header(ws)
    for stat in stats:
        ws.append(
            [
                stat.employee_id,
                stat.name,
                stat.overtime_hours,
                stat.independent_record_count,
                stat.schedule_record_count,
                stat.total_record_count,
            ]
        )
    _style_table_region(
        ws,
        header_row=1,
        data_start_row=2,
        data_end_row=ws.max_row,
        width=len(OVERTIME_HEADERS),
        highlight_col=3,
    )
    _auto_width(ws)


def _names(assignments) -> str:
    labels = [item.employee_name or item.employee_id or "-" for item in assignments]
    return ", ".join(labels) if labels else "-"


def _append_daily_sheet(ws: Worksheet, buckets: DailyShiftBuckets) -> None:
    ws.append(DAILY_HEADERS)
    _style_header(ws)
    for day_date in sorted(buckets):
        for shift in SHIFT_ORDER:
            bucket = buckets[day_date].get(shift)
            if bucket is None or not bucket.assignments:
                continue
            ws.append(
                [
                    day_date.isoformat(),
                    ShiftName(shift).value,
                    bucket.shift_hours,
                    _names(bucket.regular),
                    _names(bucket.overtime),
                    _names(bucket.personal),
                    _names(bucket.sick),
                ]
            )
    _style_table_region(
        ws,
        header_row=1,
        data_start_row=2,
        data_end_row=ws.max_row,
        width=len(DAILY_HEADERS),
    )
    _auto_width(ws)


def build_monthly_hours_xlsx_bytes(
    *,
    year: int,
    month: int,
    rows: list[EmployeeMonthlyHours],
    summary: MonthlyHoursSummary,
    overtime_stats: Iterable[OvertimeMonthlyStat] = (),
    buckets: DailyShiftBuckets | None = None,
) -> bytes:
    wb = Workbook()
    hours_ws = wb.active
    hours_ws.title = "Monthly Hours"
    _append_hours_sheet(hours_ws, year=year, month=month, rows=rows, summary=summary)

    _append_overtime_sheet(wb.create_sheet("Overtime"), overtime_stats)

    if buckets is not None:
        _append_daily_sheet(wb.create_sheet("Daily Shifts"), buckets)

    stream = BytesIO()
    wb.save(stream)
    return stream.getvalue()


def export_filename(year: int, month: int, *, today: date | None = None) -> str:
    stamp = (today or date.today()).strftime("%Y%m%d")
    return f"monthly-hours-{year}-{month:02d}-{stamp}.xlsx"
