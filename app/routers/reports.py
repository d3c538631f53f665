from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from app.db import get_db
from app.schemas import EmployeeMonthlyHoursRead, MonthlyHoursReportRead, MonthlyHoursSummaryRead
from app.services.exports import build_monthly_hours_xlsx_bytes, export_filename
from app.services.hours_reports import build_daily_buckets, build_monthly_hours_report, build_monthly_overtime_stats
from app.services.monthly_hours import month_bounds

router = APIRouter(tags=["reports"])
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/api/reports/monthly-hours", response_model=MonthlyHoursReportRead)
def monthly_hours_report_endpoint(
    year: int = Query(..., ge=1970),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db),
) -> MonthlyHoursReportRead:
    report = build_monthly_hours_report(db, year=year, month=month)
    return MonthlyHoursReportRead(
        year=report.year,
        month=report.month,
        rows=[EmployeeMonthlyHoursRead(**row.to_dict()) for row in report.rows],
        summary=MonthlyHoursSummaryRead(
            total_regular_hours=report.summary.total_regular_hours,
            total_overtime_hours=report.summary.total_overtime_hours,
            total_personal_leave_hours=report.summary.total_personal_leave_hours,
            total_sick_leave_hours=report.summary.total_sick_leave_hours,
            grand_total_hours=report.summary.grand_total_hours,
        ),
    )


@router.get("/api/reports/monthly-hours.xlsx")
def monthly_hours_xlsx_endpoint(
    request: Request,
    year: int = Query(..., ge=1970),
    month: int = Query(..., ge=1, le=12),
    include_daily_sheet: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> Response:
    report = build_monthly_hours_report(db, year=year, month=month)
    buckets = None
    if include_daily_sheet:
        start_date, end_date = month_bounds(year, month)
        buckets = build_daily_buckets(db, start_date=start_date, end_date=end_date)

    payload = build_monthly_hours_xlsx_bytes(
        year=year,
        month=month,
        rows=report.rows,
        summary=report.summary,
        overtime_stats=build_monthly_overtime_stats(db, year=year, month=month),
        buckets=buckets,
    )
    request.state.export_rows = len(report.rows)
    return Response(
        content=payload,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(year, month)}"',
        },
    )
