from datetime import date

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.audit import audit_request_action, request_actor_id
from app.db import get_db
from app.models import OvertimeRecord, OvertimeStatus
from app.schemas import (
    EmployeeOvertimeGroupRead,
    MergedOvertimeEntryRead,
    OvertimeCalculationRead,
    OvertimeCalculationRequest,
    OvertimeDecisionRequest,
    OvertimeMonthlyStatRead,
    OvertimeRecordCreate,
    OvertimeRecordRead,
    OvertimeRecordUpdate,
    OvertimeSummaryRead,
)
from app.services.hours_reports import build_monthly_overtime_stats, build_overtime_groups
from app.services.overtime_calculator import describe_overtime, estimate_overtime_hours
from app.services.overtime_merge import EmployeeOvertimeGroup
from app.services.overtime_records import (
    approve_overtime_record,
    create_overtime_record,
    delete_overtime_record,
    get_overtime_record_or_404,
    list_overtime_records,
    reject_overtime_record,
    summarize_all_overtime,
    summarize_employee_overtime,
    update_overtime_record,
)

router = APIRouter(tags=["overtime"])


def _record_read(record: OvertimeRecord) -> OvertimeRecordRead:
    return OvertimeRecordRead(
        id=record.id,
        employee_id=record.employee_id,
        employee_name=record.employee.name if record.employee is not None else None,
        day_date=record.day_date,
        hours=record.hours,
        description=record.description,
        status=record.status,
        approved_by=record.approved_by,
        approved_at=record.approved_at,
        approval_note=record.approval_note,
        created_by=record.created_by,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _group_read(group: EmployeeOvertimeGroup) -> EmployeeOvertimeGroupRead:
    return EmployeeOvertimeGroupRead(
        employee_id=group.employee_id,
        name=group.name,
        position=group.position,
        independent_hours=group.independent_hours,
        schedule_hours=group.schedule_hours,
        total_hours=group.total_hours,
        independent_record_count=len(group.records),
        schedule_record_count=group.schedule_record_count,
        latest_date=group.latest_date,
        entries=[
            MergedOvertimeEntryRead(
                id=entry.id,
                source=entry.source,
                day_date=entry.day_date,
                hours=entry.hours,
                description=entry.description,
                status=entry.status,
                shift=entry.shift,
            )
            for entry in group.entries
        ],
    )


def _record_details(record: OvertimeRecord) -> dict[str, object]:
    return {
        "employee_id": record.employee_id,
        "day_date": record.day_date.isoformat(),
        "hours": record.hours,
        "status": OvertimeStatus(record.status).value,
    }


@router.get("/api/overtime-records", response_model=list[OvertimeRecordRead])
def list_overtime_records_endpoint(
    employee_id: int | None = Query(default=None, ge=1),
    status_filter: OvertimeStatus | None = Query(default=None, alias="status"),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[OvertimeRecordRead]:
    records = list_overtime_records(
        db,
        employee_id=employee_id,
        status_filter=status_filter,
        start_date=start_date,
        end_date=end_date,
    )
    return [_record_read(record) for record in records]


@router.post("/api/overtime-records", response_model=OvertimeRecordRead, status_code=status.HTTP_201_CREATED)
def create_overtime_record_endpoint(
    payload: OvertimeRecordCreate,
    request: Request,
    db: Session = Depends(get_db),
) -> OvertimeRecordRead:
    record = create_overtime_record(db, payload, created_by=request_actor_id(request))
    audit_request_action(
        db,
        request,
        action="OVERTIME_RECORD_CREATED",
        entity_type="overtime_record",
        entity_id=record.id,
        details=_record_details(record),
    )
    return _record_read(get_overtime_record_or_404(db, record.id))


@router.patch("/api/overtime-records/{record_id}", response_model=OvertimeRecordRead)
def update_overtime_record_endpoint(
    record_id: int,
    payload: OvertimeRecordUpdate,
    request: Request,
    db: Session = Depends(get_db),
) -> OvertimeRecordRead:
    record = update_overtime_record(db, record_id, payload, actor_id=request_actor_id(request))
    audit_request_action(
        db,
        request,
        action="OVERTIME_RECORD_UPDATED",
        entity_type="overtime_record",
        entity_id=record.id,
        details=_record_details(record),
    )
    return _record_read(record)


@router.post("/api/overtime-records/{record_id}/approve", response_model=OvertimeRecordRead)
def approve_overtime_record_endpoint(
    record_id: int,
    request: Request,
    payload: OvertimeDecisionRequest | None = None,
    db: Session = Depends(get_db),
) -> OvertimeRecordRead:
    note = payload.approval_note if payload is not None else None
    record = approve_overtime_record(db, record_id, actor_id=request_actor_id(request), note=note)
    audit_request_action(
        db,
        request,
        action="OVERTIME_RECORD_APPROVED",
        entity_type="overtime_record",
        entity_id=record.id,
        details=_record_details(record),
    )
    return _record_read(record)


@router.post("/api/overtime-records/{record_id}/reject", response_model=OvertimeRecordRead)
def reject_overtime_record_endpoint(
    record_id: int,
    request: Request,
    payload: OvertimeDecisionRequest | None = None,
    db: Session = Depends(get_db),
) -> OvertimeRecordRead:
    note = payload.approval_note if payload is not None else None
    record = reject_overtime_record(db, record_id, actor_id=request_actor_id(request), note=note)
    audit_request_action(
        db,
        request,
        action="OVERTIME_RECORD_REJECTED",
        entity_type="overtime_record",
        entity_id=record.id,
        details=_record_details(record),
    )
    return _record_read(record)


@router.delete("/api/overtime-records/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_overtime_record_endpoint(
    record_id: int,
    request: Request,
    db: Session = Depends(get_db),
) -> None:
    delete_overtime_record(db, record_id)
    audit_request_action(
        db,
        request,
        action="OVERTIME_RECORD_DELETED",
        entity_type="overtime_record",
        entity_id=record_id,
    )


@router.post("/api/overtime/calculate", response_model=OvertimeCalculationRead)
def calculate_overtime_endpoint(
    payload: OvertimeCalculationRequest,
    db: Session = Depends(get_db),
) -> OvertimeCalculationRead:
    result = estimate_overtime_hours(db, payload.current_time)
    return OvertimeCalculationRead(**result.to_dict(), suggested_description=describe_overtime(result))


@router.get("/api/overtime/grouped", response_model=list[EmployeeOvertimeGroupRead])
def grouped_overtime_endpoint(
    year: int = Query(..., ge=1970),
    month: int = Query(..., ge=1, le=12),
    employee_id: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
) -> list[EmployeeOvertimeGroupRead]:
    groups = build_overtime_groups(db, year=year, month=month, employee_id=employee_id)
    return [_group_read(group) for group in groups]


@router.get("/api/overtime/monthly-stats", response_model=list[OvertimeMonthlyStatRead])
def monthly_overtime_stats_endpoint(
    year: int = Query(..., ge=1970),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db),
) -> list[OvertimeMonthlyStatRead]:
    stats = build_monthly_overtime_stats(db, year=year, month=month)
    return [
        OvertimeMonthlyStatRead(
            employee_id=stat.employee_id,
            name=stat.name,
            overtime_hours=stat.overtime_hours,
            independent_record_count=stat.independent_record_count,
            schedule_record_count=stat.schedule_record_count,
            total_record_count=stat.total_record_count,
        )
        for stat in stats
    ]


@router.get("/api/overtime/summary", response_model=list[OvertimeSummaryRead])
def overtime_summary_endpoint(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[OvertimeSummaryRead]:
    return [OvertimeSummaryRead(**item) for item in summarize_all_overtime(db, start_date=start_date, end_date=end_date)]


@router.get("/api/overtime/summary/{employee_id}", response_model=OvertimeSummaryRead)
def employee_overtime_summary_endpoint(
    employee_id: int,
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
) -> OvertimeSummaryRead:
    return OvertimeSummaryRead(
        **summarize_employee_overtime(db, employee_id, start_date=start_date, end_date=end_date)
    )
