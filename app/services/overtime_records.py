from __future__ import annotations

from datetime import date, datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from app.errors import ApiError
from app.models import Employee, OvertimeRecord, OvertimeStatus
from app.schemas import OvertimeRecordCreate, OvertimeRecordUpdate
from app.services.employees import employee_ref, get_employee_or_404
from app.services.overtime_merge import IndependentOvertime

_DECISION_STATUSES = {OvertimeStatus.APPROVED, OvertimeStatus.REJECTED}


def record_to_independent(record: OvertimeRecord) -> IndependentOvertime:
    ref = employee_ref(record.employee) if record.employee is not None else str(record.employee_id)
    return IndependentOvertime(
        employee_ref=ref,
        day_date=record.day_date,
        hours=float(record.hours),
        status=OvertimeStatus(record.status),
        description=record.description,
        id=str(record.id),
    )


def list_overtime_records(
    db: Session,
    *,
    employee_id: int | None = None,
    status_filter: OvertimeStatus | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[OvertimeRecord]:
    if start_date is not None and end_date is not None and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="start_date must be less than or equal to end_date",
        )

    stmt = (
        select(OvertimeRecord)
        .options(selectinload(OvertimeRecord.employee))
        .order_by(OvertimeRecord.day_date.desc(), OvertimeRecord.id.desc())
    )
    if employee_id is not None:
        stmt = stmt.where(OvertimeRecord.employee_id == employee_id)
    if status_filter is not None:
        stmt = stmt.where(OvertimeRecord.status == status_filter)
    if start_date is not None:
        stmt = stmt.where(OvertimeRecord.day_date >= start_date)
    if end_date is not None:
        stmt = stmt.where(OvertimeRecord.day_date <= end_date)
    return list(db.scalars(stmt).all())


def get_overtime_record_or_404(db: Session, record_id: int) -> OvertimeRecord:
    record = db.get(OvertimeRecord, record_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Overtime record not found")
    return record


def _stamp_decision(record: OvertimeRecord, decision: OvertimeStatus, *, actor_id: str, note: str | None) -> None:
    record.status = decision
    record.approved_by = actor_id
    record.approved_at = datetime.now(timezone.utc)
    if note is not None:
        record.approval_note = note


def create_overtime_record(db: Session, payload: OvertimeRecordCreate, *, created_by: str) -> OvertimeRecord:
    get_employee_or_404(db, payload.employee_id)

    record = OvertimeRecord(
        employee_id=payload.employee_id,
        day_date=payload.day_date,
        hours=payload.hours,
        description=payload.description,
        status=OvertimeStatus.PENDING,
        created_by=created_by,
    )
    if payload.status in _DECISION_STATUSES:
        _stamp_decision(record, payload.status, actor_id=created_by, note=payload.approval_note)

    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def _ensure_pending(record: OvertimeRecord) -> None:
    if OvertimeStatus(record.status) != OvertimeStatus.PENDING:
        raise ApiError(
            status_code=status.HTTP_409_CONFLICT,
            code="OVERTIME_NOT_PENDING",
            message=f"Overtime record is already {OvertimeStatus(record.status).value}",
        )


def update_overtime_record(
    db: Session,
    record_id: int,
    payload: OvertimeRecordUpdate,
    *,
    actor_id: str,
) -> OvertimeRecord:
    record = get_overtime_record_or_404(db, record_id)
    _ensure_pending(record)

    if payload.day_date is not None:
        record.day_date = payload.day_date
    if payload.hours is not None:
        record.hours = payload.hours
    if payload.description is not None:
        record.description = payload.description
    if payload.status is not None and payload.status in _DECISION_STATUSES:
        _stamp_decision(record, payload.status, actor_id=actor_id, note=payload.approval_note)
    elif payload.approval_note is not None:
        record.approval_note = payload.approval_note

    db.commit()
    db.refresh(record)
    return record


def decide_overtime_record(
    db: Session,
    record_id: int,
    decision: OvertimeStatus,
    *,
    actor_id: str,
    note: str | None = None,
) -> OvertimeRecord:
    if decision not in _DECISION_STATUSES:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Invalid overtime decision")
    record = get_overtime_record_or_404(db, record_id)
    _ensure_pending(record)
    _stamp_decision(record, decision, actor_id=actor_id, note=note)
    db.commit()
    db.refresh(record)
    return record


def approve_overtime_record(db: Session, record_id: int, *, actor_id: str, note: str | None = None) -> OvertimeRecord:
    return decide_overtime_record(db, record_id, OvertimeStatus.APPROVED, actor_id=actor_id, note=note)


def reject_overtime_record(db: Session, record_id: int, *, actor_id: str, note: str | None = None) -> OvertimeRecord:
    return decide_overtime_record(db, record_id, OvertimeStatus.REJECTED, actor_id=actor_id, note=note)


def delete_overtime_record(db: Session, record_id: int) -> None:
    record = get_overtime_record_or_404(db, record_id)
    db.delete(record)
    db.commit()


def _approved_totals_stmt():
    return (
        select(
            OvertimeRecord.employee_id,
            Employee.name,
            func.coalesce(func.sum(OvertimeRecord.hours), 0.0),
            func.count(OvertimeRecord.id),
        )
        .join(Employee, Employee.id == OvertimeRecord.employee_id)
        .where(OvertimeRecord.status == OvertimeStatus.APPROVED)
        .group_by(OvertimeRecord.employee_id, Employee.name)
    )


def summarize_employee_overtime(
    db: Session,
    employee_id: int,
    *,
    start_date: date | None = None,
    end_date: date | None = None,
) -> dict[str, object]:
    employee = get_employee_or_404(db, employee_id)
    stmt = _approved_totals_stmt().where(OvertimeRecord.employee_id == employee_id)
    if start_date is not None:
        stmt = stmt.where(OvertimeRecord.day_date >= start_date)
    if end_date is not None:
        stmt = stmt.where(OvertimeRecord.day_date <= end_date)
    row = db.execute(stmt).first()
    total_hours, record_count = (float(row[2]), int(row[3])) if row is not None else (0.0, 0)
    return {
        "employee_id": employee.id,
        "employee_name": employee.name,
        "total_hours": total_hours,
        "record_count": record_count,
    }


def summarize_all_overtime(
    db: Session,
    *,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[dict[str, object]]:
    stmt = _approved_totals_stmt()
    if start_date is not None:
        stmt = stmt.where(OvertimeRecord.day_date >= start_date)
    if end_date is not None:
        stmt = stmt.where(OvertimeRecord.day_date <= end_date)

    summaries = [
        {
            "employee_id": employee_id,
            "employee_name": name,
            "total_hours": float(total),
            "record_count": int(count),
        }
        for employee_id, name, total, count in db.execute(stmt).all()
    ]
    summaries.sort(key=lambda item: item["total_hours"], reverse=True)
    return summaries
