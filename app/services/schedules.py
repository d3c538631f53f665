from __future__ import annotations

from datetime import date

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.models import EmployeeSchedule, LeaveType, ShiftName
from app.schemas import ScheduleCreate, ScheduleUpdate
from app.services.employees import employee_ref, get_employee_or_404
from app.services.schedule_aggregation import ScheduleAssignment
from app.services.shift_times import SHIFT_ORDER


def validate_date_range(start_date: date | None, end_date: date | None) -> None:
    if (start_date is None) != (end_date is None):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="start_date and end_date must be provided together",
        )
    if start_date is not None and end_date is not None and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="start_date must be less than or equal to end_date",
        )


def schedule_to_assignment(schedule: EmployeeSchedule) -> ScheduleAssignment:
    ref = employee_ref(schedule.employee) if schedule.employee is not None else str(schedule.employee_id)
    return ScheduleAssignment(
        employee_ref=ref,
        day_date=schedule.day_date,
        shift=schedule.shift,
        leave_type=schedule.leave_type,
        id=str(schedule.id),
    )


def list_schedules(
    db: Session,
    *,
    start_date: date | None = None,
    end_date: date | None = None,
    employee_id: int | None = None,
    leave_type: LeaveType | None = None,
) -> list[EmployeeSchedule]:
    validate_date_range(start_date, end_date)

    stmt = (
        select(EmployeeSchedule)
        .options(selectinload(EmployeeSchedule.employee))
        .order_by(EmployeeSchedule.day_date.asc(), EmployeeSchedule.id.asc())
    )
    if start_date is not None and end_date is not None:
        stmt = stmt.where(EmployeeSchedule.day_date >= start_date, EmployeeSchedule.day_date <= end_date)
    if employee_id is not None:
        stmt = stmt.where(EmployeeSchedule.employee_id == employee_id)
    if leave_type is not None:
        stmt = stmt.where(EmployeeSchedule.leave_type == leave_type)

    schedules = list(db.scalars(stmt).all())
    schedules.sort(key=lambda item: (item.day_date, SHIFT_ORDER.index(ShiftName(item.shift))))
    return schedules


def list_schedule_assignments(
    db: Session,
    *,
    start_date: date,
    end_date: date,
    leave_type: LeaveType | None = None,
) -> list[ScheduleAssignment]:
    schedules = list_schedules(db, start_date=start_date, end_date=end_date, leave_type=leave_type)
    return [schedule_to_assignment(schedule) for schedule in schedules]


def get_schedules_by_date(
    db: Session,
    *,
    start_date: date,
    end_date: date,
) -> dict[date, dict[ShiftName, list[EmployeeSchedule]]]:
    grouped: dict[date, dict[ShiftName, list[EmployeeSchedule]]] = {}
    for schedule in list_schedules(db, start_date=start_date, end_date=end_date):
        day_shifts = grouped.setdefault(schedule.day_date, {shift: [] for shift in SHIFT_ORDER})
        day_shifts[ShiftName(schedule.shift)].append(schedule)
    return grouped


def _ensure_slot_available(
    db: Session,
    *,
    employee_id: int,
    day_date: date,
    shift: ShiftName,
    exclude_id: int | None = None,
) -> None:
    stmt = select(EmployeeSchedule.id).where(
        EmployeeSchedule.employee_id == employee_id,
        EmployeeSchedule.day_date == day_date,
        EmployeeSchedule.shift == shift,
    )
    if exclude_id is not None:
        stmt = stmt.where(EmployeeSchedule.id != exclude_id)
    if db.scalar(stmt) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Employee is already scheduled for this shift on this date",
        )


def get_schedule_or_404(db: Session, schedule_id: int) -> EmployeeSchedule:
    schedule = db.get(EmployeeSchedule, schedule_id)
    if schedule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")
    return schedule


def create_schedule(db: Session, payload: ScheduleCreate, *, created_by: str) -> EmployeeSchedule:
    get_employee_or_404(db, payload.employee_id)
    _ensure_slot_available(
        db,
        employee_id=payload.employee_id,
        day_date=payload.day_date,
        shift=payload.shift,
    )

    schedule = EmployeeSchedule(
        employee_id=payload.employee_id,
        day_date=payload.day_date,
        shift=payload.shift,
        leave_type=payload.leave_type,
        created_by=created_by,
    )
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    return schedule


def update_schedule(db: Session, schedule_id: int, payload: ScheduleUpdate) -> EmployeeSchedule:
    schedule = get_schedule_or_404(db, schedule_id)

    if payload.employee_id is not None:
        get_employee_or_404(db, payload.employee_id)
        schedule.employee_id = payload.employee_id
    if payload.day_date is not None:
        schedule.day_date = payload.day_date
    if payload.shift is not None:
        schedule.shift = payload.shift
    # An explicit null clears the leave annotation back to regular work.
    if "leave_type" in payload.model_fields_set:
        schedule.leave_type = payload.leave_type

    _ensure_slot_available(
        db,
        employee_id=schedule.employee_id,
        day_date=schedule.day_date,
        shift=ShiftName(schedule.shift),
        exclude_id=schedule.id,
    )

    db.commit()
    db.refresh(schedule)
    return schedule


def delete_schedule(db: Session, schedule_id: int) -> None:
    schedule = get_schedule_or_404(db, schedule_id)
    db.delete(schedule)
    db.commit()
