from datetime import date

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.audit import audit_request_action, request_actor_id
from app.db import get_db
from app.models import EmployeeSchedule, LeaveType
from app.schemas import (
    BucketAssignmentRead,
    DailyBucketsRead,
    ScheduleCreate,
    ScheduleDayRead,
    ScheduleRead,
    ScheduleUpdate,
    ShiftBucketRead,
)
from app.services.hours_reports import build_daily_buckets
from app.services.schedule_aggregation import ScheduleAssignment
from app.services.schedules import (
    create_schedule,
    delete_schedule,
    get_schedule_or_404,
    get_schedules_by_date,
    list_schedules,
    update_schedule,
    validate_date_range,
)
from app.services.shift_times import SHIFT_ORDER

router = APIRouter(tags=["schedules"])


def _schedule_read(schedule: EmployeeSchedule) -> ScheduleRead:
    return ScheduleRead(
        id=schedule.id,
        employee_id=schedule.employee_id,
        employee_name=schedule.employee.name if schedule.employee is not None else None,
        day_date=schedule.day_date,
        shift=schedule.shift,
        leave_type=schedule.leave_type,
        created_at=schedule.created_at,
        updated_at=schedule.updated_at,
    )


def _bucket_assignment_read(assignment: ScheduleAssignment) -> BucketAssignmentRead:
    return BucketAssignmentRead(
        id=assignment.id,
        employee_id=assignment.employee_id or "",
        employee_name=assignment.employee_name,
        leave_type=assignment.leave_type,
    )


@router.get("/api/schedules", response_model=list[ScheduleRead])
def list_schedules_endpoint(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    employee_id: int | None = Query(default=None, ge=1),
    leave_type: LeaveType | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[ScheduleRead]:
    schedules = list_schedules(
        db,
        start_date=start_date,
        end_date=end_date,
        employee_id=employee_id,
        leave_type=leave_type,
    )
    return [_schedule_read(schedule) for schedule in schedules]


@router.get("/api/schedules/by-date", response_model=dict[date, ScheduleDayRead])
def schedules_by_date_endpoint(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db),
) -> dict[date, ScheduleDayRead]:
    grouped = get_schedules_by_date(db, start_date=start_date, end_date=end_date)
    return {
        day_date: ScheduleDayRead(
            **{shift.value: [_schedule_read(item) for item in items] for shift, items in day_shifts.items()}
        )
        for day_date, day_shifts in grouped.items()
    }


@router.get("/api/schedules/buckets", response_model=list[DailyBucketsRead])
def schedule_buckets_endpoint(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db),
) -> list[DailyBucketsRead]:
    validate_date_range(start_date, end_date)
    buckets = build_daily_buckets(db, start_date=start_date, end_date=end_date)
    return [
        DailyBucketsRead(
            day_date=day_date,
            shifts=[
                ShiftBucketRead(
                    shift=shift,
                    shift_hours=buckets[day_date][shift].shift_hours,
                    regular=[_bucket_assignment_read(item) for item in buckets[day_date][shift].regular],
                    overtime=[_bucket_assignment_read(item) for item in buckets[day_date][shift].overtime],
                    personal=[_bucket_assignment_read(item) for item in buckets[day_date][shift].personal],
                    sick=[_bucket_assignment_read(item) for item in buckets[day_date][shift].sick],
                )
                for shift in SHIFT_ORDER
            ],
        )
        for day_date in sorted(buckets)
    ]


@router.post("/api/schedules", response_model=ScheduleRead, status_code=status.HTTP_201_CREATED)
def create_schedule_endpoint(
    payload: ScheduleCreate,
    request: Request,
    db: Session = Depends(get_db),
) -> ScheduleRead:
    schedule = create_schedule(db, payload, created_by=request_actor_id(request))
    audit_request_action(
        db,
        request,
        action="SCHEDULE_CREATED",
        entity_type="employee_schedule",
        entity_id=schedule.id,
        details=payload.model_dump(mode="json"),
    )
    return _schedule_read(get_schedule_or_404(db, schedule.id))


@router.patch("/api/schedules/{schedule_id}", response_model=ScheduleRead)
def update_schedule_endpoint(
    schedule_id: int,
    payload: ScheduleUpdate,
    request: Request,
    db: Session = Depends(get_db),
) -> ScheduleRead:
    schedule = update_schedule(db, schedule_id, payload)
    audit_request_action(
        db,
        request,
        action="SCHEDULE_UPDATED",
        entity_type="employee_schedule",
        entity_id=schedule.id,
        details=payload.model_dump(mode="json", exclude_unset=True),
    )
    return _schedule_read(get_schedule_or_404(db, schedule.id))


@router.delete("/api/schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule_endpoint(
    schedule_id: int,
    request: Request,
    db: Session = Depends(get_db),
) -> None:
    delete_schedule(db, schedule_id)
    audit_request_action(
        db,
        request,
        action="SCHEDULE_DELETED",
        entity_type="employee_schedule",
        entity_id=schedule_id,
    )
