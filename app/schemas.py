from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.enums import LeaveType, OvertimeStatus, ShiftName

HHMM_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


class EmployeeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    position: str | None = Field(default=None, max_length=255)
    is_active: bool = True


class EmployeeRead(BaseModel):
    id: int
    name: str
    position: str | None = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class ShiftTimeConfigUpsert(BaseModel):
    shift: ShiftName
    start_time: str = Field(pattern=HHMM_PATTERN)
    end_time: str = Field(pattern=HHMM_PATTERN)
    description: str | None = Field(default=None, max_length=200)


class ShiftTimeConfigUpdate(BaseModel):
    start_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    end_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    is_active: bool | None = None
    description: str | None = Field(default=None, max_length=200)


class ShiftTimeConfigRead(BaseModel):
    id: int
    shift: ShiftName
    start_time: str
    end_time: str
    description: str | None = None
    is_active: bool
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ShiftWindowRead(BaseModel):
    shift: ShiftName
    start_time: str
    end_time: str
    hours: float


class ScheduleCreate(BaseModel):
    employee_id: int = Field(ge=1)
    day_date: date
    shift: ShiftName
    leave_type: LeaveType | None = None


class ScheduleUpdate(BaseModel):
    employee_id: int | None = Field(default=None, ge=1)
    day_date: date | None = None
    shift: ShiftName | None = None
    leave_type: LeaveType | None = None


class ScheduleRead(BaseModel):
    id: int
    employee_id: int
    employee_name: str | None = None
    day_date: date
    shift: ShiftName
    leave_type: LeaveType | None = None
    created_at: datetime
    updated_at: datetime


class ScheduleDayRead(BaseModel):
    morning: list[ScheduleRead] = Field(default_factory=list)
    afternoon: list[ScheduleRead] = Field(default_factory=list)
    evening: list[ScheduleRead] = Field(default_factory=list)


class BucketAssignmentRead(BaseModel):
    id: str | None = None
    employee_id: str
    employee_name: str | None = None
    leave_type: LeaveType | None = None


class ShiftBucketRead(BaseModel):
    shift: ShiftName
    shift_hours: float
    regular: list[BucketAssignmentRead] = Field(default_factory=list)
    overtime: list[BucketAssignmentRead] = Field(default_factory=list)
    personal: list[BucketAssignmentRead] = Field(default_factory=list)
    sick: list[BucketAssignmentRead] = Field(default_factory=list)


class DailyBucketsRead(BaseModel):
    day_date: date
    shifts: list[ShiftBucketRead]


class OvertimeRecordCreate(BaseModel):
    employee_id: int = Field(ge=1)
    day_date: date
    hours: float = Field(gt=0, le=24)
    description: str | None = Field(default=None, max_length=500)
    status: OvertimeStatus = OvertimeStatus.PENDING
    approval_note: str | None = Field(default=None, max_length=500)


class OvertimeRecordUpdate(BaseModel):
    day_date: date | None = None
    hours: float | None = Field(default=None, gt=0, le=24)
    description: str | None = Field(default=None, max_length=500)
    status: OvertimeStatus | None = None
    approval_note: str | None = Field(default=None, max_length=500)


class OvertimeDecisionRequest(BaseModel):
    approval_note: str | None = Field(default=None, max_length=500)


class OvertimeRecordRead(BaseModel):
    id: int
    employee_id: int
    employee_name: str | None = None
    day_date: date
    hours: float
    description: str | None = None
    status: OvertimeStatus
    approved_by: str | None = None
    approved_at: datetime | None = None
    approval_note: str | None = None
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class OvertimeCalculationRequest(BaseModel):
    current_time: str | None = Field(default=None, pattern=HHMM_PATTERN)


class OvertimeCalculationRead(BaseModel):
    hours: float
    minutes: int
    nearest_shift: ShiftName
    shift_end_time: str
    current_time: str
    calculation_details: str
    suggested_description: str


class MergedOvertimeEntryRead(BaseModel):
    id: str
    source: Literal["manual", "schedule"]
    day_date: date
    hours: float
    description: str
    status: OvertimeStatus
    shift: ShiftName | None = None


class EmployeeOvertimeGroupRead(BaseModel):
    employee_id: str
    name: str
    position: str | None = None
    independent_hours: float
    schedule_hours: float
    total_hours: float
    independent_record_count: int
    schedule_record_count: int
    latest_date: date | None = None
    entries: list[MergedOvertimeEntryRead] = Field(default_factory=list)


class OvertimeMonthlyStatRead(BaseModel):
    employee_id: str
    name: str
    overtime_hours: float
    independent_record_count: int
    schedule_record_count: int
    total_record_count: int


class OvertimeSummaryRead(BaseModel):
    employee_id: int
    employee_name: str | None = None
    total_hours: float
    record_count: int


class EmployeeMonthlyHoursRead(BaseModel):
    employee_id: str
    name: str
    hours: str
    overtime_hours: str
    personal_leave_hours: str
    sick_leave_hours: str
    sick_occurrences: int


class MonthlyHoursSummaryRead(BaseModel):
    total_regular_hours: str
    total_overtime_hours: str
    total_personal_leave_hours: str
    total_sick_leave_hours: str
    grand_total_hours: str


class MonthlyHoursReportRead(BaseModel):
    year: int
    month: int
    rows: list[EmployeeMonthlyHoursRead]
    summary: MonthlyHoursSummaryRead

