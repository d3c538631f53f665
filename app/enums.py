from __future__ import annotations

import enum


class ShiftName(str, enum.Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class LeaveType(str, enum.Enum):
    SICK = "sick"
    PERSONAL = "personal"
    OVERTIME = "overtime"


class OvertimeStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AuditActorType(str, enum.Enum):
    ADMIN = "ADMIN"
    SYSTEM = "SYSTEM"
