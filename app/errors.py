from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message


class ShiftHoursError(ValueError):
    code = "SHIFT_HOURS_ERROR"


class InvalidTimeFormat(ShiftHoursError):
    code = "INVALID_TIME_FORMAT"

    def __init__(self, value: object):
        super().__init__(f"Invalid time format {value!r}. Use HH:MM.")
        self.value = value


class InvalidTimeRange(ShiftHoursError):
    code = "INVALID_TIME_RANGE"

    def __init__(self, start: str, end: str):
        super().__init__(f"Start time {start} must be earlier than end time {end}.")
        self.start = start
        self.end = end


class EmployeeIdNormalizationFailure(ShiftHoursError):
    code = "EMPLOYEE_ID_UNRECOGNIZED"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return str(request_id)
    return "unknown"


def error_response(request: Request, *, status_code: int, code: str, message: str) -> JSONResponse:
    payload = {
        "error": {
            "code": code,
            "message": message,
            "request_id": get_request_id(request),
        }
    }
    return JSONResponse(status_code=status_code, content=payload)
