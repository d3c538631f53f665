from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from app.errors import EmployeeIdNormalizationFailure


@dataclass(frozen=True)
class EmployeeIdResult:
    ok: bool
    employee_id: str | None = None
    reason: str | None = None

    def unwrap(self) -> str:
        if not self.ok or self.employee_id is None:
            raise EmployeeIdNormalizationFailure(self.reason or "Unrecognized employee reference")
        return self.employee_id


@dataclass(frozen=True)
class EmployeeInfo:
    id: str
    name: str
    position: str | None = None


def _scalar_id(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def normalize_employee_id(ref: Any) -> EmployeeIdResult:
    """Reduce any accepted employee reference shape to a string id.

    Accepted shapes: a plain id (``"65a1..."`` or ``7``), a populated
    document (``{"_id": ..., "name": ...}`` or ``{"id": ...}``) and an
    extended-JSON wrapper (``{"$oid": "65a1..."}``). The ``_id`` of a
    populated document may itself be an ``$oid`` wrapper.
    """
    if ref is None:
        return EmployeeIdResult(ok=False, reason="Employee reference is missing")

    scalar = _scalar_id(ref)
    if scalar is not None:
        return EmployeeIdResult(ok=True, employee_id=scalar)

    if isinstance(ref, Mapping):
        if "$oid" in ref:
            oid = _scalar_id(ref["$oid"])
            if oid is not None:
                return EmployeeIdResult(ok=True, employee_id=oid)
            return EmployeeIdResult(ok=False, reason="Empty $oid wrapper")
        for key in ("_id", "id"):
            if key in ref and ref[key] is not None:
                return normalize_employee_id(ref[key])
        return EmployeeIdResult(ok=False, reason="Employee document has no _id")

    return EmployeeIdResult(ok=False, reason=f"Unsupported employee reference type {type(ref).__name__}")


def employee_name_from_ref(ref: Any) -> str | None:
    if isinstance(ref, Mapping):
        name = ref.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
    return None


def employee_position_from_ref(ref: Any) -> str | None:
    if isinstance(ref, Mapping):
        position = ref.get("position")
        if isinstance(position, str) and position.strip():
            return position.strip()
    return None


def fallback_employee_name(employee_id: str) -> str:
    return f"Employee {employee_id}"
