from __future__ import annotations

from collections.abc import Iterable

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import Employee
from app.schemas import EmployeeCreate
from app.services.employee_refs import EmployeeInfo


def create_employee(db: Session, payload: EmployeeCreate) -> Employee:
    employee = Employee(
        name=payload.name.strip(),
        position=payload.position,
        is_active=payload.is_active,
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


def list_employees(db: Session, *, include_inactive: bool = False) -> list[Employee]:
    stmt = select(Employee).order_by(Employee.name.asc(), Employee.id.asc())
    if not include_inactive:
        stmt = stmt.where(Employee.is_active.is_(True))
    return list(db.scalars(stmt).all())


def get_employee_or_404(db: Session, employee_id: int) -> Employee:
    employee = db.get(Employee, employee_id)
    if employee is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    return employee


def employee_ref(employee: Employee) -> dict[str, str | None]:
    return {"_id": str(employee.id), "name": employee.name, "position": employee.position}


def build_employee_directory(employees: Iterable[Employee]) -> dict[str, EmployeeInfo]:
    return {
        str(employee.id): EmployeeInfo(id=str(employee.id), name=employee.name, position=employee.position)
        for employee in employees
    }
