from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.audit import audit_request_action
from app.db import get_db
from app.schemas import EmployeeCreate, EmployeeRead
from app.services.employees import create_employee, list_employees

router = APIRouter(tags=["employees"])


@router.get("/api/employees", response_model=list[EmployeeRead])
def list_employees_endpoint(
    include_inactive: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> list[EmployeeRead]:
    return list_employees(db, include_inactive=include_inactive)


@router.post("/api/employees", response_model=EmployeeRead, status_code=status.HTTP_201_CREATED)
def create_employee_endpoint(
    payload: EmployeeCreate,
    request: Request,
    db: Session = Depends(get_db),
) -> EmployeeRead:
    employee = create_employee(db, payload)
    audit_request_action(
        db,
        request,
        action="EMPLOYEE_CREATED",
        entity_type="employee",
        entity_id=employee.id,
        details={"name": employee.name, "position": employee.position},
    )
    return employee
