from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from app.audit import audit_request_action, request_actor_id
from app.db import get_db
from app.models import ShiftName
from app.schemas import ShiftTimeConfigRead, ShiftTimeConfigUpdate, ShiftTimeConfigUpsert, ShiftWindowRead
from app.services.shift_configs import (
    deactivate_shift_config,
    list_active_shift_configs,
    load_shift_times,
    update_shift_config,
    upsert_shift_config,
)
from app.services.shift_times import SHIFT_ORDER, compute_shift_hours

router = APIRouter(tags=["shift-configs"])


def _config_details(config) -> dict[str, object]:
    return {
        "shift": ShiftName(config.shift).value,
        "start_time": config.start_time,
        "end_time": config.end_time,
        "is_active": config.is_active,
    }


@router.get("/api/shift-configs", response_model=list[ShiftTimeConfigRead])
def list_shift_configs(db: Session = Depends(get_db)) -> list[ShiftTimeConfigRead]:
    return list_active_shift_configs(db)


@router.get("/api/shift-configs/effective", response_model=list[ShiftWindowRead])
def list_effective_shift_times(db: Session = Depends(get_db)) -> list[ShiftWindowRead]:
    shift_times = load_shift_times(db)
    return [
        ShiftWindowRead(
            shift=shift,
            start_time=shift_times[shift].start,
            end_time=shift_times[shift].end,
            hours=compute_shift_hours(shift_times[shift].start, shift_times[shift].end),
        )
        for shift in SHIFT_ORDER
    ]


@router.post("/api/shift-configs", response_model=ShiftTimeConfigRead)
def upsert_shift_config_endpoint(
    payload: ShiftTimeConfigUpsert,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
) -> ShiftTimeConfigRead:
    config, created = upsert_shift_config(db, payload, actor_id=request_actor_id(request))
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    audit_request_action(
        db,
        request,
        action="SHIFT_CONFIG_CREATED" if created else "SHIFT_CONFIG_UPDATED",
        entity_type="shift_time_config",
        entity_id=config.id,
        details=_config_details(config),
    )
    return config


@router.patch("/api/shift-configs/{shift}", response_model=ShiftTimeConfigRead)
def update_shift_config_endpoint(
    shift: ShiftName,
    payload: ShiftTimeConfigUpdate,
    request: Request,
    db: Session = Depends(get_db),
) -> ShiftTimeConfigRead:
    config = update_shift_config(db, shift, payload, actor_id=request_actor_id(request))
    audit_request_action(
        db,
        request,
        action="SHIFT_CONFIG_UPDATED",
        entity_type="shift_time_config",
        entity_id=config.id,
        details=_config_details(config),
    )
    return config


@router.delete("/api/shift-configs/{shift}", response_model=ShiftTimeConfigRead)
def delete_shift_config_endpoint(
    shift: ShiftName,
    request: Request,
    db: Session = Depends(get_db),
) -> ShiftTimeConfigRead:
    config = deactivate_shift_config(db, shift, actor_id=request_actor_id(request))
    audit_request_action(
        db,
        request,
        action="SHIFT_CONFIG_DEACTIVATED",
        entity_type="shift_time_config",
        entity_id=config.id,
        details=_config_details(config),
    )
    return config
