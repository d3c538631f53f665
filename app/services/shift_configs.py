from __future__ import annotations

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import ShiftName, ShiftTimeConfig
from app.schemas import ShiftTimeConfigUpdate, ShiftTimeConfigUpsert
from app.services.shift_times import SHIFT_ORDER, ShiftTimesMap, build_shift_times_map, ensure_valid_range


def _shift_sort_key(config: ShiftTimeConfig) -> int:
    return SHIFT_ORDER.index(ShiftName(config.shift))


def list_active_shift_configs(db: Session) -> list[ShiftTimeConfig]:
    configs = list(db.scalars(select(ShiftTimeConfig).where(ShiftTimeConfig.is_active.is_(True))).all())
    return sorted(configs, key=_shift_sort_key)


def load_shift_times(db: Session) -> ShiftTimesMap:
    return build_shift_times_map(list_active_shift_configs(db))


def _find_config(db: Session, shift: ShiftName) -> ShiftTimeConfig | None:
    return db.scalar(select(ShiftTimeConfig).where(ShiftTimeConfig.shift == shift))


def get_active_shift_config(db: Session, shift: ShiftName) -> ShiftTimeConfig:
    config = _find_config(db, shift)
    if config is None or not config.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shift time config not found")
    return config


def upsert_shift_config(
    db: Session,
    payload: ShiftTimeConfigUpsert,
    *,
    actor_id: str,
) -> tuple[ShiftTimeConfig, bool]:
    ensure_valid_range(payload.start_time, payload.end_time)

    config = _find_config(db, payload.shift)
    created = config is None
    if config is None:
        config = ShiftTimeConfig(
            shift=payload.shift,
            start_time=payload.start_time,
            end_time=payload.end_time,
            description=payload.description,
            is_active=True,
            created_by=actor_id,
        )
        db.add(config)
    else:
        config.start_time = payload.start_time
        config.end_time = payload.end_time
        if payload.description is not None:
            config.description = payload.description
        config.is_active = True
        config.updated_by = actor_id

    db.commit()
    db.refresh(config)
    return config, created


def update_shift_config(
    db: Session,
    shift: ShiftName,
    payload: ShiftTimeConfigUpdate,
    *,
    actor_id: str,
) -> ShiftTimeConfig:
    config = _find_config(db, shift)
    if config is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shift time config not found")

    # A single supplied bound is checked against the stored opposite bound.
    ensure_valid_range(payload.start_time or config.start_time, payload.end_time or config.end_time)

    if payload.start_time is not None:
        config.start_time = payload.start_time
    if payload.end_time is not None:
        config.end_time = payload.end_time
    if payload.is_active is not None:
        config.is_active = payload.is_active
    if payload.description is not None:
        config.description = payload.description
    config.updated_by = actor_id

    db.commit()
    db.refresh(config)
    return config


def deactivate_shift_config(db: Session, shift: ShiftName, *, actor_id: str) -> ShiftTimeConfig:
    config = _find_config(db, shift)
    if config is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shift time config not found")
    config.is_active = False
    config.updated_by = actor_id
    db.commit()
    db.refresh(config)
    return config
