from __future__ import annotations

import logging
from time import perf_counter

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from examdesk.api.deps import get_actor, get_db, get_owned_or_404, get_school_id
from examdesk.core.config import get_settings
from examdesk.core.exceptions import SchedulerError
from examdesk.models.exam import ExamSchedule
from examdesk.models.room import Room
from examdesk.models.seating import SeatingArrangement
from examdesk.models.student import Student
from examdesk.schemas.seating import (
    AutoSeatingRequest,
    AutoSeatingResponse,
    SeatingArrangementOut,
    SeatingOptions,
    SeatingRoom,
    SeatingStatusUpdate,
    SeatingStudent,
)
from examdesk.services.audit import log_activity
from examdesk.services.generation_lock import generation_guard
from examdesk.services.schedule_records import replace_seating
from examdesk.services.seating_engine import generate_seating

router = APIRouter()
logger = logging.getLogger(__name__)


def _load_students(db: Session, school_id: int, class_names: list[str] | None) -> list[SeatingStudent]:
    query = select(Student).where(Student.school_id == school_id, Student.is_active.is_(True))
    if class_names:
        query = query.where(Student.class_name.in_(class_names))
    return [SeatingStudent.model_validate(item) for item in db.execute(query.order_by(Student.id)).scalars()]


def _load_rooms(db: Session, school_id: int, room_ids: list[int] | None) -> list[SeatingRoom]:
    query = select(Room).where(Room.school_id == school_id)
    if room_ids is not None:
        query = query.where(Room.id.in_(room_ids))
    rooms = list(db.execute(query.order_by(Room.id)).scalars())
    if room_ids is not None:
        position = {room_id: index for index, room_id in enumerate(room_ids)}
        rooms.sort(key=lambda item: position[item.id])
    return [SeatingRoom.model_validate(item) for item in rooms]


@router.get("/exam-schedules/{schedule_id}/seating", response_model=list[SeatingArrangementOut])
def list_seating(
    schedule_id: int,
    room_number: str | None = Query(default=None),
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> list[SeatingArrangementOut]:
    get_owned_or_404(db, ExamSchedule, schedule_id, school_id, "Exam schedule")
    query = select(SeatingArrangement).where(
        SeatingArrangement.school_id == school_id,
        SeatingArrangement.exam_schedule_id == schedule_id,
    )
    if room_number:
        query = query.where(SeatingArrangement.room_number == room_number)
    query = query.order_by(
        SeatingArrangement.room_number,
        SeatingArrangement.row_number,
        SeatingArrangement.column_number,
    )
    return list(db.execute(query).scalars())


@router.post("/exam-schedules/{schedule_id}/seating/auto-generate", response_model=AutoSeatingResponse)
def auto_generate_seating(
    schedule_id: int,
    payload: AutoSeatingRequest,
    school_id: int = Depends(get_school_id),
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> AutoSeatingResponse:
    settings = get_settings()
    schedule = get_owned_or_404(db, ExamSchedule, schedule_id, school_id, "Exam schedule")
    pattern = payload.pattern or settings.default_seating_pattern
    options = SeatingOptions(
        prioritize_special_needs=payload.prioritize_special_needs,
        prevent_class_adjacency=payload.prevent_class_adjacency,
        random_seed=payload.random_seed,
        adjacency_lookahead=settings.seating_adjacency_lookahead,
    )
    class_names = payload.class_names
    if class_names is None and schedule.class_name:
        class_names = [schedule.class_name]

    started = perf_counter()
    logger.info(
        "AUTO SEATING GENERATION START | school_id=%s | schedule_id=%s | pattern=%s | classes=%s",
        school_id,
        schedule.id,
        pattern,
        ",".join(class_names) if class_names else "all",
    )
    with generation_guard(kind="seating", school_id=school_id, exam_schedule_id=schedule.id):
        try:
            result = generate_seating(
                _load_students(db, school_id, class_names),
                _load_rooms(db, school_id, payload.room_ids),
                pattern,
                options,
            )
            records = replace_seating(db, school_id=school_id, schedule=schedule, placements=result.arrangements)
            log_activity(
                db,
                school_id=school_id,
                actor=actor,
                action="seating.auto_generate",
                entity_type="exam_schedule",
                entity_id=schedule.id,
                details={
                    "pattern": pattern,
                    "seats_used": result.stats.seats_used,
                    "rooms_used": result.stats.rooms_used,
                    "unseated": result.stats.unseated_count,
                },
            )
            db.commit()
        except SchedulerError as exc:
            db.rollback()
            logger.warning(
                "AUTO SEATING GENERATION REJECTED | school_id=%s | schedule_id=%s | reason=%s",
                school_id,
                schedule_id,
                exc.message,
            )
            raise
        except Exception:
            db.rollback()
            logger.exception(
                "AUTO SEATING GENERATION FAILED | school_id=%s | schedule_id=%s | wall_ms=%s",
                school_id,
                schedule_id,
                int((perf_counter() - started) * 1000),
            )
            raise

    for record in records:
        db.refresh(record)
    logger.info(
        "AUTO SEATING GENERATION COMPLETE | school_id=%s | schedule_id=%s | seated=%s | unseated=%s | wall_ms=%s",
        school_id,
        schedule_id,
        result.stats.seats_used,
        result.stats.unseated_count,
        int((perf_counter() - started) * 1000),
    )
    return AutoSeatingResponse(
        arrangements=[SeatingArrangementOut.model_validate(item) for item in records],
        stats=result.stats,
    )


@router.put("/seating-arrangements/{arrangement_id}/status", response_model=SeatingArrangementOut)
def update_seating_status(
    arrangement_id: int,
    payload: SeatingStatusUpdate,
    school_id: int = Depends(get_school_id),
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> SeatingArrangementOut:
    arrangement = get_owned_or_404(db, SeatingArrangement, arrangement_id, school_id, "Seating arrangement")
    arrangement.status = payload.status
    log_activity(
        db,
        school_id=school_id,
        actor=actor,
        action=f"seating.{payload.status.value}",
        entity_type="seating_arrangement",
        entity_id=arrangement.id,
    )
    db.commit()
    db.refresh(arrangement)
    return arrangement


@router.delete("/seating-arrangements/{arrangement_id}")
def delete_seating_arrangement(
    arrangement_id: int,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> dict:
    arrangement = get_owned_or_404(db, SeatingArrangement, arrangement_id, school_id, "Seating arrangement")
    db.delete(arrangement)
    db.commit()
    return {"success": True}
