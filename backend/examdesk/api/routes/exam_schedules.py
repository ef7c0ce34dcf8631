from __future__ import annotations

from collections.abc import Iterable
from datetime import date
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from examdesk.api.deps import get_actor, get_db, get_owned_or_404, get_school_id
from examdesk.core.exceptions import ResourceNotFoundError, SchedulerError
from examdesk.models.exam import Exam, ExamSchedule
from examdesk.models.room import Room
from examdesk.models.teacher import Teacher, TeacherAvailability
from examdesk.schemas.common import MINUTES_PER_DAY, minutes_to_time, parse_time_to_minutes
from examdesk.schemas.conflict import ConflictCheckResponse, ConflictDetail
from examdesk.schemas.exam_schedule import (
    ConflictCheckRequest,
    ExamScheduleBulkCreate,
    ExamScheduleBulkEdit,
    ExamScheduleCreate,
    ExamScheduleOut,
    ExamScheduleUpdate,
    ScheduleEntryPayload,
)
from examdesk.schemas.teacher import TeacherAvailabilityPayload
from examdesk.services.audit import log_activity
from examdesk.services.conflict_detector import annotate_schedule, detect_conflicts
from examdesk.services.schedule_records import delete_schedules

router = APIRouter()
logger = logging.getLogger(__name__)


def _entry_payloads(schedules: Iterable[ExamSchedule]) -> list[ScheduleEntryPayload]:
    return [ScheduleEntryPayload.model_validate(item) for item in schedules]


def _tenant_schedules(db: Session, school_id: int, dates: Iterable[date] | None = None) -> list[ExamSchedule]:
    query = select(ExamSchedule).where(ExamSchedule.school_id == school_id)
    if dates is not None:
        query = query.where(ExamSchedule.exam_date.in_(list(dates)))
    query = query.order_by(ExamSchedule.exam_date, ExamSchedule.start_time, ExamSchedule.id)
    return list(db.execute(query).scalars())


def _tenant_availability(
    db: Session,
    school_id: int,
    dates: Iterable[date] | None = None,
) -> list[TeacherAvailabilityPayload]:
    query = select(TeacherAvailability).where(TeacherAvailability.school_id == school_id)
    if dates is not None:
        query = query.where(TeacherAvailability.availability_date.in_(list(dates)))
    return [TeacherAvailabilityPayload.model_validate(item) for item in db.execute(query).scalars()]


def _schedule_out(schedule: ExamSchedule, conflicts: list[ConflictDetail]) -> ExamScheduleOut:
    return ExamScheduleOut.model_validate(schedule).model_copy(update={"conflicts": conflicts})


def _annotated(db: Session, school_id: int, schedules: list[ExamSchedule]) -> list[ExamScheduleOut]:
    dates = {item.exam_date for item in schedules}
    if not dates:
        return []
    annotations = annotate_schedule(
        _entry_payloads(_tenant_schedules(db, school_id, dates)),
        _tenant_availability(db, school_id, dates),
    )
    return [_schedule_out(item, annotations.get(item.id, [])) for item in schedules]


def _ensure_references(
    db: Session,
    school_id: int,
    *,
    exam_id: int | None = None,
    room_id: int | None = None,
    teacher_id: int | None = None,
) -> None:
    if exam_id is not None:
        get_owned_or_404(db, Exam, exam_id, school_id, "Exam")
    if room_id is not None:
        get_owned_or_404(db, Room, room_id, school_id, "Room")
    if teacher_id is not None:
        get_owned_or_404(db, Teacher, teacher_id, school_id, "Teacher")


@router.get("/exam-schedules", response_model=list[ExamScheduleOut])
def list_exam_schedules(
    exam_id: int | None = Query(default=None),
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> list[ExamScheduleOut]:
    schedules = _tenant_schedules(db, school_id)
    # Conflicts are computed against every entry of the school, not just the filtered exam.
    annotations = annotate_schedule(_entry_payloads(schedules), _tenant_availability(db, school_id))
    if exam_id is not None:
        schedules = [item for item in schedules if item.exam_id == exam_id]
    return [_schedule_out(item, annotations.get(item.id, [])) for item in schedules]


@router.post("/exam-schedules", response_model=ExamScheduleOut, status_code=status.HTTP_201_CREATED)
def create_exam_schedule(
    payload: ExamScheduleCreate,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> ExamScheduleOut:
    _ensure_references(
        db,
        school_id,
        exam_id=payload.exam_id,
        room_id=payload.room_id,
        teacher_id=payload.teacher_id,
    )
    schedule = ExamSchedule(school_id=school_id, **payload.model_dump())
    db.add(schedule)
    db.commit()
    db.refresh(schedule)

    conflicts = detect_conflicts(
        ScheduleEntryPayload.model_validate(schedule),
        _entry_payloads(_tenant_schedules(db, school_id, [schedule.exam_date])),
        _tenant_availability(db, school_id, [schedule.exam_date]),
    )
    if conflicts:
        logger.info(
            "EXAM SCHEDULE SAVED WITH CONFLICTS | school_id=%s | schedule_id=%s | conflicts=%s",
            school_id,
            schedule.id,
            len(conflicts),
        )
    return _schedule_out(schedule, conflicts)


@router.post("/exam-schedules/bulk", response_model=list[ExamScheduleOut], status_code=status.HTTP_201_CREATED)
def bulk_create_exam_schedules(
    payload: ExamScheduleBulkCreate,
    school_id: int = Depends(get_school_id),
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> list[ExamScheduleOut]:
    for entry in payload.entries:
        _ensure_references(
            db,
            school_id,
            exam_id=entry.exam_id,
            room_id=entry.room_id,
            teacher_id=entry.teacher_id,
        )

    schedules = [ExamSchedule(school_id=school_id, **entry.model_dump()) for entry in payload.entries]
    db.add_all(schedules)
    db.flush()
    log_activity(
        db,
        school_id=school_id,
        actor=actor,
        action="exam_schedules.bulk_create",
        entity_type="exam_schedule",
        details={"created": len(schedules), "schedule_ids": [item.id for item in schedules]},
    )
    db.commit()
    for item in schedules:
        db.refresh(item)
    logger.info("EXAM SCHEDULE BULK IMPORT | school_id=%s | created=%s", school_id, len(schedules))
    return _annotated(db, school_id, schedules)


@router.post("/exam-schedules/bulk-edit", response_model=list[ExamScheduleOut])
def bulk_edit_exam_schedules(
    payload: ExamScheduleBulkEdit,
    school_id: int = Depends(get_school_id),
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> list[ExamScheduleOut]:
    schedule_ids = list(dict.fromkeys(payload.schedule_ids))
    schedules = list(
        db.execute(
            select(ExamSchedule)
            .where(ExamSchedule.school_id == school_id, ExamSchedule.id.in_(schedule_ids))
            .order_by(ExamSchedule.id)
        ).scalars()
    )
    found = {item.id for item in schedules}
    missing = [item for item in schedule_ids if item not in found]
    if missing:
        raise ResourceNotFoundError("Exam schedule", missing[0])
    if payload.room_id is not None:
        _ensure_references(db, school_id, room_id=payload.room_id)

    for schedule in schedules:
        if payload.shift_minutes:
            start = parse_time_to_minutes(schedule.start_time) + payload.shift_minutes
            end = parse_time_to_minutes(schedule.end_time) + payload.shift_minutes
            if start < 0 or end >= MINUTES_PER_DAY:
                raise SchedulerError(
                    "Time shift moves an exam outside the day",
                    details={"schedule_id": schedule.id, "shift_minutes": payload.shift_minutes},
                )
            schedule.start_time = minutes_to_time(start)
            schedule.end_time = minutes_to_time(end)
        if payload.room_id is not None:
            schedule.room_id = payload.room_id
        if payload.exam_date is not None:
            schedule.exam_date = payload.exam_date

    log_activity(
        db,
        school_id=school_id,
        actor=actor,
        action="exam_schedules.bulk_edit",
        entity_type="exam_schedule",
        details={
            "schedule_ids": schedule_ids,
            "shift_minutes": payload.shift_minutes,
            "room_id": payload.room_id,
            "exam_date": payload.exam_date.isoformat() if payload.exam_date else None,
        },
    )
    db.commit()
    for item in schedules:
        db.refresh(item)
    logger.info("EXAM SCHEDULE BULK EDIT | school_id=%s | updated=%s", school_id, len(schedules))
    return _annotated(db, school_id, schedules)


@router.post("/exam-schedules/conflicts/check", response_model=ConflictCheckResponse)
def check_exam_schedule_conflicts(
    payload: ConflictCheckRequest,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> ConflictCheckResponse:
    candidate = payload.candidate
    conflicts = detect_conflicts(
        candidate,
        _entry_payloads(_tenant_schedules(db, school_id, [candidate.exam_date])),
        _tenant_availability(db, school_id, [candidate.exam_date]),
    )
    return ConflictCheckResponse(has_conflicts=bool(conflicts), conflicts=conflicts)


@router.put("/exam-schedules/{schedule_id}", response_model=ExamScheduleOut)
def update_exam_schedule(
    schedule_id: int,
    payload: ExamScheduleUpdate,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> ExamScheduleOut:
    schedule = get_owned_or_404(db, ExamSchedule, schedule_id, school_id, "Exam schedule")
    data = payload.model_dump(exclude_unset=True)
    _ensure_references(db, school_id, room_id=data.get("room_id"), teacher_id=data.get("teacher_id"))

    start_time = data.get("start_time") or schedule.start_time
    end_time = data.get("end_time") or schedule.end_time
    if parse_time_to_minutes(end_time) <= parse_time_to_minutes(start_time):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end_time must be after start_time")
    full_marks = data.get("full_marks") or schedule.full_marks
    pass_marks = data.get("pass_marks") if data.get("pass_marks") is not None else schedule.pass_marks
    if pass_marks > full_marks:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="pass_marks cannot exceed full_marks")

    for key, value in data.items():
        if key in {"subject", "exam_date", "start_time", "end_time", "full_marks"} and value is None:
            continue
        setattr(schedule, key, value)
    db.commit()
    db.refresh(schedule)
    return _annotated(db, school_id, [schedule])[0]


@router.delete("/exam-schedules/{schedule_id}")
def delete_exam_schedule(
    schedule_id: int,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> dict:
    schedule = get_owned_or_404(db, ExamSchedule, schedule_id, school_id, "Exam schedule")
    delete_schedules(db, [schedule.id])
    db.commit()
    return {"success": True}
