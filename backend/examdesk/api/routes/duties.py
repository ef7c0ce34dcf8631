from __future__ import annotations

from collections import defaultdict
from datetime import date
import logging
from time import perf_counter

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from examdesk.api.deps import get_actor, get_db, get_owned_or_404, get_school_id
from examdesk.core.config import get_settings
from examdesk.core.exceptions import SchedulerError
from examdesk.models.exam import ExamSchedule
from examdesk.models.invigilation import DutySwap, DutyType, InvigilationDuty
from examdesk.models.room import Room
from examdesk.models.teacher import Teacher, TeacherAvailability
from examdesk.schemas.common import parse_time_to_minutes
from examdesk.schemas.duty import (
    AutoDutyRequest,
    AutoDutyResponse,
    BusyWindow,
    DutyRoom,
    DutyTeacher,
    InvigilationDutyCreate,
    InvigilationDutyOut,
    InvigilationDutyUpdate,
    RatioConfig,
)
from examdesk.services.audit import log_activity
from examdesk.services.conflict_detector import times_overlap
from examdesk.services.duty_assigner import assign_duties
from examdesk.services.generation_lock import generation_guard
from examdesk.services.schedule_records import replace_duties

router = APIRouter()
logger = logging.getLogger(__name__)


def _load_duty_teachers(
    db: Session,
    school_id: int,
    dates: list[date],
    teacher_ids: list[int] | None,
) -> list[DutyTeacher]:
    query = select(Teacher).where(Teacher.school_id == school_id, Teacher.is_active.is_(True))
    if teacher_ids is not None:
        query = query.where(Teacher.id.in_(teacher_ids))
    teachers = list(db.execute(query.order_by(Teacher.id)).scalars())

    unavailable: dict[int, list[date]] = defaultdict(list)
    if teachers and dates:
        rows = db.execute(
            select(TeacherAvailability).where(
                TeacherAvailability.school_id == school_id,
                TeacherAvailability.teacher_id.in_([item.id for item in teachers]),
                TeacherAvailability.availability_date.in_(dates),
                TeacherAvailability.is_available.is_(False),
            )
        ).scalars()
        for row in rows:
            unavailable[row.teacher_id].append(row.availability_date)

    return [
        DutyTeacher(
            id=item.id,
            name=item.name,
            email=item.email,
            class_name=item.class_name,
            is_active=item.is_active,
            unavailable_dates=unavailable.get(item.id, []),
        )
        for item in teachers
    ]


def _load_duty_rooms(db: Session, school_id: int, room_ids: list[int] | None) -> list[DutyRoom]:
    query = select(Room).where(Room.school_id == school_id)
    if room_ids is not None:
        query = query.where(Room.id.in_(room_ids))
    rooms = list(db.execute(query.order_by(Room.id)).scalars())
    if room_ids is not None:
        position = {room_id: index for index, room_id in enumerate(room_ids)}
        rooms.sort(key=lambda item: position[item.id])
    return [DutyRoom(id=item.id, name=item.name, capacity=item.capacity) for item in rooms]


def _busy_windows(db: Session, school_id: int, schedule_id: int, dates: list[date]) -> list[BusyWindow]:
    if not dates:
        return []
    rows = db.execute(
        select(InvigilationDuty).where(
            InvigilationDuty.school_id == school_id,
            InvigilationDuty.exam_schedule_id != schedule_id,
            InvigilationDuty.duty_date.in_(dates),
        )
    ).scalars()
    return [
        BusyWindow(
            teacher_id=row.teacher_id,
            duty_date=row.duty_date,
            start_time=row.start_time,
            end_time=row.end_time,
        )
        for row in rows
    ]


def _ensure_single_chief(
    db: Session,
    *,
    school_id: int,
    duty_date: date,
    room_number: str,
    start_time: str,
    end_time: str,
    exclude_id: int | None = None,
) -> None:
    query = select(InvigilationDuty).where(
        InvigilationDuty.school_id == school_id,
        InvigilationDuty.duty_date == duty_date,
        InvigilationDuty.room_number == room_number,
        InvigilationDuty.duty_type == DutyType.chief,
    )
    if exclude_id is not None:
        query = query.where(InvigilationDuty.id != exclude_id)

    window_start = parse_time_to_minutes(start_time)
    window_end = parse_time_to_minutes(end_time)
    for other in db.execute(query).scalars():
        if times_overlap(
            window_start,
            window_end,
            parse_time_to_minutes(other.start_time),
            parse_time_to_minutes(other.end_time),
        ):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Room already has a chief invigilator for this slot",
            )


@router.get("/exam-schedules/{schedule_id}/duties", response_model=list[InvigilationDutyOut])
def list_duties(
    schedule_id: int,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> list[InvigilationDutyOut]:
    get_owned_or_404(db, ExamSchedule, schedule_id, school_id, "Exam schedule")
    return list(
        db.execute(
            select(InvigilationDuty)
            .where(InvigilationDuty.school_id == school_id, InvigilationDuty.exam_schedule_id == schedule_id)
            .order_by(InvigilationDuty.duty_date, InvigilationDuty.room_number, InvigilationDuty.id)
        ).scalars()
    )


@router.post(
    "/exam-schedules/{schedule_id}/duties",
    response_model=InvigilationDutyOut,
    status_code=status.HTTP_201_CREATED,
)
def create_duty(
    schedule_id: int,
    payload: InvigilationDutyCreate,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> InvigilationDutyOut:
    schedule = get_owned_or_404(db, ExamSchedule, schedule_id, school_id, "Exam schedule")
    get_owned_or_404(db, Teacher, payload.teacher_id, school_id, "Teacher")
    if payload.duty_type == DutyType.chief:
        _ensure_single_chief(
            db,
            school_id=school_id,
            duty_date=payload.duty_date,
            room_number=payload.room_number,
            start_time=payload.start_time,
            end_time=payload.end_time,
        )
    duty = InvigilationDuty(school_id=school_id, exam_schedule_id=schedule.id, **payload.model_dump())
    db.add(duty)
    db.commit()
    db.refresh(duty)
    return duty


@router.post("/exam-schedules/{schedule_id}/duties/auto-generate", response_model=AutoDutyResponse)
def auto_generate_duties(
    schedule_id: int,
    payload: AutoDutyRequest,
    school_id: int = Depends(get_school_id),
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> AutoDutyResponse:
    settings = get_settings()
    schedule = get_owned_or_404(db, ExamSchedule, schedule_id, school_id, "Exam schedule")
    ratio = payload.ratio or RatioConfig(
        chief_ratio=settings.default_chief_ratio,
        assistant_ratio=settings.default_assistant_ratio,
    )
    dates = payload.dates if payload.dates is not None else [schedule.exam_date]
    start_time = payload.start_time or schedule.start_time
    end_time = payload.end_time or schedule.end_time

    started = perf_counter()
    logger.info(
        "AUTO DUTY GENERATION START | school_id=%s | schedule_id=%s | dates=%s | chief_ratio=%s | assistant_ratio=%s",
        school_id,
        schedule.id,
        len(dates),
        ratio.chief_ratio,
        ratio.assistant_ratio,
    )
    with generation_guard(kind="duty", school_id=school_id, exam_schedule_id=schedule.id):
        try:
            result = assign_duties(
                _load_duty_teachers(db, school_id, dates, payload.teacher_ids),
                _load_duty_rooms(db, school_id, payload.room_ids),
                dates,
                ratio,
                start_time=start_time,
                end_time=end_time,
                existing_duties=_busy_windows(db, school_id, schedule.id, dates),
                exam_classes=[schedule.class_name] if schedule.class_name else [],
                avoid_own_class=payload.avoid_own_class,
            )
            records = replace_duties(db, school_id=school_id, schedule=schedule, assignments=result.assignments)
            log_activity(
                db,
                school_id=school_id,
                actor=actor,
                action="duties.auto_generate",
                entity_type="exam_schedule",
                entity_id=schedule.id,
                details={
                    "assignments": result.stats.total_assignments,
                    "teachers_used": result.stats.teachers_used,
                    "unassigned": result.stats.unassigned_count,
                },
            )
            db.commit()
        except SchedulerError as exc:
            db.rollback()
            logger.warning(
                "AUTO DUTY GENERATION REJECTED | school_id=%s | schedule_id=%s | reason=%s",
                school_id,
                schedule_id,
                exc.message,
            )
            raise
        except Exception:
            db.rollback()
            logger.exception(
                "AUTO DUTY GENERATION FAILED | school_id=%s | schedule_id=%s | wall_ms=%s",
                school_id,
                schedule_id,
                int((perf_counter() - started) * 1000),
            )
            raise

    for record in records:
        db.refresh(record)
    logger.info(
        "AUTO DUTY GENERATION COMPLETE | school_id=%s | schedule_id=%s | assignments=%s | unassigned=%s | wall_ms=%s",
        school_id,
        schedule_id,
        result.stats.total_assignments,
        result.stats.unassigned_count,
        int((perf_counter() - started) * 1000),
    )
    return AutoDutyResponse(
        assignments=[InvigilationDutyOut.model_validate(item) for item in records],
        stats=result.stats,
    )


@router.put("/duties/{duty_id}", response_model=InvigilationDutyOut)
def update_duty(
    duty_id: int,
    payload: InvigilationDutyUpdate,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> InvigilationDutyOut:
    duty = get_owned_or_404(db, InvigilationDuty, duty_id, school_id, "Duty")
    data = payload.model_dump(exclude_unset=True)
    if data.get("teacher_id") is not None:
        get_owned_or_404(db, Teacher, data["teacher_id"], school_id, "Teacher")
    if (data.get("duty_type") or duty.duty_type) == DutyType.chief:
        _ensure_single_chief(
            db,
            school_id=school_id,
            duty_date=duty.duty_date,
            room_number=data.get("room_number") or duty.room_number,
            start_time=duty.start_time,
            end_time=duty.end_time,
            exclude_id=duty.id,
        )

    for key, value in data.items():
        if value is None and key != "notes":
            continue
        setattr(duty, key, value)
    db.commit()
    db.refresh(duty)
    return duty


@router.delete("/duties/{duty_id}")
def delete_duty(
    duty_id: int,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> dict:
    duty = get_owned_or_404(db, InvigilationDuty, duty_id, school_id, "Duty")
    swaps = db.execute(select(DutySwap).where(DutySwap.duty_id == duty.id)).scalars()
    for swap in swaps:
        db.delete(swap)
    db.delete(duty)
    db.commit()
    return {"success": True}
