import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from examdesk.api.deps import get_actor, get_db, get_owned_or_404, get_school_id
from examdesk.core.exceptions import ResourceNotFoundError
from examdesk.models.exam import Exam, ExamSchedule
from examdesk.schemas.exam import ExamBulkDelete, ExamCloneRequest, ExamCloneResponse, ExamCreate, ExamOut
from examdesk.services.audit import log_activity
from examdesk.services.schedule_records import delete_schedules

router = APIRouter()
logger = logging.getLogger(__name__)

CLONED_SCHEDULE_FIELDS = (
    "subject",
    "start_time",
    "end_time",
    "room_id",
    "teacher_id",
    "class_name",
    "full_marks",
    "pass_marks",
)


def _schedule_ids_for_exams(db: Session, school_id: int, exam_ids: list[int]) -> list[int]:
    return list(
        db.execute(
            select(ExamSchedule.id).where(ExamSchedule.school_id == school_id, ExamSchedule.exam_id.in_(exam_ids))
        ).scalars()
    )


@router.get("/exams", response_model=list[ExamOut])
def list_exams(school_id: int = Depends(get_school_id), db: Session = Depends(get_db)) -> list[ExamOut]:
    query = select(Exam).where(Exam.school_id == school_id).order_by(Exam.start_date, Exam.id)
    return list(db.execute(query).scalars())


@router.post("/exams", response_model=ExamOut, status_code=status.HTTP_201_CREATED)
def create_exam(
    payload: ExamCreate,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> ExamOut:
    exam = Exam(school_id=school_id, **payload.model_dump())
    db.add(exam)
    db.commit()
    db.refresh(exam)
    return exam


@router.delete("/exams/{exam_id}")
def delete_exam(
    exam_id: int,
    school_id: int = Depends(get_school_id),
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> dict:
    exam = get_owned_or_404(db, Exam, exam_id, school_id, "Exam")
    schedule_ids = _schedule_ids_for_exams(db, school_id, [exam.id])
    delete_schedules(db, schedule_ids)
    db.delete(exam)
    log_activity(
        db,
        school_id=school_id,
        actor=actor,
        action="exams.delete",
        entity_type="exam",
        entity_id=exam_id,
        details={"schedules_deleted": len(schedule_ids)},
    )
    db.commit()
    return {"success": True}


@router.post("/exams/{exam_id}/clone", response_model=ExamCloneResponse, status_code=status.HTTP_201_CREATED)
def clone_exam(
    exam_id: int,
    payload: ExamCloneRequest,
    school_id: int = Depends(get_school_id),
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> ExamCloneResponse:
    source = get_owned_or_404(db, Exam, exam_id, school_id, "Exam")
    clone = Exam(school_id=school_id, **payload.model_dump())
    db.add(clone)
    db.flush()

    # Schedule dates move with the exam period when both start dates are known.
    shift = None
    if source.start_date and payload.start_date:
        shift = payload.start_date - source.start_date

    schedules = db.execute(
        select(ExamSchedule)
        .where(ExamSchedule.school_id == school_id, ExamSchedule.exam_id == source.id)
        .order_by(ExamSchedule.id)
    ).scalars()
    copied = 0
    for schedule in schedules:
        values = {field: getattr(schedule, field) for field in CLONED_SCHEDULE_FIELDS}
        exam_date = schedule.exam_date + shift if shift is not None else schedule.exam_date
        db.add(ExamSchedule(school_id=school_id, exam_id=clone.id, exam_date=exam_date, **values))
        copied += 1

    log_activity(
        db,
        school_id=school_id,
        actor=actor,
        action="exams.clone",
        entity_type="exam",
        entity_id=clone.id,
        details={"source_exam_id": source.id, "schedules_copied": copied},
    )
    db.commit()
    db.refresh(clone)
    logger.info(
        "EXAM CLONED | school_id=%s | source_exam_id=%s | exam_id=%s | schedules=%s",
        school_id,
        source.id,
        clone.id,
        copied,
    )
    return ExamCloneResponse(exam=ExamOut.model_validate(clone), schedules_copied=copied)


@router.post("/exams/bulk-delete")
def bulk_delete_exams(
    payload: ExamBulkDelete,
    school_id: int = Depends(get_school_id),
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> dict:
    exam_ids = list(dict.fromkeys(payload.exam_ids))
    found = set(db.execute(select(Exam.id).where(Exam.school_id == school_id, Exam.id.in_(exam_ids))).scalars())
    missing = [item for item in exam_ids if item not in found]
    if missing:
        raise ResourceNotFoundError("Exam", missing[0])

    schedule_ids = _schedule_ids_for_exams(db, school_id, exam_ids)
    delete_schedules(db, schedule_ids)
    db.execute(delete(Exam).where(Exam.school_id == school_id, Exam.id.in_(exam_ids)))
    log_activity(
        db,
        school_id=school_id,
        actor=actor,
        action="exams.bulk_delete",
        entity_type="exam",
        details={"exam_ids": exam_ids, "schedules_deleted": len(schedule_ids)},
    )
    db.commit()
    logger.info(
        "EXAM BULK DELETE | school_id=%s | exams=%s | schedules=%s",
        school_id,
        len(exam_ids),
        len(schedule_ids),
    )
    return {"deleted": len(exam_ids), "schedules_deleted": len(schedule_ids)}
