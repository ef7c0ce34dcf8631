from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from examdesk.api.deps import get_db, get_owned_or_404, get_school_id
from examdesk.models.invigilation import InvigilationDuty
from examdesk.models.teacher import Teacher, TeacherAvailability
from examdesk.schemas.teacher import (
    TeacherAvailabilityCreate,
    TeacherAvailabilityOut,
    TeacherCreate,
    TeacherOut,
    TeacherUpdate,
)

router = APIRouter()


@router.get("/teachers", response_model=list[TeacherOut])
def list_teachers(
    active_only: bool = False,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> list[TeacherOut]:
    query = select(Teacher).where(Teacher.school_id == school_id)
    if active_only:
        query = query.where(Teacher.is_active.is_(True))
    return list(db.execute(query.order_by(Teacher.name)).scalars())


@router.post("/teachers", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def create_teacher(
    payload: TeacherCreate,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> TeacherOut:
    teacher = Teacher(school_id=school_id, **payload.model_dump())
    db.add(teacher)
    db.commit()
    db.refresh(teacher)
    return teacher


@router.put("/teachers/{teacher_id}", response_model=TeacherOut)
def update_teacher(
    teacher_id: int,
    payload: TeacherUpdate,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> TeacherOut:
    teacher = get_owned_or_404(db, Teacher, teacher_id, school_id, "Teacher")
    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is None and key in {"name", "is_active"}:
            continue
        setattr(teacher, key, value)
    db.commit()
    db.refresh(teacher)
    return teacher


@router.delete("/teachers/{teacher_id}")
def delete_teacher(
    teacher_id: int,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> dict:
    teacher = get_owned_or_404(db, Teacher, teacher_id, school_id, "Teacher")
    has_duties = db.execute(select(InvigilationDuty.id).where(InvigilationDuty.teacher_id == teacher.id)).first()
    if has_duties is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Teacher has invigilation duties; deactivate instead",
        )
    db.execute(delete(TeacherAvailability).where(TeacherAvailability.teacher_id == teacher.id))
    db.delete(teacher)
    db.commit()
    return {"success": True}


@router.get("/teachers/{teacher_id}/availability", response_model=list[TeacherAvailabilityOut])
def list_teacher_availability(
    teacher_id: int,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> list[TeacherAvailabilityOut]:
    teacher = get_owned_or_404(db, Teacher, teacher_id, school_id, "Teacher")
    return list(
        db.execute(
            select(TeacherAvailability)
            .where(TeacherAvailability.teacher_id == teacher.id)
            .order_by(TeacherAvailability.availability_date)
        ).scalars()
    )


@router.post("/teachers/{teacher_id}/availability", response_model=TeacherAvailabilityOut)
def set_teacher_availability(
    teacher_id: int,
    payload: TeacherAvailabilityCreate,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> TeacherAvailabilityOut:
    teacher = get_owned_or_404(db, Teacher, teacher_id, school_id, "Teacher")
    record = db.execute(
        select(TeacherAvailability).where(
            TeacherAvailability.teacher_id == teacher.id,
            TeacherAvailability.availability_date == payload.availability_date,
        )
    ).scalar_one_or_none()
    if record is None:
        record = TeacherAvailability(
            school_id=school_id,
            teacher_id=teacher.id,
            availability_date=payload.availability_date,
        )
        db.add(record)
    record.is_available = payload.is_available
    record.reason = payload.reason
    db.commit()
    db.refresh(record)
    return record
