import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from examdesk.api.deps import get_actor, get_db, get_owned_or_404, get_school_id
from examdesk.models.seating import SeatingArrangement
from examdesk.models.student import Student
from examdesk.schemas.student import StudentBulkCreate, StudentCreate, StudentOut, StudentUpdate
from examdesk.services.audit import log_activity

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/students", response_model=list[StudentOut])
def list_students(
    class_name: str | None = None,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> list[StudentOut]:
    query = select(Student).where(Student.school_id == school_id)
    if class_name:
        query = query.where(Student.class_name == class_name)
    return list(db.execute(query.order_by(Student.class_name, Student.roll_number)).scalars())


@router.post("/students", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(
    payload: StudentCreate,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> StudentOut:
    student = Student(school_id=school_id, **payload.model_dump())
    db.add(student)
    db.commit()
    db.refresh(student)
    return student


@router.post("/students/bulk", response_model=list[StudentOut], status_code=status.HTTP_201_CREATED)
def bulk_create_students(
    payload: StudentBulkCreate,
    school_id: int = Depends(get_school_id),
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> list[StudentOut]:
    codes = [item.student_code for item in payload.students]
    if len(codes) != len(set(codes)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Duplicate student_code in payload")

    students = [Student(school_id=school_id, **item.model_dump()) for item in payload.students]
    db.add_all(students)
    db.flush()
    log_activity(
        db,
        school_id=school_id,
        actor=actor,
        action="students.bulk_create",
        entity_type="student",
        details={"created": len(students)},
    )
    db.commit()
    for student in students:
        db.refresh(student)
    logger.info("STUDENT BULK IMPORT | school_id=%s | created=%s", school_id, len(students))
    return students


@router.put("/students/{student_id}", response_model=StudentOut)
def update_student(
    student_id: int,
    payload: StudentUpdate,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> StudentOut:
    student = get_owned_or_404(db, Student, student_id, school_id, "Student")
    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is None and key not in {"section", "special_needs_note"}:
            continue
        setattr(student, key, value)
    db.commit()
    db.refresh(student)
    return student


@router.delete("/students/{student_id}")
def delete_student(
    student_id: int,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> dict:
    student = get_owned_or_404(db, Student, student_id, school_id, "Student")
    db.execute(delete(SeatingArrangement).where(SeatingArrangement.student_id == student.id))
    db.delete(student)
    db.commit()
    return {"success": True}
