"""Seed a demo school with teachers, rooms, students and one exam timetable.

Run:
  PYTHONPATH=backend python scripts/seed_exam_data.py

Set DEMO_SCHOOL_ID to seed a different tenant (default 1). Re-running replaces
the demo records of that school.
"""

from __future__ import annotations

from datetime import date, timedelta
import os

from sqlalchemy import delete, select

from examdesk.db.bootstrap import ensure_runtime_schema_compatibility
from examdesk.db.session import SessionLocal
from examdesk.models.exam import Exam, ExamSchedule
from examdesk.models.room import Room
from examdesk.models.student import Student
from examdesk.models.teacher import Teacher, TeacherAvailability
from examdesk.services.schedule_records import delete_schedules

SCHOOL_ID = int(os.getenv("DEMO_SCHOOL_ID", "1"))
EXAM_NAME = "Demo Half-Yearly Examination"
EXAM_START = date(2026, 11, 2)

TEACHERS = [
    ("Anita Kulkarni", "Mathematics"),
    ("Bharat Menon", "Physics"),
    ("Celine D'Souza", "Chemistry"),
    ("Deepak Iyer", "Biology"),
    ("Esha Banerjee", "English"),
    ("Farhan Qureshi", "History"),
    ("Gita Natarajan", "Geography"),
    ("Harish Pillai", "Computer Science"),
    ("Indu Varghese", "Hindi"),
    ("Jatin Sethi", "Economics"),
    ("Kavya Reddy", "Art"),
    ("Lokesh Rao", "Physical Education"),
]

ROOMS = [
    ("Hall 101", 30, 5, 6),
    ("Hall 102", 30, 5, 6),
    ("Hall 103", 24, 4, 6),
    ("Library Annex", 20, None, None),
]

CLASSES = ["9-A", "9-B", "10-A", "10-B"]
STUDENTS_PER_CLASS = 24

TIMETABLE = [
    ("Mathematics", 0, "10:00", "13:00"),
    ("Science", 1, "10:00", "13:00"),
    ("English", 2, "10:00", "12:00"),
    ("Social Studies", 3, "10:00", "12:30"),
    ("Second Language", 4, "14:00", "16:00"),
]


def _reset_school(session) -> None:
    exam_ids = list(session.execute(select(Exam.id).where(Exam.school_id == SCHOOL_ID)).scalars())
    schedule_ids = list(
        session.execute(select(ExamSchedule.id).where(ExamSchedule.exam_id.in_(exam_ids))).scalars()
    )
    delete_schedules(session, schedule_ids)
    session.execute(delete(Exam).where(Exam.school_id == SCHOOL_ID))
    session.execute(delete(TeacherAvailability).where(TeacherAvailability.school_id == SCHOOL_ID))
    session.execute(delete(Teacher).where(Teacher.school_id == SCHOOL_ID))
    session.execute(delete(Student).where(Student.school_id == SCHOOL_ID))
    session.execute(delete(Room).where(Room.school_id == SCHOOL_ID))


def _seed(session) -> dict[str, int]:
    teachers = [
        Teacher(
            school_id=SCHOOL_ID,
            name=name,
            email=f"{name.split()[0].lower()}@demo-school.example",
            subject=subject,
        )
        for name, subject in TEACHERS
    ]
    session.add_all(teachers)

    rooms = [
        Room(school_id=SCHOOL_ID, name=name, capacity=capacity, rows_count=rows, seats_per_row=seats)
        for name, capacity, rows, seats in ROOMS
    ]
    session.add_all(rooms)

    students: list[Student] = []
    for class_name in CLASSES:
        for roll in range(1, STUDENTS_PER_CLASS + 1):
            students.append(
                Student(
                    school_id=SCHOOL_ID,
                    name=f"Student {class_name} {roll:02d}",
                    student_code=f"{class_name}-{roll:03d}",
                    class_name=class_name,
                    section=class_name.split("-")[1],
                    roll_number=str(roll),
                    is_special_needs=roll == 7,
                    special_needs_note="Needs ground-floor seating" if roll == 7 else None,
                )
            )
    session.add_all(students)

    exam = Exam(
        school_id=SCHOOL_ID,
        name=EXAM_NAME,
        start_date=EXAM_START,
        end_date=EXAM_START + timedelta(days=len(TIMETABLE) - 1),
        description="Seeded for local testing of duty and seating generation.",
    )
    session.add(exam)
    session.flush()

    schedules = 0
    for subject, offset, start_time, end_time in TIMETABLE:
        for index, class_name in enumerate(CLASSES):
            session.add(
                ExamSchedule(
                    school_id=SCHOOL_ID,
                    exam_id=exam.id,
                    subject=subject,
                    exam_date=EXAM_START + timedelta(days=offset),
                    start_time=start_time,
                    end_time=end_time,
                    room_id=rooms[index].id,
                    class_name=class_name,
                )
            )
            schedules += 1

    session.add(
        TeacherAvailability(
            school_id=SCHOOL_ID,
            teacher_id=teachers[0].id,
            availability_date=EXAM_START + timedelta(days=1),
            is_available=False,
            reason="Board evaluation duty",
        )
    )
    return {
        "teachers": len(teachers),
        "rooms": len(rooms),
        "students": len(students),
        "schedules": schedules,
    }


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        _reset_school(session)
        counts = _seed(session)
        session.commit()

    print("Exam demo data seeded successfully.")
    print("")
    print(f"School id: {SCHOOL_ID}")
    print(f"Exam: {EXAM_NAME}")
    print(f"Teachers: {counts['teachers']}")
    print(f"Rooms: {counts['rooms']}")
    print(f"Students: {counts['students']}")
    print(f"Schedule entries: {counts['schedules']}")


if __name__ == "__main__":
    main()
