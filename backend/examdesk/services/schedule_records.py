from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from examdesk.models.exam import ExamSchedule
from examdesk.models.invigilation import DutySwap, InvigilationDuty
from examdesk.models.seating import SeatingArrangement, SeatingStatus
from examdesk.schemas.duty import DutyAssignment
from examdesk.schemas.seating import SeatPlacement


def delete_duties_for_schedules(db: Session, schedule_ids: Iterable[int]) -> None:
    ids = list(schedule_ids)
    if not ids:
        return
    duty_ids = select(InvigilationDuty.id).where(InvigilationDuty.exam_schedule_id.in_(ids))
    db.execute(delete(DutySwap).where(DutySwap.duty_id.in_(duty_ids)))
    db.execute(delete(InvigilationDuty).where(InvigilationDuty.exam_schedule_id.in_(ids)))


def delete_seating_for_schedules(db: Session, schedule_ids: Iterable[int]) -> None:
    ids = list(schedule_ids)
    if not ids:
        return
    db.execute(delete(SeatingArrangement).where(SeatingArrangement.exam_schedule_id.in_(ids)))


def delete_schedules(db: Session, schedule_ids: Iterable[int]) -> None:
    ids = list(schedule_ids)
    if not ids:
        return
    delete_seating_for_schedules(db, ids)
    delete_duties_for_schedules(db, ids)
    db.execute(delete(ExamSchedule).where(ExamSchedule.id.in_(ids)))


def replace_duties(
    db: Session,
    *,
    school_id: int,
    schedule: ExamSchedule,
    assignments: Iterable[DutyAssignment],
) -> list[InvigilationDuty]:
    """Swap the schedule's duty roster for ``assignments`` inside the caller's transaction.

    Nothing is committed here; the caller commits or rolls back the delete and
    the inserts together.
    """
    delete_duties_for_schedules(db, [schedule.id])
    records = [
        InvigilationDuty(
            school_id=school_id,
            exam_schedule_id=schedule.id,
            teacher_id=item.teacher_id,
            room_number=item.room_name,
            duty_type=item.duty_type,
            duty_date=item.duty_date,
            start_time=item.start_time,
            end_time=item.end_time,
        )
        for item in assignments
    ]
    db.add_all(records)
    db.flush()
    return records


def replace_seating(
    db: Session,
    *,
    school_id: int,
    schedule: ExamSchedule,
    placements: Iterable[SeatPlacement],
) -> list[SeatingArrangement]:
    delete_seating_for_schedules(db, [schedule.id])
    # The delete must reach the database before the inserts hit the unique seat constraints.
    db.flush()
    records = [
        SeatingArrangement(
            school_id=school_id,
            exam_schedule_id=schedule.id,
            student_id=item.student_id,
            room_id=item.room_id,
            room_number=item.room_number,
            seat_number=item.seat_number,
            row_number=item.row_number,
            column_number=item.column_number,
            is_special_needs=item.is_special_needs,
            special_needs_note=item.special_needs_note,
            status=SeatingStatus.pending,
        )
        for item in placements
    ]
    db.add_all(records)
    db.flush()
    return records
