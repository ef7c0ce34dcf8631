from __future__ import annotations

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from examdesk.api.deps import get_actor, get_db, get_owned_or_404, get_school_id
from examdesk.models.invigilation import DutySwap, InvigilationDuty, SwapStatus
from examdesk.models.teacher import Teacher, TeacherAvailability
from examdesk.schemas.common import parse_time_to_minutes
from examdesk.schemas.duty import DutySwapCreate, DutySwapDecision, DutySwapOut
from examdesk.services.audit import log_activity
from examdesk.services.conflict_detector import times_overlap

router = APIRouter()
logger = logging.getLogger(__name__)


def _ensure_teacher_can_take(db: Session, school_id: int, duty: InvigilationDuty, teacher_id: int) -> None:
    unavailable = db.execute(
        select(TeacherAvailability).where(
            TeacherAvailability.school_id == school_id,
            TeacherAvailability.teacher_id == teacher_id,
            TeacherAvailability.availability_date == duty.duty_date,
            TeacherAvailability.is_available.is_(False),
        )
    ).scalar_one_or_none()
    if unavailable is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Target teacher is unavailable on the duty date",
        )

    same_day = db.execute(
        select(InvigilationDuty).where(
            InvigilationDuty.school_id == school_id,
            InvigilationDuty.teacher_id == teacher_id,
            InvigilationDuty.duty_date == duty.duty_date,
            InvigilationDuty.id != duty.id,
        )
    ).scalars()
    start = parse_time_to_minutes(duty.start_time)
    end = parse_time_to_minutes(duty.end_time)
    for other in same_day:
        if times_overlap(start, end, parse_time_to_minutes(other.start_time), parse_time_to_minutes(other.end_time)):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Target teacher already has an overlapping duty",
            )


@router.get("/duty-swaps", response_model=list[DutySwapOut])
def list_duty_swaps(
    status_filter: SwapStatus | None = Query(default=None, alias="status"),
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> list[DutySwapOut]:
    query = select(DutySwap).where(DutySwap.school_id == school_id)
    if status_filter is not None:
        query = query.where(DutySwap.status == status_filter)
    return list(db.execute(query.order_by(DutySwap.id.desc())).scalars())


@router.post("/duty-swaps", response_model=DutySwapOut, status_code=status.HTTP_201_CREATED)
def create_duty_swap(
    payload: DutySwapCreate,
    school_id: int = Depends(get_school_id),
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> DutySwapOut:
    duty = get_owned_or_404(db, InvigilationDuty, payload.duty_id, school_id, "Duty")
    target = get_owned_or_404(db, Teacher, payload.to_teacher_id, school_id, "Teacher")
    if not target.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Target teacher is not active")
    if target.id == duty.teacher_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Duty is already assigned to this teacher")

    pending = db.execute(
        select(DutySwap).where(DutySwap.duty_id == duty.id, DutySwap.status == SwapStatus.pending)
    ).scalar_one_or_none()
    if pending is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A swap request for this duty is already pending")

    swap = DutySwap(
        school_id=school_id,
        duty_id=duty.id,
        from_teacher_id=duty.teacher_id,
        to_teacher_id=target.id,
        reason=payload.reason,
        status=SwapStatus.pending,
    )
    db.add(swap)
    db.flush()
    log_activity(
        db,
        school_id=school_id,
        actor=actor,
        action="duty_swaps.request",
        entity_type="duty_swap",
        entity_id=swap.id,
        details={"duty_id": duty.id, "from_teacher_id": duty.teacher_id, "to_teacher_id": target.id},
    )
    db.commit()
    db.refresh(swap)
    return swap


@router.put("/duty-swaps/{swap_id}/status", response_model=DutySwapOut)
def decide_duty_swap(
    swap_id: int,
    payload: DutySwapDecision,
    school_id: int = Depends(get_school_id),
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> DutySwapOut:
    swap = get_owned_or_404(db, DutySwap, swap_id, school_id, "Duty swap")
    if swap.status != SwapStatus.pending:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Duty swap is already {swap.status.value}",
        )

    decision = SwapStatus(payload.status)
    if decision == SwapStatus.approved:
        duty = get_owned_or_404(db, InvigilationDuty, swap.duty_id, school_id, "Duty")
        if duty.teacher_id != swap.from_teacher_id:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Duty has been reassigned since the swap was requested",
            )
        _ensure_teacher_can_take(db, school_id, duty, swap.to_teacher_id)
        duty.teacher_id = swap.to_teacher_id

    swap.status = decision
    swap.approved_by = payload.approved_by or actor
    swap.decision_note = payload.decision_note
    swap.decided_at = datetime.now(timezone.utc)
    log_activity(
        db,
        school_id=school_id,
        actor=actor,
        action=f"duty_swaps.{decision.value}",
        entity_type="duty_swap",
        entity_id=swap.id,
        details={"duty_id": swap.duty_id, "to_teacher_id": swap.to_teacher_id},
    )
    db.commit()
    db.refresh(swap)
    logger.info(
        "DUTY SWAP DECIDED | school_id=%s | swap_id=%s | status=%s | duty_id=%s",
        school_id,
        swap.id,
        decision.value,
        swap.duty_id,
    )
    return swap
