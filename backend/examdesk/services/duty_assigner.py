from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
import logging

from examdesk.core.exceptions import SchedulerError
from examdesk.models.invigilation import DutyType
from examdesk.schemas.common import parse_time_to_minutes, validate_time_order
from examdesk.schemas.duty import (
    AutoDutyResult,
    BusyWindow,
    DutyAssignment,
    DutyRoom,
    DutyStats,
    DutyTeacher,
    RatioConfig,
    UnassignedSlot,
)
from examdesk.services.conflict_detector import times_overlap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DutySlot:
    duty_date: date
    room: DutyRoom
    duty_type: DutyType


def assistants_per_room(ratio: RatioConfig) -> int:
    """Assistant slots created next to each chief slot, rounded half up, at least one."""
    return max(1, (2 * ratio.assistant_ratio + ratio.chief_ratio) // (2 * ratio.chief_ratio))


def build_slots(rooms: Sequence[DutyRoom], dates: Sequence[date], ratio: RatioConfig) -> list[DutySlot]:
    assistants = assistants_per_room(ratio)
    slots: list[DutySlot] = []
    for duty_date in dates:
        for room in rooms:
            slots.append(DutySlot(duty_date=duty_date, room=room, duty_type=DutyType.chief))
            for _ in range(assistants):
                slots.append(DutySlot(duty_date=duty_date, room=room, duty_type=DutyType.assistant))
    return slots


def assign_duties(
    teachers: Sequence[DutyTeacher],
    rooms: Sequence[DutyRoom],
    dates: Sequence[date],
    ratio_config: RatioConfig,
    *,
    start_time: str = "10:00",
    end_time: str = "13:00",
    existing_duties: Iterable[BusyWindow] = (),
    exam_classes: Iterable[str] = (),
    avoid_own_class: bool = True,
) -> AutoDutyResult:
    """Greedy round-robin invigilation roster.

    Every (date, room) pair gets one chief and a ratio-derived number of
    assistants. Slots are filled in date, room, chief-first order by the
    eligible teacher holding the fewest duties so far. A teacher is eligible
    when active, not marked unavailable for the date, and free of any
    overlapping duty that day (from this run or ``existing_duties``). With
    ``avoid_own_class`` on, teachers whose own class sits the exam (any of
    ``exam_classes``) are passed over. Slots nobody can take are reported
    in the stats instead of failing the run.
    """
    active_teachers = [teacher for teacher in teachers if teacher.is_active]
    if not active_teachers:
        raise SchedulerError("No teachers available for invigilation duty", details={"resource": "teachers"})
    if not rooms:
        raise SchedulerError("No rooms available for invigilation duty", details={"resource": "rooms"})
    try:
        validate_time_order(start_time, end_time)
    except ValueError as exc:
        raise SchedulerError(str(exc), details={"start_time": start_time, "end_time": end_time}) from exc

    window_start = parse_time_to_minutes(start_time)
    window_end = parse_time_to_minutes(end_time)

    busy: dict[tuple[int, date], list[tuple[int, int]]] = defaultdict(list)
    for window in existing_duties:
        busy[(window.teacher_id, window.duty_date)].append(
            (parse_time_to_minutes(window.start_time), parse_time_to_minutes(window.end_time))
        )

    unavailable = {teacher.id: set(teacher.unavailable_dates) for teacher in active_teachers}
    own_class_excluded = set(exam_classes) if avoid_own_class else set()
    load: dict[int, int] = {teacher.id: 0 for teacher in active_teachers}

    assignments: list[DutyAssignment] = []
    unassigned: list[UnassignedSlot] = []

    for slot in build_slots(rooms, dates, ratio_config):
        chosen: DutyTeacher | None = None
        for teacher in active_teachers:
            if teacher.class_name in own_class_excluded:
                continue
            if slot.duty_date in unavailable[teacher.id]:
                continue
            if any(
                times_overlap(window_start, window_end, held_start, held_end)
                for held_start, held_end in busy[(teacher.id, slot.duty_date)]
            ):
                continue
            # Strict comparison keeps the first teacher in input order on ties.
            if chosen is None or load[teacher.id] < load[chosen.id]:
                chosen = teacher

        if chosen is None:
            unassigned.append(
                UnassignedSlot(duty_date=slot.duty_date, room_name=slot.room.name, duty_type=slot.duty_type)
            )
            continue

        load[chosen.id] += 1
        busy[(chosen.id, slot.duty_date)].append((window_start, window_end))
        assignments.append(
            DutyAssignment(
                teacher_id=chosen.id,
                teacher_name=chosen.name,
                room_id=slot.room.id,
                room_name=slot.room.name,
                duty_type=slot.duty_type,
                duty_date=slot.duty_date,
                start_time=start_time,
                end_time=end_time,
            )
        )

    if unassigned:
        logger.warning(
            "DUTY ASSIGNMENT SHORTFALL | unassigned_slots=%s | teachers=%s | rooms=%s | dates=%s",
            len(unassigned),
            len(active_teachers),
            len(rooms),
            len(dates),
        )

    stats = DutyStats(
        total_assignments=len(assignments),
        teachers_used=len({item.teacher_id for item in assignments}),
        chief_count=sum(1 for item in assignments if item.duty_type == DutyType.chief),
        assistant_count=sum(1 for item in assignments if item.duty_type == DutyType.assistant),
        unassigned_count=len(unassigned),
        unassigned_slots=unassigned,
    )
    return AutoDutyResult(assignments=assignments, stats=stats)
