from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date

from examdesk.schemas.common import parse_time_to_minutes
from examdesk.schemas.conflict import ConflictDetail
from examdesk.schemas.exam_schedule import ScheduleEntryPayload
from examdesk.schemas.teacher import TeacherAvailabilityPayload


def times_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    # Half-open ranges: 09:00-10:00 and 10:00-11:00 do not overlap.
    return start_a < end_b and start_b < end_a


def _entries_overlap(left: ScheduleEntryPayload, right: ScheduleEntryPayload) -> bool:
    if left.exam_date != right.exam_date:
        return False
    return times_overlap(
        parse_time_to_minutes(left.start_time),
        parse_time_to_minutes(left.end_time),
        parse_time_to_minutes(right.start_time),
        parse_time_to_minutes(right.end_time),
    )


def _overlapping(
    candidate: ScheduleEntryPayload,
    others: list[ScheduleEntryPayload],
    attribute: str,
) -> list[ScheduleEntryPayload]:
    value = getattr(candidate, attribute)
    if value is None:
        return []
    return [item for item in others if getattr(item, attribute) == value and _entries_overlap(candidate, item)]


def _unavailability(
    candidate: ScheduleEntryPayload,
    teacher_availability: Iterable[TeacherAvailabilityPayload],
) -> TeacherAvailabilityPayload | None:
    if candidate.teacher_id is None:
        return None
    for record in teacher_availability:
        if (
            record.teacher_id == candidate.teacher_id
            and record.availability_date == candidate.exam_date
            and not record.is_available
        ):
            return record
    return None


def detect_conflicts(
    candidate: ScheduleEntryPayload,
    all_entries: Iterable[ScheduleEntryPayload],
    teacher_availability: Iterable[TeacherAvailabilityPayload] = (),
) -> list[ConflictDetail]:
    """Return every conflict of ``candidate`` against ``all_entries``.

    The candidate may or may not be part of ``all_entries``; entries sharing its
    id are skipped. Checks run in a fixed order (class time overlap, room
    occupancy, teacher unavailability, teacher double-booking) and their
    findings are concatenated in that order.
    """
    others = [
        item
        for item in all_entries
        if candidate.id is None or item.id != candidate.id
    ]
    conflicts: list[ConflictDetail] = []

    for other in _overlapping(candidate, others, "class_name"):
        conflicts.append(
            ConflictDetail(
                conflict_type="time_overlap",
                severity="error",
                message=f"Time overlap with {other.subject} exam",
                schedule_id=candidate.id,
                conflict_with=other.id,
            )
        )

    for other in _overlapping(candidate, others, "room_id"):
        conflicts.append(
            ConflictDetail(
                conflict_type="room_occupied",
                severity="warning",
                message=f"Room already occupied for {other.subject} exam",
                schedule_id=candidate.id,
                conflict_with=other.id,
            )
        )

    unavailable = _unavailability(candidate, teacher_availability)
    if unavailable is not None:
        reason = (unavailable.reason or "").strip() or "not specified"
        conflicts.append(
            ConflictDetail(
                conflict_type="teacher_busy",
                severity="warning",
                message=f"Teacher is unavailable on {candidate.exam_date.isoformat()} (reason: {reason})",
                schedule_id=candidate.id,
            )
        )

    for other in _overlapping(candidate, others, "teacher_id"):
        conflicts.append(
            ConflictDetail(
                conflict_type="teacher_busy",
                severity="error",
                message=f"Teacher already assigned to {other.subject} exam",
                schedule_id=candidate.id,
                conflict_with=other.id,
            )
        )

    return conflicts


def annotate_schedule(
    entries: Iterable[ScheduleEntryPayload],
    teacher_availability: Iterable[TeacherAvailabilityPayload] = (),
) -> dict[int | None, list[ConflictDetail]]:
    """Conflicts for every entry against the full entry set, keyed by entry id."""
    items = list(entries)
    availability = list(teacher_availability)

    # Only entries on the same date can collide.
    by_date: dict[date, list[ScheduleEntryPayload]] = defaultdict(list)
    for item in items:
        by_date[item.exam_date].append(item)

    annotations: dict[int | None, list[ConflictDetail]] = {}
    for item in items:
        annotations[item.id] = detect_conflicts(item, by_date[item.exam_date], availability)
    return annotations
