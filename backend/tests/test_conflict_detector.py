from datetime import date

import pytest

from examdesk.schemas.exam_schedule import ScheduleEntryPayload
from examdesk.schemas.teacher import TeacherAvailabilityPayload
from examdesk.services.conflict_detector import annotate_schedule, detect_conflicts, times_overlap

EXAM_DAY = date(2026, 3, 2)


def _entry(entry_id, start="09:00", end="10:00", **overrides):
    values = {
        "id": entry_id,
        "subject": f"Subject {entry_id}",
        "exam_date": EXAM_DAY,
        "start_time": start,
        "end_time": end,
        "room_id": None,
        "teacher_id": None,
        "class_name": None,
    }
    values.update(overrides)
    return ScheduleEntryPayload(**values)


def test_times_overlap_is_half_open():
    assert times_overlap(540, 600, 570, 630)
    assert not times_overlap(540, 600, 600, 660)
    assert not times_overlap(600, 660, 540, 600)


@pytest.mark.parametrize(
    ("field", "value", "conflict_type", "severity"),
    [
        ("class_name", "10-A", "time_overlap", "error"),
        ("room_id", 7, "room_occupied", "warning"),
        ("teacher_id", 3, "teacher_busy", "error"),
    ],
)
def test_overlap_is_reported_from_both_sides(field, value, conflict_type, severity):
    first = _entry(1, "09:00", "11:00", **{field: value})
    second = _entry(2, "10:00", "12:00", **{field: value})
    entries = [first, second]

    from_first = detect_conflicts(first, entries)
    from_second = detect_conflicts(second, entries)

    assert [(item.conflict_type, item.severity, item.conflict_with) for item in from_first] == [
        (conflict_type, severity, 2)
    ]
    assert [(item.conflict_type, item.severity, item.conflict_with) for item in from_second] == [
        (conflict_type, severity, 1)
    ]


def test_adjacent_ranges_and_other_dates_do_not_conflict():
    base = _entry(1, "09:00", "10:00", class_name="10-A", room_id=1, teacher_id=1)
    back_to_back = _entry(2, "10:00", "11:00", class_name="10-A", room_id=1, teacher_id=1)
    next_day = _entry(3, "09:00", "10:00", class_name="10-A", room_id=1, teacher_id=1, exam_date=date(2026, 3, 3))

    assert detect_conflicts(base, [base, back_to_back, next_day]) == []
    assert detect_conflicts(back_to_back, [base, back_to_back, next_day]) == []


def test_checks_only_run_for_references_the_candidate_carries():
    candidate = _entry(None, "09:00", "10:00")
    others = [_entry(1, "09:00", "10:00", class_name="10-A", room_id=1, teacher_id=1)]

    assert detect_conflicts(candidate, others) == []


def test_conflict_order_and_messages():
    candidate = _entry(None, "09:30", "10:30", class_name="10-A", room_id=4, teacher_id=9)
    entries = [
        _entry(1, "09:00", "10:00", subject="Physics", class_name="10-A"),
        _entry(2, "10:00", "11:00", subject="Chemistry", room_id=4),
        _entry(3, "08:00", "12:00", subject="Biology", teacher_id=9),
    ]
    availability = [
        TeacherAvailabilityPayload(teacher_id=9, availability_date=EXAM_DAY, is_available=False, reason="Training"),
    ]

    conflicts = detect_conflicts(candidate, entries, availability)

    assert [item.conflict_type for item in conflicts] == [
        "time_overlap",
        "room_occupied",
        "teacher_busy",
        "teacher_busy",
    ]
    assert conflicts[0].message == "Time overlap with Physics exam"
    assert conflicts[1].message == "Room already occupied for Chemistry exam"
    assert conflicts[2].severity == "warning"
    assert "Training" in conflicts[2].message
    assert conflicts[2].conflict_with is None
    assert conflicts[3].message == "Teacher already assigned to Biology exam"


def test_unavailability_without_reason_says_not_specified():
    candidate = _entry(5, teacher_id=2)
    availability = [TeacherAvailabilityPayload(teacher_id=2, availability_date=EXAM_DAY, is_available=False)]

    conflicts = detect_conflicts(candidate, [candidate], availability)

    assert len(conflicts) == 1
    assert conflicts[0].message.endswith("(reason: not specified)")


def test_available_record_does_not_flag_teacher():
    candidate = _entry(5, teacher_id=2)
    availability = [TeacherAvailabilityPayload(teacher_id=2, availability_date=EXAM_DAY, is_available=True)]

    assert detect_conflicts(candidate, [candidate], availability) == []


def test_entry_is_not_compared_with_itself():
    entry = _entry(1, class_name="10-A", room_id=1, teacher_id=1)

    assert detect_conflicts(entry, [entry]) == []


def test_annotate_schedule_covers_every_entry():
    entries = [
        _entry(1, "09:00", "10:00", room_id=1),
        _entry(2, "09:30", "10:30", room_id=1),
        _entry(3, "11:00", "12:00", room_id=1),
        _entry(4, "09:00", "10:00", room_id=1, exam_date=date(2026, 3, 4)),
    ]

    annotations = annotate_schedule(entries)

    assert set(annotations) == {1, 2, 3, 4}
    assert [item.conflict_with for item in annotations[1]] == [2]
    assert [item.conflict_with for item in annotations[2]] == [1]
    assert annotations[3] == []
    assert annotations[4] == []
