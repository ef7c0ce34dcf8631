from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging
import math
import random

from examdesk.core.exceptions import SchedulerError
from examdesk.schemas.seating import (
    SEATING_PATTERNS,
    SeatingOptions,
    SeatingResult,
    SeatingRoom,
    SeatingStats,
    SeatingStudent,
    SeatPlacement,
)

logger = logging.getLogger(__name__)

DEFAULT_ROWS_WHEN_UNKNOWN = 5


@dataclass(frozen=True)
class RoomGeometry:
    rows_count: int
    seats_per_row: int
    usable_seats: int


@dataclass
class RoomFill:
    placements: list[SeatPlacement]
    next_position: int
    adjacency_violations: int


def room_geometry(room: SeatingRoom) -> RoomGeometry:
    """Rows and columns of a room, deriving whichever side is missing from capacity."""
    if room.capacity <= 0:
        return RoomGeometry(rows_count=0, seats_per_row=0, usable_seats=0)
    seats_per_row = room.seats_per_row or math.ceil(room.capacity / (room.rows_count or DEFAULT_ROWS_WHEN_UNKNOWN))
    rows_count = room.rows_count or math.ceil(room.capacity / seats_per_row)
    return RoomGeometry(
        rows_count=rows_count,
        seats_per_row=seats_per_row,
        usable_seats=min(rows_count * seats_per_row, room.capacity),
    )


def roll_sort_key(student: SeatingStudent) -> tuple[int, int, str]:
    roll = student.roll_number.strip()
    if roll.isdigit():
        return (0, int(roll), "")
    return (1, 0, roll)


def interleave_by_class(students: Sequence[SeatingStudent]) -> list[SeatingStudent]:
    """Take one student per class section in rotation, sections in order of first appearance."""
    by_class: dict[tuple[str, str], list[SeatingStudent]] = {}
    for student in students:
        by_class.setdefault((student.class_name, student.section or ""), []).append(student)

    result: list[SeatingStudent] = []
    longest = max((len(group) for group in by_class.values()), default=0)
    for index in range(longest):
        for group in by_class.values():
            if index < len(group):
                result.append(group[index])
    return result


def order_students(
    students: Sequence[SeatingStudent],
    pattern: str,
    options: SeatingOptions,
    rng: random.Random,
) -> list[SeatingStudent]:
    if pattern == "roll-random":
        ordered = list(students)
        rng.shuffle(ordered)
    elif pattern == "class-mixing":
        ordered = interleave_by_class(sorted(students, key=roll_sort_key))
    else:
        # zigzag shares the roll order; it only differs at placement time.
        ordered = sorted(students, key=roll_sort_key)

    if options.prioritize_special_needs:
        ordered = [item for item in ordered if item.is_special_needs] + [
            item for item in ordered if not item.is_special_needs
        ]
    return ordered


def column_order(row_index: int, seats_per_row: int, *, zigzag: bool) -> range:
    if zigzag and row_index % 2 == 1:
        return range(seats_per_row - 1, -1, -1)
    return range(seats_per_row)


def _find_swap_candidate(
    queue: list[SeatingStudent],
    position: int,
    blocked_classes: set[str],
    lookahead: int,
    keep_special_needs_order: bool,
) -> int | None:
    current = queue[position]
    last = min(len(queue), position + 1 + lookahead)
    for index in range(position + 1, last):
        candidate = queue[index]
        if candidate.class_name in blocked_classes:
            continue
        if keep_special_needs_order and candidate.is_special_needs != current.is_special_needs:
            continue
        return index
    return None


def _fill_room(
    room: SeatingRoom,
    queue: list[SeatingStudent],
    position: int,
    *,
    zigzag: bool,
    options: SeatingOptions,
) -> RoomFill:
    geometry = room_geometry(room)
    occupied: dict[tuple[int, int], str] = {}
    placements: list[SeatPlacement] = []
    violations = 0

    for row_index in range(geometry.rows_count):
        previous_column: int | None = None
        for column_index in column_order(row_index, geometry.seats_per_row, zigzag=zigzag):
            if position >= len(queue) or len(placements) >= geometry.usable_seats:
                return RoomFill(placements=placements, next_position=position, adjacency_violations=violations)

            if options.prevent_class_adjacency:
                neighbours = {
                    occupied.get((row_index, previous_column)) if previous_column is not None else None,
                    occupied.get((row_index - 1, column_index)),
                }
                neighbours.discard(None)
                if queue[position].class_name in neighbours:
                    swap_index = _find_swap_candidate(
                        queue,
                        position,
                        neighbours,
                        options.adjacency_lookahead,
                        options.prioritize_special_needs,
                    )
                    if swap_index is None:
                        violations += 1
                    else:
                        queue[position], queue[swap_index] = queue[swap_index], queue[position]

            student = queue[position]
            position += 1
            occupied[(row_index, column_index)] = student.class_name
            previous_column = column_index
            placements.append(
                SeatPlacement(
                    student_id=student.id,
                    room_id=room.id,
                    room_number=room.name,
                    seat_number=row_index * geometry.seats_per_row + column_index + 1,
                    row_number=row_index + 1,
                    column_number=column_index + 1,
                    is_special_needs=student.is_special_needs,
                    special_needs_note=student.special_needs_note,
                )
            )

    return RoomFill(placements=placements, next_position=position, adjacency_violations=violations)


def generate_seating(
    students: Sequence[SeatingStudent],
    rooms: Sequence[SeatingRoom],
    pattern: str = "zigzag",
    options: SeatingOptions | None = None,
    *,
    rng: random.Random | None = None,
) -> SeatingResult:
    """Seat students across rooms.

    Students are ordered by the pattern (special-needs students first when
    requested), then poured into rooms in the given order, row by row. The
    zigzag pattern walks odd row indexes right to left. With class adjacency
    prevention on, a student who would sit beside or behind a classmate is
    swapped with the next queued student of another class found within
    ``options.adjacency_lookahead`` positions; when none exists the seat is
    taken anyway and counted as a violation. Students left over once every
    room is full are reported as unseated rather than raising.
    """
    options = options or SeatingOptions()
    if not students:
        raise SchedulerError("No students available for seating", details={"resource": "students"})
    if not rooms:
        raise SchedulerError("No rooms available for seating", details={"resource": "rooms"})
    if pattern not in SEATING_PATTERNS:
        raise SchedulerError(
            f"Unknown seating pattern '{pattern}'",
            details={"allowed_patterns": list(SEATING_PATTERNS)},
        )

    rng = rng or random.Random(options.random_seed)
    queue = order_students(students, pattern, options, rng)

    arrangements: list[SeatPlacement] = []
    rooms_used = 0
    violations = 0
    position = 0
    for room in rooms:
        if position >= len(queue):
            break
        fill = _fill_room(room, queue, position, zigzag=pattern == "zigzag", options=options)
        if fill.placements:
            rooms_used += 1
        arrangements.extend(fill.placements)
        violations += fill.adjacency_violations
        position = fill.next_position

    unseated = [student.id for student in queue[position:]]
    stats = SeatingStats(
        total_students=len(students),
        total_seats=sum(room_geometry(room).usable_seats for room in rooms),
        seats_used=len(arrangements),
        rooms_used=rooms_used,
        special_needs_seats=sum(1 for item in arrangements if item.is_special_needs),
        unseated_count=len(unseated),
        unseated_student_ids=unseated,
        adjacency_violations=violations,
    )

    if unseated:
        logger.warning(
            "SEATING CAPACITY SHORTFALL | students=%s | seats=%s | unseated=%s",
            stats.total_students,
            stats.total_seats,
            stats.unseated_count,
        )
    logger.info(
        "SEATING GENERATED | pattern=%s | seated=%s | rooms_used=%s | special_needs=%s | adjacency_violations=%s",
        pattern,
        stats.seats_used,
        stats.rooms_used,
        stats.special_needs_seats,
        stats.adjacency_violations,
    )
    return SeatingResult(arrangements=arrangements, stats=stats)
