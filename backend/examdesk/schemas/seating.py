from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from examdesk.models.seating import SeatingStatus

SeatingPattern = Literal["zigzag", "class-mixing", "roll-sequential", "roll-random"]
SEATING_PATTERNS: tuple[str, ...] = ("zigzag", "class-mixing", "roll-sequential", "roll-random")


class SeatingStudent(BaseModel):
    id: int
    name: str
    student_code: str | None = None
    class_name: str
    section: str | None = None
    roll_number: str
    is_special_needs: bool = False
    special_needs_note: str | None = None

    model_config = {"from_attributes": True}


class SeatingRoom(BaseModel):
    id: int | None = None
    name: str = Field(min_length=1, max_length=100)
    capacity: int = Field(ge=0)
    rows_count: int | None = Field(default=None, ge=1)
    seats_per_row: int | None = Field(default=None, ge=1)

    model_config = {"from_attributes": True}


class SeatingOptions(BaseModel):
    prioritize_special_needs: bool = True
    prevent_class_adjacency: bool = False
    random_seed: int | None = None
    adjacency_lookahead: int = Field(default=10, ge=0, le=500)


class SeatPlacement(BaseModel):
    student_id: int
    room_id: int | None = None
    room_number: str
    seat_number: int
    row_number: int
    column_number: int
    is_special_needs: bool = False
    special_needs_note: str | None = None


class SeatingStats(BaseModel):
    total_students: int
    total_seats: int
    seats_used: int
    rooms_used: int
    special_needs_seats: int
    unseated_count: int
    unseated_student_ids: list[int] = Field(default_factory=list)
    adjacency_violations: int = 0


class SeatingResult(BaseModel):
    arrangements: list[SeatPlacement]
    stats: SeatingStats


class AutoSeatingRequest(BaseModel):
    pattern: SeatingPattern | None = None
    prioritize_special_needs: bool = True
    prevent_class_adjacency: bool = False
    random_seed: int | None = None
    room_ids: list[int] | None = None
    class_names: list[str] | None = None


class SeatingArrangementOut(SeatPlacement):
    id: int
    exam_schedule_id: int
    status: SeatingStatus

    model_config = {"from_attributes": True}


class SeatingStatusUpdate(BaseModel):
    status: SeatingStatus


class AutoSeatingResponse(BaseModel):
    arrangements: list[SeatingArrangementOut]
    stats: SeatingStats
