from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from examdesk.models.invigilation import DutyType, SwapStatus
from examdesk.schemas.common import validate_time_order, validate_time_value


class RatioConfig(BaseModel):
    chief_ratio: int = Field(default=1, ge=1, le=20)
    assistant_ratio: int = Field(default=3, ge=1, le=20)


class DutyTeacher(BaseModel):
    id: int
    name: str
    email: str | None = None
    class_name: str | None = None
    is_active: bool = True
    unavailable_dates: list[date] = Field(default_factory=list)


class DutyRoom(BaseModel):
    id: int | None = None
    name: str = Field(min_length=1, max_length=100)
    capacity: int = Field(default=30, ge=0)


class BusyWindow(BaseModel):
    """A duty a teacher already holds outside the current generation run."""

    teacher_id: int
    duty_date: date
    start_time: str
    end_time: str


class DutyAssignment(BaseModel):
    teacher_id: int
    teacher_name: str
    room_id: int | None = None
    room_name: str
    duty_type: DutyType
    duty_date: date
    start_time: str
    end_time: str


class UnassignedSlot(BaseModel):
    duty_date: date
    room_name: str
    duty_type: DutyType


class DutyStats(BaseModel):
    total_assignments: int
    teachers_used: int
    chief_count: int
    assistant_count: int
    unassigned_count: int
    unassigned_slots: list[UnassignedSlot] = Field(default_factory=list)


class AutoDutyResult(BaseModel):
    assignments: list[DutyAssignment]
    stats: DutyStats


class InvigilationDutyBase(BaseModel):
    teacher_id: int
    room_number: str = Field(min_length=1, max_length=100)
    duty_type: DutyType = DutyType.assistant
    duty_date: date
    start_time: str
    end_time: str
    notes: str | None = Field(default=None, max_length=1000)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        return validate_time_value(value)

    @model_validator(mode="after")
    def validate_order(self) -> "InvigilationDutyBase":
        validate_time_order(self.start_time, self.end_time)
        return self


class InvigilationDutyCreate(InvigilationDutyBase):
    pass


class InvigilationDutyUpdate(BaseModel):
    teacher_id: int | None = None
    room_number: str | None = Field(default=None, min_length=1, max_length=100)
    duty_type: DutyType | None = None
    notes: str | None = Field(default=None, max_length=1000)


class InvigilationDutyOut(InvigilationDutyBase):
    id: int
    exam_schedule_id: int

    model_config = {"from_attributes": True}


class AutoDutyRequest(BaseModel):
    dates: list[date] | None = Field(default=None, max_length=60)
    ratio: RatioConfig | None = None
    room_ids: list[int] | None = None
    teacher_ids: list[int] | None = None
    start_time: str | None = None
    end_time: str | None = None
    avoid_own_class: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_optional_time(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return validate_time_value(value)

    @field_validator("dates")
    @classmethod
    def normalize_dates(cls, value: list[date] | None) -> list[date] | None:
        if value is None:
            return None
        return sorted(set(value))


class AutoDutyResponse(BaseModel):
    assignments: list[InvigilationDutyOut]
    stats: DutyStats


class DutySwapCreate(BaseModel):
    duty_id: int
    to_teacher_id: int
    reason: str | None = Field(default=None, max_length=1000)


class DutySwapDecision(BaseModel):
    status: Literal["approved", "rejected"]
    approved_by: str | None = Field(default=None, max_length=200)
    decision_note: str | None = Field(default=None, max_length=1000)


class DutySwapOut(BaseModel):
    id: int
    duty_id: int
    from_teacher_id: int
    to_teacher_id: int
    reason: str | None = None
    status: SwapStatus
    approved_by: str | None = None
    decision_note: str | None = None
    decided_at: datetime | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
