from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, field_validator, model_validator

from examdesk.schemas.common import validate_time_order, validate_time_value
from examdesk.schemas.conflict import ConflictDetail


class ScheduleEntryPayload(BaseModel):
    """A schedule entry as seen by the conflict detector."""

    id: int | None = None
    subject: str = Field(min_length=1, max_length=200)
    exam_date: date
    start_time: str
    end_time: str
    room_id: int | None = None
    teacher_id: int | None = None
    class_name: str | None = None

    model_config = {"from_attributes": True}

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        return validate_time_value(value)

    @model_validator(mode="after")
    def validate_order(self) -> "ScheduleEntryPayload":
        validate_time_order(self.start_time, self.end_time)
        return self


class ExamScheduleBase(BaseModel):
    exam_id: int
    subject: str = Field(min_length=1, max_length=200)
    exam_date: date
    start_time: str
    end_time: str
    room_id: int | None = None
    teacher_id: int | None = None
    class_name: str | None = Field(default=None, max_length=50)
    full_marks: int = Field(default=100, ge=1, le=1000)
    pass_marks: int = Field(default=33, ge=0, le=1000)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        return validate_time_value(value)

    @field_validator("class_name")
    @classmethod
    def normalize_class_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None

    @model_validator(mode="after")
    def validate_entry(self) -> "ExamScheduleBase":
        validate_time_order(self.start_time, self.end_time)
        if self.pass_marks > self.full_marks:
            raise ValueError("pass_marks cannot exceed full_marks")
        return self


class ExamScheduleCreate(ExamScheduleBase):
    pass


class ExamScheduleUpdate(BaseModel):
    subject: str | None = Field(default=None, min_length=1, max_length=200)
    exam_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    room_id: int | None = None
    teacher_id: int | None = None
    class_name: str | None = Field(default=None, max_length=50)
    full_marks: int | None = Field(default=None, ge=1, le=1000)
    pass_marks: int | None = Field(default=None, ge=0, le=1000)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_optional_time_format(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return validate_time_value(value)


class ExamScheduleOut(ExamScheduleBase):
    id: int
    conflicts: list[ConflictDetail] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ExamScheduleBulkCreate(BaseModel):
    entries: list[ExamScheduleCreate] = Field(min_length=1, max_length=500)


class ExamScheduleBulkEdit(BaseModel):
    schedule_ids: list[int] = Field(min_length=1, max_length=500)
    shift_minutes: int | None = Field(default=None, ge=-720, le=720)
    room_id: int | None = None
    exam_date: date | None = None

    @model_validator(mode="after")
    def validate_has_change(self) -> "ExamScheduleBulkEdit":
        if not self.shift_minutes and self.room_id is None and self.exam_date is None:
            raise ValueError("Provide at least one of shift_minutes, room_id or exam_date")
        return self


class ConflictCheckRequest(BaseModel):
    candidate: ScheduleEntryPayload
