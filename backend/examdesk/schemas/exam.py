from datetime import date

from pydantic import BaseModel, Field, model_validator


class ExamBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    start_date: date | None = None
    end_date: date | None = None
    description: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def validate_period(self) -> "ExamBase":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class ExamCreate(ExamBase):
    pass


class ExamOut(ExamBase):
    id: int

    model_config = {"from_attributes": True}


class ExamCloneRequest(ExamBase):
    pass


class ExamCloneResponse(BaseModel):
    exam: ExamOut
    schedules_copied: int


class ExamBulkDelete(BaseModel):
    exam_ids: list[int] = Field(min_length=1, max_length=200)
