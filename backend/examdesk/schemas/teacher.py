from datetime import date

from pydantic import BaseModel, EmailStr, Field, field_validator


class TeacherBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr | None = None
    subject: str | None = Field(default=None, max_length=200)
    class_name: str | None = Field(default=None, max_length=50)
    is_active: bool = True


class TeacherCreate(TeacherBase):
    pass


class TeacherUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    subject: str | None = Field(default=None, max_length=200)
    class_name: str | None = Field(default=None, max_length=50)
    is_active: bool | None = None


class TeacherOut(TeacherBase):
    id: int

    model_config = {"from_attributes": True}


class TeacherAvailabilityPayload(BaseModel):
    teacher_id: int
    availability_date: date
    is_available: bool = True
    reason: str | None = None

    model_config = {"from_attributes": True}


class TeacherAvailabilityCreate(BaseModel):
    availability_date: date
    is_available: bool = False
    reason: str | None = Field(default=None, max_length=1000)

    @field_validator("reason")
    @classmethod
    def normalize_reason(cls, value: str | None) -> str | None:
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None


class TeacherAvailabilityOut(TeacherAvailabilityPayload):
    id: int
