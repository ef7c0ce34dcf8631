from pydantic import BaseModel, Field


class StudentBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    student_code: str = Field(min_length=1, max_length=50)
    class_name: str = Field(min_length=1, max_length=50)
    section: str | None = Field(default=None, max_length=20)
    roll_number: str = Field(min_length=1, max_length=50)
    is_special_needs: bool = False
    special_needs_note: str | None = Field(default=None, max_length=1000)
    is_active: bool = True


class StudentCreate(StudentBase):
    pass


class StudentBulkCreate(BaseModel):
    students: list[StudentCreate] = Field(min_length=1, max_length=2000)


class StudentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    student_code: str | None = Field(default=None, min_length=1, max_length=50)
    class_name: str | None = Field(default=None, min_length=1, max_length=50)
    section: str | None = Field(default=None, max_length=20)
    roll_number: str | None = Field(default=None, min_length=1, max_length=50)
    is_special_needs: bool | None = None
    special_needs_note: str | None = Field(default=None, max_length=1000)
    is_active: bool | None = None


class StudentOut(StudentBase):
    id: int

    model_config = {"from_attributes": True}
