from pydantic import BaseModel, Field, model_validator


class RoomBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    capacity: int = Field(ge=1, le=1000)
    rows_count: int | None = Field(default=None, ge=1, le=100)
    seats_per_row: int | None = Field(default=None, ge=1, le=100)


class RoomCreate(RoomBase):
    @model_validator(mode="after")
    def validate_geometry(self) -> "RoomCreate":
        if self.rows_count and self.seats_per_row and self.rows_count * self.seats_per_row < self.capacity:
            raise ValueError("rows_count * seats_per_row must cover the room capacity")
        return self


class RoomUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    capacity: int | None = Field(default=None, ge=1, le=1000)
    rows_count: int | None = Field(default=None, ge=1, le=100)
    seats_per_row: int | None = Field(default=None, ge=1, le=100)


class RoomOut(RoomBase):
    id: int

    model_config = {"from_attributes": True}
