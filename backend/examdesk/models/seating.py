from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from examdesk.db.base import Base


class SeatingStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class SeatingArrangement(Base):
    __tablename__ = "seating_arrangements"
    __table_args__ = (
        UniqueConstraint(
            "exam_schedule_id",
            "room_number",
            "row_number",
            "column_number",
            name="uq_seating_exam_room_cell",
        ),
        UniqueConstraint("exam_schedule_id", "room_number", "seat_number", name="uq_seating_exam_room_seat"),
        UniqueConstraint("exam_schedule_id", "student_id", name="uq_seating_exam_student"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    school_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    exam_schedule_id: Mapped[int] = mapped_column(
        ForeignKey("exam_schedules.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id: Mapped[int] = mapped_column(ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    room_id: Mapped[int | None] = mapped_column(ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True)
    room_number: Mapped[str] = mapped_column(String(100), nullable=False)
    seat_number: Mapped[int] = mapped_column(Integer, nullable=False)
    row_number: Mapped[int] = mapped_column(Integer, nullable=False)
    column_number: Mapped[int] = mapped_column(Integer, nullable=False)
    is_special_needs: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    special_needs_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[SeatingStatus] = mapped_column(
        SAEnum(SeatingStatus, name="seating_status"),
        nullable=False,
        default=SeatingStatus.pending,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
