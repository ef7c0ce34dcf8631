from datetime import date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, Enum as SAEnum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from examdesk.db.base import Base


class DutyType(str, Enum):
    chief = "chief"
    assistant = "assistant"
    supervisor = "supervisor"


class SwapStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class InvigilationDuty(Base):
    __tablename__ = "invigilation_duties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    school_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    exam_schedule_id: Mapped[int] = mapped_column(
        ForeignKey("exam_schedules.id", ondelete="CASCADE"), nullable=False, index=True
    )
    teacher_id: Mapped[int] = mapped_column(ForeignKey("teachers.id"), nullable=False, index=True)
    room_number: Mapped[str] = mapped_column(String(100), nullable=False)
    duty_type: Mapped[DutyType] = mapped_column(
        SAEnum(DutyType, name="duty_type"),
        nullable=False,
        default=DutyType.assistant,
    )
    duty_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())


class DutySwap(Base):
    __tablename__ = "duty_swaps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    school_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    duty_id: Mapped[int] = mapped_column(
        ForeignKey("invigilation_duties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_teacher_id: Mapped[int] = mapped_column(Integer, nullable=False)
    to_teacher_id: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[SwapStatus] = mapped_column(
        SAEnum(SwapStatus, name="duty_swap_status"),
        nullable=False,
        default=SwapStatus.pending,
    )
    approved_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    decision_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
