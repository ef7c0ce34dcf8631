"""create invigilation duties, seating arrangements and activity logs

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    duty_type = sa.Enum("chief", "assistant", "supervisor", name="duty_type")
    duty_swap_status = sa.Enum("pending", "approved", "rejected", name="duty_swap_status")
    seating_status = sa.Enum("pending", "approved", "rejected", name="seating_status")

    op.create_table(
        "invigilation_duties",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("school_id", sa.Integer(), nullable=False),
        sa.Column(
            "exam_schedule_id",
            sa.Integer(),
            sa.ForeignKey("exam_schedules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("teacher_id", sa.Integer(), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("room_number", sa.String(length=100), nullable=False),
        sa.Column("duty_type", duty_type, nullable=False, server_default="assistant"),
        sa.Column("duty_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_invigilation_duties_school_id", "invigilation_duties", ["school_id"])
    op.create_index("ix_invigilation_duties_exam_schedule_id", "invigilation_duties", ["exam_schedule_id"])
    op.create_index("ix_invigilation_duties_teacher_id", "invigilation_duties", ["teacher_id"])
    op.create_index("ix_invigilation_duties_duty_date", "invigilation_duties", ["duty_date"])

    op.create_table(
        "duty_swaps",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("school_id", sa.Integer(), nullable=False),
        sa.Column(
            "duty_id",
            sa.Integer(),
            sa.ForeignKey("invigilation_duties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("from_teacher_id", sa.Integer(), nullable=False),
        sa.Column("to_teacher_id", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", duty_swap_status, nullable=False, server_default="pending"),
        sa.Column("approved_by", sa.String(length=200), nullable=True),
        sa.Column("decision_note", sa.Text(), nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_duty_swaps_school_id", "duty_swaps", ["school_id"])
    op.create_index("ix_duty_swaps_duty_id", "duty_swaps", ["duty_id"])

    op.create_table(
        "seating_arrangements",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("school_id", sa.Integer(), nullable=False),
        sa.Column(
            "exam_schedule_id",
            sa.Integer(),
            sa.ForeignKey("exam_schedules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True),
        sa.Column("room_number", sa.String(length=100), nullable=False),
        sa.Column("seat_number", sa.Integer(), nullable=False),
        sa.Column("row_number", sa.Integer(), nullable=False),
        sa.Column("column_number", sa.Integer(), nullable=False),
        sa.Column("is_special_needs", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("special_needs_note", sa.Text(), nullable=True),
        sa.Column("status", seating_status, nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "exam_schedule_id",
            "room_number",
            "row_number",
            "column_number",
            name="uq_seating_exam_room_cell",
        ),
        sa.UniqueConstraint("exam_schedule_id", "room_number", "seat_number", name="uq_seating_exam_room_seat"),
        sa.UniqueConstraint("exam_schedule_id", "student_id", name="uq_seating_exam_student"),
    )
    op.create_index("ix_seating_arrangements_school_id", "seating_arrangements", ["school_id"])
    op.create_index("ix_seating_arrangements_exam_schedule_id", "seating_arrangements", ["exam_schedule_id"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("school_id", sa.Integer(), nullable=False),
        sa.Column("actor", sa.String(length=200), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=True),
        sa.Column("entity_id", sa.String(length=100), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_school_id", "activity_logs", ["school_id"])


def downgrade() -> None:
    op.drop_index("ix_activity_logs_school_id", table_name="activity_logs")
    op.drop_table("activity_logs")
    op.drop_index("ix_seating_arrangements_exam_schedule_id", table_name="seating_arrangements")
    op.drop_index("ix_seating_arrangements_school_id", table_name="seating_arrangements")
    op.drop_table("seating_arrangements")
    op.drop_index("ix_duty_swaps_duty_id", table_name="duty_swaps")
    op.drop_index("ix_duty_swaps_school_id", table_name="duty_swaps")
    op.drop_table("duty_swaps")
    op.drop_index("ix_invigilation_duties_duty_date", table_name="invigilation_duties")
    op.drop_index("ix_invigilation_duties_teacher_id", table_name="invigilation_duties")
    op.drop_index("ix_invigilation_duties_exam_schedule_id", table_name="invigilation_duties")
    op.drop_index("ix_invigilation_duties_school_id", table_name="invigilation_duties")
    op.drop_table("invigilation_duties")

    bind = op.get_bind()
    sa.Enum(name="seating_status").drop(bind, checkfirst=True)
    sa.Enum(name="duty_swap_status").drop(bind, checkfirst=True)
    sa.Enum(name="duty_type").drop(bind, checkfirst=True)
