"""create school entities

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "teachers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("school_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("subject", sa.String(length=200), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_teachers_school_id", "teachers", ["school_id"])

    op.create_table(
        "teacher_availability",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("school_id", sa.Integer(), nullable=False),
        sa.Column("teacher_id", sa.Integer(), sa.ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("availability_date", sa.Date(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("teacher_id", "availability_date", name="uq_teacher_availability_teacher_date"),
    )
    op.create_index("ix_teacher_availability_school_id", "teacher_availability", ["school_id"])
    op.create_index("ix_teacher_availability_teacher_id", "teacher_availability", ["teacher_id"])

    op.create_table(
        "rooms",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("school_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("rows_count", sa.Integer(), nullable=True),
        sa.Column("seats_per_row", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("school_id", "name", name="uq_rooms_school_name"),
    )
    op.create_index("ix_rooms_school_id", "rooms", ["school_id"])

    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("school_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("student_code", sa.String(length=50), nullable=False),
        sa.Column("class_name", sa.String(length=50), nullable=False),
        sa.Column("section", sa.String(length=20), nullable=True),
        sa.Column("roll_number", sa.String(length=50), nullable=False),
        sa.Column("is_special_needs", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("special_needs_note", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_students_school_id", "students", ["school_id"])
    op.create_index("ix_students_class_name", "students", ["class_name"])

    op.create_table(
        "exams",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("school_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_exams_school_id", "exams", ["school_id"])

    op.create_table(
        "exam_schedules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("school_id", sa.Integer(), nullable=False),
        sa.Column("exam_id", sa.Integer(), sa.ForeignKey("exams.id"), nullable=False),
        sa.Column("subject", sa.String(length=200), nullable=False),
        sa.Column("exam_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True),
        sa.Column("teacher_id", sa.Integer(), sa.ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("class_name", sa.String(length=50), nullable=True),
        sa.Column("full_marks", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("pass_marks", sa.Integer(), nullable=False, server_default="33"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_exam_schedules_school_id", "exam_schedules", ["school_id"])
    op.create_index("ix_exam_schedules_exam_id", "exam_schedules", ["exam_id"])
    op.create_index("ix_exam_schedules_exam_date", "exam_schedules", ["exam_date"])


def downgrade() -> None:
    op.drop_index("ix_exam_schedules_exam_date", table_name="exam_schedules")
    op.drop_index("ix_exam_schedules_exam_id", table_name="exam_schedules")
    op.drop_index("ix_exam_schedules_school_id", table_name="exam_schedules")
    op.drop_table("exam_schedules")
    op.drop_index("ix_exams_school_id", table_name="exams")
    op.drop_table("exams")
    op.drop_index("ix_students_class_name", table_name="students")
    op.drop_index("ix_students_school_id", table_name="students")
    op.drop_table("students")
    op.drop_index("ix_rooms_school_id", table_name="rooms")
    op.drop_table("rooms")
    op.drop_index("ix_teacher_availability_teacher_id", table_name="teacher_availability")
    op.drop_index("ix_teacher_availability_school_id", table_name="teacher_availability")
    op.drop_table("teacher_availability")
    op.drop_index("ix_teachers_school_id", table_name="teachers")
    op.drop_table("teachers")
