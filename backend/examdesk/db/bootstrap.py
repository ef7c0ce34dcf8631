from __future__ import annotations

import logging

from sqlalchemy import inspect

import examdesk.models  # noqa: F401
from examdesk.db.base import Base
from examdesk.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "teachers": {"id", "school_id", "name", "class_name", "is_active"},
    "teacher_availability": {"id", "school_id", "teacher_id", "availability_date", "is_available"},
    "rooms": {"id", "school_id", "name", "capacity", "rows_count", "seats_per_row"},
    "students": {"id", "school_id", "class_name", "roll_number", "is_special_needs"},
    "exams": {"id", "school_id", "name"},
    "exam_schedules": {"id", "school_id", "exam_id", "exam_date", "start_time", "end_time"},
    "invigilation_duties": {"id", "school_id", "exam_schedule_id", "teacher_id", "duty_type", "duty_date"},
    "duty_swaps": {"id", "school_id", "duty_id", "status"},
    "seating_arrangements": {
        "id",
        "school_id",
        "exam_schedule_id",
        "student_id",
        "seat_number",
        "row_number",
        "column_number",
        "status",
    },
    "activity_logs": {"id", "school_id", "action"},
}


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
