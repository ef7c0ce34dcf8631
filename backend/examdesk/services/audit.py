from __future__ import annotations

from sqlalchemy.orm import Session

from examdesk.models.activity_log import ActivityLog


def log_activity(
    db: Session,
    *,
    school_id: int,
    actor: str | None,
    action: str,
    entity_type: str | None = None,
    entity_id: int | str | None = None,
    details: dict | None = None,
) -> None:
    record = ActivityLog(
        school_id=school_id,
        actor=actor,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        details=details or {},
    )
    db.add(record)
