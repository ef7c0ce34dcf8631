from collections.abc import Generator
from typing import TypeVar

from fastapi import HTTPException, Request, status
from sqlalchemy.orm import Session

from examdesk.core.config import get_settings
from examdesk.db.session import SessionLocal

ModelT = TypeVar("ModelT")


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_school_id(request: Request) -> int:
    header = get_settings().tenant_header
    raw_value = (request.headers.get(header) or "").strip()
    if not raw_value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Missing {header} header")
    try:
        school_id = int(raw_value)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{header} header must be an integer",
        ) from exc
    if school_id < 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{header} header must be positive")
    return school_id


def get_actor(request: Request) -> str | None:
    value = (request.headers.get(get_settings().actor_header) or "").strip()
    return value[:200] or None


def get_owned_or_404(db: Session, model: type[ModelT], record_id: int, school_id: int, label: str) -> ModelT:
    record = db.get(model, record_id)
    if record is None or record.school_id != school_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return record
