from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from examdesk.api.deps import get_db, get_owned_or_404, get_school_id
from examdesk.models.room import Room
from examdesk.schemas.room import RoomCreate, RoomOut, RoomUpdate

router = APIRouter()


def _name_taken(db: Session, school_id: int, name: str, exclude_id: int | None = None) -> bool:
    query = select(Room.id).where(Room.school_id == school_id, Room.name == name)
    if exclude_id is not None:
        query = query.where(Room.id != exclude_id)
    return db.execute(query).first() is not None


@router.get("/rooms", response_model=list[RoomOut])
def list_rooms(school_id: int = Depends(get_school_id), db: Session = Depends(get_db)) -> list[RoomOut]:
    return list(db.execute(select(Room).where(Room.school_id == school_id).order_by(Room.name)).scalars())


@router.post("/rooms", response_model=RoomOut, status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> RoomOut:
    if _name_taken(db, school_id, payload.name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Room name already exists")
    room = Room(school_id=school_id, **payload.model_dump())
    db.add(room)
    db.commit()
    db.refresh(room)
    return room


@router.put("/rooms/{room_id}", response_model=RoomOut)
def update_room(
    room_id: int,
    payload: RoomUpdate,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> RoomOut:
    room = get_owned_or_404(db, Room, room_id, school_id, "Room")

    data = payload.model_dump(exclude_unset=True)
    if data.get("name") and _name_taken(db, school_id, data["name"], exclude_id=room.id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Room name already exists")

    for key, value in data.items():
        if value is None and key in {"name", "capacity"}:
            continue
        setattr(room, key, value)
    db.commit()
    db.refresh(room)
    return room


@router.delete("/rooms/{room_id}")
def delete_room(
    room_id: int,
    school_id: int = Depends(get_school_id),
    db: Session = Depends(get_db),
) -> dict:
    room = get_owned_or_404(db, Room, room_id, school_id, "Room")
    db.delete(room)
    db.commit()
    return {"success": True}
