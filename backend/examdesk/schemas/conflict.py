from typing import List, Literal, Optional

from pydantic import BaseModel

ConflictType = Literal["time_overlap", "room_occupied", "teacher_busy"]
ConflictSeverity = Literal["error", "warning"]


class ConflictDetail(BaseModel):
    conflict_type: ConflictType
    severity: ConflictSeverity
    message: str
    schedule_id: Optional[int] = None
    conflict_with: Optional[int] = None  # id of the other schedule entry, when there is one


class ConflictCheckResponse(BaseModel):
    has_conflicts: bool
    conflicts: List[ConflictDetail]
