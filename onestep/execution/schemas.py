import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True


class ExecutionRecordResponse(BaseSchema):
    id: UUID
    action_id: UUID
    user_id: UUID
    date: datetime.date
    completed: bool
    difficulty: Optional[int] = None
    energy: Optional[int] = None
