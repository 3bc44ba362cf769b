from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True


class PositionStateResponse(BaseSchema):
    user_id: UUID
    current_goal_id: Optional[UUID] = None
    current_phase_id: Optional[UUID] = None
    current_action_id: Optional[UUID] = None
    version: int
    updated_at: datetime
