from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field

from onestep.goals.schemas import ActionResponse, PhaseBase, GoalResponse


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True


class CompleteActionRequest(BaseSchema):
    action_id: UUID
    difficulty: int = Field(..., ge=1, le=5)
    energy: int = Field(..., ge=1, le=5)


class CompleteActionResponse(BaseSchema):
    next_action_id: Optional[UUID] = None


class MarkIncompleteRequest(BaseSchema):
    action_id: UUID


class OkResponse(BaseModel):
    ok: bool = True


class SetCurrentGoalRequest(BaseSchema):
    goal_id: UUID


class NextActionResponse(BaseSchema):
    exhausted: bool
    goal_id: UUID
    action_id: Optional[UUID] = None
    phase_id: Optional[UUID] = None
    dead_end: bool = False


class CurrentActionResponse(BaseSchema):
    action: Optional[ActionResponse] = None
    phase: Optional[PhaseBase] = None
    goal: Optional[GoalResponse] = None
