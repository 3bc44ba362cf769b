from datetime import date, datetime
from typing import Optional, List, Literal
from uuid import UUID
from pydantic import BaseModel, Field


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True


# Actions
class ActionBase(BaseSchema):
    id: UUID
    phase_id: UUID
    order_index: int
    title: str
    definition: str
    estimated_time: Optional[str] = None
    completed_at: Optional[datetime] = None


class ActionCreate(BaseSchema):
    phase_id: UUID
    title: str = Field(..., min_length=1)
    definition: str
    estimated_time: Optional[str] = None
    order_index: Optional[int] = None  # appended after the last action when omitted


class ActionUpdate(BaseSchema):
    title: Optional[str] = Field(None, min_length=1)
    definition: Optional[str] = None
    estimated_time: Optional[str] = None


class ActionResponse(ActionBase):
    pass


# Phases
class PhaseBase(BaseSchema):
    id: UUID
    goal_id: UUID
    order_index: int
    name: str
    description: Optional[str] = None


class PhaseCreate(BaseSchema):
    goal_id: UUID
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    order_index: Optional[int] = None


class PhaseUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class PhaseResponse(PhaseBase):
    actions: List[ActionResponse] = []


# Goals
class GoalBase(BaseSchema):
    id: UUID
    user_id: UUID
    name: str
    category: str
    start_date: date
    end_date: Optional[date] = None
    status: str
    created_at: datetime


class GoalCreate(BaseSchema):
    name: str = Field(..., min_length=1)
    category: str
    start_date: date
    end_date: Optional[date] = None


class GoalUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    # "completed" is only ever set by the progression engine
    status: Optional[Literal["active", "paused"]] = None


class GoalResponse(GoalBase):
    pass


class GoalDetailResponse(GoalBase):
    phases: List[PhaseResponse] = []


class ReorderRequest(BaseSchema):
    ids: List[UUID] = Field(..., min_length=1)
