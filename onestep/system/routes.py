from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from onestep.core.database import get_db
from onestep.auth.service import create_token
from onestep.goals.models import Goal
from onestep.goals.schemas import GoalResponse
from onestep.position.models import PositionState
from onestep.position.schemas import PositionStateResponse
from onestep.system.schemas import DevTokenResponse

router = APIRouter(prefix="/system", tags=["System"])


@router.post("/dev-token/{user_id}", response_model=DevTokenResponse)
def dev_token_route(user_id: UUID):
    return DevTokenResponse(token=create_token(user_id), user_id=user_id)


@router.get("/debug/goals", response_model=List[GoalResponse])
def get_all_goals_route(db: Session = Depends(get_db)):
    goals = db.query(Goal).order_by(Goal.created_at.desc()).all()
    return [GoalResponse.model_validate(goal) for goal in goals]


@router.get("/debug/positions", response_model=List[PositionStateResponse])
def get_all_positions_route(db: Session = Depends(get_db)):
    positions = db.query(PositionState).order_by(PositionState.updated_at.desc()).all()
    return [PositionStateResponse.model_validate(position) for position in positions]
