from uuid import UUID
import logging

from fastapi import APIRouter, Depends, HTTPException, Security
from sqlalchemy.orm import Session

from onestep.auth.service import get_current_user_id
from onestep.core.database import get_db
from onestep.core.exceptions import ProgressionError
from onestep.position.schemas import PositionStateResponse
from onestep.progression.resolver import NextUnit, resolve_next
from onestep.progression.schemas import (
    CompleteActionRequest,
    CompleteActionResponse,
    CurrentActionResponse,
    MarkIncompleteRequest,
    NextActionResponse,
    OkResponse,
    SetCurrentGoalRequest,
)
from onestep.progression.service import (
    complete_action,
    get_current_action,
    get_current_position,
    mark_incomplete,
    set_current_goal,
)

router = APIRouter(prefix="/progression", tags=["Progression"])
logger = logging.getLogger(__name__)


@router.post(
    "/complete",
    response_model=CompleteActionResponse,
    summary="Complete an action",
    description="Complete the given action, record today's ratings and advance to the next action. "
                "A null next_action_id means the goal is finished.",
    responses={
        200: {"description": "Action completed."},
        401: {"description": "Unauthorized."},
        404: {"description": "Action not found."},
        409: {"description": "Action already completed, or today's completion limit reached."},
        422: {"description": "Ratings outside 1..5."},
        503: {"description": "Storage failure, safe to retry."},
    },
)
def complete_action_route(
    body: CompleteActionRequest,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> CompleteActionResponse:
    try:
        result = complete_action(db, user_id, body.action_id, body.difficulty, body.energy)
    except ProgressionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        logger.error(f"Failed to complete action {body.action_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to complete action")
    return CompleteActionResponse(next_action_id=result.next_action_id)


@router.post(
    "/incomplete",
    response_model=OkResponse,
    summary="Mark today's attempt as incomplete",
    description="Record that today's attempt at a pending action failed. The current position does not move.",
    responses={
        200: {"description": "Attempt recorded."},
        401: {"description": "Unauthorized."},
        404: {"description": "Action not found."},
        409: {"description": "Action is completed and cannot be reversed."},
        503: {"description": "Storage failure, safe to retry."},
    },
)
def mark_incomplete_route(
    body: MarkIncompleteRequest,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> OkResponse:
    try:
        mark_incomplete(db, user_id, body.action_id)
    except ProgressionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        logger.error(f"Failed to mark action {body.action_id} incomplete for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to mark action incomplete")
    return OkResponse()


@router.get(
    "/position",
    response_model=PositionStateResponse,
    summary="Get the current position",
    description="Return the user's current goal, phase and action pointer.",
    responses={
        200: {"description": "Position retrieved."},
        401: {"description": "Unauthorized."},
        404: {"description": "Position never initialized."},
    },
)
def get_position_route(
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> PositionStateResponse:
    try:
        return get_current_position(db, user_id)
    except ProgressionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get(
    "/current",
    response_model=CurrentActionResponse,
    summary="Get the current action",
    description="Return the current action with its phase and goal, or empty values when nothing is actionable.",
)
def get_current_action_route(
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> CurrentActionResponse:
    return CurrentActionResponse.model_validate(get_current_action(db, user_id))


@router.post(
    "/current-goal",
    response_model=PositionStateResponse,
    summary="Select the current goal",
    description="Point the user at the first pending action of a goal. "
                "Refused while another goal is still in progress.",
    responses={
        200: {"description": "Goal selected."},
        400: {"description": "Goal has no pending action."},
        401: {"description": "Unauthorized."},
        404: {"description": "Goal not found."},
        409: {"description": "Current goal still in progress."},
    },
)
def set_current_goal_route(
    body: SetCurrentGoalRequest,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> PositionStateResponse:
    try:
        return set_current_goal(db, user_id, body.goal_id)
    except ProgressionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        logger.error(f"Failed to set current goal {body.goal_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to set current goal")


@router.get(
    "/actions/{action_id}/next",
    response_model=NextActionResponse,
    summary="Resolve the next action",
    description="Compute which action follows a completed action, without changing anything.",
    responses={
        200: {"description": "Next action or exhausted goal."},
        401: {"description": "Unauthorized."},
        404: {"description": "Action not found."},
        409: {"description": "Action is not completed yet."},
    },
)
def resolve_next_route(
    action_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> NextActionResponse:
    try:
        resolution = resolve_next(db, action_id, user_id)
    except ProgressionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if isinstance(resolution, NextUnit):
        return NextActionResponse(
            exhausted=False,
            goal_id=resolution.goal_id,
            phase_id=resolution.phase_id,
            action_id=resolution.action_id,
        )
    return NextActionResponse(exhausted=True, goal_id=resolution.goal_id, dead_end=resolution.dead_end)
