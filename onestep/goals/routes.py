from uuid import UUID
from typing import List, Dict
import logging

from fastapi import APIRouter, Depends, HTTPException, Security
from sqlalchemy.orm import Session

from onestep.auth.service import get_current_user_id
from onestep.core.database import get_db
from onestep.core.exceptions import ValidationError
from onestep.goals.schemas import (
    GoalCreate,
    GoalUpdate,
    GoalResponse,
    GoalDetailResponse,
    PhaseCreate,
    PhaseUpdate,
    PhaseResponse,
    ActionCreate,
    ActionUpdate,
    ActionResponse,
    ReorderRequest,
)
from onestep.goals.db import (
    create_goal,
    get_goal,
    update_goal,
    get_user_goals,
    create_phase,
    get_phase,
    update_phase,
    create_action,
    get_action,
    update_action,
    reorder_phases,
    reorder_actions,
)
from onestep.progression.service import (
    delete_action_and_realign,
    delete_goal_and_release,
    delete_phase_and_realign,
)

router = APIRouter(prefix="/goals", tags=["Goals"])
phases_router = APIRouter(prefix="/phases", tags=["Phases"])
actions_router = APIRouter(prefix="/actions", tags=["Actions"])
logger = logging.getLogger(__name__)


@router.get(
    "",
    response_model=List[GoalResponse],
    summary="Get all user goals",
    description="Retrieve all goals associated with the authenticated user. Supports pagination.",
    responses={
        200: {"description": "Goals retrieved successfully."},
        401: {"description": "Unauthorized."},
        500: {"description": "Failed to retrieve goals."},
    },
)
def read_user_goals_route(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> List[GoalResponse]:
    try:
        return get_user_goals(db, user_id, skip, limit)
    except Exception as e:
        logger.error(f"Failed to fetch goals for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve goals")


@router.get(
    "/{goal_id}",
    response_model=GoalDetailResponse,
    summary="Get a specific goal",
    description="Retrieve a goal with its ordered phases and actions.",
    responses={
        200: {"description": "Goal retrieved successfully."},
        401: {"description": "Unauthorized."},
        404: {"description": "Goal not found."},
    },
)
def read_goal_route(
    goal_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> GoalDetailResponse:
    goal = get_goal(db, goal_id, user_id)
    if goal is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    return goal


@router.post(
    "",
    response_model=GoalResponse,
    summary="Create a new goal",
    description="Create a new active goal for the authenticated user.",
    responses={
        200: {"description": "Goal created successfully."},
        401: {"description": "Unauthorized."},
        422: {"description": "Invalid dates."},
        500: {"description": "Goal creation failed."},
    },
)
def create_goal_route(
    goal: GoalCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> GoalResponse:
    try:
        return create_goal(db, goal, user_id)
    except ValidationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        logger.error(f"Failed to create goal for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create goal")


@router.put(
    "/{goal_id}",
    response_model=GoalResponse,
    summary="Update an existing goal",
    description="Update the metadata of a goal, or toggle it between active and paused.",
    responses={
        200: {"description": "Goal updated successfully."},
        401: {"description": "Unauthorized."},
        404: {"description": "Goal not found."},
        422: {"description": "Invalid update."},
        500: {"description": "Failed to update goal."},
    },
)
def update_goal_route(
    goal_id: UUID,
    goal: GoalUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> GoalResponse:
    try:
        updated = update_goal(db, goal_id, goal, user_id)
    except ValidationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        logger.error(f"Failed to update goal {goal_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update goal")
    if updated is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    return updated


@router.delete(
    "/{goal_id}",
    response_model=Dict[str, str],
    summary="Delete a goal",
    description="Delete a goal with its phases, actions and execution history.",
    responses={
        200: {"description": "Goal deleted successfully."},
        401: {"description": "Unauthorized."},
        404: {"description": "Goal not found."},
        500: {"description": "Failed to delete goal."},
    },
)
def delete_goal_route(
    goal_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> Dict[str, str]:
    try:
        deleted = delete_goal_and_release(db, user_id, goal_id)
    except Exception as e:
        logger.error(f"Failed to delete goal {goal_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete goal")
    if deleted is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    return {"detail": "Goal deleted successfully."}


@router.post(
    "/{goal_id}/phases/reorder",
    response_model=List[PhaseResponse],
    summary="Reorder the phases of a goal",
    description="Rewrite phase order from the full list of phase ids in their new order.",
    responses={
        200: {"description": "Phases reordered."},
        401: {"description": "Unauthorized."},
        404: {"description": "Goal not found."},
        422: {"description": "The list does not match the goal's phases."},
    },
)
def reorder_phases_route(
    goal_id: UUID,
    body: ReorderRequest,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> List[PhaseResponse]:
    try:
        phases = reorder_phases(db, goal_id, body.ids, user_id)
    except ValidationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if phases is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    return phases


# Phases
@phases_router.post(
    "",
    response_model=PhaseResponse,
    summary="Create a phase",
    description="Add a phase to one of the user's goals. Appended last unless order_index is given.",
    responses={
        200: {"description": "Phase created."},
        401: {"description": "Unauthorized."},
        404: {"description": "Goal not found."},
        422: {"description": "Order index already used."},
    },
)
def create_phase_route(
    phase: PhaseCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> PhaseResponse:
    try:
        created = create_phase(db, phase, user_id)
    except ValidationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if created is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    return created


@phases_router.get("/{phase_id}", response_model=PhaseResponse, summary="Get a phase with its actions")
def read_phase_route(
    phase_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> PhaseResponse:
    phase = get_phase(db, phase_id, user_id)
    if phase is None:
        raise HTTPException(status_code=404, detail="Phase not found")
    return phase


@phases_router.put("/{phase_id}", response_model=PhaseResponse, summary="Update a phase")
def update_phase_route(
    phase_id: UUID,
    phase: PhaseUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> PhaseResponse:
    updated = update_phase(db, phase_id, phase, user_id)
    if updated is None:
        raise HTTPException(status_code=404, detail="Phase not found")
    return updated


@phases_router.delete("/{phase_id}", response_model=Dict[str, str], summary="Delete a phase")
def delete_phase_route(
    phase_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> Dict[str, str]:
    try:
        deleted = delete_phase_and_realign(db, user_id, phase_id)
    except Exception as e:
        logger.error(f"Failed to delete phase {phase_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete phase")
    if deleted is None:
        raise HTTPException(status_code=404, detail="Phase not found")
    return {"detail": "Phase deleted successfully."}


@phases_router.post(
    "/{phase_id}/actions/reorder",
    response_model=List[ActionResponse],
    summary="Reorder the actions of a phase",
    description="Rewrite action order from the full list of action ids in their new order.",
)
def reorder_actions_route(
    phase_id: UUID,
    body: ReorderRequest,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> List[ActionResponse]:
    try:
        actions = reorder_actions(db, phase_id, body.ids, user_id)
    except ValidationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if actions is None:
        raise HTTPException(status_code=404, detail="Phase not found")
    return actions


# Actions
@actions_router.post(
    "",
    response_model=ActionResponse,
    summary="Create an action",
    description="Add an action to one of the user's phases. Appended last unless order_index is given.",
    responses={
        200: {"description": "Action created."},
        401: {"description": "Unauthorized."},
        404: {"description": "Phase not found."},
        422: {"description": "Order index already used."},
    },
)
def create_action_route(
    action: ActionCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> ActionResponse:
    try:
        created = create_action(db, action, user_id)
    except ValidationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if created is None:
        raise HTTPException(status_code=404, detail="Phase not found")
    return created


@actions_router.get("/{action_id}", response_model=ActionResponse, summary="Get an action")
def read_action_route(
    action_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> ActionResponse:
    action = get_action(db, action_id, user_id)
    if action is None:
        raise HTTPException(status_code=404, detail="Action not found")
    return action


@actions_router.put("/{action_id}", response_model=ActionResponse, summary="Update an action")
def update_action_route(
    action_id: UUID,
    action: ActionUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> ActionResponse:
    updated = update_action(db, action_id, action, user_id)
    if updated is None:
        raise HTTPException(status_code=404, detail="Action not found")
    return updated


@actions_router.delete("/{action_id}", response_model=Dict[str, str], summary="Delete an action")
def delete_action_route(
    action_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> Dict[str, str]:
    try:
        deleted = delete_action_and_realign(db, user_id, action_id)
    except Exception as e:
        logger.error(f"Failed to delete action {action_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete action")
    if deleted is None:
        raise HTTPException(status_code=404, detail="Action not found")
    return {"detail": "Action deleted successfully."}
