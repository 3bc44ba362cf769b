"""
Progression workflows: completing and reversing actions, and moving the
per-user position pointer.

This module is the only writer of PositionState. Each workflow runs inside a
single ``transaction`` so a failure leaves the ledger, the actions and the
pointer exactly as they were before the call.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from onestep.core import config
from onestep.core.database import transaction
from onestep.core.dates import get_today, utcnow
from onestep.core.exceptions import (
    AlreadyCompleted,
    CannotReverseCompleted,
    DailyLimitReached,
    GoalInProgress,
    NotFound,
    NothingActionable,
    ValidationError,
)
from onestep.execution.db import has_other_completion, upsert_execution
from onestep.goals.db import delete_action, delete_goal, delete_phase, get_action, get_goal, get_phase
from onestep.goals.models import Action, Goal, Phase
from onestep.position.db import get_position, init_position, update_position
from onestep.position.models import PositionState
from onestep.progression.resolver import NextUnit, first_pending, load_hierarchy, load_pending, resolve_next

logger = logging.getLogger(__name__)

RATING_MIN = 1
RATING_MAX = 5


@dataclass(frozen=True)
class CompletionResult:
    next_action_id: Optional[UUID]


@dataclass(frozen=True)
class CurrentAction:
    action: Optional[Action] = None
    phase: Optional[Phase] = None
    goal: Optional[Goal] = None


def _check_rating(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer")
    if not RATING_MIN <= value <= RATING_MAX:
        raise ValidationError(f"{name} must be between {RATING_MIN} and {RATING_MAX}")


def _owned_action(db: Session, action_id: UUID, user_id: UUID) -> Action:
    action = get_action(db, action_id, user_id)
    if action is None:
        raise NotFound(f"Action {action_id} not found")
    return action


def complete_action(
    db: Session,
    user_id: UUID,
    action_id: UUID,
    difficulty: int,
    energy: int,
    today: Optional[date] = None,
) -> CompletionResult:
    """
    Completes one action and advances the user's position.

    Ledger upsert, ``completed_at`` stamp, pointer move and (when the goal
    runs out of actions) the goal status change commit together or not at all.

    Raises:
        ValidationError: ratings outside [1, 5]; nothing is read or written.
        NotFound: no such action among the user's goals.
        AlreadyCompleted: the action was completed before, possibly by a
            concurrent request. Nothing changes.
        DailyLimitReached: ONE_ACTION_PER_DAY is on and another action was
            completed today.
        StorageFailure: the transaction failed and was rolled back.
    """
    _check_rating("difficulty", difficulty)
    _check_rating("energy", energy)
    day = today or get_today()

    with transaction(db):
        action = _owned_action(db, action_id, user_id)
        if action.completed_at is not None:
            raise AlreadyCompleted(f"Action {action_id} is already completed")
        if config.ONE_ACTION_PER_DAY and has_other_completion(db, user_id, day, action.id):
            raise DailyLimitReached("An action was already completed today")

        upsert_execution(db, action.id, user_id, day, True, difficulty, energy)

        # Sole serialization point: only one writer can flip completed_at from NULL
        claimed = (
            db.query(Action)
            .filter(Action.id == action.id, Action.completed_at.is_(None))
            .update({Action.completed_at: utcnow()}, synchronize_session="fetch")
        )
        if claimed != 1:
            raise AlreadyCompleted(f"Action {action_id} was completed concurrently")

        resolution = resolve_next(db, action.id)
        if isinstance(resolution, NextUnit):
            update_position(
                db,
                user_id,
                current_goal_id=resolution.goal_id,
                current_phase_id=resolution.phase_id,
                current_action_id=resolution.action_id,
            )
            next_action_id = resolution.action_id
        else:
            if resolution.dead_end:
                logger.warning(
                    f"Goal {resolution.goal_id} stopped at an empty phase after action {action.id}"
                )
            # Goal and phase ids stay for display of the finished goal
            update_position(db, user_id, current_action_id=None)
            goal = db.get(Goal, resolution.goal_id)
            goal.status = "completed"
            next_action_id = None

    if next_action_id is None:
        logger.info(f"User {user_id} completed action {action_id} and finished goal {resolution.goal_id}")
    else:
        logger.info(f"User {user_id} completed action {action_id}, next is {next_action_id}")
    return CompletionResult(next_action_id=next_action_id)


def mark_incomplete(db: Session, user_id: UUID, action_id: UUID, today: Optional[date] = None) -> None:
    """Records today's attempt at a pending action as failed. The position does not move."""
    day = today or get_today()
    with transaction(db):
        action = _owned_action(db, action_id, user_id)
        if action.completed_at is not None:
            raise CannotReverseCompleted(f"Action {action_id} is completed and cannot be reversed")
        upsert_execution(db, action.id, user_id, day, False)
    logger.info(f"User {user_id} marked action {action_id} incomplete for {day}")


def get_current_position(db: Session, user_id: UUID) -> PositionState:
    position = get_position(db, user_id)
    if position is None:
        raise NotFound(f"No position state for user {user_id}")
    return position


def get_current_action(db: Session, user_id: UUID) -> CurrentAction:
    position = get_position(db, user_id)
    if position is None or position.current_action_id is None:
        return CurrentAction()
    action = get_action(db, position.current_action_id, user_id)
    if action is None:
        return CurrentAction()
    phase = action.phase
    return CurrentAction(action=action, phase=phase, goal=phase.goal)


def set_current_goal(db: Session, user_id: UUID, goal_id: UUID) -> PositionState:
    """
    Points the user at the first pending action of ``goal_id``.

    Refused while another goal is current and not yet completed.
    """
    with transaction(db):
        goal = get_goal(db, goal_id, user_id)
        if goal is None:
            raise NotFound(f"Goal {goal_id} not found")

        position = init_position(db, user_id)
        if position.current_goal_id is not None and position.current_goal_id != goal.id:
            current = get_goal(db, position.current_goal_id, user_id)
            if current is not None and current.status != "completed":
                raise GoalInProgress("Cannot switch goal while the current goal is in progress")

        phase_ids, actions_by_phase = load_hierarchy(db, goal.id)
        target = first_pending(phase_ids, actions_by_phase, load_pending(db, goal.id))
        if target is None:
            raise NothingActionable(f"Goal {goal_id} has no pending action to work on")

        position = update_position(
            db,
            user_id,
            current_goal_id=goal.id,
            current_phase_id=target[0],
            current_action_id=target[1],
        )
    db.refresh(position)
    logger.info(f"User {user_id} switched to goal {goal_id}, action {target[1]}")
    return position


def _release_goal(db: Session, user_id: UUID, goal_id: UUID) -> None:
    position = get_position(db, user_id)
    if position is not None and position.current_goal_id == goal_id:
        update_position(
            db,
            user_id,
            current_goal_id=None,
            current_phase_id=None,
            current_action_id=None,
        )


def _realign_position(db: Session, user_id: UUID, goal_id: UUID) -> None:
    """
    Re-points a pointer whose current action left ``goal_id`` at the goal's
    first pending action. With none reachable the goal is completed, as if
    its last action had just been done.
    """
    position = get_position(db, user_id)
    if position is None or position.current_goal_id != goal_id or position.current_action_id is None:
        return
    if db.get(Action, position.current_action_id) is not None:
        return

    phase_ids, actions_by_phase = load_hierarchy(db, goal_id)
    target = first_pending(phase_ids, actions_by_phase, load_pending(db, goal_id))
    if target is None:
        update_position(db, user_id, current_action_id=None)
        db.get(Goal, goal_id).status = "completed"
        logger.info(f"Goal {goal_id} has no pending action left and is completed")
    else:
        update_position(db, user_id, current_phase_id=target[0], current_action_id=target[1])


def delete_goal_and_release(db: Session, user_id: UUID, goal_id: UUID) -> Optional[Goal]:
    """Deletes a goal and clears the pointer if it was the current one. None when not found."""
    with transaction(db):
        deleted = delete_goal(db, goal_id, user_id)
        if deleted is not None:
            _release_goal(db, user_id, goal_id)
    return deleted


def delete_phase_and_realign(db: Session, user_id: UUID, phase_id: UUID) -> Optional[Phase]:
    with transaction(db):
        phase = get_phase(db, phase_id, user_id)
        if phase is None:
            return None
        goal_id = phase.goal_id
        delete_phase(db, phase.id, user_id)
        _realign_position(db, user_id, goal_id)
    return phase


def delete_action_and_realign(db: Session, user_id: UUID, action_id: UUID) -> Optional[Action]:
    """
    Deletes an action and moves the pointer off it in the same transaction.

    A storage failure while moving the pointer keeps the action too.
    """
    with transaction(db):
        action = get_action(db, action_id, user_id)
        if action is None:
            return None
        goal_id = action.phase.goal_id
        delete_action(db, action.id, user_id)
        _realign_position(db, user_id, goal_id)
    return action
