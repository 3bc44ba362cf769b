from sqlalchemy import func
from sqlalchemy.orm import Session
from onestep.core.exceptions import ValidationError
from onestep.goals.models import Goal, Phase, Action
from onestep.goals.schemas import (
    GoalCreate,
    GoalUpdate,
    PhaseCreate,
    PhaseUpdate,
    ActionCreate,
    ActionUpdate,
)
from typing import List, Optional, Sequence
from uuid import UUID, uuid4


def _check_dates(start_date, end_date) -> None:
    if start_date and end_date and end_date < start_date:
        raise ValidationError("end_date must not be before start_date")


# Goal CRUD
def create_goal(db: Session, goal: GoalCreate, user_id: UUID) -> Goal:
    _check_dates(goal.start_date, goal.end_date)
    new_goal = Goal(
        id=uuid4(),
        user_id=user_id,
        name=goal.name,
        category=goal.category,
        start_date=goal.start_date,
        end_date=goal.end_date,
        status="active",
    )
    db.add(new_goal)
    db.commit()
    db.refresh(new_goal)
    return new_goal

def get_goal(db: Session, goal_id: UUID, user_id: UUID) -> Optional[Goal]:
    return db.query(Goal).filter(
        Goal.id == goal_id,
        Goal.user_id == user_id
    ).first()

def get_user_goals(db: Session, user_id: UUID, skip: int = 0, limit: int = 100) -> List[Goal]:
    return (
        db.query(Goal)
        .filter(Goal.user_id == user_id)
        .order_by(Goal.created_at)
        .offset(skip)
        .limit(limit)
        .all()
    )

def update_goal(db: Session, goal_id: UUID, updated_goal: GoalUpdate, user_id: UUID) -> Optional[Goal]:
    goal = get_goal(db, goal_id, user_id)
    if goal:
        update_data = updated_goal.model_dump(exclude_unset=True)
        _check_dates(update_data.get("start_date", goal.start_date), update_data.get("end_date", goal.end_date))
        if "status" in update_data and goal.status == "completed":
            raise ValidationError("A completed goal cannot be paused or reactivated")
        for field, value in update_data.items():
            setattr(goal, field, value)
        db.commit()
        db.refresh(goal)
        return goal
    return None

def delete_goal(db: Session, goal_id: UUID, user_id: UUID) -> Optional[Goal]:
    # Flush only: deletes commit together with the pointer clean-up
    goal = get_goal(db, goal_id, user_id)
    if goal:
        db.delete(goal)
        db.flush()
        return goal
    return None


# Phase CRUD
def get_phase(db: Session, phase_id: UUID, user_id: UUID) -> Optional[Phase]:
    return (
        db.query(Phase)
        .join(Goal, Phase.goal_id == Goal.id)
        .filter(Phase.id == phase_id, Goal.user_id == user_id)
        .first()
    )

def get_goal_phases(db: Session, goal_id: UUID) -> List[Phase]:
    return db.query(Phase).filter(Phase.goal_id == goal_id).order_by(Phase.order_index).all()

def create_phase(db: Session, phase: PhaseCreate, user_id: UUID) -> Optional[Phase]:
    goal = get_goal(db, phase.goal_id, user_id)
    if goal is None:
        return None
    order_index = phase.order_index
    if order_index is None:
        last = db.query(func.max(Phase.order_index)).filter(Phase.goal_id == goal.id).scalar()
        order_index = (last or 0) + 1
    elif db.query(Phase).filter(Phase.goal_id == goal.id, Phase.order_index == order_index).first():
        raise ValidationError(f"Order index {order_index} is already used in this goal")
    new_phase = Phase(
        id=uuid4(),
        goal_id=goal.id,
        order_index=order_index,
        name=phase.name,
        description=phase.description,
    )
    db.add(new_phase)
    db.commit()
    db.refresh(new_phase)
    return new_phase

def update_phase(db: Session, phase_id: UUID, updated_phase: PhaseUpdate, user_id: UUID) -> Optional[Phase]:
    phase = get_phase(db, phase_id, user_id)
    if phase:
        for field, value in updated_phase.model_dump(exclude_unset=True).items():
            setattr(phase, field, value)
        db.commit()
        db.refresh(phase)
        return phase
    return None

def delete_phase(db: Session, phase_id: UUID, user_id: UUID) -> Optional[Phase]:
    phase = get_phase(db, phase_id, user_id)
    if phase:
        db.delete(phase)
        db.flush()
        return phase
    return None


# Action CRUD
def get_action(db: Session, action_id: UUID, user_id: UUID) -> Optional[Action]:
    return (
        db.query(Action)
        .join(Phase, Action.phase_id == Phase.id)
        .join(Goal, Phase.goal_id == Goal.id)
        .filter(Action.id == action_id, Goal.user_id == user_id)
        .first()
    )

def get_phase_actions(db: Session, phase_id: UUID) -> List[Action]:
    return db.query(Action).filter(Action.phase_id == phase_id).order_by(Action.order_index).all()

def create_action(db: Session, action: ActionCreate, user_id: UUID) -> Optional[Action]:
    phase = get_phase(db, action.phase_id, user_id)
    if phase is None:
        return None
    order_index = action.order_index
    if order_index is None:
        last = db.query(func.max(Action.order_index)).filter(Action.phase_id == phase.id).scalar()
        order_index = (last or 0) + 1
    elif db.query(Action).filter(Action.phase_id == phase.id, Action.order_index == order_index).first():
        raise ValidationError(f"Order index {order_index} is already used in this phase")
    new_action = Action(
        id=uuid4(),
        phase_id=phase.id,
        order_index=order_index,
        title=action.title,
        definition=action.definition,
        estimated_time=action.estimated_time,
    )
    db.add(new_action)
    db.commit()
    db.refresh(new_action)
    return new_action

def update_action(db: Session, action_id: UUID, updated_action: ActionUpdate, user_id: UUID) -> Optional[Action]:
    action = get_action(db, action_id, user_id)
    if action:
        for field, value in updated_action.model_dump(exclude_unset=True).items():
            setattr(action, field, value)
        db.commit()
        db.refresh(action)
        return action
    return None

def delete_action(db: Session, action_id: UUID, user_id: UUID) -> Optional[Action]:
    action = get_action(db, action_id, user_id)
    if action:
        db.delete(action)
        db.flush()
        return action
    return None


# Reordering
def _rewrite_order(db: Session, rows: Sequence, ordered_ids: Sequence[UUID]) -> None:
    by_id = {row.id: row for row in rows}
    # Two passes so (parent, order_index) stays unique after every flush
    for index, row_id in enumerate(ordered_ids):
        by_id[row_id].order_index = -(index + 1)
    db.flush()
    for index, row_id in enumerate(ordered_ids):
        by_id[row_id].order_index = index + 1
    db.commit()

def _check_same_set(current_ids, ordered_ids: Sequence[UUID], kind: str) -> None:
    if len(set(ordered_ids)) != len(ordered_ids) or set(ordered_ids) != set(current_ids):
        raise ValidationError(f"Reorder must list every {kind} exactly once")

def reorder_phases(db: Session, goal_id: UUID, ordered_ids: Sequence[UUID], user_id: UUID) -> Optional[List[Phase]]:
    goal = get_goal(db, goal_id, user_id)
    if goal is None:
        return None
    phases = get_goal_phases(db, goal.id)
    _check_same_set([p.id for p in phases], ordered_ids, "phase")
    _rewrite_order(db, phases, ordered_ids)
    return get_goal_phases(db, goal.id)

def reorder_actions(db: Session, phase_id: UUID, ordered_ids: Sequence[UUID], user_id: UUID) -> Optional[List[Action]]:
    phase = get_phase(db, phase_id, user_id)
    if phase is None:
        return None
    actions = get_phase_actions(db, phase.id)
    _check_same_set([a.id for a in actions], ordered_ids, "action")
    _rewrite_order(db, actions, ordered_ids)
    return get_phase_actions(db, phase.id)
