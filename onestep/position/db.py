from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from onestep.position.models import PositionState

POINTER_FIELDS = ("current_goal_id", "current_phase_id", "current_action_id")


def get_position(db: Session, user_id: UUID) -> Optional[PositionState]:
    return db.query(PositionState).filter(PositionState.user_id == user_id).first()


def init_position(db: Session, user_id: UUID) -> PositionState:
    """Creates an all-null pointer row for the user; returns the existing row unchanged if there is one."""
    position = get_position(db, user_id)
    if position is not None:
        return position
    position = PositionState(
        id=uuid4(),
        user_id=user_id,
        current_goal_id=None,
        current_phase_id=None,
        current_action_id=None,
    )
    db.add(position)
    db.flush()
    return position


def update_position(db: Session, user_id: UUID, **fields) -> PositionState:
    """
    Merge-patches the pointer fields that were passed; the others keep their
    value. Flushes so a concurrent writer holding a stale version fails here.
    """
    unknown = set(fields) - set(POINTER_FIELDS)
    if unknown:
        raise ValueError(f"Unknown position fields: {sorted(unknown)}")
    position = init_position(db, user_id)
    for field, value in fields.items():
        setattr(position, field, value)
    db.flush()
    return position
