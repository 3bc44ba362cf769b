"""
Next-unit resolution over a Goal's Phase/Action hierarchy.

Traversal order is ``(phase.order_index, action.order_index)`` ascending. The
pure helpers work on two ordered inputs, a list of phase ids and a mapping of
phase id to its ordered action ids, so they can be exercised without a
database. ``resolve_next`` loads those inputs for a stored action and only
ever answers with a pending action.

A phase with no actions ends traversal: the unit before it has no successor
even when later phases hold actions.
"""
from dataclasses import dataclass
from typing import Container, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple, Union
from uuid import UUID

from sqlalchemy.orm import Session

from onestep.core.exceptions import ActionNotCompleted, NotFound
from onestep.goals.models import Action, Goal, Phase

Unit = Tuple[UUID, UUID]  # (phase_id, action_id)


@dataclass(frozen=True)
class NextUnit:
    action_id: UUID
    phase_id: UUID
    goal_id: UUID
    exhausted = False


@dataclass(frozen=True)
class Exhausted:
    """No pending action is reachable. ``dead_end`` marks pending actions stranded behind an empty phase."""
    goal_id: UUID
    dead_end: bool = False
    exhausted = True


Resolution = Union[NextUnit, Exhausted]


def _following_phase(phase_ids: Sequence[UUID], phase_id: UUID) -> Optional[UUID]:
    position = phase_ids.index(phase_id)
    if position + 1 < len(phase_ids):
        return phase_ids[position + 1]
    return None


def first_in_sequence(
    phase_ids: Sequence[UUID],
    actions_by_phase: Mapping[UUID, Sequence[UUID]],
) -> Optional[Unit]:
    if not phase_ids:
        return None
    first_phase = phase_ids[0]
    actions = actions_by_phase.get(first_phase) or []
    if not actions:
        return None
    return first_phase, actions[0]


def next_in_sequence(
    phase_ids: Sequence[UUID],
    actions_by_phase: Mapping[UUID, Sequence[UUID]],
    phase_id: UUID,
    action_id: UUID,
) -> Optional[Unit]:
    """
    Returns the unit that follows ``action_id`` of ``phase_id``, or None.

    Raises ValueError when the phase or action is not part of the inputs.
    """
    actions = list(actions_by_phase.get(phase_id) or [])
    position = actions.index(action_id)
    if position + 1 < len(actions):
        return phase_id, actions[position + 1]

    next_phase = _following_phase(phase_ids, phase_id)
    if next_phase is None:
        return None
    following = actions_by_phase.get(next_phase) or []
    if not following:
        return None
    return next_phase, following[0]


def iter_sequence(
    phase_ids: Sequence[UUID],
    actions_by_phase: Mapping[UUID, Sequence[UUID]],
) -> Iterator[Unit]:
    """Yields every reachable unit of the goal in traversal order."""
    unit = first_in_sequence(phase_ids, actions_by_phase)
    while unit is not None:
        yield unit
        unit = next_in_sequence(phase_ids, actions_by_phase, *unit)


def first_pending(
    phase_ids: Sequence[UUID],
    actions_by_phase: Mapping[UUID, Sequence[UUID]],
    pending: Container[UUID],
) -> Optional[Unit]:
    return next((unit for unit in iter_sequence(phase_ids, actions_by_phase) if unit[1] in pending), None)


def next_pending(
    phase_ids: Sequence[UUID],
    actions_by_phase: Mapping[UUID, Sequence[UUID]],
    phase_id: UUID,
    action_id: UUID,
    pending: Container[UUID],
) -> Optional[Unit]:
    """
    Returns the first unit after ``action_id`` whose action is in ``pending``.

    Completed actions met on the way are stepped over; reordering or inserting
    can leave them after the unit just finished. When nothing pending follows,
    the earliest pending unit of the goal is returned instead, so an action
    placed before the finished ones is still reached. None means no pending
    action is reachable.
    """
    unit = next_in_sequence(phase_ids, actions_by_phase, phase_id, action_id)
    while unit is not None:
        if unit[1] in pending:
            return unit
        unit = next_in_sequence(phase_ids, actions_by_phase, *unit)
    return first_pending(phase_ids, actions_by_phase, pending)


def load_hierarchy(db: Session, goal_id: UUID) -> Tuple[List[UUID], Dict[UUID, List[UUID]]]:
    phase_ids = [
        row.id
        for row in db.query(Phase.id).filter(Phase.goal_id == goal_id).order_by(Phase.order_index)
    ]
    actions_by_phase: Dict[UUID, List[UUID]] = {phase_id: [] for phase_id in phase_ids}
    rows = (
        db.query(Action.id, Action.phase_id)
        .join(Phase, Action.phase_id == Phase.id)
        .filter(Phase.goal_id == goal_id)
        .order_by(Phase.order_index, Action.order_index)
    )
    for row in rows:
        actions_by_phase[row.phase_id].append(row.id)
    return phase_ids, actions_by_phase


def load_pending(db: Session, goal_id: UUID) -> Set[UUID]:
    """Ids of the goal's actions that are not completed yet."""
    return {
        row.id
        for row in db.query(Action.id)
        .join(Phase, Action.phase_id == Phase.id)
        .filter(Phase.goal_id == goal_id, Action.completed_at.is_(None))
    }


def resolve_next(db: Session, action_id: UUID, user_id: Optional[UUID] = None) -> Resolution:
    """
    Computes what follows a completed action.

    Read-only: repeated calls over unchanged data give the same answer.
    Raises NotFound for an unknown action (or one outside ``user_id``'s goals)
    and ActionNotCompleted while the action is still pending.
    """
    query = (
        db.query(Action, Phase.goal_id)
        .join(Phase, Action.phase_id == Phase.id)
        .filter(Action.id == action_id)
    )
    if user_id is not None:
        query = query.join(Goal, Phase.goal_id == Goal.id).filter(Goal.user_id == user_id)
    row = query.first()
    if row is None:
        raise NotFound(f"Action {action_id} not found")
    action, goal_id = row
    if action.completed_at is None:
        raise ActionNotCompleted(f"Action {action_id} is not completed")

    phase_ids, actions_by_phase = load_hierarchy(db, goal_id)
    pending = load_pending(db, goal_id)
    unit = next_pending(phase_ids, actions_by_phase, action.phase_id, action.id, pending)
    if unit is not None:
        return NextUnit(action_id=unit[1], phase_id=unit[0], goal_id=goal_id)

    # Anything still pending sits behind an empty phase
    return Exhausted(goal_id=goal_id, dead_end=bool(pending))
