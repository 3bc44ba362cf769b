import uuid
from datetime import date

import pytest

from onestep.core.exceptions import ValidationError
from onestep.goals.db import (
    create_action,
    create_goal,
    create_phase,
    delete_goal,
    get_action,
    get_goal,
    get_phase_actions,
    reorder_actions,
    reorder_phases,
    update_goal,
)
from onestep.goals.models import Goal
from onestep.goals.schemas import ActionCreate, GoalCreate, GoalUpdate, PhaseCreate


def _goal(db, user_id):
    return create_goal(db, GoalCreate(name="Ship the side project", category="work", start_date=date(2026, 1, 5)), user_id)


def test_create_hierarchy_appends_in_order(db, user_id):
    goal = _goal(db, user_id)
    p1 = create_phase(db, PhaseCreate(goal_id=goal.id, name="Plan"), user_id)
    p2 = create_phase(db, PhaseCreate(goal_id=goal.id, name="Build"), user_id)
    a1 = create_action(db, ActionCreate(phase_id=p1.id, title="Write outline", definition="Outline exists"), user_id)
    a2 = create_action(db, ActionCreate(phase_id=p1.id, title="Pick stack", definition="Stack chosen"), user_id)

    assert goal.status == "active"
    assert (p1.order_index, p2.order_index) == (1, 2)
    assert (a1.order_index, a2.order_index) == (1, 2)
    assert a1.completed_at is None


def test_foreign_parents_are_invisible(db, user_id):
    goal = _goal(db, user_id)
    stranger = uuid.uuid4()

    assert get_goal(db, goal.id, stranger) is None
    assert create_phase(db, PhaseCreate(goal_id=goal.id, name="Plan"), stranger) is None


def test_order_index_collision(db, user_id):
    goal = _goal(db, user_id)
    create_phase(db, PhaseCreate(goal_id=goal.id, name="Plan", order_index=3), user_id)

    with pytest.raises(ValidationError):
        create_phase(db, PhaseCreate(goal_id=goal.id, name="Again", order_index=3), user_id)


def test_end_date_before_start(db, user_id):
    with pytest.raises(ValidationError):
        create_goal(
            db,
            GoalCreate(name="Backwards", category="misc", start_date=date(2026, 2, 1), end_date=date(2026, 1, 1)),
            user_id,
        )


def test_pause_and_resume(db, user_id):
    goal = _goal(db, user_id)

    assert update_goal(db, goal.id, GoalUpdate(status="paused"), user_id).status == "paused"
    assert update_goal(db, goal.id, GoalUpdate(status="active"), user_id).status == "active"


def test_completed_goal_status_is_locked(db, user_id):
    goal = _goal(db, user_id)
    db.get(Goal, goal.id).status = "completed"
    db.commit()

    with pytest.raises(ValidationError):
        update_goal(db, goal.id, GoalUpdate(status="active"), user_id)


def test_reorder_actions(db, user_id):
    goal = _goal(db, user_id)
    phase = create_phase(db, PhaseCreate(goal_id=goal.id, name="Plan"), user_id)
    ids = [
        create_action(db, ActionCreate(phase_id=phase.id, title=f"Step {n}", definition="done"), user_id).id
        for n in range(3)
    ]

    reordered = reorder_actions(db, phase.id, [ids[2], ids[0], ids[1]], user_id)

    assert [a.id for a in reordered] == [ids[2], ids[0], ids[1]]
    assert [a.order_index for a in get_phase_actions(db, phase.id)] == [1, 2, 3]


def test_reorder_requires_the_full_set(db, user_id):
    goal = _goal(db, user_id)
    p1 = create_phase(db, PhaseCreate(goal_id=goal.id, name="Plan"), user_id)
    create_phase(db, PhaseCreate(goal_id=goal.id, name="Build"), user_id)

    with pytest.raises(ValidationError):
        reorder_phases(db, goal.id, [p1.id], user_id)
    with pytest.raises(ValidationError):
        reorder_phases(db, goal.id, [p1.id, p1.id], user_id)


def test_delete_goal_cascades(db, user_id):
    goal = _goal(db, user_id)
    phase = create_phase(db, PhaseCreate(goal_id=goal.id, name="Plan"), user_id)
    action = create_action(db, ActionCreate(phase_id=phase.id, title="Step", definition="done"), user_id)
    action_id = action.id

    delete_goal(db, goal.id, user_id)

    assert get_action(db, action_id, user_id) is None
