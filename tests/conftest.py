"""
Pytest configuration and fixtures.

Every test gets a fresh in-memory SQLite database. Environment defaults are
set before any ``onestep`` import so the module-level config picks them up.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

import uuid
from datetime import date, datetime
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from onestep.auth.service import create_token
from onestep.core.database import Base, get_db
from onestep.goals.models import Action, Goal, Phase

TODAY = date(2026, 3, 14)
NOW = datetime(2026, 3, 14, 9, 30)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def build_goal(db):
    """
    Factory for a goal hierarchy. ``layout`` lists the number of actions per
    phase, e.g. ``[2, 1]`` builds P1 (A1, A2) and P2 (A3).
    """
    def _build(user_id, layout, name="Run a marathon"):
        goal = Goal(
            id=uuid.uuid4(),
            user_id=user_id,
            name=name,
            category="health",
            start_date=TODAY,
            status="active",
        )
        db.add(goal)
        phases, actions = [], []
        for phase_number, action_count in enumerate(layout, start=1):
            phase = Phase(
                id=uuid.uuid4(),
                goal_id=goal.id,
                order_index=phase_number * 10,
                name=f"Phase {phase_number}",
            )
            db.add(phase)
            phases.append(phase)
            for action_number in range(1, action_count + 1):
                action = Action(
                    id=uuid.uuid4(),
                    phase_id=phase.id,
                    order_index=action_number * 10,
                    title=f"P{phase_number} step {action_number}",
                    definition="Done when the step is finished",
                )
                db.add(action)
                actions.append(action)
        db.commit()
        return SimpleNamespace(
            goal_id=goal.id,
            phase_ids=[p.id for p in phases],
            action_ids=[a.id for a in actions],
        )

    return _build


@pytest.fixture
def client(session_factory):
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(user_id):
    return {"Authorization": f"Bearer {create_token(user_id)}"}
