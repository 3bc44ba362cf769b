import uuid

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from onestep.auth.service import decode_token
from onestep.core.database import get_db
from onestep.system import routes as system_router


@pytest.fixture
def dev_client(session_factory):
    app = FastAPI()
    app.include_router(system_router.router)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def test_dev_token_carries_user_id(dev_client):
    user_id = uuid.uuid4()

    body = dev_client.post(f"/system/dev-token/{user_id}").json()

    assert body["user_id"] == str(user_id)
    assert decode_token(body["token"])["sub"] == str(user_id)


def test_debug_listings(dev_client, user_id, build_goal):
    tree = build_goal(user_id, [1])

    goals = dev_client.get("/system/debug/goals").json()

    assert [g["id"] for g in goals] == [str(tree.goal_id)]
    assert dev_client.get("/system/debug/positions").json() == []
