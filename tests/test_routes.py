import uuid


def _seed(client, headers, layout):
    goal = client.post(
        "/goals",
        json={"name": "Read 12 books", "category": "learning", "start_date": "2026-01-01"},
        headers=headers,
    ).json()
    action_ids = []
    for phase_number, count in enumerate(layout, start=1):
        phase = client.post(
            "/phases", json={"goal_id": goal["id"], "name": f"Quarter {phase_number}"}, headers=headers
        ).json()
        for n in range(count):
            action = client.post(
                "/actions",
                json={"phase_id": phase["id"], "title": f"Book {n}", "definition": "Last page read"},
                headers=headers,
            ).json()
            action_ids.append(action["id"])
    return goal["id"], action_ids


def test_requires_bearer_token(client):
    assert client.get("/goals").status_code in (401, 403)
    response = client.get("/goals", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_full_progression_flow(client, auth_headers):
    goal_id, (a1, a2, a3) = _seed(client, auth_headers, [2, 1])

    assert client.get("/progression/position", headers=auth_headers).status_code == 404

    response = client.post("/progression/current-goal", json={"goal_id": goal_id}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["current_action_id"] == a1

    current = client.get("/progression/current", headers=auth_headers).json()
    assert current["action"]["id"] == a1
    assert current["goal"]["id"] == goal_id

    for action_id, expected in ((a1, a2), (a2, a3), (a3, None)):
        response = client.post(
            "/progression/complete",
            json={"action_id": action_id, "difficulty": 3, "energy": 4},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json() == {"next_action_id": expected}

    position = client.get("/progression/position", headers=auth_headers).json()
    assert position["current_action_id"] is None
    assert client.get(f"/goals/{goal_id}", headers=auth_headers).json()["status"] == "completed"
    assert len(client.get("/executions", headers=auth_headers).json()) == 3


def test_repeat_completion_conflicts(client, auth_headers):
    _, (a1, _) = _seed(client, auth_headers, [2])
    body = {"action_id": a1, "difficulty": 2, "energy": 2}

    assert client.post("/progression/complete", json=body, headers=auth_headers).status_code == 200
    response = client.post(
        "/progression/complete", json={**body, "difficulty": 5}, headers=auth_headers
    )

    assert response.status_code == 409
    (record,) = client.get("/executions", params={"action_id": a1}, headers=auth_headers).json()
    assert record["difficulty"] == 2


def test_ratings_out_of_range(client, auth_headers):
    _, (a1,) = _seed(client, auth_headers, [1])

    response = client.post(
        "/progression/complete",
        json={"action_id": a1, "difficulty": 0, "energy": 6},
        headers=auth_headers,
    )

    assert response.status_code == 422
    assert client.get(f"/actions/{a1}", headers=auth_headers).json()["completed_at"] is None


def test_mark_incomplete(client, auth_headers):
    _, (a1,) = _seed(client, auth_headers, [1])

    response = client.post("/progression/incomplete", json={"action_id": a1}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"ok": True}

    client.post(
        "/progression/complete", json={"action_id": a1, "difficulty": 1, "energy": 1}, headers=auth_headers
    )
    response = client.post("/progression/incomplete", json={"action_id": a1}, headers=auth_headers)
    assert response.status_code == 409


def test_resolve_next_endpoint(client, auth_headers):
    _, (a1, a2) = _seed(client, auth_headers, [1, 1])

    assert client.get(f"/progression/actions/{a1}/next", headers=auth_headers).status_code == 409

    client.post(
        "/progression/complete", json={"action_id": a1, "difficulty": 3, "energy": 3}, headers=auth_headers
    )
    body = client.get(f"/progression/actions/{a1}/next", headers=auth_headers).json()
    assert body["exhausted"] is False
    assert body["action_id"] == a2

    assert client.get(f"/progression/actions/{uuid.uuid4()}/next", headers=auth_headers).status_code == 404


def test_switching_goal_in_progress_conflicts(client, auth_headers):
    first_id, _ = _seed(client, auth_headers, [1])
    second_id, _ = _seed(client, auth_headers, [1])
    client.post("/progression/current-goal", json={"goal_id": first_id}, headers=auth_headers)

    response = client.post("/progression/current-goal", json={"goal_id": second_id}, headers=auth_headers)

    assert response.status_code == 409


def test_deleting_current_action_moves_pointer(client, auth_headers):
    goal_id, (a1, a2) = _seed(client, auth_headers, [2])
    client.post("/progression/current-goal", json={"goal_id": goal_id}, headers=auth_headers)

    assert client.delete(f"/actions/{a1}", headers=auth_headers).status_code == 200

    position = client.get("/progression/position", headers=auth_headers).json()
    assert position["current_action_id"] == a2


def test_reorder_phases_endpoint(client, auth_headers):
    goal_id, _ = _seed(client, auth_headers, [1, 1])
    phases = client.get(f"/goals/{goal_id}", headers=auth_headers).json()["phases"]
    reversed_ids = [p["id"] for p in reversed(phases)]

    response = client.post(
        f"/goals/{goal_id}/phases/reorder", json={"ids": reversed_ids}, headers=auth_headers
    )

    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == reversed_ids


def test_other_users_cannot_see_goals(client, auth_headers):
    from onestep.auth.service import create_token

    goal_id, (a1,) = _seed(client, auth_headers, [1])
    stranger = {"Authorization": f"Bearer {create_token(uuid.uuid4())}"}

    assert client.get(f"/goals/{goal_id}", headers=stranger).status_code == 404
    response = client.post(
        "/progression/complete", json={"action_id": a1, "difficulty": 3, "energy": 3}, headers=stranger
    )
    assert response.status_code == 404


def test_reordered_goal_completes_through_api(client, auth_headers):
    goal_id, (a1, a2) = _seed(client, auth_headers, [2])
    phase_id = client.get(f"/goals/{goal_id}", headers=auth_headers).json()["phases"][0]["id"]
    body = {"difficulty": 3, "energy": 3}
    client.post("/progression/complete", json={"action_id": a1, **body}, headers=auth_headers)

    response = client.post(
        f"/phases/{phase_id}/actions/reorder", json={"ids": [a2, a1]}, headers=auth_headers
    )
    assert response.status_code == 200

    response = client.post("/progression/complete", json={"action_id": a2, **body}, headers=auth_headers)
    assert response.json() == {"next_action_id": None}
    assert client.get(f"/goals/{goal_id}", headers=auth_headers).json()["status"] == "completed"


def test_deleting_last_pending_action_frees_goal_switch(client, auth_headers):
    goal_id, (a1, a2) = _seed(client, auth_headers, [2])
    other_id, _ = _seed(client, auth_headers, [1])
    client.post("/progression/current-goal", json={"goal_id": goal_id}, headers=auth_headers)
    client.post(
        "/progression/complete", json={"action_id": a1, "difficulty": 3, "energy": 3}, headers=auth_headers
    )

    assert client.delete(f"/actions/{a2}", headers=auth_headers).status_code == 200

    assert client.get(f"/goals/{goal_id}", headers=auth_headers).json()["status"] == "completed"
    response = client.post("/progression/current-goal", json={"goal_id": other_id}, headers=auth_headers)
    assert response.status_code == 200
