"""
Tests for the /tasks routes.

Tests verify that:
1. The owner always comes from the session
2. Another user's task looks exactly like a missing one
3. PATCH enforces {description, completed} and never half-applies
4. Filtering, sorting and pagination follow the query string
"""

from __future__ import annotations

from datetime import datetime

import pytest

from taskapi.models.task import Task


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def create_task(client):
    def _create(token: str, description: str, completed: bool = False) -> dict:
        response = client.post(
            "/tasks",
            json={"description": description, "completed": completed},
            headers=_auth(token),
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


# ============================================================================
# Create / Read
# ============================================================================

def test_create_task_sets_owner_from_session(client, ann):
    user, token = ann

    response = client.post("/tasks", json={"description": "  buy milk  "}, headers=_auth(token))

    assert response.status_code == 201
    task = response.json()
    assert task["owner"] == user["id"]
    assert task["description"] == "buy milk"
    assert task["completed"] is False
    assert {"id", "createdAt", "updatedAt"} <= set(task)


def test_create_task_rejects_owner_in_body(client, ann, bob):
    bob_user, _ = bob
    _, token = ann

    response = client.post(
        "/tasks",
        json={"description": "sneaky", "owner": bob_user["id"]},
        headers=_auth(token),
    )

    assert response.status_code == 400


@pytest.mark.parametrize("payload", [{}, {"description": "   "}, {"description": "x", "completed": "maybe"}])
def test_create_task_validates_body(client, ann, payload):
    _, token = ann

    response = client.post("/tasks", json=payload, headers=_auth(token))

    assert response.status_code == 400
    assert "error" in response.json()


def test_create_task_requires_auth(client):
    response = client.post("/tasks", json={"description": "x"})

    assert response.status_code == 401


def test_get_own_task(client, ann, create_task):
    _, token = ann
    task = create_task(token, "read me")

    response = client.get(f"/tasks/{task['id']}", headers=_auth(token))

    assert response.status_code == 200
    assert response.json() == task


def test_other_users_task_is_not_found(client, ann, bob, create_task):
    _, ann_token = ann
    _, bob_token = bob
    task = create_task(ann_token, "private")

    foreign = client.get(f"/tasks/{task['id']}", headers=_auth(bob_token))
    missing = client.get("/tasks/does-not-exist", headers=_auth(bob_token))

    assert foreign.status_code == missing.status_code == 404
    assert foreign.content == missing.content == b""


# ============================================================================
# Update
# ============================================================================

def test_update_task(client, ann, create_task):
    _, token = ann
    task = create_task(token, "buy milk")

    response = client.patch(
        f"/tasks/{task['id']}",
        json={"completed": True, "description": "buy oat milk"},
        headers=_auth(token),
    )

    assert response.status_code == 200
    assert response.json()["completed"] is True
    assert response.json()["description"] == "buy oat milk"


def test_update_task_with_disallowed_field_changes_nothing(client, ann, create_task):
    _, token = ann
    task = create_task(token, "buy milk")

    response = client.patch(
        f"/tasks/{task['id']}",
        json={"completed": True, "owner": "someone"},
        headers=_auth(token),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid updates!"
    assert client.get(f"/tasks/{task['id']}", headers=_auth(token)).json()["completed"] is False


def test_update_other_users_task_is_not_found(client, ann, bob, create_task):
    _, ann_token = ann
    _, bob_token = bob
    task = create_task(ann_token, "hands off")

    response = client.patch(
        f"/tasks/{task['id']}",
        json={"completed": True},
        headers=_auth(bob_token),
    )

    assert response.status_code == 404
    assert client.get(f"/tasks/{task['id']}", headers=_auth(ann_token)).json()["completed"] is False


@pytest.mark.parametrize("payload", [{"description": None}, {"completed": None}, {"description": ""}])
def test_update_task_rejects_empty_values(client, ann, create_task, payload):
    _, token = ann
    task = create_task(token, "buy milk")

    response = client.patch(f"/tasks/{task['id']}", json=payload, headers=_auth(token))

    assert response.status_code == 400


# ============================================================================
# Delete
# ============================================================================

def test_delete_task(client, ann, create_task):
    _, token = ann
    task = create_task(token, "done soon")

    response = client.delete(f"/tasks/{task['id']}", headers=_auth(token))

    assert response.status_code == 200
    assert response.json()["id"] == task["id"]
    assert client.get(f"/tasks/{task['id']}", headers=_auth(token)).status_code == 404


def test_delete_other_users_task_is_not_found(client, ann, bob, create_task):
    _, ann_token = ann
    _, bob_token = bob
    task = create_task(ann_token, "mine")

    response = client.delete(f"/tasks/{task['id']}", headers=_auth(bob_token))

    assert response.status_code == 404
    assert client.get(f"/tasks/{task['id']}", headers=_auth(ann_token)).status_code == 200


# ============================================================================
# List
# ============================================================================

@pytest.fixture
def seeded(ann, bob, create_task):
    _, ann_token = ann
    _, bob_token = bob
    create_task(ann_token, "alpha", completed=True)
    create_task(ann_token, "charlie")
    create_task(ann_token, "bravo", completed=True)
    create_task(bob_token, "bob only")
    return ann_token


def _descriptions(response) -> list:
    assert response.status_code == 200, response.text
    return [t["description"] for t in response.json()]


def test_list_is_scoped_to_owner(client, seeded):
    assert _descriptions(client.get("/tasks", headers=_auth(seeded))) == ["alpha", "charlie", "bravo"]


def test_list_keeps_insertion_order_when_timestamps_tie(client, db, ann):
    user, token = ann
    same_instant = datetime(2024, 1, 1, 12, 0, 0)
    # Ids sort opposite to insertion order
    for task_id, description in [("f" * 32, "first"), ("a" * 32, "second"), ("0" * 32, "third")]:
        db.add(Task(
            id=task_id,
            description=description,
            owner_id=user["id"],
            created_at=same_instant,
            updated_at=same_instant,
        ))
        db.commit()

    listed = client.get("/tasks", headers=_auth(token))
    by_created = client.get("/tasks", params={"sortBy": "createdAt"}, headers=_auth(token))

    assert _descriptions(listed) == ["first", "second", "third"]
    assert _descriptions(by_created) == ["first", "second", "third"]


def test_list_filters_on_completed(client, seeded):
    done = client.get("/tasks", params={"completed": "true"}, headers=_auth(seeded))
    open_ = client.get("/tasks", params={"completed": "false"}, headers=_auth(seeded))

    assert _descriptions(done) == ["alpha", "bravo"]
    assert _descriptions(open_) == ["charlie"]


def test_list_sorts(client, seeded):
    asc = client.get("/tasks", params={"sortBy": "description:asc"}, headers=_auth(seeded))
    desc = client.get("/tasks", params={"sortBy": "description:desc"}, headers=_auth(seeded))

    assert _descriptions(asc) == ["alpha", "bravo", "charlie"]
    assert _descriptions(desc) == ["charlie", "bravo", "alpha"]


def test_list_paginates(client, seeded):
    page = client.get(
        "/tasks",
        params={"sortBy": "description", "limit": "2", "skip": "1"},
        headers=_auth(seeded),
    )

    assert _descriptions(page) == ["bravo", "charlie"]


def test_list_ignores_non_numeric_pagination(client, seeded):
    response = client.get("/tasks", params={"limit": "lots", "skip": "some"}, headers=_auth(seeded))

    assert len(_descriptions(response)) == 3


def test_list_requires_auth(client):
    assert client.get("/tasks").status_code == 401
