"""
HTTP contract of /api/v1/users: status codes, envelope and validation errors.
"""
from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from users_api.app import create_app
from users_api.repositories.user_repository import UserRepository
from users_api.services.user_service import UserService

BASE = "/api/v1/users"


@pytest.fixture()
def client(temp_db):
    with TestClient(create_app()) as test_client:
        yield test_client


def _create(client: TestClient, name: str, email: str, password: str = "password123") -> dict:
    response = client.post(BASE, json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_index_returns_paginated_users(client):
    for i in range(5):
        _create(client, f"User {i}", f"user{i}@example.com")

    response = client.get(BASE)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    page = body["data"]
    assert page["current_page"] == 1
    assert page["per_page"] == 15
    assert page["total"] == 5
    assert len(page["data"]) == 5
    for item in page["data"]:
        assert {"id", "name", "email", "created_at", "updated_at"} <= set(item)
        assert "password" not in item


def test_index_honours_per_page_and_page(client):
    for i in range(5):
        _create(client, f"User {i}", f"user{i}@example.com")

    page = client.get(BASE, params={"per_page": 2, "page": 3}).json()["data"]

    assert page["per_page"] == 2
    assert page["current_page"] == 3
    assert page["last_page"] == 3
    assert [u["email"] for u in page["data"]] == ["user4@example.com"]


@pytest.mark.parametrize("raw", ["0", "-3", "abc"])
def test_index_falls_back_to_default_per_page(client, raw):
    response = client.get(BASE, params={"per_page": raw})

    assert response.status_code == 200
    assert response.json()["data"]["per_page"] == 15


def test_store_creates_new_user(client):
    response = client.post(
        BASE,
        json={"name": "John Doe", "email": "john@example.com", "password": "password123", "role": "admin"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User created successfully"
    assert body["data"]["name"] == "John Doe"
    assert body["data"]["email"] == "john@example.com"
    assert set(body["data"]) == {"id", "name", "email", "created_at"}

    stored = UserRepository().find_by_email("john@example.com")
    assert stored is not None
    assert stored.password != "password123"


def test_store_validates_required_fields(client):
    response = client.post(BASE, json={})

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert {"name", "email", "password"} <= set(body["errors"])
    assert body["errors"]["name"] == ["The name field is required."]


def test_store_treats_non_object_body_as_empty(client):
    response = client.post(BASE, content=b"not json", headers={"content-type": "application/json"})

    assert response.status_code == 422
    assert set(response.json()["errors"]) == {"name", "email", "password"}


def test_store_validates_field_rules(client):
    response = client.post(BASE, json={"name": "x" * 256, "email": "nope", "password": "short"})

    errors = response.json()["errors"]
    assert response.status_code == 422
    assert errors["name"] == ["The name field must not be greater than 255 characters."]
    assert errors["email"] == ["The email field must be a valid email address."]
    assert errors["password"] == ["The password field must be at least 8 characters."]


def test_store_validates_email_uniqueness(client):
    _create(client, "Existing", "existing@example.com")

    response = client.post(BASE, json={"name": "New User", "email": "existing@example.com", "password": "password123"})

    assert response.status_code == 422
    assert response.json()["errors"] == {"email": ["The email has already been taken."]}


def test_store_translates_storage_conflict(temp_db):
    class RacingService(UserService):
        def user_exists_by_email(self, email, ignore_id=None):
            return False

    repo = UserRepository()
    repo.create({"name": "First", "email": "race@example.com", "password": "hash"})
    app = create_app(user_service=RacingService(repo))

    with TestClient(app) as client:
        response = client.post(BASE, json={"name": "Second", "email": "race@example.com", "password": "password123"})

    assert response.status_code == 422
    assert response.json()["errors"] == {"email": ["The email has already been taken."]}
    assert len(repo.all()) == 1


def test_show_returns_specific_user(client):
    created = _create(client, "Jane Doe", "jane@example.com")

    response = client.get(f"{BASE}/{created['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert set(body["data"]) == {"id", "name", "email", "email_verified_at", "created_at", "updated_at"}
    assert body["data"]["id"] == created["id"]
    assert body["data"]["name"] == "Jane Doe"
    assert body["data"]["email"] == "jane@example.com"
    assert body["data"]["email_verified_at"] is None


@pytest.mark.parametrize("user_id", ["999", "abc", "99999999999999999999"])
def test_show_returns_404_for_non_existent_user(client, user_id):
    response = client.get(f"{BASE}/{user_id}")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "User not found"}


def test_update_modifies_existing_user(client):
    created = _create(client, "Old Name", "old@example.com")

    response = client.put(f"{BASE}/{created['id']}", json={"name": "New Name", "email": "new@example.com"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User updated successfully"
    assert body["data"]["id"] == created["id"]
    assert body["data"]["name"] == "New Name"
    assert body["data"]["email"] == "new@example.com"
    assert "password" not in body["data"]


def test_patch_changes_only_given_fields(client):
    created = _create(client, "Jane", "jane@example.com")

    response = client.patch(f"{BASE}/{created['id']}", json={"name": "  Janet  "})

    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Janet"
    assert response.json()["data"]["email"] == "jane@example.com"


def test_update_returns_404_for_non_existent_user(client):
    response = client.put(f"{BASE}/999", json={"name": "New Name"})

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "User not found"}
    assert UserRepository().all() == []


def test_update_validates_email_uniqueness_excluding_current_user(client):
    first = _create(client, "A", "a@x.com")
    _create(client, "B", "b@x.com")

    response = client.put(f"{BASE}/{first['id']}", json={"email": "b@x.com"})

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert "email" in body["errors"]


def test_update_allows_same_email_for_current_user(client):
    created = _create(client, "Test User", "test@example.com")

    response = client.put(f"{BASE}/{created['id']}", json={"name": "Updated Name", "email": "test@example.com"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["message"] == "User updated successfully"


def test_update_rejects_short_password(client):
    created = _create(client, "Jane", "jane@example.com")

    response = client.patch(f"{BASE}/{created['id']}", json={"password": "short"})

    assert response.status_code == 422
    assert list(response.json()["errors"]) == ["password"]


def test_destroy_deletes_user(client):
    created = _create(client, "Jane", "jane@example.com")

    response = client.delete(f"{BASE}/{created['id']}")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "User deleted successfully"}
    assert UserRepository().find_by_id(created["id"]) is None


def test_deleted_user_is_gone_for_every_action(client):
    created = _create(client, "Jane", "jane@example.com")
    client.delete(f"{BASE}/{created['id']}")

    assert client.get(f"{BASE}/{created['id']}").status_code == 404
    assert client.put(f"{BASE}/{created['id']}", json={"name": "Again"}).status_code == 404
    assert client.delete(f"{BASE}/{created['id']}").status_code == 404


def test_destroy_returns_404_for_non_existent_user(client):
    response = client.delete(f"{BASE}/999")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "User not found"}


def test_unknown_routes_use_the_envelope(client):
    response = client.get("/api/v1/nothing-here")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert "message" in body


@pytest.mark.parametrize("param", ["per_page", "page"])
def test_index_ignores_out_of_range_paging_values(client, param):
    _create(client, "Jane", "jane@example.com")

    response = client.get(BASE, params={param: "99999999999999999999"})

    assert response.status_code == 200
    page = response.json()["data"]
    assert page["per_page"] == 15
    assert page["current_page"] == 1
    assert [u["email"] for u in page["data"]] == ["jane@example.com"]


def test_index_page_far_past_the_end_is_empty(client):
    _create(client, "Jane", "jane@example.com")

    page = client.get(BASE, params={"per_page": 2**62, "page": 2**62}).json()["data"]

    assert page["data"] == []
    assert page["total"] == 1


@pytest.mark.parametrize("email", ["admin@localhost", "a@b.test", "x@example.local"])
def test_store_accepts_local_and_reserved_domains(client, email):
    created = _create(client, "Local Admin", email)

    assert created["email"] == email


class _LoopAwareService(UserService):
    """Records whether writes ran on the thread that owns the event loop."""

    def __init__(self, repo):
        super().__init__(repo)
        self.on_event_loop = []

    def _note_thread(self):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.on_event_loop.append(False)
        else:
            self.on_event_loop.append(True)

    def create_user(self, data):
        self._note_thread()
        return super().create_user(data)

    def update_user(self, user_id, data):
        self._note_thread()
        return super().update_user(user_id, data)


def test_writes_run_off_the_event_loop(temp_db):
    svc = _LoopAwareService(UserRepository())

    with TestClient(create_app(user_service=svc)) as client:
        created = _create(client, "Jane", "jane@example.com")
        response = client.patch(f"{BASE}/{created['id']}", json={"password": "another-secret"})

    assert response.status_code == 200
    assert svc.on_event_loop == [False, False]
