"""
Unit tests for the API routes.

Service calls are monkeypatched, so these tests cover request parsing,
authentication and the mapping of service errors to HTTP status codes.
"""

import pytest
from fastapi.testclient import TestClient
from sparmatch.api.main import app
from sparmatch.database.db import get_db_session
from sparmatch.services import (
    connection_service,
    gym_service,
    message_service,
    profile_service,
    search_service,
    user_service,
)
from sparmatch.services.errors import (
    DuplicateConnectionError,
    ForbiddenError,
    ForbiddenTransitionError,
    InvalidFilterError,
    NotFoundError,
    SelfConnectionError,
    ValidationError,
)

USER = {
    "id": 1,
    "email": "alice@example.com",
    "first_name": "Alice",
    "last_name": "Alpha",
    "profile_image_url": None,
    "created_at": "2024-01-01T00:00:00+00:00",
}

CONNECTION = {
    "id": 10,
    "requester_id": 1,
    "receiver_id": 2,
    "status": "pending",
    "message": None,
    "created_at": "2024-01-01T00:00:00+00:00",
    "updated_at": "2024-01-01T00:00:00+00:00",
}


async def _no_db_session():
    yield None


@pytest.fixture(autouse=True)
def no_database():
    """Route tests never touch the database."""
    app.dependency_overrides[get_db_session] = _no_db_session
    yield
    app.dependency_overrides.pop(get_db_session, None)


def make_client_with_auth(monkeypatch, user_id=1):
    """Create a test client whose identity header resolves to a known user."""

    async def fake_get_user_by_id(session, uid):
        if uid != user_id:
            return None
        return {**USER, "id": user_id}

    monkeypatch.setattr(user_service, "get_user_by_id", fake_get_user_by_id, raising=True)
    return TestClient(app), {"X-User-Id": str(user_id)}


def _raise(error):
    async def fake(*args, **kwargs):
        raise error

    return fake


# ──────────────────────────────────────────────────────────────
# Authentication
# ──────────────────────────────────────────────────────────────


def test_health():
    response = TestClient(app).get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_missing_identity_header(monkeypatch):
    client, _ = make_client_with_auth(monkeypatch)
    response = client.get("/api/connections")
    assert response.status_code == 401


@pytest.mark.parametrize("header", ["abc", "2"])
def test_invalid_or_unknown_identity(monkeypatch, header):
    client, _ = make_client_with_auth(monkeypatch, user_id=1)
    response = client.get("/api/auth/user", headers={"X-User-Id": header})
    assert response.status_code == 401


def test_get_authenticated_user(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    response = client.get("/api/auth/user", headers=headers)
    assert response.status_code == 200
    assert response.json()["email"] == "alice@example.com"


# ──────────────────────────────────────────────────────────────
# Partner search
# ──────────────────────────────────────────────────────────────


def test_search_partners_passes_filters(monkeypatch):
    captured = {}

    async def fake_search_profiles(session, filters, limit=None, offset=0):
        captured["filters"] = filters
        captured["limit"] = limit
        captured["offset"] = offset
        return []

    monkeypatch.setattr(search_service, "search_profiles", fake_search_profiles)

    response = TestClient(app).get(
        "/api/partners",
        params={
            "discipline": "boxing",
            "experienceLevel": "advanced",
            "latitude": 34.05,
            "longitude": -118.24,
            "limit": 5,
        },
    )
    assert response.status_code == 200
    assert response.json() == []
    filters = captured["filters"]
    assert filters.discipline.value == "boxing"
    assert filters.experience_level.value == "advanced"
    assert filters.geo.radius_miles == 25.0
    assert captured["limit"] == 5


@pytest.mark.parametrize(
    "params",
    [
        {"discipline": "karate"},
        {"latitude": 34.05},
        {"latitude": 34.05, "longitude": -118.24, "radius": -3},
    ],
)
def test_search_partners_invalid_filters(params):
    response = TestClient(app).get("/api/partners", params=params)
    assert response.status_code == 400


# ──────────────────────────────────────────────────────────────
# Connections
# ──────────────────────────────────────────────────────────────


def test_create_connection(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    captured = {}

    async def fake_create_connection(session, requester_id, receiver_id, message=None):
        captured.update(requester_id=requester_id, receiver_id=receiver_id, message=message)
        return CONNECTION

    monkeypatch.setattr(connection_service, "create_connection", fake_create_connection)

    response = client.post(
        "/api/connections", json={"receiverId": 2, "message": "Spar?"}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "pending"
    # The requester is always the authenticated caller
    assert captured == {"requester_id": 1, "receiver_id": 2, "message": "Spar?"}


@pytest.mark.parametrize(
    "error,status_code",
    [
        (SelfConnectionError("Cannot send a connection request to yourself"), 400),
        (NotFoundError("User not found"), 404),
        (DuplicateConnectionError("Connection request already sent"), 409),
        (ForbiddenError("Cannot send a connection request to this user"), 403),
    ],
)
def test_create_connection_error_mapping(monkeypatch, error, status_code):
    client, headers = make_client_with_auth(monkeypatch)
    monkeypatch.setattr(connection_service, "create_connection", _raise(error))

    response = client.post("/api/connections", json={"receiver_id": 2}, headers=headers)
    assert response.status_code == status_code
    assert response.json()["detail"] == str(error)


def test_create_connection_unexpected_error(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    monkeypatch.setattr(connection_service, "create_connection", _raise(RuntimeError("boom")))

    response = client.post("/api/connections", json={"receiver_id": 2}, headers=headers)
    assert response.status_code == 500
    assert response.json()["detail"] == "Error creating connection"


@pytest.mark.parametrize(
    "error,status_code",
    [
        (ForbiddenTransitionError("Only the receiver can mark a connection as accepted"), 403),
        (ValidationError("Invalid connection status: friends"), 400),
        (NotFoundError("Connection not found"), 404),
    ],
)
def test_update_connection_status_error_mapping(monkeypatch, error, status_code):
    client, headers = make_client_with_auth(monkeypatch)
    monkeypatch.setattr(connection_service, "update_status", _raise(error))

    response = client.patch("/api/connections/10", json={"status": "accepted"}, headers=headers)
    assert response.status_code == status_code


def test_update_connection_status(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    captured = {}

    async def fake_update_status(session, connection_id, new_status, acting_user_id):
        captured.update(connection_id=connection_id, status=new_status, actor=acting_user_id)
        return {**CONNECTION, "status": new_status}

    monkeypatch.setattr(connection_service, "update_status", fake_update_status)

    response = client.patch("/api/connections/10", json={"status": "accepted"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "accepted"
    assert captured == {"connection_id": 10, "status": "accepted", "actor": 1}


def test_list_connections(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    other = {**USER, "id": 2, "first_name": "Bob"}

    async def fake_list_connections(session, user_id):
        return [{**CONNECTION, "requester": USER, "receiver": other, "other_user": other}]

    monkeypatch.setattr(connection_service, "list_connections", fake_list_connections)

    response = client.get("/api/connections", headers=headers)
    assert response.status_code == 200
    assert response.json()[0]["other_user"]["first_name"] == "Bob"


# ──────────────────────────────────────────────────────────────
# Messages
# ──────────────────────────────────────────────────────────────


def test_send_message_on_pending_connection(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    monkeypatch.setattr(
        message_service,
        "send_message",
        _raise(ForbiddenError("Messages can only be sent on accepted connections")),
    )

    response = client.post(
        "/api/connections/10/messages", json={"content": "Hi"}, headers=headers
    )
    assert response.status_code == 403


def test_send_empty_message(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    monkeypatch.setattr(
        message_service, "send_message", _raise(ValidationError("Message content cannot be empty"))
    )

    response = client.post("/api/connections/10/messages", json={"content": " "}, headers=headers)
    assert response.status_code == 400


def test_mark_messages_read(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)

    async def fake_mark_messages_read(session, connection_id, reader_id):
        return 3

    monkeypatch.setattr(message_service, "mark_messages_read", fake_mark_messages_read)

    response = client.post("/api/connections/10/messages/read", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"updated": 3}


# ──────────────────────────────────────────────────────────────
# Profiles and gyms
# ──────────────────────────────────────────────────────────────


def test_upsert_profile_accepts_camel_case(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    captured = {}

    async def fake_upsert_profile(session, user_id, data):
        captured.update(data)
        return {
            "id": 5,
            "user_id": user_id,
            "discipline": data["discipline"],
            "experience_level": data["experience_level"],
            "location": data["location"],
            "rating": 0.0,
            "total_ratings": 0,
            "is_active": True,
            "verified": False,
        }

    monkeypatch.setattr(profile_service, "upsert_profile", fake_upsert_profile)

    response = client.post(
        "/api/profile",
        json={"discipline": "mma", "experienceLevel": "beginner", "location": "Austin, TX"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["experience_level"] == "beginner"
    # Fields the client did not send are not forwarded
    assert captured == {
        "discipline": "mma",
        "experience_level": "beginner",
        "location": "Austin, TX",
    }


def test_rating_out_of_range_rejected_by_schema(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    response = client.post("/api/profiles/2/ratings", json={"score": 9}, headers=headers)
    assert response.status_code == 422


def test_list_gyms_invalid_filter(monkeypatch):
    monkeypatch.setattr(
        gym_service, "list_gyms", _raise(InvalidFilterError("Radius must be a non-negative number of miles"))
    )
    response = TestClient(app).get("/api/gyms", params={"latitude": 1, "longitude": 1, "radius": -1})
    assert response.status_code == 400


def test_create_gym_requires_auth():
    response = TestClient(app).post(
        "/api/gyms", json={"name": "G", "address": "A", "city": "C", "state": "S"}
    )
    assert response.status_code == 401
