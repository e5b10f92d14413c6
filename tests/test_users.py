from datetime import datetime

from bson import ObjectId

from conftest import auth_headers, make_student
from placement_api.models.user import Role
from placement_api.services.user_service import normalize_updates
from placement_api.core.exceptions import ValidationError

import pytest


def test_get_user_details_returns_projection(client, insert_users):
    placed = datetime(2024, 3, 1)
    (user_id,) = insert_users(make_student("Alice", id="CS101", isPlaced=True, placedDate=placed))

    response = client.get(f"/api/v1/user/{user_id}", headers=auth_headers(user_id))

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    user = data["user"]
    assert user["_id"] == str(user_id)
    assert user["name"] == "Alice"
    assert user["id"] == "CS101"
    assert user["role"] == "student"
    assert user["isPlaced"] is True
    assert user["placedDate"] == placed.isoformat()
    assert "password" not in user
    assert "certificates" not in user


def test_get_user_details_not_found(client):
    caller = ObjectId()
    response = client.get(f"/api/v1/user/{ObjectId()}", headers=auth_headers(caller))

    assert response.status_code == 404
    assert response.json()["message"] == "User not found"
    assert response.json()["success"] is False


def test_get_user_details_rejects_malformed_id(client):
    response = client.get("/api/v1/user/not-an-id", headers=auth_headers(ObjectId()))

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_update_user_applies_allowed_fields(client, insert_users, find_user):
    (user_id,) = insert_users(make_student("Alice"))

    response = client.patch(
        "/api/v1/user",
        json={"name": "Alicia", "gender": "female", "profile.github": "alicia-gh", "semester": 6},
        headers=auth_headers(user_id),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "User updated successfully."
    assert data["user"]["name"] == "Alicia"
    assert data["user"]["profile"]["github"] == "alicia-gh"
    assert data["user"]["profile"]["semester"] == 6
    # Untouched profile fields survive
    assert data["user"]["profile"]["batch"] == "2024"

    stored = find_user(user_id)
    assert stored["name"] == "Alicia"
    assert stored["profile"]["gender"] == "female"


def test_update_user_with_disallowed_key_rejects_whole_request(client, insert_users, find_user):
    (user_id,) = insert_users(make_student("Alice"))

    response = client.patch(
        "/api/v1/user",
        json={"name": "Mallory", "hacker": "x"},
        headers=auth_headers(user_id),
    )

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid updates provided."
    assert body["details"]["invalid_fields"] == ["hacker"]
    assert find_user(user_id)["name"] == "Alice"


def test_update_user_cannot_touch_avatar_or_role(client, insert_users, find_user):
    (user_id,) = insert_users(make_student("Alice"))

    response = client.patch(
        "/api/v1/user",
        json={"role": "admin", "avatar": str(ObjectId())},
        headers=auth_headers(user_id),
    )

    assert response.status_code == 400
    stored = find_user(user_id)
    assert stored["role"] == "student"
    assert "avatar" not in stored["profile"]


def test_update_user_rejects_empty_body(client, insert_users):
    (user_id,) = insert_users(make_student("Alice"))

    response = client.patch("/api/v1/user", json={}, headers=auth_headers(user_id))

    assert response.status_code == 400


def test_update_user_rejects_bad_value_types(client, insert_users, find_user):
    (user_id,) = insert_users(make_student("Alice"))

    response = client.patch(
        "/api/v1/user",
        json={"name": "Alicia", "birthDate": "not-a-date"},
        headers=auth_headers(user_id),
    )

    assert response.status_code == 400
    assert find_user(user_id)["name"] == "Alice"


def test_update_user_parses_birth_date(client, insert_users, find_user):
    (user_id,) = insert_users(make_student("Alice"))

    response = client.patch(
        "/api/v1/user",
        json={"birthDate": "2002-05-04T00:00:00"},
        headers=auth_headers(user_id),
    )

    assert response.status_code == 200
    assert find_user(user_id)["profile"]["birthDate"] == datetime(2002, 5, 4)


def test_update_user_assigns_existing_counsellor(client, insert_users, find_user):
    counsellor_id, user_id = insert_users(
        {"name": "Dr. Rao", "role": "counsellor", "email": "rao@example.com"},
        make_student("Alice"),
    )

    response = client.patch(
        "/api/v1/user",
        json={"counsellor": str(counsellor_id)},
        headers=auth_headers(user_id),
    )

    assert response.status_code == 200
    assert find_user(user_id)["profile"]["counsellor"] == counsellor_id


def test_update_user_rejects_non_counsellor_reference(client, insert_users, find_user):
    other_student, user_id = insert_users(make_student("Bob"), make_student("Alice"))

    response = client.patch(
        "/api/v1/user",
        json={"counsellor": str(other_student)},
        headers=auth_headers(user_id),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Counsellor not found"
    assert "counsellor" not in find_user(user_id)["profile"]


def test_update_user_missing_caller(client):
    response = client.patch("/api/v1/user", json={"name": "Ghost"}, headers=auth_headers(ObjectId()))

    assert response.status_code == 404


def test_normalize_updates_maps_flat_and_dotted_keys():
    assert normalize_updates({"name": "A", "mobileNo": "99", "profile.batch": "2025"}) == {
        "name": "A",
        "profile.mobileNo": "99",
        "profile.batch": "2025",
    }


def test_normalize_updates_lists_every_invalid_key():
    with pytest.raises(ValidationError) as exc_info:
        normalize_updates({"name": "A", "email": "x", "isPlaced": True})

    assert exc_info.value.details["invalid_fields"] == ["email", "isPlaced"]


def test_counsellor_role_can_read_profiles(client, insert_users):
    (user_id,) = insert_users(make_student("Alice"))

    response = client.get(f"/api/v1/user/{user_id}", headers=auth_headers(ObjectId(), Role.COUNSELLOR))

    assert response.status_code == 200
