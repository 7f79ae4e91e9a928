"""
HTTP tests for registration, login and the user CRUD routes.
"""

from fastapi.testclient import TestClient

from conftest import run

ALICE = {"username": "alice", "email": "alice@example.com", "password": "pw123"}


def register(client, body=ALICE):
    return client.post("/api/register", json=body)


def test_register_success(client, user_repo):
    response = register(client)

    assert response.status_code == 200
    assert response.json() == {
        "status": "success",
        "message": "New user successfully registered alice",
    }
    stored = run(user_repo.get_all())
    assert [(u.username, u.email) for u in stored] == [("alice", "alice@example.com")]


def test_register_rejects_any_empty_field(client, user_repo):
    response = register(client, {"username": "alice", "email": "", "password": "pw"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid JSON message"
    assert run(user_repo.get_all()) == []


def test_register_legacy_only_rejects_all_empty(make_app, user_repo):
    client = TestClient(make_app(legacy_required_fields=True))

    partial = register(client, {"username": "alice"})
    empty = register(client, {})

    assert partial.status_code == 200
    assert empty.status_code == 400
    assert [u.username for u in run(user_repo.get_all())] == ["alice"]


def test_register_invalid_json(client):
    response = client.post(
        "/api/register",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid request body"


def test_register_wrong_field_type(client):
    response = register(client, {"username": ["alice"], "email": "a@b.c", "password": "x"})

    assert response.status_code == 400


def test_register_requires_post(client):
    assert client.get("/api/register").status_code == 405


def test_get_user_returns_username(client, user_repo):
    user = run(user_repo.create("alice", "alice@example.com", "pw123"))

    response = client.get(f"/api/users/{user.id}")

    assert response.status_code == 200
    assert response.json() == {"status": "success", "message": "alice"}


def test_get_missing_user_is_404(client):
    response = client.get("/api/users/999")

    assert response.status_code == 404
    assert "not found" in response.json()["detail"]


def test_get_missing_user_legacy_status_is_500(make_app):
    client = TestClient(make_app(legacy_not_found_status=True))

    response = client.get("/api/users/999")

    assert response.status_code == 500
    assert "not found" in response.json()["detail"]


def test_non_numeric_id_falls_through_to_not_found_page(client):
    response = client.get("/api/users/abc")

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("text/html")
    assert "404" in response.text


def test_out_of_range_id_is_bad_request(client):
    response = client.get(f"/api/users/{2**64}")

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid user ID"


def test_rename_user(client, user_repo):
    user = run(user_repo.create("alice", "alice@example.com", "pw123"))

    response = client.put(f"/api/users/{user.id}", json={"newName": "alicia"})

    assert response.status_code == 200
    assert response.json()["message"] == "User successfully updated"
    assert run(user_repo.get_by_id(user.id)).username == "alicia"


def test_rename_missing_user_creates_nothing(client, user_repo):
    response = client.put("/api/users/5", json={"newName": "ghost"})

    assert response.status_code == 404
    assert run(user_repo.get_all()) == []


def test_rename_with_bad_body(client, user_repo):
    user = run(user_repo.create("alice", "alice@example.com", "pw123"))

    response = client.put(
        f"/api/users/{user.id}",
        content=b"[",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert run(user_repo.get_by_id(user.id)).username == "alice"


def test_delete_user(client, user_repo):
    user = run(user_repo.create("alice", "alice@example.com", "pw123"))

    first = client.delete(f"/api/users/{user.id}")
    again = client.delete(f"/api/users/{user.id}")

    assert first.status_code == 200
    assert first.json()["message"] == "User successfully deleted"
    assert again.status_code == 200
    assert run(user_repo.get_all()) == []


def test_list_users_hides_passwords(client, user_repo):
    run(user_repo.create("alice", "alice@example.com", "pw123"))
    run(user_repo.create("bob", "bob@example.com", "hunter2"))

    response = client.get("/api/users")

    assert response.status_code == 200
    body = response.json()
    assert [u["username"] for u in body] == ["alice", "bob"]
    assert all("password" not in u for u in body)
    assert {"id", "email", "createdAt", "updatedAt"} <= set(body[0])


def test_login_success(client, user_repo):
    run(user_repo.create("alice", "alice@example.com", "pw123"))

    response = client.post("/api/login", json={"username": "alice", "password": "pw123"})

    assert response.status_code == 200
    assert response.json() == {
        "status": "success",
        "message": "You successfully logged in alice",
    }


def test_login_mismatch_keeps_200_with_empty_message(client, user_repo):
    run(user_repo.create("alice", "alice@example.com", "pw123"))

    response = client.post("/api/login", json={"username": "alice", "password": "wrong"})

    assert response.status_code == 200
    assert response.json() == {"status": "success", "message": ""}


def test_login_mismatch_rejected_when_flag_set(make_app, user_repo):
    run(user_repo.create("alice", "alice@example.com", "pw123"))
    client = TestClient(make_app(login_reject_mismatch=True))

    wrong = client.post("/api/login", json={"username": "alice", "password": "wrong"})
    right = client.post("/api/login", json={"username": "alice", "password": "pw123"})

    assert wrong.status_code == 401
    assert right.status_code == 200


def test_login_requires_both_fields(client):
    response = client.post("/api/login", json={"username": "alice"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid JSON message"


def test_login_invalid_json(client):
    response = client.post(
        "/api/login", content=b"nope", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid JSON format"


def test_login_only_accepts_post(client):
    assert client.get("/api/login").status_code == 405
