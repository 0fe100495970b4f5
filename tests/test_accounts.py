"""Tests for registration, login, profile and favorites."""

from bson import ObjectId


def _register(client, **overrides):
    body = {"username": "fern", "email": "fern@plants.org", "phone": "555-0100", "password": "secret1"}
    body.update(overrides)
    return client.post("/register", json=body)


def test_register_and_login(client):
    resp = _register(client)
    assert resp.status_code == 201
    assert resp.json()["user"]["email"] == "fern@plants.org"
    assert "password" not in str(resp.json())

    login = client.post("/login", json={"email": "FERN@plants.org", "password": "secret1"})
    assert login.status_code == 200
    body = login.json()
    assert body["token"]
    assert body["user"]["username"] == "fern"


def test_register_duplicate_email_case_insensitive(client):
    assert _register(client).status_code == 201
    dup = _register(client, email="Fern@Plants.org", username="other")
    assert dup.status_code == 400
    assert dup.json()["error"] == "User already exists"


def test_register_validation(client):
    assert _register(client, password="123").status_code == 400
    assert _register(client, username="  ").status_code == 400
    assert _register(client, email="not-an-email").status_code == 400


def test_login_failures(client):
    _register(client)
    wrong = client.post("/login", json={"email": "fern@plants.org", "password": "nope"})
    unknown = client.post("/login", json={"email": "moss@plants.org", "password": "secret1"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["error"] == unknown.json()["error"]


def test_verify_token(client, register):
    user_id, headers = register("fern")
    resp = client.get("/verify-token", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["valid"] is True
    assert resp.json()["user"]["id"] == user_id
    assert client.get("/verify-token").status_code == 401


def test_profile_update(client, register):
    _, headers = register("fern")
    _register(client, username="moss", email="moss@plants.org")

    resp = client.put("/profile", json={"username": "Fernanda", "phone": "555-0199"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["username"] == "Fernanda"
    assert client.get("/profile", headers=headers).json()["phone"] == "555-0199"

    taken = client.put("/profile", json={"email": "moss@plants.org"}, headers=headers)
    assert taken.status_code == 400


def test_favorites(client, register):
    _, headers = register("fern")

    added = client.post("/favorites", json={"plantName": "boston fern"}, headers=headers)
    assert added.status_code == 200
    assert added.json()["favorites"] == ["Boston Fern"]

    client.post("/favorites", json={"plantName": "Boston Fern"}, headers=headers)
    assert client.get("/favorites", headers=headers).json()["favorites"] == ["Boston Fern"]

    unknown = client.post("/favorites", json={"plantName": "Triffid"}, headers=headers)
    assert unknown.status_code == 404

    removed = client.request("DELETE", "/favorites", json={"plantName": "Boston Fern"}, headers=headers)
    assert removed.status_code == 200
    assert removed.json()["favorites"] == []


def test_remove_favorite_ignores_case(client, register, db):
    user_id, headers = register("moss")
    client.post("/favorites", json={"plantName": "snake plant"}, headers=headers)
    assert client.get("/favorites", headers=headers).json()["favorites"] == ["Snake Plant"]

    removed = client.request("DELETE", "/favorites", json={"plantName": "snake plant"}, headers=headers)
    assert removed.json()["favorites"] == []

    db["user"].update_one({"_id": ObjectId(user_id)}, {"$set": {"favorites": ["spider plant", "Boston Fern"]}})
    removed = client.request("DELETE", "/favorites", json={"plantName": " Spider Plant "}, headers=headers)
    assert removed.json()["favorites"] == ["Boston Fern"]
