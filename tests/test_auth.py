import pytest

from linkshelf.errors import Unauthorized
from linkshelf.services.security import AuthGate, AuthSettings


def test_signup_sets_cookie_and_me_returns_user(client):
    response = client.post(
        "/api/auth/signup", json={"username": "casey", "password": "secret"}
    )
    assert response.status_code == 201
    payload = response.get_json()
    assert payload["user"]["username"] == "casey"
    assert payload["token"]
    assert "token=" in response.headers["Set-Cookie"]
    assert "HttpOnly" in response.headers["Set-Cookie"]

    response = client.get("/api/auth/me")
    assert response.status_code == 200
    assert response.get_json()["user"]["username"] == "casey"


def test_signup_validation_and_duplicate_username(client):
    response = client.post("/api/auth/signup", json={"username": "casey"})
    assert response.status_code == 400

    client.post("/api/auth/signup", json={"username": "casey", "password": "x"})
    response = client.post(
        "/api/auth/signup", json={"username": "casey", "password": "y"}
    )
    assert response.status_code == 409
    assert response.get_json()["error"] == "username already exists"


def test_login_and_logout(app):
    app.test_client().post(
        "/api/auth/signup", json={"username": "dana", "password": "secret"}
    )
    client = app.test_client()

    response = client.post(
        "/api/auth/login", json={"username": "dana", "password": "wrong"}
    )
    assert response.status_code == 401
    assert response.get_json()["error"] == "invalid credentials"

    response = client.post(
        "/api/auth/login", json={"username": "dana", "password": "secret"}
    )
    assert response.status_code == 200
    assert client.get("/api/links").status_code == 200

    response = client.post("/api/auth/logout")
    assert response.status_code == 200
    assert client.get("/api/links").status_code == 401


def test_auth_gate_round_trip_and_expiry():
    gate = AuthGate(AuthSettings(secret_key="k", max_age=60))
    token = gate.issue_token(42)
    assert gate.identify(token) == 42

    other = AuthGate(AuthSettings(secret_key="different", max_age=60))
    with pytest.raises(Unauthorized):
        other.identify(token)

    expired = AuthGate(AuthSettings(secret_key="k", max_age=-1))
    with pytest.raises(Unauthorized, match="Invalid or expired token"):
        expired.identify(token)


def test_web_pages_redirect_by_session(client):
    response = client.get("/", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/login")

    assert client.get("/login").status_code == 200
    assert client.get("/signup").status_code == 200

    client.post("/api/auth/signup", json={"username": "erin", "password": "secret"})
    response = client.get("/login", follow_redirects=False)
    assert response.status_code == 302

    response = client.get("/")
    assert response.status_code == 200
    assert b"erin" in response.data
