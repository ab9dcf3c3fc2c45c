"""
HTTP tests for /register, /login and /logout.

Each test gets a fresh app with its own users file (see conftest.py).
"""

import json

from fastapi.testclient import TestClient

from config import Settings
from main import create_app

ALICE = {"username": "alice", "password": "hunter2", "email": "alice@x.com"}


def _register(client, payload=None):
    return client.post("/register", json=payload or ALICE)


class TestRegister:

    def test_register_success(self, client):
        r = _register(client)
        assert r.status_code == 200
        assert r.json() == {"success": True}

    def test_duplicate_username_conflicts(self, client):
        assert _register(client).status_code == 200

        r = _register(client)
        assert r.status_code == 409
        assert r.json() == {"success": False, "message": "Username already exists"}

    def test_duplicate_email_conflicts(self, client):
        _register(client)

        r = _register(client, {"username": "bob", "password": "hunter2", "email": "alice@x.com"})
        assert r.status_code == 409
        assert r.json()["message"] == "Email already exists"

    def test_missing_fields(self, client):
        r = client.post("/register", json={"username": "alice", "password": "hunter2"})
        assert r.status_code == 400
        assert r.json() == {"success": False, "message": "Missing fields"}

    def test_short_username_accepted_by_server(self, client):
        r = _register(client, {"username": "al", "password": "secret1", "email": "a@b.com"})
        assert r.status_code == 200

    def test_url_encoded_form(self, client):
        r = client.post("/register", data={**ALICE, "phone": "5551234"})
        assert r.status_code == 200
        assert client.post("/login", data={"username": "alice", "password": "hunter2"}).status_code == 200

    def test_non_object_json_is_rejected(self, client):
        r = client.post("/register", json=["alice", "hunter2"])
        assert r.status_code == 400
        assert r.json() == {"success": False, "message": "Invalid JSON"}

    def test_undecodable_body_is_rejected(self, client):
        r = client.post("/register", content=b"\xff\xfe\xfa")
        assert r.status_code == 400
        assert r.json()["message"] == "Invalid JSON"

    def test_empty_body_is_missing_fields(self, client):
        r = client.post("/register", content=b"")
        assert r.status_code == 400
        assert r.json()["message"] == "Missing fields"

    def test_record_persisted_as_json_line(self, client, settings):
        _register(client)
        with open(settings.users_file) as f:
            lines = f.read().splitlines()

        assert len(lines) == 1
        record = json.loads(lines[0])
        assert record["username"] == "alice"
        assert record["password"] != "hunter2"
        assert record["created_at"]

    def test_unvalidatable_record_blocks_reregistration(self, settings):
        with open(settings.users_file, "w") as f:
            f.write('{"username":"bob","password":"p","email":null}\n')

        with TestClient(create_app(settings)) as client:
            r = _register(client, {"username": "bob", "password": "hunter2", "email": "bob@x.com"})
        assert r.status_code == 409
        assert r.json()["message"] == "Username already exists"

        with open(settings.users_file) as f:
            usernames = [json.loads(line)["username"] for line in f.read().splitlines()]
        assert usernames == ["bob"]

    def test_storage_failure_returns_500(self, tmp_path, public_dir):
        settings = Settings(public_dir=str(public_dir), users_file=str(tmp_path), password_hash_iterations=1_000)
        with TestClient(create_app(settings)) as client:
            r = _register(client)
        assert r.status_code == 500
        assert r.json() == {"success": False, "message": "Failed to save user"}


class TestLogin:

    def test_login_sets_session_cookie(self, client):
        _register(client)
        r = client.post("/login", json={"username": "alice", "password": "hunter2"})

        assert r.status_code == 200
        assert r.json() == {"success": True}

        cookie = r.headers["set-cookie"]
        assert cookie.startswith("sid=")
        assert "HttpOnly" in cookie
        assert "Path=/" in cookie
        assert "samesite=lax" in cookie.lower()
        assert "expires" not in cookie.lower()
        assert "max-age" not in cookie.lower()

    def test_issued_token_validates_to_username(self, client):
        _register(client)
        r = client.post("/login", json={"username": "alice", "password": "hunter2"})

        token = r.cookies["sid"]
        session = client.app.state.sessions.validate(token)
        assert session is not None
        assert session.username == "alice"

    def test_unknown_user(self, client):
        r = client.post("/login", json={"username": "ghost", "password": "hunter2"})
        assert r.status_code == 401
        assert r.json() == {"success": False, "message": "Invalid credentials"}

    def test_wrong_password(self, client):
        _register(client)
        r = client.post("/login", json={"username": "alice", "password": "hunter3"})
        assert r.status_code == 401
        assert "set-cookie" not in r.headers

    def test_missing_fields(self, client):
        r = client.post("/login", json={"username": "alice"})
        assert r.status_code == 400
        assert r.json()["message"] == "Missing fields"

    def test_users_survive_restart(self, settings):
        with TestClient(create_app(settings)) as client:
            _register(client)

        with TestClient(create_app(settings)) as client:
            r = client.post("/login", json={"username": "alice", "password": "hunter2"})
        assert r.status_code == 200

    def test_sessions_do_not_survive_restart(self, settings):
        with TestClient(create_app(settings)) as client:
            _register(client)
            token = client.post("/login", json={"username": "alice", "password": "hunter2"}).cookies["sid"]

        with TestClient(create_app(settings)) as client:
            assert client.app.state.sessions.validate(token) is None


class TestLogout:

    def test_logout_revokes_session(self, client):
        _register(client)
        token = client.post("/login", json={"username": "alice", "password": "hunter2"}).cookies["sid"]

        r = client.post("/logout")
        assert r.status_code == 200
        assert r.json() == {"success": True}
        assert client.app.state.sessions.validate(token) is None
        assert r.headers["set-cookie"].startswith("sid=")

    def test_logout_without_session(self, client):
        r = client.post("/logout")
        assert r.status_code == 200
        assert r.json() == {"success": True}
