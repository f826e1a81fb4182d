"""End-to-end tests for the User and Auth modules."""
from app.dirikita.db import session_scope
from app.dirikita.modules.auth.models import AuthEvent

JSON = {"Accept": "application/json"}


def _login(client, email="admin@example.com", password="password1"):
    return client.post("/auth/login", json={"email": email, "password": password}, headers=JSON)


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.get_json() == {"success": True, "data": {"status": "ok"}}


def test_register_user(client, csrf):
    r = client.post(
        "/api/users",
        json={"name": "Ada", "email": "Ada@Example.com", "password": "correct-horse"},
        headers={**JSON, "X-CSRF-Token": csrf},
    )
    assert r.status_code == 201
    body = r.get_json()
    assert body["success"] is True
    assert body["message"] == "User created."
    assert body["data"]["email"] == "ada@example.com"
    assert "password_hash" not in body["data"]


def test_register_requires_csrf_token(client):
    r = client.post("/api/users", json={"name": "Ada"}, headers=JSON)
    assert r.status_code == 419
    assert r.get_json()["error"]["code"] == "CSRF_TOKEN_MISMATCH"


def test_register_validation_errors(client, user, csrf):
    r = client.post(
        "/api/users",
        json={"name": "", "email": "admin@example.com", "password": "short"},
        headers={**JSON, "X-CSRF-Token": csrf},
    )
    assert r.status_code == 422
    error = r.get_json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["message"] == "Validation failed"
    assert error["details"] == {
        "name": ["The name field is required."],
        "email": ["The email has already been taken."],
        "password": ["The password must be at least 8 characters."],
    }


def test_register_validation_from_browser_redirects_back(client, csrf):
    r = client.post(
        "/api/users",
        data={"name": "Ada", "email": "not-an-email", "password": "correct-horse", "csrf_token": csrf},
        headers={"Referer": "http://localhost/register"},
    )
    assert r.status_code == 302
    assert r.headers["Location"] == "http://localhost/register"
    with client.session_transaction() as sess:
        assert sess["_flash_errors"] == {"email": ["The email must be a valid email address."]}
        assert sess["_flash_old_input"]["email"] == "not-an-email"
        assert "password" not in sess["_flash_old_input"]


def test_me_requires_login_json(client):
    r = client.get("/api/users/me", headers=JSON)
    assert r.status_code == 401
    assert r.get_json() == {
        "success": False,
        "error": {"code": "UNAUTHORIZED", "message": "Unauthorized access", "details": None},
    }


def test_me_requires_login_browser(client):
    r = client.get("/api/users/me")
    assert r.status_code == 302
    assert r.headers["Location"].startswith("/auth/login")


def test_login_page_renders_form(client):
    r = client.get("/auth/login?next=/api/users/me")
    assert r.status_code == 200
    assert b"<form" in r.data
    assert b"/api/users/me" in r.data


def test_login_hint_for_json_clients(client):
    r = client.get("/auth/login", headers=JSON)
    assert r.status_code == 200
    assert r.get_json()["data"]["csrf_token"]


def test_login_and_me(client, user):
    r = _login(client)
    assert r.status_code == 200
    assert r.get_json()["data"]["id"] == user

    r = client.get("/api/users/me", headers=JSON)
    assert r.status_code == 200
    assert r.get_json()["data"]["email"] == "admin@example.com"

    r = client.get("/api/users", headers=JSON)
    assert [u["id"] for u in r.get_json()["data"]] == [user]


def test_browser_login_returns_to_intended_url(client, user):
    r = client.get("/api/users/me")
    assert r.status_code == 302

    r = client.post("/auth/login", data={"email": "admin@example.com", "password": "password1"})
    assert r.status_code == 302
    assert r.headers["Location"] == "/api/users/me"


def test_login_with_bad_password(app, client, user):
    r = _login(client, password="wrong-password")
    assert r.status_code == 422
    assert r.get_json()["error"]["details"] == {"email": ["These credentials do not match our records."]}

    with session_scope(app) as s:
        actions = [e.action for e in s.query(AuthEvent).all()]
    assert actions == ["auth.login_failed"]


def test_login_missing_fields(client):
    r = client.post("/auth/login", json={}, headers=JSON)
    assert r.status_code == 422
    assert set(r.get_json()["error"]["details"]) == {"email", "password"}


def test_login_is_throttled(client, user):
    for _ in range(5):
        _login(client, password="wrong-password")
    r = _login(client)
    assert r.status_code == 422
    assert "Too many login attempts" in r.get_json()["error"]["details"]["email"][0]


def test_show_missing_user(client, user):
    _login(client)
    r = client.get("/api/users/999", headers=JSON)
    assert r.status_code == 404
    assert r.get_json()["error"] == {
        "code": "USER_NOT_FOUND",
        "message": "User not found.",
        "details": {"id": 999},
    }


def test_logout(app, client, user):
    _login(client)
    with client.session_transaction() as sess:
        token = sess["csrf_token"]

    r = client.post("/auth/logout", headers={**JSON, "X-CSRF-Token": token})
    assert r.status_code == 200
    assert r.get_json() == {"success": True, "message": "Logged out."}

    r = client.get("/api/users/me", headers=JSON)
    assert r.status_code == 401

    with session_scope(app) as s:
        actions = [e.action for e in s.query(AuthEvent).order_by(AuthEvent.id).all()]
    assert actions == ["auth.login", "auth.logout"]


def test_guest_post_is_not_replayed_after_login(client, user, csrf):
    r = client.post("/auth/logout", headers={"X-CSRF-Token": csrf})
    assert r.status_code == 302
    assert r.headers["Location"] == "/auth/login"
    with client.session_transaction() as sess:
        assert "intended_url" not in sess

    r = client.post("/auth/login", data={"email": "admin@example.com", "password": "password1"})
    assert r.status_code == 302
    assert r.headers["Location"] == "/"


def test_guest_post_returns_to_referrer_after_login(client, user, csrf):
    r = client.post(
        "/auth/logout",
        headers={"X-CSRF-Token": csrf, "Referer": "http://localhost/api/users/me"},
    )
    assert r.status_code == 302
    assert r.headers["Location"].startswith("/auth/login?next=")
    with client.session_transaction() as sess:
        assert sess["intended_url"] == "/api/users/me"

    r = client.post("/auth/login", data={"email": "admin@example.com", "password": "password1"})
    assert r.headers["Location"] == "/api/users/me"


def test_old_input_survives_exactly_one_request(client, user):
    r = client.post(
        "/auth/login",
        data={"email": "admin@example.com", "password": "wrong-password"},
        headers={"Referer": "http://localhost/auth/login"},
    )
    assert r.status_code == 302
    assert r.headers["Location"] == "http://localhost/auth/login"

    r = client.get("/auth/login")
    assert b'value="admin@example.com"' in r.data
    assert b"These credentials do not match our records." in r.data
    with client.session_transaction() as sess:
        assert "_flash_errors" not in sess
        assert "_flash_old_input" not in sess

    r = client.get("/auth/login")
    assert b'value="admin@example.com"' not in r.data
