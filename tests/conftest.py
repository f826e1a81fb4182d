import pytest
from werkzeug.security import generate_password_hash

from app.dirikita import create_app
from app.dirikita.db import Base, session_scope
from app.dirikita.modules.auth import service as auth_service
from app.dirikita.modules.user.models import User


@pytest.fixture()
def make_app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    for k in ("MODULES", "LOGIN_ENDPOINT", "LOG_LEVEL"):
        monkeypatch.delenv(k, raising=False)
    auth_service._login_attempts.clear()

    def _make(**overrides):
        app = create_app({"TESTING": True, **overrides})
        Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])
        return app

    return _make


@pytest.fixture()
def app(make_app):
    return make_app()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def user(app):
    with session_scope(app) as s:
        u = User(name="Admin", email="admin@example.com", password_hash=generate_password_hash("password1"), is_active=True)
        s.add(u)
        s.flush()
        user_id = u.id
    return user_id


@pytest.fixture()
def csrf(client):
    """Seed a known CSRF token into the client session and return it."""
    with client.session_transaction() as sess:
        sess["csrf_token"] = "test-token"
    return "test-token"
