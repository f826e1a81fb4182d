from datetime import datetime, timedelta, timezone

from app.dirikita.db import session_scope, utcnow
from app.dirikita.modules.user.models import User


def test_utcnow_is_naive_utc():
    now = utcnow()
    assert now.tzinfo is None
    reference = datetime.now(timezone.utc).replace(tzinfo=None)
    assert abs(reference - now) < timedelta(seconds=5)


def test_model_timestamps_default_to_utc(app):
    before = utcnow()
    with session_scope(app) as s:
        u = User(name="Ada", email="ada@example.com", password_hash="x")
        s.add(u)
        s.flush()
        created_at = u.created_at
    assert created_at.tzinfo is None
    assert before <= created_at <= utcnow()
