from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from flask import g, has_request_context, request
from werkzeug.security import check_password_hash

from app.dirikita.db import utcnow
from app.dirikita.modules.auth.models import AuthEvent
from app.dirikita.shared.exceptions import ValidationException

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from app.dirikita.modules.user.models import User

LOGIN_RATE_LIMIT = 5
LOGIN_RATE_WINDOW = 300  # seconds

_login_attempts: dict[str, list[datetime]] = defaultdict(list)


def too_many_attempts(ip: str) -> bool:
    cutoff = utcnow() - timedelta(seconds=LOGIN_RATE_WINDOW)
    _login_attempts[ip] = [t for t in _login_attempts[ip] if t > cutoff]
    return len(_login_attempts[ip]) >= LOGIN_RATE_LIMIT


def hit(ip: str) -> None:
    _login_attempts[ip].append(utcnow())


def clear_attempts(ip: str) -> None:
    _login_attempts.pop(ip, None)


def record_event(s: "Session", *, action: str, user: "User | None" = None, email: str | None = None) -> AuthEvent:
    ev = AuthEvent(
        action=action,
        user_id=user.id if user else None,
        email=email or (user.email if user else None),
        request_id=getattr(g, "request_id", None) if has_request_context() else None,
        client_ip=request.remote_addr if has_request_context() else None,
    )
    s.add(ev)
    return ev


def attempt_login(s: "Session", email: str, password: str, ip: str) -> "User":
    """
    Check credentials for `email`. Raises ValidationException for missing
    fields, throttled attempts and bad credentials alike.
    """
    from app.dirikita.modules.user.models import User

    missing: dict[str, str] = {}
    if not email:
        missing["email"] = "The email field is required."
    if not password:
        missing["password"] = "The password field is required."
    if missing:
        raise ValidationException.with_messages(missing)

    if too_many_attempts(ip):
        raise ValidationException.with_messages({"email": "Too many login attempts. Please wait 5 minutes."})
    hit(ip)

    user = s.query(User).filter(User.email == email).one_or_none()
    if not user or not user.is_active or not check_password_hash(user.password_hash, password):
        record_event(s, action="auth.login_failed", email=email)
        s.commit()
        raise ValidationException.with_messages({"email": "These credentials do not match our records."})

    clear_attempts(ip)
    record_event(s, action="auth.login", user=user)
    return user
