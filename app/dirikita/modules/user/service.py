from __future__ import annotations

import re
from typing import TYPE_CHECKING

from werkzeug.security import generate_password_hash

from app.dirikita.db import utcnow
from app.dirikita.shared.exceptions import ApiException, ValidationException

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from app.dirikita.modules.user.models import User

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 8


def validate_user_payload(s: "Session", payload: dict) -> dict[str, list[str]]:
    from app.dirikita.modules.user.models import User

    errors: dict[str, list[str]] = {}
    name = (payload.get("name") or "").strip()
    email = (payload.get("email") or "").strip().lower()
    password = payload.get("password") or ""

    if not name:
        errors.setdefault("name", []).append("The name field is required.")
    elif len(name) > 255:
        errors.setdefault("name", []).append("The name may not be greater than 255 characters.")

    if not email:
        errors.setdefault("email", []).append("The email field is required.")
    elif not EMAIL_RE.match(email):
        errors.setdefault("email", []).append("The email must be a valid email address.")
    elif s.query(User).filter(User.email == email).one_or_none() is not None:
        errors.setdefault("email", []).append("The email has already been taken.")

    if not password:
        errors.setdefault("password", []).append("The password field is required.")
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors.setdefault("password", []).append(
            f"The password must be at least {MIN_PASSWORD_LENGTH} characters."
        )
    return errors


def create_user(s: "Session", payload: dict) -> "User":
    from app.dirikita.modules.user.models import User

    errors = validate_user_payload(s, payload)
    if errors:
        raise ValidationException(errors)

    now = utcnow()
    user = User(
        name=(payload.get("name") or "").strip(),
        email=(payload.get("email") or "").strip().lower(),
        password_hash=generate_password_hash(payload["password"]),
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    s.add(user)
    s.flush()
    return user


def get_user(s: "Session", user_id: int) -> "User":
    from app.dirikita.modules.user.models import User

    user = s.get(User, user_id)
    if user is None:
        raise ApiException("User not found.", "USER_NOT_FOUND", details={"id": user_id}, status_code=404)
    return user


def list_users(s: "Session") -> list["User"]:
    from app.dirikita.modules.user.models import User

    return s.query(User).order_by(User.id.asc()).all()
