from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import g

from app.dirikita.shared.exceptions import UnauthorizedException


def current_user() -> Any:
    user = getattr(g, "current_user", None)
    if not user or not user.is_active:
        raise UnauthorizedException()
    return user


def login_required(fn: Callable[..., Any]) -> Callable[..., Any]:
    # Unauthenticated -> UnauthorizedException; JSON clients get 401, browsers the login page.
    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        current_user()
        return fn(*args, **kwargs)

    return wrapped
