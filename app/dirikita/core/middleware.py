"""
Named middleware groups.

A group is an ordered tuple of `before_request` hooks. Blueprints are attached
to a group at boot; one app-level dispatcher then runs the group's hooks for
requests routed to those blueprints. A hook returning a response, or raising,
short-circuits the request exactly like a plain Flask `before_request`.
"""
from __future__ import annotations

import uuid
from collections.abc import Callable

from flask import Flask, current_app, g, request, session

from app.dirikita.db import db_session
from app.dirikita.security import UNSAFE_METHODS, ensure_csrf_token, validate_csrf
from app.dirikita.shared.exceptions import ApiException

Hook = Callable[[], object]

# Endpoints allowed to skip CSRF verification.
CSRF_EXEMPT_ENDPOINTS = frozenset({"auth.login_post"})


def start_session() -> None:
    session.permanent = True
    ensure_csrf_token()


def verify_csrf_token() -> None:
    if request.method not in UNSAFE_METHODS:
        return
    if request.endpoint in CSRF_EXEMPT_ENDPOINTS:
        return
    if not validate_csrf(request):
        raise ApiException("CSRF token mismatch.", "CSRF_TOKEN_MISMATCH", status_code=419)


def load_current_user() -> None:
    """
    Loads g.current_user from the signed session cookie and assigns a
    per-request request_id for log correlation.
    """
    from app.dirikita.modules.user.models import User

    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    g.current_user = None

    user_id = session.get("user_id")
    if not user_id:
        return

    user = db_session().get(User, int(user_id))
    if not user or not user.is_active:
        current_app.logger.info("Dropping stale session user_id=%s request_id=%s", user_id, g.request_id)
        session.pop("user_id", None)
        return
    g.current_user = user


MIDDLEWARE_GROUPS: dict[str, tuple[Hook, ...]] = {
    "web": (start_session, verify_csrf_token, load_current_user),
}


def attach_to_group(app: Flask, group: str, blueprint_name: str) -> None:
    if group not in MIDDLEWARE_GROUPS:
        raise KeyError(f"Unknown middleware group: {group!r}")
    members: dict[str, set[str]] = app.extensions.setdefault("middleware_groups", {})
    members.setdefault(group, set()).add(blueprint_name)


def groups_for(app: Flask, blueprint_names: list[str]) -> list[str]:
    members: dict[str, set[str]] = app.extensions.get("middleware_groups", {})
    return [group for group, names in members.items() if names.intersection(blueprint_names)]


def init_middleware(app: Flask) -> None:
    def _run_middleware_groups():
        for group in groups_for(app, list(request.blueprints)):
            for hook in MIDDLEWARE_GROUPS[group]:
                rv = hook()
                if rv is not None:
                    return rv
        return None

    app.before_request(_run_middleware_groups)
