from __future__ import annotations

from flask import Blueprint, request

from app.dirikita.db import db_session
from app.dirikita.guards import current_user, login_required
from app.dirikita.modules.user.service import create_user, get_user, list_users
from app.dirikita.shared.responses import success_response

bp = Blueprint("user", __name__, url_prefix="/api/users")


def _payload() -> dict:
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        return body
    return request.form.to_dict()


@bp.get("")
@login_required
def users_index():
    s = db_session()
    return success_response([u.to_dict() for u in list_users(s)])


@bp.get("/me")
def users_me():
    return success_response(current_user().to_dict())


@bp.get("/<int:user_id>")
@login_required
def users_show(user_id: int):
    s = db_session()
    return success_response(get_user(s, user_id).to_dict())


@bp.post("")
def users_store():
    s = db_session()
    user = create_user(s, _payload())
    s.commit()
    return success_response(user.to_dict(), "User created.", 201)
