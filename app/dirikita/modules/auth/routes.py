from __future__ import annotations

from flask import Blueprint, g, redirect, render_template, request, session

from app.dirikita.db import db_session
from app.dirikita.guards import login_required
from app.dirikita.modules.auth.service import attempt_login, record_event
from app.dirikita.security import ensure_csrf_token, regenerate_csrf_token
from app.dirikita.shared.http import expects_json
from app.dirikita.shared.responses import success_response

bp = Blueprint("auth", __name__, url_prefix="/auth")


def _safe_next(nxt: str | None) -> str | None:
    # Only allow local paths to avoid open redirects.
    nxt = (nxt or "").strip()
    if nxt.startswith("/") and not nxt.startswith("//"):
        return nxt
    return None


@bp.get("/login", endpoint="login")
def login_get():
    if expects_json(request):
        return success_response({"csrf_token": ensure_csrf_token()}, "Authentication required.")
    return render_template("auth/login.html", next=(request.args.get("next") or "").strip())


@bp.post("/login")
def login_post():
    body = request.get_json(silent=True)
    data = body if isinstance(body, dict) else request.form
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    s = db_session()
    user = attempt_login(s, email, password, request.remote_addr or "unknown")
    intended = session.get("intended_url")
    session.clear()
    session.permanent = True
    session["user_id"] = user.id
    regenerate_csrf_token()
    s.commit()

    if expects_json(request):
        return success_response(user.to_dict(), "Logged in.")
    nxt = _safe_next(data.get("next")) or _safe_next(intended)
    return redirect(nxt or "/")


@bp.post("/logout")
@login_required
def logout():
    s = db_session()
    record_event(s, action="auth.logout", user=g.current_user)
    s.commit()
    session.clear()
    if expects_json(request):
        return success_response(message="Logged out.")
    return redirect("/")
