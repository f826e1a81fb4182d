import secrets

from flask import Request, session

UNSAFE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
CSRF_HEADER = "X-CSRF-Token"
CSRF_FIELD = "csrf_token"


def ensure_csrf_token() -> str:
    """Return the session's CSRF token, creating one on first use."""
    token = session.get(CSRF_FIELD)
    if not token:
        token = regenerate_csrf_token()
    return token


def regenerate_csrf_token() -> str:
    """Issue a fresh token, e.g. when the authenticated identity changes."""
    token = secrets.token_urlsafe(32)
    session[CSRF_FIELD] = token
    return token


def submitted_csrf_token(req: Request) -> str | None:
    """Token sent with the request: header first, then form field, then JSON body."""
    token = req.headers.get(CSRF_HEADER) or req.form.get(CSRF_FIELD)
    if token:
        return token
    if req.is_json:
        body = req.get_json(silent=True)
        if isinstance(body, dict) and body.get(CSRF_FIELD):
            return str(body[CSRF_FIELD])
    return None


def validate_csrf(req: Request) -> bool:
    token = submitted_csrf_token(req)
    expected = session.get(CSRF_FIELD)
    return bool(token and expected and secrets.compare_digest(str(token), str(expected)))
