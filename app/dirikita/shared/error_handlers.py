"""
Exception -> response translation.

Every API exception is rendered by `render_exception`, which picks the output
from the exception type and from whether the client expects JSON. Browser
clients get redirects (login, or back to the form); API clients get the error
envelope.
"""
from __future__ import annotations

import re

from flask import Flask, Request, current_app, flash, g, redirect, render_template, request, session, url_for
from flask.typing import ResponseReturnValue
from werkzeug.exceptions import HTTPException

from app.dirikita.shared.exceptions import HttpRenderable, UnauthorizedException, ValidationException
from app.dirikita.shared.http import expects_json
from app.dirikita.shared.responses import error_response

# Never echoed back into the session as old input.
_DONT_FLASH = frozenset({"password", "password_confirmation", "csrf_token"})


def _intended_path(req: Request) -> str:
    nxt = req.full_path or req.path
    # Avoid trailing '?' from full_path when there is no query string.
    if nxt.endswith("?"):
        nxt = nxt[:-1]
    return nxt


def _same_host_referrer(req: Request) -> str | None:
    referrer = req.referrer
    if referrer and referrer.startswith(req.host_url):
        return referrer
    return None


def _intended_after_login(req: Request) -> str | None:
    # Only a GET can be replayed after login; otherwise go back to where the user was.
    if req.method == "GET":
        return _intended_path(req)
    referrer = _same_host_referrer(req)
    if referrer is None:
        return None
    return "/" + referrer[len(req.host_url):]


def _redirect_guest(req: Request) -> ResponseReturnValue:
    endpoint = current_app.config.get("LOGIN_ENDPOINT", "auth.login")
    nxt = _intended_after_login(req)
    if nxt is None:
        session.pop("intended_url", None)
        return redirect(url_for(endpoint), 302)
    session["intended_url"] = nxt
    return redirect(url_for(endpoint, next=nxt), 302)


def _redirect_back_with_errors(exc: ValidationException, req: Request) -> ResponseReturnValue:
    errors = exc.errors()
    for messages in errors.values():
        for message in messages:
            flash(message, "danger")
    session["_flash_errors"] = errors
    session["_flash_old_input"] = {k: v for k, v in req.form.items() if k not in _DONT_FLASH}

    referrer = _same_host_referrer(req)
    if referrer:
        return redirect(referrer, 302)
    return redirect("/", 302)


def render_exception(exc: HttpRenderable, req: Request) -> ResponseReturnValue:
    json_expected = expects_json(req)

    if isinstance(exc, UnauthorizedException):
        if json_expected:
            return error_response("UNAUTHORIZED", exc.message, None, 401)
        return _redirect_guest(req)

    if isinstance(exc, ValidationException):
        if json_expected:
            return error_response("VALIDATION_ERROR", "Validation failed", exc.errors(), 422)
        return _redirect_back_with_errors(exc, req)

    # Generic API errors are always JSON, whoever asked.
    return error_response(exc.error_code, exc.message, exc.details, exc.status_code)


def _http_error_code(exc: HTTPException) -> str:
    return re.sub(r"[^A-Z0-9]+", "_", (exc.name or "HTTP Error").upper()).strip("_")


def pull_flashed_input() -> None:
    """
    Move validation errors and old input written by the previous request from
    the session onto `g`, so they live for exactly one request.
    """
    g.errors = session.pop("_flash_errors", None) or {}
    g.old_input = session.pop("_flash_old_input", None) or {}


def register_error_handlers(app: Flask) -> None:
    app.before_request(pull_flashed_input)

    @app.context_processor
    def _inject_flashed_input() -> dict:
        return {
            "errors": getattr(g, "errors", {}),
            "old_input": getattr(g, "old_input", {}),
        }

    @app.errorhandler(HttpRenderable)
    def _handle_api_exception(exc: HttpRenderable):  # type: ignore[no-redef]
        app.logger.info(
            "%s (%s) on %s %s request_id=%s",
            type(exc).__name__,
            exc.error_code,
            request.method,
            request.path,
            getattr(g, "request_id", None),
        )
        return render_exception(exc, request)

    @app.errorhandler(HTTPException)
    def _handle_http_exception(exc: HTTPException):  # type: ignore[no-redef]
        if not expects_json(request):
            return exc.get_response()
        return error_response(_http_error_code(exc), exc.name, None, exc.code or 500)

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):  # type: ignore[no-redef]
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        if expects_json(request):
            return error_response("SERVER_ERROR", "Server Error", None, 500)
        return render_template("errors/500.html"), 500
