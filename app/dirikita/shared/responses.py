from __future__ import annotations

from typing import Any

from flask import Response, jsonify


def success_response(data: Any = None, message: str | None = None, status_code: int = 200) -> Response:
    """
    Return a success envelope: {"success": true, "data"?, "message"?}.

    `data` and `message` are left out of the body entirely when they are None.
    """
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    resp = jsonify(body)
    resp.status_code = status_code
    return resp


def error_payload(code: str, message: str, details: Any = None) -> dict[str, Any]:
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "details": details,
        },
    }


def error_response(code: str, message: str, details: Any = None, status_code: int = 400) -> Response:
    """Return an error envelope. `error.details` is always present (null when not given)."""
    resp = jsonify(error_payload(code, message, details))
    resp.status_code = status_code
    return resp
