from __future__ import annotations

from flask import Request
from werkzeug.http import parse_list_header, parse_options_header


def _quality(params: dict[str, str]) -> float:
    try:
        return float(params.get("q", 1))
    except ValueError:
        return 0.0


def _first_acceptable(req: Request) -> str | None:
    """
    Most preferred Accept type: highest quality wins, header order breaks ties.

    `request.accept_mimetypes` is not used because werkzeug ranks by
    specificity before quality.
    """
    best: tuple[float, str] | None = None
    for item in parse_list_header(req.headers.get("Accept", "")):
        value, params = parse_options_header(item)
        if not value:
            continue
        q = _quality(params)
        if best is None or q > best[0]:
            best = (q, value.lower())
    return best[1] if best else None


def accepts_any_content_type(req: Request) -> bool:
    first = _first_acceptable(req)
    return first is None or first in ("*/*", "*")


def wants_json(req: Request) -> bool:
    first = _first_acceptable(req)
    return first is not None and ("/json" in first or "+json" in first)


def is_ajax(req: Request) -> bool:
    return req.headers.get("X-Requested-With") == "XMLHttpRequest"


def is_pjax(req: Request) -> bool:
    return bool(req.headers.get("X-PJAX"))


def expects_json(req: Request) -> bool:
    """
    True when the client should get a machine-readable (JSON) response rather
    than an HTML page or redirect.

    Either an XHR that will take anything (and is not a PJAX navigation), or a
    client whose preferred Accept type is JSON.
    """
    return (is_ajax(req) and not is_pjax(req) and accepts_any_content_type(req)) or wants_json(req)
