from flask import Blueprint

from app.dirikita.shared.responses import success_response

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    return success_response({"name": "dirikita"})


@bp.get("/health")
def health():
    """Health check endpoint. No DB access."""
    return success_response({"status": "ok"})
