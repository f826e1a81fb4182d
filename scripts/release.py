"""
Release-phase helper.

- Fail fast if DATABASE_URL is missing (avoid silently using SQLite in prod).
- Run Alembic migrations across the core and every module migration path.

Usage:
  python scripts/release.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _require_env(name: str) -> str:
    v = (os.environ.get(name) or "").strip()
    if not v:
        raise RuntimeError(f"Missing required environment variable {name}.")
    return v


def run_release() -> None:
    db_url = _require_env("DATABASE_URL")
    env = (os.environ.get("ENV") or "").strip().lower()
    if env in ("prod", "production") and db_url.startswith("sqlite"):
        raise RuntimeError("Refusing to run release on sqlite DATABASE_URL in production. Set DATABASE_URL to Postgres.")

    from alembic import command

    from app.dirikita import create_app
    from app.dirikita.core.providers.app import alembic_config, migration_paths

    app = create_app()
    print(f"ENV={env or '(unset)'}", flush=True)
    for path in migration_paths(app):
        print(f"Migration path: {path}{'' if path.is_dir() else ' (missing)'}", flush=True)

    print("Running Alembic migrations...", flush=True)
    command.upgrade(alembic_config(app, db_url), "heads")
    print("Migrations complete.", flush=True)


def main() -> None:
    run_release()


if __name__ == "__main__":
    main()
