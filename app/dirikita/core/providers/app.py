"""
Application boot: wires module routes and module migration paths into an app.

`boot()` runs once from `create_app()` and returns a `BootReport` describing
what it registered.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from alembic.config import Config
from flask import Flask

from app.dirikita.core.providers.routes import MODULES, MODULES_ROOT, load_module_routes, module_routes

logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parents[4]
MIGRATIONS_DIR = ROOT / "migrations"

MODULE_MIGRATION_PATHS: tuple[Path, ...] = (
    MODULES_ROOT / "user" / "migrations" / "versions",
    MODULES_ROOT / "auth" / "migrations" / "versions",
)


@dataclass(frozen=True)
class BootReport:
    modules: tuple[str, ...]
    migration_paths: tuple[Path, ...]


def register_migration_paths(app: Flask, paths: Iterable[Path]) -> list[Path]:
    """
    Add directories for the migration runner to scan. Paths are recorded whether
    or not they exist; Alembic ignores missing version locations.
    """
    registered: list[Path] = app.extensions.setdefault("migration_paths", [])
    for path in paths:
        path = Path(path)
        if path not in registered:
            registered.append(path)
            logger.debug("Registered migration path %s", path)
    return registered


def migration_paths(app: Flask) -> list[Path]:
    return list(app.extensions.get("migration_paths", []))


def alembic_config(app: Flask, database_url: str | None = None) -> Config:
    """Build an Alembic Config covering the core and every registered module migration path."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    cfg.set_main_option("sqlalchemy.url", database_url or app.config["DATABASE_URL"])
    locations = [MIGRATIONS_DIR / "versions", *migration_paths(app)]
    cfg.set_main_option("path_separator", "os")
    cfg.set_main_option("version_path_separator", "os")
    cfg.set_main_option("version_locations", os.pathsep.join(str(p) for p in locations))
    return cfg


def boot(app: Flask) -> BootReport:
    names = app.config.get("MODULES") or MODULES
    loaded = load_module_routes(app, module_routes(names))
    paths = register_migration_paths(app, MODULE_MIGRATION_PATHS)
    app.logger.info("Boot complete: modules=%s migration_paths=%d", ",".join(loaded) or "-", len(paths))
    return BootReport(modules=tuple(loaded), migration_paths=tuple(paths))
