from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from flask import Blueprint, Flask

from app.dirikita.core.middleware import attach_to_group

logger = logging.getLogger(__name__)

MODULES_ROOT = Path(__file__).resolve().parents[2] / "modules"
MODULES_PACKAGE = "app.dirikita.modules"

# Extend by adding a module package with a routes.py exposing `bp`.
MODULES: tuple[str, ...] = ("User", "Auth")


@dataclass(frozen=True)
class ModuleRoutes:
    name: str
    routes_path: Path
    import_name: str
    middleware: str = "web"

    @property
    def enabled(self) -> bool:
        return self.routes_path.is_file()


def module_routes(names: Iterable[str] = MODULES, root: Path = MODULES_ROOT) -> list[ModuleRoutes]:
    entries = []
    for name in names:
        package = name.lower()
        entries.append(
            ModuleRoutes(
                name=name,
                routes_path=root / package / "routes.py",
                import_name=f"{MODULES_PACKAGE}.{package}.routes",
            )
        )
    return entries


def load_module_routes(app: Flask, entries: Iterable[ModuleRoutes]) -> list[str]:
    """
    Register the blueprint of every module whose route file exists.

    Modules without a route file are skipped. Returns the names of the modules
    that were registered.
    """
    loaded: list[str] = []
    for entry in entries:
        if not entry.enabled:
            logger.debug("No route file for module %s at %s; skipping", entry.name, entry.routes_path)
            continue
        bp = getattr(importlib.import_module(entry.import_name), "bp")
        if not isinstance(bp, Blueprint):
            raise TypeError(f"{entry.import_name}.bp is not a Blueprint")
        app.register_blueprint(bp)
        attach_to_group(app, entry.middleware, bp.name)
        logger.info("Loaded routes for module %s (middleware=%s)", entry.name, entry.middleware)
        loaded.append(entry.name)
    return loaded
