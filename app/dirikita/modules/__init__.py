"""
Feature modules live under this package.

Each module owns its blueprint (``routes.py``), models and Alembic migrations
(``migrations/versions``). Modules are discovered at boot by
``app.dirikita.core.providers.routes``.
"""
