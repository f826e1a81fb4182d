"""Alembic environment for the dirikita backend.

Configured programmatically by ``app.dirikita.core.providers.app.alembic_config``;
version locations span the core and every registered module.
"""

from __future__ import annotations

from alembic import context
from sqlalchemy import create_engine, pool

from app.dirikita.db import Base

# Import module models so their tables are on Base.metadata.
from app.dirikita.modules.auth import models as _auth_models  # noqa: F401
from app.dirikita.modules.user import models as _user_models  # noqa: F401

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode: emit SQL to stdout."""
    url = context.config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against a live database connection."""
    url = context.config.get_main_option("sqlalchemy.url")
    assert url is not None, "sqlalchemy.url must be set in Alembic config"

    connectable = create_engine(url, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
