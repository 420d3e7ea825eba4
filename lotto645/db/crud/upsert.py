"""Dialect-aware INSERT ... ON CONFLICT helpers."""

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def dialect_insert(session: AsyncSession, model):
    """``insert()`` from the bound dialect, so ``on_conflict_do_update`` is available."""
    if session.get_bind().dialect.name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)
