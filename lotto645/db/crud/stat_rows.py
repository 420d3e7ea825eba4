"""CRUD for the per-draw statistic tables (posterior and unified rows).

Functions take the ORM model so both ``BayesianStat`` and ``AnalysisStat``
share one implementation; each table is keyed by (draw_no, number).
"""

from loguru import logger
from sqlalchemy import delete, select, func, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lotto645.db.crud.upsert import dialect_insert
from lotto645.errors import PersistenceFailure

CONFLICT_KEYS = ("draw_no", "number")


async def latest_checkpoint_draw_no(session: AsyncSession, model) -> int:
    """Highest draw already computed for this table, 0 when empty."""
    result = await session.execute(select(func.max(model.draw_no)))
    return result.scalar() or 0


async def rows_at_draw(session: AsyncSession, model, draw_no: int) -> list:
    result = await session.execute(
        select(model).where(model.draw_no == draw_no).order_by(model.number)
    )
    return list(result.scalars().all())


async def latest_rows(session: AsyncSession, model) -> list:
    """Rows at the checkpoint draw; empty list when the table is empty."""
    checkpoint = await latest_checkpoint_draw_no(session, model)
    if checkpoint == 0:
        return []
    return await rows_at_draw(session, model, checkpoint)


async def history_for_number(session: AsyncSession, model, number: int, limit: int = 100) -> list:
    """Rows for one number, newest draw first."""
    result = await session.execute(
        select(model)
        .where(model.number == number)
        .order_by(desc(model.draw_no))
        .limit(limit)
    )
    return list(result.scalars().all())


async def upsert_rows(
    session: AsyncSession,
    model,
    rows: list[dict],
    conflict_keys: tuple[str, ...] = CONFLICT_KEYS,
) -> int:
    """Write one batch in a single statement and commit it.

    On failure the session is rolled back so no part of the batch is kept.
    """
    if not rows:
        return 0

    stmt = dialect_insert(session, model).values(rows)
    update_cols = {key: stmt.excluded[key] for key in rows[0] if key not in conflict_keys}
    stmt = stmt.on_conflict_do_update(index_elements=list(conflict_keys), set_=update_cols)

    try:
        await session.execute(stmt)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Upsert into {} failed ({} rows): {}", model.__tablename__, len(rows), exc)
        raise PersistenceFailure(
            f"Failed to write {len(rows)} rows to {model.__tablename__}",
            details={"table": model.__tablename__, "draw_no": rows[0].get("draw_no")},
        ) from exc

    return len(rows)


async def delete_all(session: AsyncSession, model) -> int:
    """Remove every row of the table without committing.

    The deletion becomes visible with the caller's next commit, so a
    replay that fails on its first batch rolls it back as well.
    """
    result = await session.execute(delete(model))
    return result.rowcount or 0
