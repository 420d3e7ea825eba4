"""CRUD operations for Lotto 6/45 draws."""

from sqlalchemy import select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from lotto645.db.crud.upsert import dialect_insert
from lotto645.db.models.draw import LottoDraw


async def latest_draw_no(session: AsyncSession) -> int:
    """Highest stored draw number, 0 when the store is empty."""
    result = await session.execute(select(func.max(LottoDraw.draw_no)))
    return result.scalar() or 0


async def get_latest(session: AsyncSession) -> LottoDraw | None:
    result = await session.execute(
        select(LottoDraw).order_by(desc(LottoDraw.draw_no)).limit(1)
    )
    return result.scalar_one_or_none()


async def get_by_no(session: AsyncSession, draw_no: int) -> LottoDraw | None:
    return await session.get(LottoDraw, draw_no)


async def get_draws(
    session: AsyncSession,
    *,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[LottoDraw], int]:
    total = (await session.execute(select(func.count(LottoDraw.draw_no)))).scalar() or 0

    query = (
        select(LottoDraw)
        .order_by(desc(LottoDraw.draw_no))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await session.execute(query)
    return list(result.scalars().all()), total


async def get_all(session: AsyncSession) -> list[LottoDraw]:
    """Every draw, ascending by draw number."""
    result = await session.execute(select(LottoDraw).order_by(LottoDraw.draw_no))
    return list(result.scalars().all())


async def upsert(session: AsyncSession, draw: dict) -> None:
    """Insert a draw or overwrite the stored one with the same draw number."""
    stmt = dialect_insert(session, LottoDraw).values(**draw)
    update_cols = {
        key: stmt.excluded[key] for key in draw if key not in ("draw_no", "created_at")
    }
    update_cols["updated_at"] = func.now()
    stmt = stmt.on_conflict_do_update(index_elements=["draw_no"], set_=update_cols)
    await session.execute(stmt)


async def bulk_upsert(session: AsyncSession, draws: list[dict]) -> int:
    """Upsert draws one statement each. Returns the number processed."""
    for draw in draws:
        await upsert(session, draw)
    return len(draws)
