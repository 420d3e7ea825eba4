"""Repair queries for unified analysis rows."""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lotto645.db.models.analysis_stat import AnalysisStat


async def rows_with_zero_prob(
    session: AsyncSession, field: str, count_field: str
) -> list[AnalysisStat]:
    """Rows whose probability is 0 although the matching count is not."""
    prob_col = getattr(AnalysisStat, field)
    count_col = getattr(AnalysisStat, count_field)
    result = await session.execute(
        select(AnalysisStat)
        .where(prob_col == 0, count_col > 0)
        .order_by(AnalysisStat.draw_no, AnalysisStat.number)
    )
    return list(result.scalars().all())


async def update_prob(session: AsyncSession, field: str, values: dict[int, float]) -> int:
    """Set only ``field`` for each row id in ``values``. Caller commits."""
    prob_col = getattr(AnalysisStat, field)
    for row_id, value in values.items():
        await session.execute(
            update(AnalysisStat).where(AnalysisStat.id == row_id).values({prob_col: value})
        )
    return len(values)
