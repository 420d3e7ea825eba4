"""Draw store access: reads used by the calculators and data-correction writes."""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from lotto645.constants import MAX_NUMBER, MIN_NUMBER, NUMBERS_PER_DRAW
from lotto645.db.crud import draw as draw_crud
from lotto645.db.models.draw import LottoDraw
from lotto645.errors import DataUnavailable, DrawNotFound, InvalidRequest
from lotto645.schemas.draw import DrawCreate, DrawSchema, PaginatedDraws


async def latest_draw_no(session: AsyncSession) -> int:
    return await draw_crud.latest_draw_no(session)


async def draw_by_no(session: AsyncSession, draw_no: int) -> LottoDraw:
    draw = await draw_crud.get_by_no(session, draw_no)
    if draw is None:
        raise DrawNotFound(draw_no)
    return draw


async def latest_draw(session: AsyncSession) -> LottoDraw:
    draw = await draw_crud.get_latest(session)
    if draw is None:
        raise DataUnavailable("No draws stored yet")
    return draw


async def all_draws(session: AsyncSession) -> list[LottoDraw]:
    return await draw_crud.get_all(session)


async def list_draws(session: AsyncSession, page: int = 1, page_size: int = 20) -> PaginatedDraws:
    items, total = await draw_crud.get_draws(session, page=page, page_size=page_size)
    return PaginatedDraws(
        items=[DrawSchema.model_validate(d) for d in items],
        total=total,
        page=page,
        page_size=page_size,
    )


def validate_draw(draw: DrawCreate) -> list[int]:
    """Check the number set and return it sorted ascending."""
    numbers = sorted(draw.numbers)
    if len(numbers) != NUMBERS_PER_DRAW or len(set(numbers)) != NUMBERS_PER_DRAW:
        raise InvalidRequest(f"Draw {draw.draw_no} needs {NUMBERS_PER_DRAW} distinct numbers")
    for num in [*numbers, draw.bonus_num]:
        if not MIN_NUMBER <= num <= MAX_NUMBER:
            raise InvalidRequest(f"Draw {draw.draw_no} has number {num} outside {MIN_NUMBER}-{MAX_NUMBER}")
    if draw.bonus_num in numbers:
        raise InvalidRequest(f"Draw {draw.draw_no} bonus {draw.bonus_num} repeats a primary number")
    return numbers


def _to_row(draw: DrawCreate) -> dict:
    numbers = validate_draw(draw)
    row = draw.model_dump(exclude={"numbers"})
    row.update({f"num{i}": num for i, num in enumerate(numbers, start=1)})
    return row


async def upsert_draw(session: AsyncSession, draw: DrawCreate) -> LottoDraw:
    """Insert a draw or overwrite a stored one (data correction)."""
    await draw_crud.upsert(session, _to_row(draw))
    await session.commit()
    logger.info("Upserted draw {}", draw.draw_no)

    stored = await draw_crud.get_by_no(session, draw.draw_no)
    # Refresh in case an older copy sits in the identity map
    await session.refresh(stored)
    return stored


async def import_draws(session: AsyncSession, draws: list[DrawCreate]) -> int:
    """Upsert a batch of draws in one transaction."""
    rows = [_to_row(d) for d in draws]
    count = await draw_crud.bulk_upsert(session, rows)
    await session.commit()
    logger.info("Imported {} draws", count)
    return count
