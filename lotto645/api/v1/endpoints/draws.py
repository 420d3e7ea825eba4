"""Draw API endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lotto645.api.deps import get_db
from lotto645.schemas.draw import DrawCreate, DrawSchema, PaginatedDraws
from lotto645.services import draw_service

router = APIRouter()


@router.get("", response_model=PaginatedDraws)
async def list_draws(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Paginated draw history, newest first."""
    return await draw_service.list_draws(db, page=page, page_size=page_size)


@router.get("/latest", response_model=DrawSchema)
async def latest_draw(db: AsyncSession = Depends(get_db)):
    return await draw_service.latest_draw(db)


@router.get("/{draw_no}", response_model=DrawSchema)
async def get_draw(draw_no: int, db: AsyncSession = Depends(get_db)):
    return await draw_service.draw_by_no(db, draw_no)


@router.put("", response_model=DrawSchema)
async def upsert_draw(draw: DrawCreate, db: AsyncSession = Depends(get_db)):
    """Insert a draw or correct a stored one."""
    return await draw_service.upsert_draw(db, draw)
