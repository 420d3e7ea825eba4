"""Recommendation API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lotto645.api.deps import get_db
from lotto645.services import recommend_service
from lotto645.schemas.recommend import (
    CombineAlgorithmListResponse,
    MethodListResponse,
    RecommendRequest,
    RecommendResponse,
)

router = APIRouter()


@router.post("", response_model=RecommendResponse)
async def recommend(request: RecommendRequest, db: AsyncSession = Depends(get_db)):
    """Combine up to three methods into recommended number sets."""
    return await recommend_service.recommend(db, request)


@router.get("/methods", response_model=MethodListResponse)
async def methods():
    return recommend_service.list_methods()


@router.get("/combine-methods", response_model=CombineAlgorithmListResponse)
async def combine_methods():
    return recommend_service.list_combine_algorithms()
