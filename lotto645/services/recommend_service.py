"""Recommendation service: request validation and the combiner over the latest rows."""

from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from lotto645.analysis.combiner import WEIGHTED_AVG
from lotto645.analysis.recommender import COMBINE_ALGORITHMS, METHODS, Recommender
from lotto645.config import settings
from lotto645.constants import MAX_METHOD_CODES
from lotto645.db.crud import stat_rows
from lotto645.db.models import AnalysisStat
from lotto645.errors import InvalidRequest
from lotto645.schemas.recommend import (
    CombineAlgorithmListResponse,
    MethodListResponse,
    RecommendRequest,
    RecommendResponse,
)
from lotto645.services import draw_service

recommender = Recommender(seed=settings.RECOMMEND_SEED)


def validate_request(request: RecommendRequest) -> None:
    """Reject structurally invalid requests; unknown method codes are allowed."""
    if not request.method_codes:
        raise InvalidRequest("At least one method_code is required")
    if len(request.method_codes) > MAX_METHOD_CODES:
        raise InvalidRequest(f"Maximum {MAX_METHOD_CODES} method_codes allowed")

    if request.combine_code == WEIGHTED_AVG:
        if not request.weights:
            raise InvalidRequest("weights are required for WEIGHTED_AVG")
        codes = set(request.method_codes)
        for key, value in request.weights.items():
            if key not in codes:
                raise InvalidRequest(f"Weight key '{key}' does not match any method_code")
            if value <= 0:
                raise InvalidRequest(f"Weight for '{key}' must be greater than 0")


async def recommend(session: AsyncSession, request: RecommendRequest) -> RecommendResponse:
    validate_request(request)

    rows = await stat_rows.latest_rows(session, AnalysisStat)
    if not rows:
        logger.warning("No unified analysis rows yet, recommending at random")

    recommendations = recommender.recommend(request, rows)
    logger.debug(
        "Recommended {} sets via {} over {}",
        len(recommendations), request.combine_code, request.method_codes,
    )
    return RecommendResponse(
        recommendations=recommendations,
        latest_draw_no=await draw_service.latest_draw_no(session),
        generated_at=datetime.now(),
    )


def list_methods() -> MethodListResponse:
    return MethodListResponse(methods=METHODS, total_count=len(METHODS))


def list_combine_algorithms() -> CombineAlgorithmListResponse:
    return CombineAlgorithmListResponse(methods=COMBINE_ALGORITHMS, total_count=len(COMBINE_ALGORITHMS))
