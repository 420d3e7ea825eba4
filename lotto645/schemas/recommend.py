"""Pydantic schemas for number recommendation."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from lotto645.constants import MAX_RECOMMEND_COUNT


class RecommendRequest(BaseModel):
    method_codes: list[str]
    weights: dict[str, float] = Field(default_factory=dict)
    combine_code: str = "SIMPLE_AVG"
    count: int = 1
    include_bonus: bool = False

    @field_validator("count", mode="before")
    @classmethod
    def clamp_count(cls, v):
        # Out-of-range counts are clamped rather than rejected
        v = int(v or 1)
        return max(1, min(v, MAX_RECOMMEND_COUNT))

    @field_validator("combine_code", mode="before")
    @classmethod
    def default_combine_code(cls, v):
        return v or "SIMPLE_AVG"


class Recommendation(BaseModel):
    numbers: list[int]  # six distinct, ascending
    bonus: int | None = None
    methods_used: list[str]
    combine_method: str
    confidence: float
    details: dict = Field(default_factory=dict)


class RecommendResponse(BaseModel):
    recommendations: list[Recommendation]
    latest_draw_no: int
    generated_at: datetime


class MethodInfo(BaseModel):
    code: str
    name: str
    description: str
    source_field: str  # unified-row probability field it reads


class MethodListResponse(BaseModel):
    methods: list[MethodInfo]
    total_count: int


class CombineAlgorithmInfo(BaseModel):
    code: str
    name: str
    description: str
    is_active: bool


class CombineAlgorithmListResponse(BaseModel):
    methods: list[CombineAlgorithmInfo]
    total_count: int
