"""Pydantic schemas for statistics."""

from datetime import datetime

from pydantic import BaseModel


class NumberStat(BaseModel):
    model_config = {"from_attributes": True}

    number: int
    total_count: int
    bonus_count: int
    last_draw_no: int
    probability: float = 0.0  # total_count / total draws


class NumberStatsResponse(BaseModel):
    number_stats: list[NumberStat]
    total_draws: int
    latest_draw_no: int
    uniformity_p_value: float  # chi-square goodness of fit vs. uniform


class ReappearStat(BaseModel):
    model_config = {"from_attributes": True}

    number: int
    total_appear: int
    reappear_count: int
    probability: float


class PositionStat(BaseModel):
    number: int
    count: int
    probability: float


class FirstLastStatsResponse(BaseModel):
    first_stats: list[PositionStat]
    last_stats: list[PositionStat]
    total_draws: int
    latest_draw_no: int


class PairStat(BaseModel):
    number1: int
    number2: int
    count: int
    probability: float


class PairStatsResponse(BaseModel):
    top_pairs: list[PairStat]
    bottom_pairs: list[PairStat]
    total_draws: int
    latest_draw_no: int


class ConsecutiveCountStat(BaseModel):
    consecutive_count: int  # 0 = no run, otherwise longest run length
    draw_count: int
    probability: float


class ConsecutiveExample(BaseModel):
    draw_no: int
    numbers: list[int]
    consecutive_count: int


class ConsecutiveStatsResponse(BaseModel):
    count_stats: list[ConsecutiveCountStat]
    recent_examples: list[ConsecutiveExample]
    total_draws: int
    latest_draw_no: int


class RatioStat(BaseModel):
    ratio: str  # "odd:even" or "high:low"
    count: int
    probability: float


class RatioStatsResponse(BaseModel):
    odd_even_stats: list[RatioStat]
    high_low_stats: list[RatioStat]
    total_draws: int
    latest_draw_no: int


class ColorPatternStat(BaseModel):
    pattern: str
    count: int
    probability: float


class ColorStatsResponse(BaseModel):
    top_patterns: list[ColorPatternStat]
    color_counts: dict[str, int]
    total_draws: int
    latest_draw_no: int


class LineStat(BaseModel):
    line: int
    count: int
    probability: float  # count / (total draws * 6)


class LineDistStat(BaseModel):
    distribution: str  # "r1:r2:...:r7"
    count: int
    probability: float


class GridStatsResponse(BaseModel):
    row_stats: list[LineStat]
    col_stats: list[LineStat]
    top_row_patterns: list[LineDistStat]
    top_col_patterns: list[LineDistStat]
    total_draws: int
    latest_draw_no: int


class BayesianNumberStat(BaseModel):
    number: int
    prior: float
    likelihood: float
    posterior: float
    recent_count: int
    expected_count: float
    deviation: float
    status: str  # HOT / COLD / NEUTRAL
    last_appear_draw_no: int
    gap_since_last_draw: int


class BayesianStatsResponse(BaseModel):
    numbers: list[BayesianNumberStat]
    hot_numbers: list[BayesianNumberStat]
    cold_numbers: list[BayesianNumberStat]
    window_size: int
    total_draws: int
    latest_draw_no: int


class PosteriorRowSchema(BaseModel):
    model_config = {"from_attributes": True}

    draw_no: int
    number: int
    total_count: int
    total_draws: int
    prior: float
    posterior: float
    appeared: bool


class AnalysisRowSchema(BaseModel):
    model_config = {"from_attributes": True}

    draw_no: int
    number: int
    total_count: int
    total_prob: float
    bonus_count: int
    bonus_prob: float
    first_count: int
    first_prob: float
    last_count: int
    last_prob: float
    reappear_total: int
    reappear_count: int
    reappear_prob: float
    bayesian_prior: float
    bayesian_post: float
    appeared: bool


class RecalculateResult(BaseModel):
    latest_draw_no: int
    number_stats_written: int
    reappear_stats_written: int
    bayesian_draws_processed: int
    analysis_draws_processed: int
    calculated_at: datetime


class RepairResult(BaseModel):
    field: str
    rows_fixed: int
