"""Unified per-draw analysis rows (one per draw_no x number)."""

from sqlalchemy import Boolean, Float, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from lotto645.db.base import Base


class AnalysisStat(Base):
    """Running counts and probabilities for every signal the recommender reads."""

    __tablename__ = "lotto_analysis_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    draw_no: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    number: Mapped[int] = mapped_column(Integer, nullable=False)

    total_count: Mapped[int] = mapped_column(Integer, default=0)
    total_prob: Mapped[float] = mapped_column(Float, default=0.0)
    bonus_count: Mapped[int] = mapped_column(Integer, default=0)
    bonus_prob: Mapped[float] = mapped_column(Float, default=0.0)
    first_count: Mapped[int] = mapped_column(Integer, default=0)
    first_prob: Mapped[float] = mapped_column(Float, default=0.0)
    last_count: Mapped[int] = mapped_column(Integer, default=0)
    last_prob: Mapped[float] = mapped_column(Float, default=0.0)
    reappear_total: Mapped[int] = mapped_column(Integer, default=0)
    reappear_count: Mapped[int] = mapped_column(Integer, default=0)
    reappear_prob: Mapped[float] = mapped_column(Float, default=0.0)
    bayesian_prior: Mapped[float] = mapped_column(Float, default=0.0)
    bayesian_post: Mapped[float] = mapped_column(Float, default=0.0)
    appeared: Mapped[bool] = mapped_column(Boolean, default=False)

    __table_args__ = (
        UniqueConstraint("draw_no", "number", name="uq_analysis_draw_number"),
    )

    def __repr__(self) -> str:
        return f"<AnalysisStat draw={self.draw_no} number={self.number}>"
