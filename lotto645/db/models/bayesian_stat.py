"""Per-draw Bayesian posterior rows (one per draw_no x number)."""

from sqlalchemy import Boolean, Float, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from lotto645.db.base import Base


class BayesianStat(Base):
    __tablename__ = "lotto_bayesian_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    draw_no: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    total_count: Mapped[int] = mapped_column(Integer, nullable=False)
    total_draws: Mapped[int] = mapped_column(Integer, nullable=False)
    prior: Mapped[float] = mapped_column(Float, nullable=False)
    posterior: Mapped[float] = mapped_column(Float, nullable=False)
    appeared: Mapped[bool] = mapped_column(Boolean, default=False)

    __table_args__ = (
        UniqueConstraint("draw_no", "number", name="uq_bayesian_draw_number"),
    )

    def __repr__(self) -> str:
        return f"<BayesianStat draw={self.draw_no} number={self.number} post={self.posterior:.5f}>"
