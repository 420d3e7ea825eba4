"""Snapshot statistic tables keyed by number."""

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from lotto645.db.base import Base


class NumberStatRecord(Base):
    """Per-number occurrence counts over the full history."""

    __tablename__ = "lotto_number_stats"

    number: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    total_count: Mapped[int] = mapped_column(Integer, default=0)
    bonus_count: Mapped[int] = mapped_column(Integer, default=0)
    last_draw_no: Mapped[int] = mapped_column(Integer, default=0)
    calculated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    def __repr__(self) -> str:
        return f"<NumberStatRecord number={self.number} total={self.total_count}>"


class ReappearStatRecord(Base):
    """How often a number drawn in one draw shows up again in the next."""

    __tablename__ = "lotto_reappear_stats"

    number: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    total_appear: Mapped[int] = mapped_column(Integer, default=0)
    reappear_count: Mapped[int] = mapped_column(Integer, default=0)
    probability: Mapped[float] = mapped_column(Float, default=0.0)
    calculated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    def __repr__(self) -> str:
        return f"<ReappearStatRecord number={self.number} p={self.probability:.4f}>"
