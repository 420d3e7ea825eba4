"""Lotto 6/45 draw ORM model."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from lotto645.db.base import Base


class LottoDraw(Base):
    """Finalized draw: six primary numbers (ascending) + one bonus number."""

    __tablename__ = "lotto_draws"

    draw_no: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    draw_date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY.MM.DD

    num1: Mapped[int] = mapped_column(Integer, nullable=False)
    num2: Mapped[int] = mapped_column(Integer, nullable=False)
    num3: Mapped[int] = mapped_column(Integer, nullable=False)
    num4: Mapped[int] = mapped_column(Integer, nullable=False)
    num5: Mapped[int] = mapped_column(Integer, nullable=False)
    num6: Mapped[int] = mapped_column(Integer, nullable=False)
    bonus_num: Mapped[int] = mapped_column(Integer, nullable=False)

    # Prize tiers: total amount, winner count, amount per winning game
    first_prize: Mapped[int] = mapped_column(BigInteger, default=0)
    first_winners: Mapped[int] = mapped_column(Integer, default=0)
    first_per_game: Mapped[int] = mapped_column(BigInteger, default=0)
    second_prize: Mapped[int] = mapped_column(BigInteger, default=0)
    second_winners: Mapped[int] = mapped_column(Integer, default=0)
    second_per_game: Mapped[int] = mapped_column(BigInteger, default=0)
    third_prize: Mapped[int] = mapped_column(BigInteger, default=0)
    third_winners: Mapped[int] = mapped_column(Integer, default=0)
    third_per_game: Mapped[int] = mapped_column(BigInteger, default=0)
    fourth_prize: Mapped[int] = mapped_column(BigInteger, default=0)
    fourth_winners: Mapped[int] = mapped_column(Integer, default=0)
    fourth_per_game: Mapped[int] = mapped_column(BigInteger, default=0)
    fifth_prize: Mapped[int] = mapped_column(BigInteger, default=0)
    fifth_winners: Mapped[int] = mapped_column(Integer, default=0)
    fifth_per_game: Mapped[int] = mapped_column(BigInteger, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    @property
    def numbers(self) -> list[int]:
        return [self.num1, self.num2, self.num3, self.num4, self.num5, self.num6]

    def __repr__(self) -> str:
        return f"<LottoDraw no={self.draw_no} numbers={self.numbers} bonus={self.bonus_num}>"
