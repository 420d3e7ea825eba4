"""Pydantic schemas for draw data."""

from pydantic import BaseModel, Field


class DrawSchema(BaseModel):
    model_config = {"from_attributes": True}

    draw_no: int
    draw_date: str
    num1: int
    num2: int
    num3: int
    num4: int
    num5: int
    num6: int
    bonus_num: int
    numbers: list[int]
    first_prize: int = 0
    first_winners: int = 0
    first_per_game: int = 0


class DrawCreate(BaseModel):
    """Draw as delivered by an import or a data correction."""

    draw_no: int = Field(ge=1)
    draw_date: str
    numbers: list[int]
    bonus_num: int
    first_prize: int = 0
    first_winners: int = 0
    first_per_game: int = 0
    second_prize: int = 0
    second_winners: int = 0
    second_per_game: int = 0
    third_prize: int = 0
    third_winners: int = 0
    third_per_game: int = 0
    fourth_prize: int = 0
    fourth_winners: int = 0
    fourth_per_game: int = 0
    fifth_prize: int = 0
    fifth_winners: int = 0
    fifth_per_game: int = 0


class PaginatedDraws(BaseModel):
    items: list[DrawSchema]
    total: int
    page: int
    page_size: int
