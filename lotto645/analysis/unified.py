"""Unified per-draw analysis rows.

Folds frequency, bonus, first/last position, reappearance and the
Beta-Binomial posterior into one row per (draw, number). Uses the same
checkpoint policy as :mod:`lotto645.analysis.posterior`.
"""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, replace

from lotto645.analysis.posterior import beta_binomial_posterior, trials_through
from lotto645.constants import ALL_NUMBERS, UNIFORM_PRIOR
from lotto645.db.models.draw import LottoDraw


@dataclass(frozen=True)
class UnifiedState:
    number: int
    total_count: int = 0
    bonus_count: int = 0
    first_count: int = 0
    last_count: int = 0
    reappear_total: int = 0
    reappear_count: int = 0
    bayesian_post: float = UNIFORM_PRIOR


def _ratio(count: int, denominator: int) -> float:
    return count / denominator if denominator > 0 else 0.0


class UnifiedTracker:
    """Running unified state for all 45 numbers."""

    def __init__(
        self,
        states: dict[int, UnifiedState] | None = None,
        last_draw_no: int = 0,
        last_numbers: frozenset[int] = frozenset(),
    ):
        self.states = states or {num: UnifiedState(num) for num in ALL_NUMBERS}
        # Numbers of the last folded draw, for reappearance
        self.last_draw_no = last_draw_no
        self.last_numbers = last_numbers

    @classmethod
    def from_rows(cls, rows: Iterable) -> "UnifiedTracker":
        rows = list(rows)
        states = {
            row.number: UnifiedState(
                number=row.number,
                total_count=row.total_count,
                bonus_count=row.bonus_count,
                first_count=row.first_count,
                last_count=row.last_count,
                reappear_total=row.reappear_total,
                reappear_count=row.reappear_count,
                bayesian_post=row.bayesian_post,
            )
            for row in rows
        }
        missing = set(ALL_NUMBERS) - states.keys()
        if missing:
            raise ValueError(f"Checkpoint rows incomplete, missing numbers: {sorted(missing)}")

        draw_nos = {row.draw_no for row in rows}
        if len(draw_nos) != 1:
            raise ValueError(f"Checkpoint rows span several draws: {sorted(draw_nos)}")

        return cls(
            states,
            last_draw_no=draw_nos.pop(),
            last_numbers=frozenset(row.number for row in rows if row.appeared),
        )

    def advance(self, draw: LottoDraw) -> list[dict]:
        """Fold one draw into the state; returns the 45 rows for that draw."""
        drawn = frozenset(draw.numbers)
        draw_no = draw.draw_no
        trials = trials_through(draw_no)
        # Reappearance only counts strictly consecutive draws
        previous = self.last_numbers if self.last_draw_no == draw_no - 1 else None
        rows = []

        for num in ALL_NUMBERS:
            prev = self.states[num]
            appeared = num in drawn

            reappear_total = prev.reappear_total
            reappear_count = prev.reappear_count
            if previous is not None and num in previous:
                reappear_total += 1
                if appeared:
                    reappear_count += 1

            state = replace(
                prev,
                total_count=prev.total_count + (1 if appeared else 0),
                bonus_count=prev.bonus_count + (1 if draw.bonus_num == num else 0),
                first_count=prev.first_count + (1 if draw.num1 == num else 0),
                last_count=prev.last_count + (1 if draw.num6 == num else 0),
                reappear_total=reappear_total,
                reappear_count=reappear_count,
            )
            state = replace(state, bayesian_post=beta_binomial_posterior(state.total_count, trials))

            rows.append({
                "draw_no": draw_no,
                "number": num,
                "total_count": state.total_count,
                "total_prob": _ratio(state.total_count, trials),
                "bonus_count": state.bonus_count,
                "bonus_prob": _ratio(state.bonus_count, draw_no),
                "first_count": state.first_count,
                "first_prob": _ratio(state.first_count, draw_no),
                "last_count": state.last_count,
                "last_prob": _ratio(state.last_count, draw_no),
                "reappear_total": state.reappear_total,
                "reappear_count": state.reappear_count,
                "reappear_prob": _ratio(state.reappear_count, state.reappear_total),
                "bayesian_prior": prev.bayesian_post,
                "bayesian_post": state.bayesian_post,
                "appeared": appeared,
            })
            self.states[num] = state

        self.last_draw_no = draw_no
        self.last_numbers = drawn
        return rows

    @classmethod
    def rebuild(cls, draws: Sequence[LottoDraw]) -> Iterator[list[dict]]:
        tracker = cls()
        for draw in sorted(draws, key=lambda d: d.draw_no):
            yield tracker.advance(draw)


# --- Repair of rows written before a probability formula existed ---

# probability field -> (count field, denominator)
PROBABILITY_FIELDS = {
    "total_prob": ("total_count", lambda row: trials_through(row.draw_no)),
    "bonus_prob": ("bonus_count", lambda row: row.draw_no),
    "first_prob": ("first_count", lambda row: row.draw_no),
    "last_prob": ("last_count", lambda row: row.draw_no),
    "reappear_prob": ("reappear_count", lambda row: row.reappear_total),
}


def rederive_probability(row, field: str) -> float:
    """Recompute ``field`` for a stored row from its count columns."""
    count_field, denominator = PROBABILITY_FIELDS[field]
    return _ratio(getattr(row, count_field), denominator(row))
