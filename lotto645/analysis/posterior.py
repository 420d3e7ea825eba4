"""Sequential Beta-Binomial posterior per number.

Each number carries its own running state (cumulative count and last
posterior). Advancing by one draw is a pure function of that state and
whether the number appeared, so a sequence replayed from any checkpoint
matches a full rebuild from draw 1.
"""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum

from lotto645.constants import (
    ALL_NUMBERS,
    BETA_ALPHA,
    BETA_BETA,
    NUMBERS_PER_DRAW,
    TOTAL_NUMBERS,
    UNIFORM_PRIOR,
)
from lotto645.db.models.draw import LottoDraw
from lotto645.schemas.statistics import BayesianNumberStat, BayesianStatsResponse


class CheckpointState(str, Enum):
    UNINITIALIZED = "uninitialized"  # no rows yet -> full rebuild
    BEHIND = "behind"                # checkpoint < latest draw -> incremental catch-up
    UP_TO_DATE = "up_to_date"        # nothing to do


def resolve_checkpoint_state(checkpoint_draw_no: int, latest_draw_no: int) -> CheckpointState:
    if checkpoint_draw_no >= latest_draw_no:
        return CheckpointState.UP_TO_DATE
    if checkpoint_draw_no == 0:
        return CheckpointState.UNINITIALIZED
    return CheckpointState.BEHIND


def beta_binomial_posterior(count: int, trials: int) -> float:
    """Posterior mean of Beta(alpha + k, beta + n - k)."""
    return (BETA_ALPHA + count) / (BETA_ALPHA + BETA_BETA + trials)


def trials_through(draw_no: int) -> int:
    return draw_no * NUMBERS_PER_DRAW


@dataclass
class PosteriorState:
    number: int
    total_count: int = 0
    posterior: float = UNIFORM_PRIOR


class PosteriorTracker:
    """Running posterior for all 45 numbers, advanced one draw at a time."""

    def __init__(self, states: dict[int, PosteriorState] | None = None):
        self.states = states or {num: PosteriorState(num) for num in ALL_NUMBERS}

    @classmethod
    def from_rows(cls, rows: Iterable) -> "PosteriorTracker":
        """Resume from the rows persisted at a checkpoint draw."""
        states = {
            row.number: PosteriorState(row.number, row.total_count, row.posterior)
            for row in rows
        }
        missing = set(ALL_NUMBERS) - states.keys()
        if missing:
            raise ValueError(f"Checkpoint rows incomplete, missing numbers: {sorted(missing)}")
        return cls(states)

    def advance(self, draw: LottoDraw) -> list[dict]:
        """Fold one draw into the state; returns the 45 rows for that draw."""
        drawn = set(draw.numbers)
        trials = trials_through(draw.draw_no)
        rows = []

        for num in ALL_NUMBERS:
            prev = self.states[num]
            appeared = num in drawn
            count = prev.total_count + (1 if appeared else 0)
            posterior = beta_binomial_posterior(count, trials)

            rows.append({
                "draw_no": draw.draw_no,
                "number": num,
                "total_count": count,
                "total_draws": draw.draw_no,
                "prior": prev.posterior,
                "posterior": posterior,
                "appeared": appeared,
            })
            self.states[num] = PosteriorState(num, count, posterior)

        return rows

    @classmethod
    def rebuild(cls, draws: Sequence[LottoDraw]) -> Iterator[list[dict]]:
        """Replay every draw from a clean state, yielding one batch per draw."""
        tracker = cls()
        for draw in sorted(draws, key=lambda d: d.draw_no):
            yield tracker.advance(draw)


# --- Windowed HOT/COLD classification ---

def classify_deviation(count: int, expected: float, threshold: float = 0.2) -> str:
    if expected <= 0:
        return "NEUTRAL"
    ratio = (count - expected) / expected
    if ratio > threshold:
        return "HOT"
    if ratio < -threshold:
        return "COLD"
    return "NEUTRAL"


def calculate_bayesian_window(
    draws: Sequence[LottoDraw],
    window: int = 50,
    threshold: float = 0.2,
    top_n: int = 10,
) -> BayesianStatsResponse | None:
    """Posterior over the most recent ``window`` draws with HOT/COLD status.

    Posteriors are normalised to sum to 1 across the 45 numbers. An invalid
    window (non-positive or longer than the history) falls back to 50.
    """
    if not draws:
        return None

    total_draws = len(draws)
    if window <= 0 or window > total_draws:
        window = 50

    newest_first = sorted(draws, key=lambda d: d.draw_no, reverse=True)
    latest_draw_no = newest_first[0].draw_no
    recent = newest_first[:window]
    actual_window = len(recent)

    trials = actual_window * NUMBERS_PER_DRAW
    expected = trials / TOTAL_NUMBERS

    recent_counts = {num: 0 for num in ALL_NUMBERS}
    for draw in recent:
        for num in draw.numbers:
            recent_counts[num] += 1

    last_appear = {num: 0 for num in ALL_NUMBERS}
    for draw in newest_first:
        for num in draw.numbers:
            if last_appear[num] == 0:
                last_appear[num] = draw.draw_no

    raw = {num: beta_binomial_posterior(recent_counts[num], trials) for num in ALL_NUMBERS}
    total_posterior = sum(raw.values())

    stats = []
    for num in ALL_NUMBERS:
        k = recent_counts[num]
        stats.append(BayesianNumberStat(
            number=num,
            prior=UNIFORM_PRIOR,
            likelihood=k / trials,
            posterior=raw[num] / total_posterior,
            recent_count=k,
            expected_count=expected,
            deviation=k - expected,
            status=classify_deviation(k, expected, threshold),
            last_appear_draw_no=last_appear[num],
            gap_since_last_draw=latest_draw_no - last_appear[num],
        ))

    stats.sort(key=lambda s: s.posterior, reverse=True)
    top_n = min(top_n, len(stats))

    return BayesianStatsResponse(
        numbers=stats,
        hot_numbers=stats[:top_n],
        cold_numbers=list(reversed(stats[-top_n:])),
        window_size=actual_window,
        total_draws=total_draws,
        latest_draw_no=latest_draw_no,
    )
