"""Full-history aggregate statistics.

Every calculator takes the complete draw history (ascending by draw number)
and returns a fresh snapshot. Nothing here is incremental: each call is a
pure function of the draws it is given. An empty history yields ``None``
so callers never see statistics fabricated over zero draws.
"""

from collections import Counter
from collections.abc import Sequence
from itertools import combinations

import numpy as np
from scipy import stats as sp_stats

from lotto645.constants import (
    ALL_NUMBERS,
    COLOR_BANDS,
    GRID_SIZE,
    HIGH_LOW_BOUNDARY,
    MAX_NUMBER,
    MIN_NUMBER,
    NUMBERS_PER_DRAW,
    TOTAL_NUMBERS,
)
from lotto645.db.models.draw import LottoDraw
from lotto645.schemas.statistics import (
    ColorPatternStat,
    ColorStatsResponse,
    ConsecutiveCountStat,
    ConsecutiveExample,
    ConsecutiveStatsResponse,
    FirstLastStatsResponse,
    GridStatsResponse,
    LineDistStat,
    LineStat,
    NumberStat,
    NumberStatsResponse,
    PairStat,
    PairStatsResponse,
    PositionStat,
    RatioStat,
    RatioStatsResponse,
    ReappearStat,
)

CONSECUTIVE_BUCKETS = (0, 2, 3, 4, 5, 6)
MAX_CONSECUTIVE_EXAMPLES = 10


def _latest_draw_no(draws: Sequence[LottoDraw]) -> int:
    return max(d.draw_no for d in draws)


def _probability(count: int, denominator: int) -> float:
    return count / denominator if denominator > 0 else 0.0


# --- Frequency ---

def calculate_number_stats(draws: Sequence[LottoDraw]) -> NumberStatsResponse | None:
    """Primary/bonus occurrence counts and last appearance for every number."""
    if not draws:
        return None

    total_counter = Counter()
    bonus_counter = Counter()
    last_seen: dict[int, int] = {}

    for draw in draws:
        for num in draw.numbers:
            total_counter[num] += 1
            last_seen[num] = max(last_seen.get(num, 0), draw.draw_no)
        bonus_counter[draw.bonus_num] += 1
        last_seen[draw.bonus_num] = max(last_seen.get(draw.bonus_num, 0), draw.draw_no)

    total_draws = len(draws)
    stats = [
        NumberStat(
            number=num,
            total_count=total_counter.get(num, 0),
            bonus_count=bonus_counter.get(num, 0),
            last_draw_no=last_seen.get(num, 0),
            probability=_probability(total_counter.get(num, 0), total_draws),
        )
        for num in ALL_NUMBERS
    ]

    observed = np.array([s.total_count for s in stats], dtype=np.float64)
    expected = np.full(TOTAL_NUMBERS, total_draws * NUMBERS_PER_DRAW / TOTAL_NUMBERS)
    _, p_value = sp_stats.chisquare(observed, f_exp=expected)

    return NumberStatsResponse(
        number_stats=stats,
        total_draws=total_draws,
        latest_draw_no=_latest_draw_no(draws),
        uniformity_p_value=float(p_value),
    )


# --- Reappearance ---

def calculate_reappear_stats(draws: Sequence[LottoDraw]) -> list[ReappearStat] | None:
    """Probability that a number drawn in draw k is drawn again in draw k+1."""
    if len(draws) < 2:
        return None

    total_appear = Counter()
    reappear = Counter()

    for current, following in zip(draws, draws[1:]):
        next_numbers = set(following.numbers)
        for num in current.numbers:
            total_appear[num] += 1
            if num in next_numbers:
                reappear[num] += 1

    return [
        ReappearStat(
            number=num,
            total_appear=total_appear.get(num, 0),
            reappear_count=reappear.get(num, 0),
            probability=_probability(reappear.get(num, 0), total_appear.get(num, 0)),
        )
        for num in ALL_NUMBERS
    ]


# --- Position ---

def calculate_first_last_stats(draws: Sequence[LottoDraw]) -> FirstLastStatsResponse | None:
    """Distribution of the smallest (Num1) and largest (Num6) number.

    Only the positionally possible range is reported: 1-40 for the first
    number and 6-45 for the last.
    """
    if not draws:
        return None

    total_draws = len(draws)
    first_counter = Counter(d.num1 for d in draws)
    last_counter = Counter(d.num6 for d in draws)

    first_stats = [
        PositionStat(
            number=num,
            count=first_counter.get(num, 0),
            probability=_probability(first_counter.get(num, 0), total_draws),
        )
        for num in range(MIN_NUMBER, MAX_NUMBER - NUMBERS_PER_DRAW + 2)
    ]
    last_stats = [
        PositionStat(
            number=num,
            count=last_counter.get(num, 0),
            probability=_probability(last_counter.get(num, 0), total_draws),
        )
        for num in range(MIN_NUMBER + NUMBERS_PER_DRAW - 1, MAX_NUMBER + 1)
    ]

    return FirstLastStatsResponse(
        first_stats=first_stats,
        last_stats=last_stats,
        total_draws=total_draws,
        latest_draw_no=_latest_draw_no(draws),
    )


# --- Pairs ---

def count_pairs(draws: Sequence[LottoDraw]) -> Counter:
    """Co-occurrence count for every unordered pair, keyed by (min, max)."""
    pair_counter = Counter()
    for draw in draws:
        for pair in combinations(sorted(draw.numbers), 2):
            pair_counter[pair] += 1
    return pair_counter


def calculate_pair_stats(draws: Sequence[LottoDraw], top_n: int = 20) -> PairStatsResponse | None:
    """Most and least frequent number pairs; bottom pairs are sorted ascending."""
    if not draws:
        return None

    total_draws = len(draws)
    all_pairs = [
        PairStat(number1=a, number2=b, count=count, probability=count / total_draws)
        for (a, b), count in count_pairs(draws).items()
    ]
    all_pairs.sort(key=lambda p: p.count, reverse=True)

    top_n = min(top_n, len(all_pairs))
    top_pairs = all_pairs[:top_n]
    bottom_pairs = sorted(all_pairs[len(all_pairs) - top_n:], key=lambda p: p.count)

    return PairStatsResponse(
        top_pairs=top_pairs,
        bottom_pairs=bottom_pairs,
        total_draws=total_draws,
        latest_draw_no=_latest_draw_no(draws),
    )


# --- Consecutive runs ---

def count_consecutive(numbers: Sequence[int]) -> int:
    """Longest run of consecutive integers in a sorted draw; 0 if none."""
    if len(numbers) < 2:
        return 0

    longest = current = 1
    for prev, num in zip(numbers, numbers[1:]):
        if num == prev + 1:
            current += 1
            longest = max(longest, current)
        else:
            current = 1

    return 0 if longest == 1 else longest


def calculate_consecutive_stats(draws: Sequence[LottoDraw]) -> ConsecutiveStatsResponse | None:
    if not draws:
        return None

    total_draws = len(draws)
    bucket_counter = Counter()
    examples: list[ConsecutiveExample] = []

    for draw in draws:
        nums = draw.numbers
        run = count_consecutive(nums)
        bucket_counter[run] += 1
        if run >= 2 and len(examples) < MAX_CONSECUTIVE_EXAMPLES:
            examples.append(ConsecutiveExample(
                draw_no=draw.draw_no, numbers=nums, consecutive_count=run,
            ))

    examples.sort(key=lambda e: e.draw_no, reverse=True)

    count_stats = [
        ConsecutiveCountStat(
            consecutive_count=bucket,
            draw_count=bucket_counter.get(bucket, 0),
            probability=_probability(bucket_counter.get(bucket, 0), total_draws),
        )
        for bucket in CONSECUTIVE_BUCKETS
    ]

    return ConsecutiveStatsResponse(
        count_stats=count_stats,
        recent_examples=examples,
        total_draws=total_draws,
        latest_draw_no=_latest_draw_no(draws),
    )


# --- Odd/even and high/low ---

def _ratio_stats(counter: Counter, total_draws: int) -> list[RatioStat]:
    # Always reported as 6:0, 5:1, ... 0:6
    stats = []
    for left in range(NUMBERS_PER_DRAW, -1, -1):
        key = f"{left}:{NUMBERS_PER_DRAW - left}"
        stats.append(RatioStat(
            ratio=key,
            count=counter.get(key, 0),
            probability=_probability(counter.get(key, 0), total_draws),
        ))
    return stats


def calculate_ratio_stats(draws: Sequence[LottoDraw]) -> RatioStatsResponse | None:
    if not draws:
        return None

    odd_even = Counter()
    high_low = Counter()
    for draw in draws:
        nums = draw.numbers
        odd = sum(1 for n in nums if n % 2 == 1)
        high = sum(1 for n in nums if n >= HIGH_LOW_BOUNDARY)
        odd_even[f"{odd}:{len(nums) - odd}"] += 1
        high_low[f"{high}:{len(nums) - high}"] += 1

    total_draws = len(draws)
    return RatioStatsResponse(
        odd_even_stats=_ratio_stats(odd_even, total_draws),
        high_low_stats=_ratio_stats(high_low, total_draws),
        total_draws=total_draws,
        latest_draw_no=_latest_draw_no(draws),
    )


# --- Colour bands ---

def color_for_number(num: int) -> str:
    for letter, low, high in COLOR_BANDS:
        if low <= num <= high:
            return letter
    return "?"


def calculate_color_stats(draws: Sequence[LottoDraw], top_n: int = 20) -> ColorStatsResponse | None:
    """Colour-band pattern per draw (six letters in draw order) and band totals."""
    if not draws:
        return None

    total_draws = len(draws)
    pattern_counter = Counter()
    color_counts = {letter: 0 for letter, _, _ in COLOR_BANDS}

    for draw in draws:
        letters = [color_for_number(n) for n in draw.numbers]
        for letter in letters:
            color_counts[letter] = color_counts.get(letter, 0) + 1
        pattern_counter["".join(letters)] += 1

    patterns = [
        ColorPatternStat(pattern=pattern, count=count, probability=count / total_draws)
        for pattern, count in pattern_counter.most_common()
    ]

    return ColorStatsResponse(
        top_patterns=patterns[:top_n],
        color_counts=color_counts,
        total_draws=total_draws,
        latest_draw_no=_latest_draw_no(draws),
    )


# --- 7x7 grid ---

def grid_position(num: int) -> tuple[int, int]:
    """1-indexed (row, col) of a number on the 7x7 play slip."""
    return (num - 1) // GRID_SIZE + 1, (num - 1) % GRID_SIZE + 1


def _line_dist_stats(counter: Counter, total_draws: int) -> list[LineDistStat]:
    return [
        LineDistStat(distribution=dist, count=count, probability=count / total_draws)
        for dist, count in counter.most_common()
    ]


def calculate_grid_stats(draws: Sequence[LottoDraw], top_n: int = 20) -> GridStatsResponse | None:
    if not draws:
        return None

    total_draws = len(draws)
    row_totals = np.zeros(GRID_SIZE + 1, dtype=np.int64)  # index 0 unused
    col_totals = np.zeros(GRID_SIZE + 1, dtype=np.int64)
    row_patterns = Counter()
    col_patterns = Counter()

    for draw in draws:
        row_dist = np.zeros(GRID_SIZE + 1, dtype=np.int64)
        col_dist = np.zeros(GRID_SIZE + 1, dtype=np.int64)
        for num in draw.numbers:
            row, col = grid_position(num)
            row_dist[row] += 1
            col_dist[col] += 1
        row_totals += row_dist
        col_totals += col_dist
        row_patterns[":".join(str(int(c)) for c in row_dist[1:])] += 1
        col_patterns[":".join(str(int(c)) for c in col_dist[1:])] += 1

    ball_total = total_draws * NUMBERS_PER_DRAW
    row_stats = [
        LineStat(line=i, count=int(row_totals[i]), probability=int(row_totals[i]) / ball_total)
        for i in range(1, GRID_SIZE + 1)
    ]
    col_stats = [
        LineStat(line=i, count=int(col_totals[i]), probability=int(col_totals[i]) / ball_total)
        for i in range(1, GRID_SIZE + 1)
    ]

    return GridStatsResponse(
        row_stats=row_stats,
        col_stats=col_stats,
        top_row_patterns=_line_dist_stats(row_patterns, total_draws)[:top_n],
        top_col_patterns=_line_dist_stats(col_patterns, total_draws)[:top_n],
        total_draws=total_draws,
        latest_draw_no=_latest_draw_no(draws),
    )
