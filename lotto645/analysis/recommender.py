"""Probability-combination recommender.

Turns the latest unified analysis rows into recommended number sets:
per-method probability maps -> combined score map -> top six numbers.
"""

from collections.abc import Sequence

import numpy as np

from lotto645.analysis import combiner
from lotto645.constants import ALL_NUMBERS, NUMBERS_PER_DRAW, UNIFORM_PRIOR
from lotto645.schemas.recommend import (
    CombineAlgorithmInfo,
    MethodInfo,
    Recommendation,
    RecommendRequest,
)

# Selected numbers averaging this many times the uniform rate score 1.0
CONFIDENCE_MULTIPLIER = 3.0

METHODS = [
    MethodInfo(code="NUMBER_FREQUENCY", name="Number frequency",
               description="Cumulative appearance rate of each number", source_field="total_prob"),
    MethodInfo(code="REAPPEAR_PROB", name="Reappearance",
               description="Chance a number drawn last time is drawn again", source_field="reappear_prob"),
    MethodInfo(code="FIRST_POSITION", name="First position",
               description="Rate of being the smallest number of a draw", source_field="first_prob"),
    MethodInfo(code="LAST_POSITION", name="Last position",
               description="Rate of being the largest number of a draw", source_field="last_prob"),
    MethodInfo(code="PAIR_FREQUENCY", name="Pair frequency",
               description="Co-occurring pairs, scored by individual frequency", source_field="total_prob"),
    MethodInfo(code="CONSECUTIVE", name="Consecutive numbers",
               description="Consecutive runs, scored by individual frequency", source_field="total_prob"),
    MethodInfo(code="ODD_EVEN_RATIO", name="Odd/even ratio",
               description="Odd/even balance, scored by individual frequency", source_field="total_prob"),
    MethodInfo(code="HIGH_LOW_RATIO", name="High/low ratio",
               description="High/low balance, scored by individual frequency", source_field="total_prob"),
    MethodInfo(code="BAYESIAN", name="Bayesian posterior",
               description="Beta-Binomial posterior appearance rate", source_field="bayesian_post"),
    MethodInfo(code="HOT_COLD", name="Hot/cold",
               description="Recent momentum, scored by the Bayesian posterior", source_field="bayesian_post"),
]

METHOD_FIELDS = {m.code: m.source_field for m in METHODS}
DEFAULT_FIELD = "total_prob"

COMBINE_ALGORITHMS = [
    CombineAlgorithmInfo(code=combiner.SIMPLE_AVG, name="Simple average",
                         description="Arithmetic mean of the method probabilities", is_active=True),
    CombineAlgorithmInfo(code=combiner.WEIGHTED_AVG, name="Weighted average",
                         description="Mean weighted by user-supplied per-method weights", is_active=True),
    CombineAlgorithmInfo(code=combiner.BAYESIAN_COMBINE, name="Bayesian combination",
                         description="Methods treated as independent evidence", is_active=True),
    CombineAlgorithmInfo(code=combiner.GEOMETRIC_MEAN, name="Geometric mean",
                         description="n-th root of the product of probabilities", is_active=True),
    CombineAlgorithmInfo(code=combiner.MIN_MAX, name="Min-max",
                         description="Most conservative method per number", is_active=False),
]


def get_method_probabilities(code: str, rows: Sequence) -> dict[int, float]:
    """Per-number probability map for one method; unknown codes read total_prob."""
    field = METHOD_FIELDS.get(code, DEFAULT_FIELD)
    return {row.number: float(getattr(row, field)) for row in rows}


def calculate_confidence(numbers: Sequence[int], scores: dict[int, float], method_count: int) -> float:
    if method_count == 0 or not numbers:
        return 0.0
    avg = sum(scores.get(n, 0.0) for n in numbers) / len(numbers)
    confidence = avg / (CONFIDENCE_MULTIPLIER * UNIFORM_PRIOR)
    return min(max(confidence, 0.0), 1.0)


class Recommender:
    """Stateless apart from its random generator, used only for tie-breaks and fills."""

    def __init__(self, seed: int | None = None, rng: np.random.Generator | None = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def select_top_numbers(self, scores: dict[int, float], count: int = NUMBERS_PER_DRAW) -> list[int]:
        """Highest-scoring ``count`` numbers, ascending.

        Equal scores are ordered randomly. Only positive scores rank; missing
        slots are filled with random unused numbers.
        """
        candidates = [num for num, score in scores.items() if score > 0]
        # Shuffle first so the stable sort breaks ties at random
        order = self.rng.permutation(len(candidates))
        candidates = sorted((candidates[i] for i in order), key=lambda n: scores[n], reverse=True)
        numbers = candidates[:count]

        if len(numbers) < count:
            unused = [n for n in ALL_NUMBERS if n not in numbers]
            fill = self.rng.choice(unused, size=count - len(numbers), replace=False)
            numbers.extend(int(n) for n in fill)

        return sorted(numbers)

    def select_bonus_number(self, rows: Sequence, exclude: Sequence[int]) -> int:
        excluded = set(exclude)
        candidates = [row for row in rows if row.number not in excluded]
        if candidates:
            return max(candidates, key=lambda row: row.bonus_prob).number

        unused = [n for n in ALL_NUMBERS if n not in excluded]
        return int(self.rng.choice(unused))

    def recommend(self, request: RecommendRequest, rows: Sequence) -> list[Recommendation]:
        """Build ``request.count`` recommendations from one snapshot of rows."""
        prob_maps = []
        details = {}
        for code in request.method_codes:
            prob_maps.append(get_method_probabilities(code, rows))
            details[code] = {
                "method": code,
                "type": "probability_based",
                "source_field": METHOD_FIELDS.get(code, DEFAULT_FIELD),
            }

        scores = combiner.combine(
            request.combine_code, prob_maps, request.method_codes, request.weights
        )

        recommendations = []
        for _ in range(request.count):
            numbers = self.select_top_numbers(scores)
            bonus = self.select_bonus_number(rows, numbers) if request.include_bonus else None
            recommendations.append(Recommendation(
                numbers=numbers,
                bonus=bonus,
                methods_used=list(request.method_codes),
                combine_method=request.combine_code,
                confidence=calculate_confidence(numbers, scores, len(request.method_codes)),
                details=details,
            ))
        return recommendations
