"""Combination algorithms for per-number probability maps.

Each input map is ``{number: probability}``; missing numbers count as 0.
Every algorithm returns a map over all 45 numbers, or an empty map when
no input maps are given.
"""

from collections.abc import Sequence

import numpy as np

from lotto645.constants import ALL_NUMBERS

SIMPLE_AVG = "SIMPLE_AVG"
WEIGHTED_AVG = "WEIGHTED_AVG"
BAYESIAN_COMBINE = "BAYESIAN_COMBINE"
GEOMETRIC_MEAN = "GEOMETRIC_MEAN"
MIN_MAX = "MIN_MAX"

# Keeps products away from exact 0 and 1
EPSILON = 1e-10

ProbMap = dict[int, float]


def _stack(prob_maps: Sequence[ProbMap]) -> np.ndarray:
    """(n_methods, 45) matrix, column i holding number i + 1."""
    return np.array(
        [[pm.get(num, 0.0) for num in ALL_NUMBERS] for pm in prob_maps],
        dtype=np.float64,
    )


def _to_map(values: np.ndarray) -> ProbMap:
    return {num: float(v) for num, v in zip(ALL_NUMBERS, values)}


def _clamp(matrix: np.ndarray) -> np.ndarray:
    return np.clip(matrix, EPSILON, 1.0 - EPSILON)


def combine_simple_average(prob_maps: Sequence[ProbMap]) -> ProbMap:
    if not prob_maps:
        return {}
    return _to_map(_stack(prob_maps).mean(axis=0))


def combine_weighted_average(
    prob_maps: Sequence[ProbMap],
    method_codes: Sequence[str],
    weights: dict[str, float] | None,
) -> ProbMap:
    """Weighted mean; a method without a weight contributes nothing.

    Weights need not sum to 1. A zero weight sum degrades to the simple
    average.
    """
    if not prob_maps:
        return {}

    weights = weights or {}
    w = np.array([weights.get(code, 0.0) for code in method_codes], dtype=np.float64)
    total = w.sum()
    if total == 0:
        return combine_simple_average(prob_maps)

    matrix = _stack(prob_maps)
    return _to_map((w[:, np.newaxis] * matrix).sum(axis=0) / total)


def combine_bayesian(prob_maps: Sequence[ProbMap]) -> ProbMap:
    """Naive-Bayes fusion: prod(p) / (prod(p) + prod(1 - p)).

    Agreement on high probabilities is amplified above the mean and a
    single low probability pulls the result below it.
    """
    if not prob_maps:
        return {}

    p = _clamp(_stack(prob_maps))
    prod_p = p.prod(axis=0)
    prod_not_p = (1.0 - p).prod(axis=0)
    return _to_map(prod_p / (prod_p + prod_not_p))


def combine_geometric_mean(prob_maps: Sequence[ProbMap]) -> ProbMap:
    """n-th root of the product; never above the arithmetic mean (AM-GM)."""
    if not prob_maps:
        return {}

    p = _clamp(_stack(prob_maps))
    return _to_map(p.prod(axis=0) ** (1.0 / len(prob_maps)))


def combine(
    combine_code: str,
    prob_maps: Sequence[ProbMap],
    method_codes: Sequence[str] = (),
    weights: dict[str, float] | None = None,
) -> ProbMap:
    """Dispatch by algorithm code; unimplemented codes use the simple average."""
    if combine_code == WEIGHTED_AVG:
        return combine_weighted_average(prob_maps, method_codes, weights)
    if combine_code == BAYESIAN_COMBINE:
        return combine_bayesian(prob_maps)
    if combine_code == GEOMETRIC_MEAN:
        return combine_geometric_mean(prob_maps)
    return combine_simple_average(prob_maps)
