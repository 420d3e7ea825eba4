from collections import Counter

import pytest

from lotto645.analysis import aggregates
from lotto645.analysis.aggregates import (
    calculate_color_stats,
    calculate_consecutive_stats,
    calculate_first_last_stats,
    calculate_grid_stats,
    calculate_number_stats,
    calculate_pair_stats,
    calculate_ratio_stats,
    calculate_reappear_stats,
    color_for_number,
    count_consecutive,
    count_pairs,
    grid_position,
)

from factories import make_draw


@pytest.fixture
def small_history():
    return [
        make_draw(1, [1, 2, 3, 10, 20, 30], 45),
        make_draw(2, [1, 5, 9, 23, 34, 45], 2),
        make_draw(3, [2, 3, 11, 12, 13, 14], 1),
    ]


@pytest.mark.parametrize(
    "calculator",
    [
        calculate_number_stats,
        calculate_reappear_stats,
        calculate_first_last_stats,
        calculate_pair_stats,
        calculate_consecutive_stats,
        calculate_ratio_stats,
        calculate_color_stats,
        calculate_grid_stats,
    ],
)
def test_empty_history_yields_none(calculator):
    assert calculator([]) is None


class TestNumberStats:
    def test_counts_match_history(self, draws):
        result = calculate_number_stats(draws)
        observed = Counter(n for d in draws for n in d.numbers)
        for stat in result.number_stats:
            assert stat.total_count == observed.get(stat.number, 0)
        assert sum(s.total_count for s in result.number_stats) == len(draws) * 6

    def test_bonus_and_last_draw(self, small_history):
        stats = {s.number: s for s in calculate_number_stats(small_history).number_stats}
        assert stats[1].total_count == 2
        assert stats[1].bonus_count == 1
        assert stats[1].last_draw_no == 3
        assert stats[45].total_count == 1
        assert stats[45].last_draw_no == 2
        assert stats[44].last_draw_no == 0
        assert stats[1].probability == pytest.approx(2 / 3)

    def test_uniformity_p_value(self, draws):
        result = calculate_number_stats(draws)
        assert 0.0 <= result.uniformity_p_value <= 1.0
        assert result.total_draws == 30
        assert result.latest_draw_no == 30


class TestReappear:
    def test_needs_two_draws(self, small_history):
        assert calculate_reappear_stats(small_history[:1]) is None

    def test_counts_consecutive_pairs(self, small_history):
        stats = {s.number: s for s in calculate_reappear_stats(small_history)}
        assert stats[1].total_appear == 2
        assert stats[1].reappear_count == 1
        assert stats[1].probability == pytest.approx(0.5)
        assert stats[2].total_appear == 1
        assert stats[2].reappear_count == 0
        # Numbers only in the newest draw have no following draw yet
        assert stats[14].total_appear == 0
        assert stats[14].probability == 0.0


class TestFirstLast:
    def test_ranges_and_counts(self, small_history):
        result = calculate_first_last_stats(small_history)
        assert [s.number for s in result.first_stats] == list(range(1, 41))
        assert [s.number for s in result.last_stats] == list(range(6, 46))

        first = {s.number: s for s in result.first_stats}
        last = {s.number: s for s in result.last_stats}
        assert first[1].count == 2
        assert first[1].probability == pytest.approx(2 / 3)
        assert first[2].count == 1
        assert last[45].count == 1
        assert last[14].count == 1


class TestPairs:
    def test_total_observations(self, draws):
        assert sum(count_pairs(draws).values()) == 15 * len(draws)

    def test_keys_are_ordered(self, draws):
        assert all(a < b for a, b in count_pairs(draws))

    def test_top_and_bottom(self, small_history):
        result = calculate_pair_stats(small_history, top_n=5)
        top = result.top_pairs[0]
        assert (top.number1, top.number2, top.count) == (2, 3, 2)
        assert top.probability == pytest.approx(2 / 3)
        assert len(result.bottom_pairs) == 5
        counts = [p.count for p in result.bottom_pairs]
        assert counts == sorted(counts)


class TestConsecutive:
    @pytest.mark.parametrize(
        "numbers, expected",
        [
            ([1, 5, 9, 23, 34, 45], 0),
            ([1, 2, 9, 23, 34, 45], 2),
            ([1, 2, 3, 10, 20, 30], 3),
            ([2, 3, 11, 12, 13, 14], 4),
            ([1, 2, 3, 4, 5, 6], 6),
        ],
    )
    def test_longest_run(self, numbers, expected):
        assert count_consecutive(numbers) == expected

    def test_buckets_and_examples(self, small_history):
        result = calculate_consecutive_stats(small_history)
        buckets = {s.consecutive_count: s.draw_count for s in result.count_stats}
        assert list(buckets) == [0, 2, 3, 4, 5, 6]
        assert buckets == {0: 1, 2: 0, 3: 1, 4: 1, 5: 0, 6: 0}
        assert [e.draw_no for e in result.recent_examples] == [3, 1]

    def test_examples_capped_at_ten(self):
        history = [make_draw(i, [1, 2, 10, 20, 30, 40], 45) for i in range(1, 15)]
        result = calculate_consecutive_stats(history)
        # First ten encountered, newest first
        assert [e.draw_no for e in result.recent_examples] == list(range(10, 0, -1))


class TestRatio:
    def test_buckets(self, small_history):
        result = calculate_ratio_stats(small_history)
        odd_even = {s.ratio: s.count for s in result.odd_even_stats}
        high_low = {s.ratio: s.count for s in result.high_low_stats}
        assert list(odd_even) == ["6:0", "5:1", "4:2", "3:3", "2:4", "1:5", "0:6"]
        assert odd_even["2:4"] == 1
        assert odd_even["5:1"] == 1
        assert odd_even["3:3"] == 1
        assert high_low["1:5"] == 1
        assert high_low["3:3"] == 1
        assert high_low["0:6"] == 1

    def test_boundary_22_is_low_23_is_high(self):
        result = calculate_ratio_stats([make_draw(1, [22, 23, 1, 2, 3, 4], 45)])
        high_low = {s.ratio: s.count for s in result.high_low_stats}
        assert high_low["1:5"] == 1


class TestColor:
    @pytest.mark.parametrize(
        "num, letter", [(1, "Y"), (10, "Y"), (11, "B"), (21, "R"), (40, "G"), (41, "E"), (45, "E")]
    )
    def test_bands(self, num, letter):
        assert color_for_number(num) == letter

    def test_patterns_and_totals(self, small_history):
        result = calculate_color_stats(small_history)
        patterns = {p.pattern: p.count for p in result.top_patterns}
        assert patterns["YYYYBR"] == 1
        assert sum(result.color_counts.values()) == 18
        assert result.color_counts["Y"] == 9
        assert result.color_counts["E"] == 1

    def test_top_n_limits_patterns(self, draws):
        assert len(calculate_color_stats(draws, top_n=3).top_patterns) <= 3


class TestGrid:
    @pytest.mark.parametrize("num, pos", [(1, (1, 1)), (7, (1, 7)), (8, (2, 1)), (45, (7, 3))])
    def test_grid_position(self, num, pos):
        assert grid_position(num) == pos

    def test_line_totals(self, draws):
        result = calculate_grid_stats(draws)
        assert len(result.row_stats) == aggregates.GRID_SIZE
        assert sum(s.count for s in result.row_stats) == len(draws) * 6
        assert sum(s.count for s in result.col_stats) == len(draws) * 6
        assert sum(s.probability for s in result.row_stats) == pytest.approx(1.0)

    def test_distribution_patterns(self):
        result = calculate_grid_stats([make_draw(1, [1, 2, 8, 9, 15, 45], 44)])
        assert result.top_row_patterns[0].distribution == "2:2:1:0:0:0:1"
        assert result.top_col_patterns[0].distribution == "3:2:1:0:0:0:0"
