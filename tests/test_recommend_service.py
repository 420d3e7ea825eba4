import pytest

from lotto645.db.crud import stat_rows
from lotto645.db.models import AnalysisStat
from lotto645.errors import InvalidRequest
from lotto645.schemas.recommend import RecommendRequest
from lotto645.services import analysis_service, recommend_service

from factories import store_draws


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"method_codes": []},
            {"method_codes": ["A", "B", "C", "D"]},
            {"method_codes": ["A", "B"], "combine_code": "WEIGHTED_AVG"},
            {"method_codes": ["A", "B"], "combine_code": "WEIGHTED_AVG", "weights": {"C": 1.0}},
            {"method_codes": ["A", "B"], "combine_code": "WEIGHTED_AVG", "weights": {"A": 0.0}},
            {"method_codes": ["A", "B"], "combine_code": "WEIGHTED_AVG", "weights": {"A": -1.0}},
        ],
    )
    def test_rejected(self, kwargs):
        with pytest.raises(InvalidRequest) as exc_info:
            recommend_service.validate_request(RecommendRequest(**kwargs))
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"method_codes": ["NOT_A_METHOD"]},
            {"method_codes": ["A", "B", "C"], "combine_code": "MIN_MAX"},
            {"method_codes": ["A", "B"], "combine_code": "WEIGHTED_AVG", "weights": {"A": 2.0}},
            # Weights are ignored unless the weighted average is requested
            {"method_codes": ["A"], "weights": {"Z": -1.0}},
        ],
    )
    def test_accepted(self, kwargs):
        recommend_service.validate_request(RecommendRequest(**kwargs))


class TestRecommend:
    async def test_without_statistics(self, session):
        response = await recommend_service.recommend(
            session, RecommendRequest(method_codes=["BAYESIAN"], count=2, include_bonus=True)
        )
        assert response.latest_draw_no == 0
        assert len(response.recommendations) == 2
        for rec in response.recommendations:
            assert len(set(rec.numbers)) == 6
            assert rec.bonus not in rec.numbers

    async def test_uses_latest_unified_rows(self, session, draws):
        await store_draws(session, draws)
        await analysis_service.recalculate_all(session)

        response = await recommend_service.recommend(
            session, RecommendRequest(method_codes=["NUMBER_FREQUENCY"], count=3, include_bonus=True)
        )
        assert response.latest_draw_no == 30
        assert len(response.recommendations) == 3

        rows = await stat_rows.rows_at_draw(session, AnalysisStat, 30)
        scores = {r.number: r.total_prob for r in rows}
        for rec in response.recommendations:
            chosen = set(rec.numbers)
            lowest_chosen = min(scores[n] for n in chosen)
            highest_other = max(s for n, s in scores.items() if n not in chosen)
            assert lowest_chosen >= highest_other
            assert rec.bonus not in chosen
            assert 0.0 <= rec.confidence <= 1.0

    async def test_count_clamped(self, session):
        response = await recommend_service.recommend(
            session, RecommendRequest(method_codes=["BAYESIAN"], count=25)
        )
        assert len(response.recommendations) == 10


def test_list_methods():
    response = recommend_service.list_methods()
    assert response.total_count == len(response.methods) == 10


def test_list_combine_algorithms():
    response = recommend_service.list_combine_algorithms()
    assert response.total_count == 5
    assert sum(a.is_active for a in response.methods) == 4
