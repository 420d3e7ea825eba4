import pytest
from sqlalchemy import delete, select, update

from lotto645.analysis.posterior import PosteriorTracker
from lotto645.analysis.unified import UnifiedTracker
from lotto645.db.crud import stat_rows
from lotto645.db.models import (
    AnalysisStat,
    BayesianStat,
    LottoDraw,
    NumberStatRecord,
    ReappearStatRecord,
)
from lotto645.errors import DataUnavailable, DrawNotFound, InvalidRequest, PersistenceFailure
from lotto645.schemas.draw import DrawCreate
from lotto645.services import analysis_service, draw_service

from factories import generate_draws, make_draw, store_draws


class TestRecalculateAll:
    async def test_empty_store(self, session):
        with pytest.raises(DataUnavailable):
            await analysis_service.recalculate_all(session)

    async def test_full_rebuild_then_no_op(self, session, draws):
        await store_draws(session, draws)

        result = await analysis_service.recalculate_all(session)
        assert result.latest_draw_no == 30
        assert result.number_stats_written == 45
        assert result.reappear_stats_written == 45
        assert result.bayesian_draws_processed == 30
        assert result.analysis_draws_processed == 30

        again = await analysis_service.recalculate_all(session)
        assert again.bayesian_draws_processed == 0
        assert again.analysis_draws_processed == 0

        snapshots = (await session.execute(select(NumberStatRecord))).scalars().all()
        assert sum(s.total_count for s in snapshots) == 30 * 6
        reappear = (await session.execute(select(ReappearStatRecord))).scalars().all()
        assert len(reappear) == 45

    async def test_catch_up_matches_full_rebuild(self, session):
        history = generate_draws(35)
        await store_draws(session, history[:25])
        await analysis_service.recalculate_all(session)

        await store_draws(session, history[25:])
        assert await analysis_service.update_bayesian_stats(session) == 10
        assert await analysis_service.update_unified_stats(session) == 10

        expected_posterior = list(PosteriorTracker.rebuild(history))[-1]
        stored = await stat_rows.rows_at_draw(session, BayesianStat, 35)
        assert [r.posterior for r in stored] == [r["posterior"] for r in expected_posterior]
        assert [r.prior for r in stored] == [r["prior"] for r in expected_posterior]

        expected_unified = list(UnifiedTracker.rebuild(history))[-1]
        stored = await stat_rows.rows_at_draw(session, AnalysisStat, 35)
        assert [r.reappear_count for r in stored] == [r["reappear_count"] for r in expected_unified]
        assert [r.total_prob for r in stored] == [r["total_prob"] for r in expected_unified]

    async def test_missing_draw_stops_at_last_good_checkpoint(self, session):
        history = generate_draws(12)
        await store_draws(session, history[:10] + history[11:])

        with pytest.raises(DrawNotFound):
            await analysis_service.update_bayesian_stats(session)
        assert await stat_rows.latest_checkpoint_draw_no(session, BayesianStat) == 10
        assert len(await stat_rows.rows_at_draw(session, BayesianStat, 10)) == 45

    async def test_store_starting_after_draw_one(self, session):
        history = generate_draws(30)[4:]
        await store_draws(session, history)

        result = await analysis_service.recalculate_all(session)
        assert result.bayesian_draws_processed == 26
        assert result.analysis_draws_processed == 26
        assert await stat_rows.rows_at_draw(session, BayesianStat, 4) == []
        assert len(await stat_rows.rows_at_draw(session, AnalysisStat, 5)) == 45

        expected = list(PosteriorTracker.rebuild(history))[-1]
        stored = await stat_rows.rows_at_draw(session, BayesianStat, 30)
        assert [r.posterior for r in stored] == [r["posterior"] for r in expected]

        again = await analysis_service.recalculate_all(session)
        assert again.bayesian_draws_processed == 0


class TestUpsertRows:
    async def test_failed_batch_writes_nothing(self, session):
        rows = [
            {"draw_no": 1, "number": n, "total_count": 0, "total_draws": 1,
             "prior": 0.1, "posterior": 0.1, "appeared": False}
            for n in range(1, 46)
        ]
        rows[-1]["total_count"] = None  # violates NOT NULL

        with pytest.raises(PersistenceFailure) as exc_info:
            await stat_rows.upsert_rows(session, BayesianStat, rows)
        assert exc_info.value.status_code == 500
        assert await stat_rows.latest_checkpoint_draw_no(session, BayesianStat) == 0

    async def test_upsert_overwrites(self, session):
        row = {"draw_no": 1, "number": 1, "total_count": 0, "total_draws": 1,
               "prior": 0.1, "posterior": 0.1, "appeared": False}
        await stat_rows.upsert_rows(session, BayesianStat, [row])
        await stat_rows.upsert_rows(session, BayesianStat, [{**row, "posterior": 0.3}])

        session.expunge_all()
        [stored] = await stat_rows.rows_at_draw(session, BayesianStat, 1)
        assert stored.posterior == pytest.approx(0.3)


class TestGetStatistic:
    async def test_unknown_kind(self, session):
        with pytest.raises(InvalidRequest):
            await analysis_service.get_statistic(session, "lucky_numbers")

    async def test_no_draws(self, session):
        with pytest.raises(DataUnavailable):
            await analysis_service.get_statistic(session, "numbers")

    async def test_kinds(self, session, draws):
        await store_draws(session, draws)
        for kind in analysis_service.STATISTICS:
            assert await analysis_service.get_statistic(session, kind) is not None

    async def test_params(self, session, draws):
        await store_draws(session, draws)
        pairs = await analysis_service.get_statistic(session, "pairs", {"top_n": 3})
        assert len(pairs.top_pairs) == 3
        window = await analysis_service.get_statistic(session, "bayesian", {"window": 10})
        assert window.window_size == 10


class TestHistory:
    async def test_reads(self, session, draws):
        await store_draws(session, draws)
        await analysis_service.recalculate_all(session)

        history = await analysis_service.posterior_history(session, 5, limit=10)
        assert [r.draw_no for r in history] == list(range(30, 20, -1))
        assert all(r.number == 5 for r in history)

        rows = await analysis_service.analysis_rows_at_draw(session, 7)
        assert [r.number for r in rows] == list(range(1, 46))
        assert len(await analysis_service.posterior_rows_at_draw(session, 7)) == 45
        assert len(await analysis_service.analysis_history(session, 45, limit=5000)) == 30

    @pytest.mark.parametrize("number", [0, 46])
    async def test_number_out_of_range(self, session, number):
        with pytest.raises(InvalidRequest):
            await analysis_service.analysis_history(session, number)


class TestRepair:
    async def test_repair_zero_total_prob(self, session, draws):
        await store_draws(session, draws)
        await analysis_service.recalculate_all(session)
        await session.execute(
            update(AnalysisStat).where(AnalysisStat.draw_no <= 3).values(total_prob=0.0)
        )
        await session.commit()

        result = await analysis_service.repair_zero_total_prob(session)
        # Draws 1-3 cover 18 primary numbers at most, all with total_count > 0
        assert 0 < result.rows_fixed <= 3 * 45
        assert result.field == "total_prob"

        session.expunge_all()
        for row in await stat_rows.rows_at_draw(session, AnalysisStat, 3):
            assert row.total_prob == pytest.approx(row.total_count / 18)

        assert (await analysis_service.repair_zero_total_prob(session)).rows_fixed == 0

    async def test_repair_zero_bonus_prob(self, session, draws):
        await store_draws(session, draws)
        await analysis_service.recalculate_all(session)
        await session.execute(update(AnalysisStat).values(bonus_prob=0.0))
        await session.commit()

        result = await analysis_service.repair_zero_bonus_prob(session)
        expected = (await session.execute(
            select(AnalysisStat).where(AnalysisStat.bonus_count > 0)
        )).scalars().all()
        assert result.rows_fixed == len(expected)

    async def test_unknown_field(self, session):
        with pytest.raises(InvalidRequest):
            await analysis_service.repair_zero_prob(session, "posterior")


class TestFullRebuild:
    async def test_empty_store(self, session):
        with pytest.raises(DataUnavailable):
            await analysis_service.rebuild_bayesian_stats(session)

    async def test_corrected_draw_is_picked_up(self, session):
        history = generate_draws(10)
        await store_draws(session, history)
        await analysis_service.recalculate_all(session)

        await draw_service.upsert_draw(session, DrawCreate(
            draw_no=10, draw_date=history[-1].draw_date, numbers=[1, 2, 3, 4, 5, 6], bonus_num=7,
        ))
        # The checkpoint already covers draw 10, so a catch-up changes nothing
        stale = await analysis_service.recalculate_all(session)
        assert stale.analysis_draws_processed == 0

        result = await analysis_service.recalculate_all(session, full_rebuild=True)
        assert result.bayesian_draws_processed == 10
        assert result.analysis_draws_processed == 10

        session.expunge_all()
        for model in (AnalysisStat, BayesianStat):
            rows = await stat_rows.rows_at_draw(session, model, 10)
            assert [r.number for r in rows if r.appeared] == [1, 2, 3, 4, 5, 6]
            assert await stat_rows.latest_checkpoint_draw_no(session, model) == 10

        corrected = history[:-1] + [make_draw(10, [1, 2, 3, 4, 5, 6], 7)]
        expected = list(UnifiedTracker.rebuild(corrected))[-1]
        stored = await stat_rows.rows_at_draw(session, AnalysisStat, 10)
        assert [r.total_count for r in stored] == [r["total_count"] for r in expected]
        assert [r.bayesian_post for r in stored] == [r["bayesian_post"] for r in expected]

    async def test_rebuild_drops_rows_of_removed_draws(self, session):
        await store_draws(session, generate_draws(8))
        await analysis_service.recalculate_all(session)
        assert await stat_rows.latest_checkpoint_draw_no(session, BayesianStat) == 8

        await session.execute(delete(LottoDraw).where(LottoDraw.draw_no > 5))
        await session.commit()

        assert await analysis_service.rebuild_bayesian_stats(session) == 5
        assert await stat_rows.latest_checkpoint_draw_no(session, BayesianStat) == 5
        assert await stat_rows.rows_at_draw(session, BayesianStat, 8) == []
