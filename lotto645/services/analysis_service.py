"""Analysis service: statistic snapshots, checkpointed trackers, repairs."""

from collections.abc import Callable
from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from lotto645.analysis import aggregates
from lotto645.analysis.posterior import (
    CheckpointState,
    PosteriorTracker,
    calculate_bayesian_window,
    resolve_checkpoint_state,
)
from lotto645.analysis.unified import PROBABILITY_FIELDS, UnifiedTracker, rederive_probability
from lotto645.config import settings
from lotto645.constants import MAX_NUMBER, MIN_NUMBER
from lotto645.db.crud import analysis_stat as analysis_crud
from lotto645.db.crud import stat_rows
from lotto645.db.models import AnalysisStat, BayesianStat, NumberStatRecord, ReappearStatRecord
from lotto645.errors import DataUnavailable, InvalidRequest
from lotto645.schemas.statistics import (
    AnalysisRowSchema,
    PosteriorRowSchema,
    RecalculateResult,
    RepairResult,
)
from lotto645.services import draw_service

MAX_HISTORY_LIMIT = 1000


# --- Full snapshot statistics ---

def _top_n(params: dict) -> int:
    return int(params.get("top_n") or settings.DEFAULT_TOP_N)


# kind -> calculator(draws, params)
STATISTICS: dict[str, Callable] = {
    "numbers": lambda draws, params: aggregates.calculate_number_stats(draws),
    "reappear": lambda draws, params: aggregates.calculate_reappear_stats(draws),
    "first_last": lambda draws, params: aggregates.calculate_first_last_stats(draws),
    "pairs": lambda draws, params: aggregates.calculate_pair_stats(draws, top_n=_top_n(params)),
    "consecutive": lambda draws, params: aggregates.calculate_consecutive_stats(draws),
    "ratio": lambda draws, params: aggregates.calculate_ratio_stats(draws),
    "color": lambda draws, params: aggregates.calculate_color_stats(draws, top_n=_top_n(params)),
    "grid": lambda draws, params: aggregates.calculate_grid_stats(draws, top_n=_top_n(params)),
    "bayesian": lambda draws, params: calculate_bayesian_window(
        draws,
        window=int(params.get("window") or settings.HOT_COLD_WINDOW),
        threshold=settings.HOT_COLD_THRESHOLD,
    ),
}


async def get_statistic(session: AsyncSession, kind: str, params: dict | None = None):
    """Compute one statistic over the full draw history."""
    calculator = STATISTICS.get(kind)
    if calculator is None:
        raise InvalidRequest(f"Unknown statistic '{kind}'", details={"valid": sorted(STATISTICS)})

    draws = await draw_service.all_draws(session)
    result = calculator(draws, params or {})
    if result is None:
        raise DataUnavailable(f"No draws available for '{kind}' statistic")
    return result


async def _save_snapshots(session: AsyncSession, draws: list) -> tuple[int, int]:
    now = datetime.now()
    written_numbers = written_reappear = 0

    number_stats = aggregates.calculate_number_stats(draws)
    if number_stats is not None:
        rows = [
            {
                "number": s.number,
                "total_count": s.total_count,
                "bonus_count": s.bonus_count,
                "last_draw_no": s.last_draw_no,
                "calculated_at": now,
            }
            for s in number_stats.number_stats
        ]
        written_numbers = await stat_rows.upsert_rows(
            session, NumberStatRecord, rows, conflict_keys=("number",)
        )

    reappear_stats = aggregates.calculate_reappear_stats(draws)
    if reappear_stats is not None:
        rows = [{**s.model_dump(), "calculated_at": now} for s in reappear_stats]
        written_reappear = await stat_rows.upsert_rows(
            session, ReappearStatRecord, rows, conflict_keys=("number",)
        )

    return written_numbers, written_reappear


# --- Checkpointed trackers ---

async def _replay(session: AsyncSession, model, tracker_cls, label: str) -> int:
    """Fold every stored draw from a clean state, one committed batch per draw."""
    draws = await draw_service.all_draws(session)
    processed = 0
    for rows in tracker_cls.rebuild(draws):
        try:
            await stat_rows.upsert_rows(session, model, rows)
        except Exception:
            logger.error("{}: failed at draw {}", label, rows[0]["draw_no"])
            raise
        processed += 1

    if draws:
        logger.info(
            "{}: replayed {} draws ({} -> {})",
            label, processed, draws[0].draw_no, draws[-1].draw_no,
        )
    return processed


async def _catch_up(session: AsyncSession, model, tracker_cls, label: str) -> int:
    """Advance one per-draw table to the latest draw. Returns draws processed."""
    latest = await draw_service.latest_draw_no(session)
    checkpoint = await stat_rows.latest_checkpoint_draw_no(session, model)
    state = resolve_checkpoint_state(checkpoint, latest)
    logger.info("{}: checkpoint={} latest={} -> {}", label, checkpoint, latest, state.value)

    if state is CheckpointState.UP_TO_DATE:
        return 0

    if state is CheckpointState.UNINITIALIZED:
        # The store may start after draw 1, so replay only the draws it holds
        return await _replay(session, model, tracker_cls, label)

    tracker = tracker_cls.from_rows(await stat_rows.rows_at_draw(session, model, checkpoint))
    processed = 0
    for draw_no in range(checkpoint + 1, latest + 1):
        try:
            draw = await draw_service.draw_by_no(session, draw_no)
            # One committed batch per draw; a failure leaves the checkpoint at draw_no - 1
            await stat_rows.upsert_rows(session, model, tracker.advance(draw))
        except Exception:
            logger.error("{}: failed at draw {}", label, draw_no)
            raise
        processed += 1

    logger.info("{}: processed {} draws ({} -> {})", label, processed, checkpoint + 1, latest)
    return processed


async def _rebuild(session: AsyncSession, model, tracker_cls, label: str) -> int:
    """Drop every row of one per-draw table and replay the draw store.

    The deletion commits together with the first replayed draw. If the
    replay fails later, the table holds the rebuilt rows up to the failing
    draw and the next catch-up resumes from there.
    """
    if await draw_service.latest_draw_no(session) == 0:
        raise DataUnavailable(f"Cannot rebuild {label} statistics without draws")

    removed = await stat_rows.delete_all(session, model)
    logger.info("{}: full rebuild, cleared {} rows", label, removed)
    return await _replay(session, model, tracker_cls, label)


async def update_bayesian_stats(session: AsyncSession) -> int:
    return await _catch_up(session, BayesianStat, PosteriorTracker, "bayesian")


async def update_unified_stats(session: AsyncSession) -> int:
    return await _catch_up(session, AnalysisStat, UnifiedTracker, "unified")


async def rebuild_bayesian_stats(session: AsyncSession) -> int:
    return await _rebuild(session, BayesianStat, PosteriorTracker, "bayesian")


async def rebuild_unified_stats(session: AsyncSession) -> int:
    return await _rebuild(session, AnalysisStat, UnifiedTracker, "unified")


async def recalculate_all(session: AsyncSession, full_rebuild: bool = False) -> RecalculateResult:
    """Recompute snapshot statistics and bring both per-draw tables up to date.

    By default the per-draw tables are caught up from their checkpoints.
    ``full_rebuild`` recomputes them from scratch instead, which is needed
    after a stored draw has been corrected.
    """
    draws = await draw_service.all_draws(session)
    if not draws:
        raise DataUnavailable("Cannot recalculate statistics without draws")

    logger.info("Recalculating statistics over {} draws (full_rebuild={})", len(draws), full_rebuild)
    number_written, reappear_written = await _save_snapshots(session, draws)
    if full_rebuild:
        bayesian_processed = await rebuild_bayesian_stats(session)
        unified_processed = await rebuild_unified_stats(session)
    else:
        bayesian_processed = await update_bayesian_stats(session)
        unified_processed = await update_unified_stats(session)

    result = RecalculateResult(
        latest_draw_no=draws[-1].draw_no,
        number_stats_written=number_written,
        reappear_stats_written=reappear_written,
        bayesian_draws_processed=bayesian_processed,
        analysis_draws_processed=unified_processed,
        calculated_at=datetime.now(),
    )
    logger.info("Recalculation complete: {}", result.model_dump())
    return result


# --- History reads ---

def _check_number(number: int) -> None:
    if not MIN_NUMBER <= number <= MAX_NUMBER:
        raise InvalidRequest(f"Number must be between {MIN_NUMBER} and {MAX_NUMBER}")


def _clamp_limit(limit: int) -> int:
    return max(1, min(limit, MAX_HISTORY_LIMIT))


async def posterior_rows_at_draw(session: AsyncSession, draw_no: int) -> list[PosteriorRowSchema]:
    rows = await stat_rows.rows_at_draw(session, BayesianStat, draw_no)
    return [PosteriorRowSchema.model_validate(r) for r in rows]


async def posterior_history(session: AsyncSession, number: int, limit: int = 100) -> list[PosteriorRowSchema]:
    _check_number(number)
    rows = await stat_rows.history_for_number(session, BayesianStat, number, _clamp_limit(limit))
    return [PosteriorRowSchema.model_validate(r) for r in rows]


async def analysis_rows_at_draw(session: AsyncSession, draw_no: int) -> list[AnalysisRowSchema]:
    rows = await stat_rows.rows_at_draw(session, AnalysisStat, draw_no)
    return [AnalysisRowSchema.model_validate(r) for r in rows]


async def analysis_history(session: AsyncSession, number: int, limit: int = 100) -> list[AnalysisRowSchema]:
    _check_number(number)
    rows = await stat_rows.history_for_number(session, AnalysisStat, number, _clamp_limit(limit))
    return [AnalysisRowSchema.model_validate(r) for r in rows]


# --- Repairs ---

async def repair_zero_prob(session: AsyncSession, field: str) -> RepairResult:
    """Re-derive ``field`` on rows where it is 0 but its count is not."""
    if field not in PROBABILITY_FIELDS:
        raise InvalidRequest(f"Cannot repair '{field}'", details={"valid": sorted(PROBABILITY_FIELDS)})

    count_field, _ = PROBABILITY_FIELDS[field]
    rows = await analysis_crud.rows_with_zero_prob(session, field, count_field)
    if not rows:
        logger.info("Repair {}: nothing to fix", field)
        return RepairResult(field=field, rows_fixed=0)

    values = {row.id: rederive_probability(row, field) for row in rows}
    fixed = await analysis_crud.update_prob(session, field, values)
    await session.commit()
    logger.info("Repair {}: fixed {} rows", field, fixed)
    return RepairResult(field=field, rows_fixed=fixed)


async def repair_zero_total_prob(session: AsyncSession) -> RepairResult:
    return await repair_zero_prob(session, "total_prob")


async def repair_zero_bonus_prob(session: AsyncSession) -> RepairResult:
    return await repair_zero_prob(session, "bonus_prob")
