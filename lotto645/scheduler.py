"""APScheduler cron job for the weekly statistics recalculation."""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from lotto645.config import settings
from lotto645.db.engine import async_session_factory
from lotto645.errors import LottoError

RECALC_JOB_ID = "lotto645_recalculate"

_scheduler: AsyncIOScheduler | None = None


async def run_recalculation() -> None:
    """Run ``recalculate_all`` in its own session; failures are logged, not raised."""
    from lotto645.services.analysis_service import recalculate_all

    async with async_session_factory() as session:
        try:
            result = await recalculate_all(session)
            logger.info(
                "Scheduled recalculation done at draw {} (bayesian +{}, unified +{})",
                result.latest_draw_no,
                result.bayesian_draws_processed,
                result.analysis_draws_processed,
            )
        except LottoError as e:
            logger.error("Scheduled recalculation failed [{}]: {}", e.code, e.message)
            await session.rollback()


def start_scheduler():
    """Start the scheduler with the weekly recalculation job."""
    global _scheduler
    if _scheduler is not None:
        return

    _scheduler = AsyncIOScheduler()

    # Single writer: the checkpointed tables must not be advanced concurrently
    _scheduler.add_job(
        run_recalculation, "cron",
        day_of_week=settings.RECALC_CRON_DAY_OF_WEEK,
        hour=settings.RECALC_CRON_HOUR,
        minute=settings.RECALC_CRON_MINUTE,
        id=RECALC_JOB_ID,
        max_instances=1,
        coalesce=True,
    )

    _scheduler.start()
    logger.info("Scheduler started with {} jobs", len(_scheduler.get_jobs()))


def stop_scheduler():
    """Shutdown the scheduler."""
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("Scheduler stopped")


def get_scheduler_status() -> list[dict]:
    """Get status of all scheduled jobs."""
    if not _scheduler:
        return []

    return [
        {
            "id": job.id,
            "name": job.name,
            "next_run": str(job.next_run_time) if job.next_run_time else None,
            "trigger": str(job.trigger),
        }
        for job in _scheduler.get_jobs()
    ]
