"""
Job Scheduler
=============
APScheduler-based scheduler for periodic pricing updates.
"""

import asyncio

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
import structlog

from cost_estimator.config import settings
from cost_estimator.database import get_session_context, init_db
from cost_estimator.services.price_feed import PriceFeed
from cost_estimator.services.pricing_update import PricingUpdateService

logger = structlog.get_logger()


class JobScheduler:
    """
    Manages scheduled background jobs.
    """

    def __init__(self, feed: PriceFeed | None = None):
        self.scheduler = AsyncIOScheduler()
        self.feed = feed

    async def run_pricing_update(self) -> bool:
        """Execute a pricing update; returns whether it succeeded."""
        try:
            logger.info("Running scheduled pricing update")
            async with get_session_context() as session:
                result = await PricingUpdateService(session, feed=self.feed).run()
            logger.info(
                "Scheduled pricing update completed",
                success=result.success,
                changes=len(result.changes),
                errors=len(result.errors),
            )
            return result.success
        except Exception as e:
            logger.error("Scheduled pricing update failed", error=str(e))
            return False

    async def run_if_stale(self) -> bool:
        """Run a pricing update only when the last successful one is too old."""
        async with get_session_context() as session:
            stale = await PricingUpdateService(session, feed=self.feed).should_auto_update()

        if not stale:
            logger.info("Pricing is current, skipping update")
            return False
        return await self.run_pricing_update()

    def setup(self) -> None:
        """Configure scheduled jobs."""
        self.scheduler.add_job(
            self.run_pricing_update,
            IntervalTrigger(hours=settings.pricing_refresh_hours),
            id="pricing_update",
            name="Pricing Update",
            replace_existing=True,
        )

        logger.info("Scheduler configured", refresh_hours=settings.pricing_refresh_hours)

    def start(self) -> None:
        """Start the scheduler."""
        self.scheduler.start()
        logger.info("Scheduler started")

    def stop(self) -> None:
        """Stop the scheduler."""
        self.scheduler.shutdown()
        logger.info("Scheduler stopped")


async def run_scheduler() -> None:
    """Run the job scheduler."""
    await init_db()
    scheduler = JobScheduler()
    await scheduler.run_if_stale()
    scheduler.setup()
    scheduler.start()

    try:
        # Keep the scheduler running
        while True:
            await asyncio.sleep(60)
    except (KeyboardInterrupt, SystemExit):
        scheduler.stop()


def run() -> None:
    """Entry point for the scheduler worker."""
    if not settings.scheduler_enabled:
        logger.warning("Scheduler is disabled")
        return

    logger.info("Starting AI Cost Estimator Scheduler")
    asyncio.run(run_scheduler())


if __name__ == "__main__":
    run()
