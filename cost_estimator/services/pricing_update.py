"""
Pricing Update Service
======================
Reconciles the stored catalog with a price feed and tracks update history.
"""

import json
from datetime import datetime, timedelta, timezone

import structlog
from prometheus_client import Counter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cost_estimator.config import settings
from cost_estimator.core.reconciliation import merge_pricing
from cost_estimator.models.catalog import PricingUpdateRun
from cost_estimator.schemas.catalog import PricingStatusResponse, PricingUpdateResponse
from cost_estimator.services.price_feed import PriceFeed, get_price_feed
from cost_estimator.services.store import CatalogStore

logger = structlog.get_logger()

PRICING_CHANGES = Counter(
    "estimator_pricing_changes_total",
    "Model prices changed or added by pricing updates",
)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_last_update(last_update: datetime | None, now: datetime | None = None) -> str:
    """Human readable age of the last pricing update."""
    if last_update is None:
        return "Never"

    now = now or datetime.now(timezone.utc)
    elapsed = now - _as_utc(last_update)
    hours = int(elapsed.total_seconds() // 3600)
    days = hours // 24

    if days > 0:
        return f"{days} day{'s' if days > 1 else ''} ago"
    if hours > 0:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    return "Just now"


class PricingUpdateService:
    """Service for reconciling catalog prices with a price feed."""

    def __init__(self, session: AsyncSession, feed: PriceFeed | None = None):
        self.session = session
        self.store = CatalogStore(session)
        self.feed = feed or get_price_feed()

    async def run(self) -> PricingUpdateResponse:
        """
        Fetch current prices, merge them into the catalog and save it.

        When the feed returns no updates the catalog is left untouched and
        the response reports ``success=False``.
        """
        started_at = datetime.now(timezone.utc)
        fetched = await self.feed.fetch_all()

        if not fetched.updates:
            errors = ["No pricing data available", *fetched.errors]
            logger.warning("Pricing update skipped", errors=errors)
            await self._record_run(started_at, success=False, change_count=0, total_models=0, errors=errors)
            return PricingUpdateResponse(success=False, changes=[], errors=errors, total_models=0)

        current = await self.store.load()
        merged = merge_pricing(current, fetched.updates)
        await self.store.upsert(merged.models)

        PRICING_CHANGES.inc(len(merged.changes))
        await self._record_run(
            started_at,
            success=True,
            change_count=len(merged.changes),
            total_models=len(merged.models),
            errors=fetched.errors,
        )

        logger.info(
            "Pricing update completed",
            updates=len(fetched.updates),
            changes=len(merged.changes),
            total_models=len(merged.models),
            feed_errors=len(fetched.errors),
        )

        return PricingUpdateResponse(
            success=True,
            changes=merged.changes,
            errors=fetched.errors,
            total_models=len(merged.models),
            updated_models=merged.models,
        )

    async def _record_run(
        self,
        started_at: datetime,
        success: bool,
        change_count: int,
        total_models: int,
        errors: list[str],
    ) -> None:
        self.session.add(
            PricingUpdateRun(
                started_at=started_at,
                success=success,
                change_count=change_count,
                total_models=total_models,
                errors_json=json.dumps(errors) if errors else None,
            )
        )
        await self.session.flush()

    async def last_successful_update(self) -> datetime | None:
        stmt = (
            select(PricingUpdateRun.started_at)
            .where(PricingUpdateRun.success.is_(True))
            .order_by(PricingUpdateRun.started_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        started_at = result.scalar_one_or_none()
        return _as_utc(started_at) if started_at else None

    async def should_auto_update(self, now: datetime | None = None) -> bool:
        """True when no successful update exists or the last one is stale."""
        last_update = await self.last_successful_update()
        if last_update is None:
            return True

        now = now or datetime.now(timezone.utc)
        return now - last_update >= timedelta(hours=settings.pricing_refresh_hours)

    async def status(self) -> PricingStatusResponse:
        """Summarize the stored catalog and the last update."""
        models = await self.store.load()
        providers = list(dict.fromkeys(m.provider for m in models))
        last_update = await self.last_successful_update()

        return PricingStatusResponse(
            total_models=len(models),
            providers=providers,
            custom_models=sum(1 for m in models if m.is_custom),
            last_update=last_update,
            last_update_display=format_last_update(last_update),
        )
