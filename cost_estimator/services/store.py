"""
Catalog Store
=============
Persistence for catalog models and price overrides.
"""

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cost_estimator.models.catalog import AIModelRecord, PriceOverrideRecord
from cost_estimator.schemas.catalog import AIModel, PriceOverride

logger = structlog.get_logger()


class CatalogStore:
    """
    Loads and saves the model catalog.

    ``load``/``save``/``upsert`` operate on the whole catalog in catalog
    order; the remaining methods serve single-model edits.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def load(self) -> list[AIModel]:
        """Return every stored model in catalog order."""
        stmt = select(AIModelRecord).order_by(AIModelRecord.position, AIModelRecord.id)
        result = await self.session.execute(stmt)
        return [AIModel.model_validate(record) for record in result.scalars().all()]

    async def save(self, models: list[AIModel]) -> None:
        """
        Replace the stored catalog with ``models``.

        Records are updated in place, new ids inserted and ids missing from
        ``models`` removed.
        """
        result = await self.session.execute(select(AIModelRecord))
        records = {record.id: record for record in result.scalars().all()}

        for position, model in enumerate(models):
            record = records.pop(model.id, None)
            if record is None:
                record = AIModelRecord(id=model.id)
                self.session.add(record)
            self._apply(record, model, position)

        if records:
            removed_ids = list(records)
            await self.session.execute(
                delete(PriceOverrideRecord).where(PriceOverrideRecord.model_id.in_(removed_ids))
            )
            await self.session.execute(
                delete(AIModelRecord).where(AIModelRecord.id.in_(removed_ids))
            )

        await self.session.flush()
        logger.info("Saved catalog", models=len(models), removed=len(records))

    async def upsert(self, models: list[AIModel]) -> None:
        """
        Write ``models`` in catalog order without removing anything.

        Stored models missing from ``models`` (such as a custom model created
        after the list was loaded) are kept and moved behind them in their
        existing order.
        """
        stmt = select(AIModelRecord).order_by(AIModelRecord.position, AIModelRecord.id)
        result = await self.session.execute(stmt)
        records = {record.id: record for record in result.scalars().all()}

        for position, model in enumerate(models):
            record = records.pop(model.id, None)
            if record is None:
                record = AIModelRecord(id=model.id)
                self.session.add(record)
            self._apply(record, model, position)

        for position, record in enumerate(records.values(), start=len(models)):
            record.position = position

        await self.session.flush()
        logger.info("Upserted catalog", models=len(models), kept=len(records))

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(AIModelRecord.id)))
        return result.scalar_one()

    async def get(self, model_id: str) -> AIModel | None:
        record = await self.session.get(AIModelRecord, model_id)
        return AIModel.model_validate(record) if record else None

    async def add(self, model: AIModel) -> AIModel:
        """Append a model at the end of the catalog."""
        result = await self.session.execute(select(func.max(AIModelRecord.position)))
        last = result.scalar_one_or_none()
        record = AIModelRecord(id=model.id)
        self._apply(record, model, 0 if last is None else last + 1)
        self.session.add(record)
        await self.session.flush()
        return model

    async def update(self, model: AIModel) -> AIModel:
        record = await self.session.get(AIModelRecord, model.id)
        if record is None:
            raise KeyError(model.id)
        self._apply(record, model, record.position)
        await self.session.flush()
        return model

    async def delete(self, model_id: str) -> None:
        await self.delete_override(model_id)
        await self.session.execute(delete(AIModelRecord).where(AIModelRecord.id == model_id))
        await self.session.flush()

    async def load_overrides(self) -> dict[str, PriceOverride]:
        result = await self.session.execute(select(PriceOverrideRecord))
        return {
            record.model_id: PriceOverride.model_validate(record)
            for record in result.scalars().all()
        }

    async def set_override(self, override: PriceOverride) -> None:
        record = await self.session.get(PriceOverrideRecord, override.model_id)
        if record is None:
            record = PriceOverrideRecord(model_id=override.model_id)
            self.session.add(record)
        record.input_cost_per_million = override.input_cost_per_million
        record.output_cost_per_million = override.output_cost_per_million
        await self.session.flush()

    async def delete_override(self, model_id: str) -> bool:
        result = await self.session.execute(
            delete(PriceOverrideRecord).where(PriceOverrideRecord.model_id == model_id)
        )
        await self.session.flush()
        return result.rowcount > 0

    @staticmethod
    def _apply(record: AIModelRecord, model: AIModel, position: int) -> None:
        record.position = position
        record.name = model.name
        record.provider = model.provider
        record.input_cost_per_million = model.input_cost_per_million
        record.output_cost_per_million = model.output_cost_per_million
        record.is_custom = model.is_custom
