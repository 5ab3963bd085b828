"""
Catalog Service
===============
Effective catalog composition and user edits on top of the stored catalog.
"""

import re
import time
from pathlib import Path

import structlog
import yaml
from sqlalchemy.ext.asyncio import AsyncSession

from cost_estimator.config import settings
from cost_estimator.schemas.catalog import (
    AIModel,
    BulkPriceItem,
    ModelCreate,
    ModelUpdate,
    PriceOverride,
)
from cost_estimator.services.store import CatalogStore

logger = structlog.get_logger()


class CatalogError(ValueError):
    """Base class for catalog rule violations."""


class ModelNotFoundError(CatalogError):
    def __init__(self, model_id: str):
        super().__init__(f"Model not found: {model_id}")
        self.model_id = model_id


class PreloadedModelError(CatalogError):
    """Raised when an edit would delete or rewrite a pre-loaded model."""

    def __init__(self, model_id: str):
        super().__init__(f"Cannot modify pre-loaded model: {model_id}")
        self.model_id = model_id


def compose_catalog(
    base: list[AIModel],
    overrides: dict[str, PriceOverride],
    custom: list[AIModel],
) -> list[AIModel]:
    """
    Build the catalog users see.

    Base models keep their order with any override prices applied; custom
    models follow. An override only replaces the prices it sets.
    """
    effective = []
    for model in base:
        override = overrides.get(model.id)
        if override is not None:
            prices = override.model_dump(
                include={"input_cost_per_million", "output_cost_per_million"},
                exclude_none=True,
            )
            model = model.model_copy(update=prices)
        effective.append(model)
    return effective + list(custom)


def generate_model_id(name: str, now_ms: int | None = None) -> str:
    """Id for a custom model: ``custom-<slug>-<epoch ms>``."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"custom-{slug}-{now_ms}"


class CatalogService:
    """Service for reading and editing the model catalog."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.store = CatalogStore(session)

    async def list_models(self) -> list[AIModel]:
        """Effective catalog: base models with overrides, then custom models."""
        models = await self.store.load()
        overrides = await self.store.load_overrides()
        base = [m for m in models if not m.is_custom]
        custom = [m for m in models if m.is_custom]
        return compose_catalog(base, overrides, custom)

    async def get_model(self, model_id: str) -> AIModel:
        for model in await self.list_models():
            if model.id == model_id:
                return model
        raise ModelNotFoundError(model_id)

    async def list_by_provider(self) -> dict[str, list[AIModel]]:
        grouped: dict[str, list[AIModel]] = {}
        for model in await self.list_models():
            grouped.setdefault(model.provider, []).append(model)
        return grouped

    async def add_custom_model(self, data: ModelCreate) -> AIModel:
        """Create a user-owned model."""
        model_id = generate_model_id(data.name)
        # Two models created within the same millisecond
        while await self.store.get(model_id) is not None:
            model_id = generate_model_id(data.name, int(model_id.rsplit("-", 1)[1]) + 1)

        model = AIModel(
            id=model_id,
            name=data.name,
            provider=data.provider,
            input_cost_per_million=data.input_cost_per_million,
            output_cost_per_million=data.output_cost_per_million,
            is_custom=True,
        )
        await self.store.add(model)
        logger.info("Created custom model", model_id=model_id, provider=data.provider)
        return model

    async def update_model(self, model_id: str, data: ModelUpdate) -> AIModel:
        """
        Update a model.

        Pre-loaded models accept price changes only, kept as an override so
        the stored price stays reconcilable. A price left out of the edit
        keeps any earlier override, otherwise it follows the catalog price.
        Custom models are edited in place.
        """
        stored = await self.store.get(model_id)
        if stored is None:
            raise ModelNotFoundError(model_id)

        if not stored.is_custom:
            renamed = data.name is not None and data.name != stored.name
            moved = data.provider is not None and data.provider != stored.provider
            if renamed or moved:
                raise PreloadedModelError(model_id)

            prices = data.model_dump(
                include={"input_cost_per_million", "output_cost_per_million"},
                exclude_none=True,
            )
            if not prices:
                return await self.get_model(model_id)

            existing = (await self.store.load_overrides()).get(model_id)
            override = (existing or PriceOverride(model_id=model_id)).model_copy(update=prices)
            await self.store.set_override(override)
            logger.info("Stored price override", model_id=model_id)
            return await self.get_model(model_id)

        changes = data.model_dump(exclude_none=True)
        updated = stored.model_copy(update=changes)
        await self.store.update(updated)
        logger.info("Updated custom model", model_id=model_id, fields=sorted(changes))
        return updated

    async def delete_model(self, model_id: str) -> None:
        """Delete a custom model; pre-loaded models cannot be deleted."""
        stored = await self.store.get(model_id)
        if stored is None:
            raise ModelNotFoundError(model_id)
        if not stored.is_custom:
            raise PreloadedModelError(model_id)

        await self.store.delete(model_id)
        logger.info("Deleted custom model", model_id=model_id)

    async def bulk_update_prices(self, items: list[BulkPriceItem]) -> int:
        """
        Store price overrides for pre-loaded models.

        Ids that are unknown or belong to custom models are skipped.
        """
        base_ids = {m.id for m in await self.store.load() if not m.is_custom}
        applied = 0
        for item in items:
            if item.id not in base_ids:
                continue
            await self.store.set_override(
                PriceOverride(
                    model_id=item.id,
                    input_cost_per_million=item.input_cost_per_million,
                    output_cost_per_million=item.output_cost_per_million,
                )
            )
            applied += 1

        logger.info("Bulk price update", requested=len(items), applied=applied)
        return applied

    async def reset_override(self, model_id: str) -> AIModel:
        """Drop the user price of a pre-loaded model."""
        stored = await self.store.get(model_id)
        if stored is None:
            raise ModelNotFoundError(model_id)
        await self.store.delete_override(model_id)
        return await self.get_model(model_id)


def load_seed_models(path: str) -> list[AIModel]:
    """Read the pre-loaded catalog from a YAML file with a ``models`` list."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    entries = data.get("models", []) if isinstance(data, dict) else []
    return [AIModel(**{**entry, "is_custom": False}) for entry in entries]


async def seed_catalog(session: AsyncSession, path: str | None = None) -> int:
    """
    Populate an empty catalog from the seed file.

    Returns the number of models written.
    """
    seed_path = path or settings.catalog_seed_path
    store = CatalogStore(session)

    if await store.count() > 0:
        return 0

    if not Path(seed_path).exists():
        logger.warning("Catalog seed file not found", path=seed_path)
        return 0

    models = load_seed_models(seed_path)
    await store.save(models)
    logger.info("Seeded catalog", path=seed_path, models=len(models))
    return len(models)
