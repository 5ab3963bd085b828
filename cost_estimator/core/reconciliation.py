"""
Pricing Reconciliation
======================
Merges current prices from a feed into the model catalog.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from cost_estimator.schemas.catalog import AIModel, PriceUpdate, PricingChange


@dataclass
class MergeResult:
    """Catalog after a merge plus the ordered change log."""

    models: list[AIModel]
    changes: list[PricingChange] = field(default_factory=list)


def merge_pricing(
    current_models: list[AIModel],
    updates: list[PriceUpdate],
) -> MergeResult:
    """
    Reconcile the catalog with a list of price updates.

    - Custom models are never touched, even when an update shares their id.
    - Existing models get the update's prices when either price differs.
    - Updates for ids not present in ``current_models`` are appended as new
      non-custom models with zero old prices in the change log.

    Neither input list is mutated.
    """
    changes: list[PricingChange] = []
    models = list(current_models)
    # Last occurrence wins when a feed repeats an id
    update_map = {update.id: update for update in updates}

    for index, model in enumerate(models):
        if model.is_custom:
            continue

        update = update_map.get(model.id)
        if update is None:
            continue

        input_changed = model.input_cost_per_million != update.input_cost_per_million
        output_changed = model.output_cost_per_million != update.output_cost_per_million
        if not (input_changed or output_changed):
            continue

        changes.append(
            PricingChange(
                model_id=model.id,
                model_name=model.name,
                provider=model.provider,
                old_input=model.input_cost_per_million,
                new_input=update.input_cost_per_million,
                old_output=model.output_cost_per_million,
                new_output=update.output_cost_per_million,
            )
        )
        models[index] = model.model_copy(
            update={
                "input_cost_per_million": update.input_cost_per_million,
                "output_cost_per_million": update.output_cost_per_million,
            }
        )

    existing_ids = {model.id for model in current_models}
    for update_id in update_map:
        if update_id in existing_ids:
            continue

        update = update_map[update_id]
        models.append(
            AIModel(
                id=update.id,
                name=update.name,
                provider=update.provider,
                input_cost_per_million=update.input_cost_per_million,
                output_cost_per_million=update.output_cost_per_million,
                is_custom=False,
            )
        )
        changes.append(
            PricingChange(
                model_id=update.id,
                model_name=update.name,
                provider=update.provider,
                old_input=Decimal("0"),
                new_input=update.input_cost_per_million,
                old_output=Decimal("0"),
                new_output=update.output_cost_per_million,
            )
        )

    return MergeResult(models=models, changes=changes)
