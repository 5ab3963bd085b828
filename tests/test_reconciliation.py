"""
Pricing Reconciliation Tests
============================
Tests for merging price feed updates into the catalog.
"""

from decimal import Decimal

from cost_estimator.core.reconciliation import merge_pricing


class TestMergePricing:
    """Tests for merge_pricing."""

    def test_changed_price_is_updated(self, base_catalog, update_factory):
        """Test an existing model takes the new prices and logs the change."""
        result = merge_pricing(base_catalog, [update_factory("claude-3-5-haiku", "0.8", "4", "Anthropic")])

        haiku = next(m for m in result.models if m.id == "claude-3-5-haiku")
        assert haiku.input_cost_per_million == Decimal("0.8")
        assert haiku.output_cost_per_million == Decimal("4")

        assert len(result.changes) == 1
        change = result.changes[0]
        assert change.model_id == "claude-3-5-haiku"
        assert change.old_input == Decimal("1")
        assert change.new_input == Decimal("0.8")
        assert change.old_output == Decimal("5")
        assert change.new_output == Decimal("4")

    def test_one_changed_price_is_enough(self, base_catalog, update_factory):
        """Test a change to only the output price is applied."""
        result = merge_pricing(base_catalog, [update_factory("gpt-4o", "2.5", "12")])

        assert len(result.changes) == 1
        assert result.models[0].output_cost_per_million == Decimal("12")

    def test_equal_prices_produce_no_change(self, base_catalog, update_factory):
        """Test an update repeating the current prices is not logged."""
        result = merge_pricing(base_catalog, [update_factory("gpt-4o", "2.50", "10.0")])

        assert result.changes == []
        assert result.models == base_catalog

    def test_custom_models_are_never_touched(self, base_catalog, update_factory):
        """Test an update sharing a custom model's id leaves it alone."""
        result = merge_pricing(base_catalog, [update_factory("custom-mine-1", "0", "0")])

        custom = next(m for m in result.models if m.id == "custom-mine-1")
        assert custom == base_catalog[2]
        assert result.changes == []
        assert len(result.models) == len(base_catalog)

    def test_new_models_are_appended(self, base_catalog, update_factory):
        """Test unknown ids are appended in feed order with zero old prices."""
        updates = [
            update_factory("o1", "15", "60"),
            update_factory("gpt-4o", "2.5", "10"),
            update_factory("mistral-large", "2", "6", "Mistral"),
        ]
        result = merge_pricing(base_catalog, updates)

        assert [m.id for m in result.models] == [
            "gpt-4o",
            "claude-3-5-haiku",
            "custom-mine-1",
            "o1",
            "mistral-large",
        ]
        appended = result.models[3]
        assert appended.is_custom is False
        assert appended.provider == "OpenAI"

        assert [c.model_id for c in result.changes] == ["o1", "mistral-large"]
        assert all(c.old_input == Decimal("0") and c.old_output == Decimal("0") for c in result.changes)

    def test_updates_before_additions_in_change_log(self, base_catalog, update_factory):
        """Test changes to existing models precede additions."""
        updates = [
            update_factory("o1", "15", "60"),
            update_factory("gpt-4o", "3", "10"),
        ]
        result = merge_pricing(base_catalog, updates)

        assert [c.model_id for c in result.changes] == ["gpt-4o", "o1"]

    def test_duplicate_feed_ids_last_wins(self, base_catalog, update_factory):
        """Test a repeated id in the feed is applied and appended once with its last prices."""
        updates = [
            update_factory("o1", "15", "60"),
            update_factory("o1", "99", "99"),
            update_factory("gpt-4o", "3", "10"),
            update_factory("gpt-4o", "4", "10"),
        ]
        result = merge_pricing(base_catalog, updates)

        assert [m.id for m in result.models].count("o1") == 1
        o1 = next(m for m in result.models if m.id == "o1")
        assert o1.input_cost_per_million == Decimal("99")
        assert result.models[0].input_cost_per_million == Decimal("4")
        assert [(c.model_id, c.new_input) for c in result.changes] == [
            ("gpt-4o", Decimal("4")),
            ("o1", Decimal("99")),
        ]

    def test_merge_is_idempotent(self, base_catalog, update_factory):
        """Test merging the same updates twice changes nothing the second time."""
        updates = [
            update_factory("gpt-4o", "3", "12"),
            update_factory("o1", "15", "60"),
        ]
        first = merge_pricing(base_catalog, updates)
        second = merge_pricing(first.models, updates)

        assert second.changes == []
        assert second.models == first.models

    def test_inputs_are_not_mutated(self, base_catalog, update_factory):
        """Test neither the catalog nor the updates are modified."""
        snapshot = [m.model_copy() for m in base_catalog]
        updates = [update_factory("gpt-4o", "3", "12"), update_factory("o1", "15", "60")]
        update_snapshot = [u.model_copy() for u in updates]

        merge_pricing(base_catalog, updates)

        assert base_catalog == snapshot
        assert updates == update_snapshot

    def test_models_missing_from_feed_are_kept(self, base_catalog, update_factory):
        """Test models the feed does not mention stay unchanged."""
        result = merge_pricing(base_catalog, [update_factory("gpt-4o", "3", "12")])

        assert result.models[1] == base_catalog[1]
        assert len(result.models) == 3

    def test_empty_catalog_gets_all_updates(self, update_factory):
        """Test merging into an empty catalog adds every update."""
        result = merge_pricing([], [update_factory("a", "1", "2"), update_factory("b", "3", "4")])

        assert [m.id for m in result.models] == ["a", "b"]
        assert all(not m.is_custom for m in result.models)
        assert len(result.changes) == 2
        assert all(c.old_input == Decimal("0") and c.old_output == Decimal("0") for c in result.changes)

    def test_empty_updates(self, base_catalog):
        """Test an empty feed leaves the catalog as is."""
        result = merge_pricing(base_catalog, [])

        assert result.models == base_catalog
        assert result.changes == []
