"""
Price Feed Tests
================
Tests for static and remote pricing sources.
"""

from decimal import Decimal

import httpx
import pytest
from tenacity import wait_none

from cost_estimator.services.price_feed import (
    LATEST_PRICING,
    RemotePriceFeed,
    StaticPriceFeed,
    parse_pricing_table,
)

FEED_URL = "https://prices.example.test/pricing.json"


class TestParsePricingTable:
    """Tests for parsing provider-grouped pricing tables."""

    def test_provider_is_taken_from_group(self):
        """Test entries inherit the provider of their section."""
        result = parse_pricing_table({
            "OpenAI": [
                {"id": "gpt-4o", "name": "GPT-4o", "input_cost_per_million": 2.5, "output_cost_per_million": 10},
            ],
        })

        assert result.errors == []
        assert len(result.updates) == 1
        update = result.updates[0]
        assert update.provider == "OpenAI"
        assert update.input_cost_per_million == Decimal("2.5")

    def test_bad_section_does_not_hide_others(self):
        """Test one malformed provider is reported and the rest parsed."""
        result = parse_pricing_table({
            "Broken": [{"id": "x"}],
            "Meta": [
                {"id": "llama", "name": "Llama", "input_cost_per_million": "1", "output_cost_per_million": "1"},
            ],
        })

        assert [u.id for u in result.updates] == ["llama"]
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Failed to fetch Broken pricing: ")

    def test_non_list_section_is_an_error(self):
        """Test a provider mapped to a scalar is reported."""
        result = parse_pricing_table({"Odd": "nope"})

        assert result.updates == []
        assert result.errors[0].startswith("Failed to fetch Odd pricing: ")

    def test_negative_price_is_an_error(self):
        """Test invalid prices fail validation."""
        result = parse_pricing_table({
            "Bad": [{"id": "m", "input_cost_per_million": -1, "output_cost_per_million": 1}],
        })

        assert result.updates == []
        assert len(result.errors) == 1


class TestStaticPriceFeed:
    """Tests for the YAML-backed feed."""

    async def test_reads_yaml_table(self, tmp_path):
        """Test prices are loaded from the configured file."""
        path = tmp_path / "pricing.yaml"
        path.write_text(
            "Acme:\n"
            "  - {id: acme-1, name: Acme One, input_cost_per_million: 1.5, output_cost_per_million: 3}\n"
        )
        feed = StaticPriceFeed(str(path))

        result = await feed.fetch_all()

        assert feed.available_providers() == ["Acme"]
        assert [u.id for u in result.updates] == ["acme-1"]
        assert result.updates[0].output_cost_per_million == Decimal("3")

    async def test_missing_file_uses_builtin_table(self, tmp_path):
        """Test the built-in table is used when the file is absent."""
        feed = StaticPriceFeed(str(tmp_path / "absent.yaml"))

        result = await feed.fetch_all()

        assert feed.available_providers() == list(LATEST_PRICING)
        assert len(result.updates) == sum(len(v) for v in LATEST_PRICING.values())
        assert result.errors == []

    async def test_invalid_yaml_uses_builtin_table(self, tmp_path):
        """Test a non-mapping file falls back to the built-in table."""
        path = tmp_path / "pricing.yaml"
        path.write_text("- just\n- a list\n")

        feed = StaticPriceFeed(str(path))

        assert feed.available_providers() == list(LATEST_PRICING)

    async def test_fetch_provider(self, tmp_path):
        """Test fetching a single provider."""
        feed = StaticPriceFeed(str(tmp_path / "absent.yaml"))

        result = await feed.fetch_provider("Anthropic")

        assert result.updates
        assert all(u.provider == "Anthropic" for u in result.updates)

    async def test_fetch_unknown_provider(self, tmp_path):
        """Test an unknown provider is reported as an error."""
        feed = StaticPriceFeed(str(tmp_path / "absent.yaml"))

        result = await feed.fetch_provider("Nobody")

        assert result.updates == []
        assert result.errors == ["Unknown provider: Nobody"]

    async def test_reload_picks_up_changes(self, tmp_path):
        """Test reload re-reads the file."""
        path = tmp_path / "pricing.yaml"
        path.write_text("A:\n  - {id: a, name: A, input_cost_per_million: 1, output_cost_per_million: 1}\n")
        feed = StaticPriceFeed(str(path))

        path.write_text("B:\n  - {id: b, name: B, input_cost_per_million: 2, output_cost_per_million: 2}\n")
        feed.reload()

        assert feed.available_providers() == ["B"]


class TestRemotePriceFeed:
    """Tests for the HTTP feed."""

    @pytest.fixture(autouse=True)
    def no_retry_wait(self, monkeypatch):
        """Retry immediately."""
        monkeypatch.setattr(RemotePriceFeed._fetch_table.retry, "wait", wait_none())

    async def test_fetches_json_table(self):
        """Test a JSON table is parsed into updates."""

        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == FEED_URL
            return httpx.Response(200, json={
                "Google": [
                    {"id": "gemini", "name": "Gemini", "input_cost_per_million": "1.25", "output_cost_per_million": "5"},
                ],
            })

        feed = RemotePriceFeed(FEED_URL, transport=httpx.MockTransport(handler))
        result = await feed.fetch_all()

        assert result.errors == []
        assert result.updates[0].id == "gemini"
        assert result.updates[0].provider == "Google"

    async def test_server_error_is_retried_then_reported(self):
        """Test persistent HTTP errors end up in errors, not raised."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        feed = RemotePriceFeed(FEED_URL, transport=httpx.MockTransport(handler))
        result = await feed.fetch_all()

        assert len(calls) == 3
        assert result.updates == []
        assert result.errors[0].startswith("Failed to fetch pricing feed: ")

    async def test_transient_error_recovers(self):
        """Test a failed attempt followed by success returns prices."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(500)
            return httpx.Response(200, json={
                "Meta": [{"id": "llama", "name": "Llama", "input_cost_per_million": 1, "output_cost_per_million": 1}],
            })

        feed = RemotePriceFeed(FEED_URL, transport=httpx.MockTransport(handler))
        result = await feed.fetch_all()

        assert len(calls) == 2
        assert [u.id for u in result.updates] == ["llama"]

    async def test_non_object_body_is_reported(self):
        """Test a JSON body that is not an object is rejected."""
        feed = RemotePriceFeed(
            FEED_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=["no"])),
        )
        result = await feed.fetch_all()

        assert result.updates == []
        assert result.errors == ["Failed to fetch pricing feed: expected a JSON object"]

    async def test_invalid_json_is_reported(self):
        """Test an unparsable body is reported."""
        feed = RemotePriceFeed(
            FEED_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"<html>")),
        )
        result = await feed.fetch_all()

        assert result.updates == []
        assert result.errors[0].startswith("Failed to fetch pricing feed: ")
