"""
Price Feeds
===========
Sources of current per-model prices used to reconcile the catalog.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol

import httpx
import structlog
import yaml
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cost_estimator.config import settings
from cost_estimator.schemas.catalog import PriceUpdate

logger = structlog.get_logger()


def _entry(model_id: str, name: str, input_price: str, output_price: str) -> dict[str, Any]:
    return {
        "id": model_id,
        "name": name,
        "input_cost_per_million": input_price,
        "output_cost_per_million": output_price,
    }


# Built-in table used when no pricing file is available
LATEST_PRICING: dict[str, list[dict[str, Any]]] = {
    "OpenAI": [
        _entry("gpt-4o", "GPT-4o", "2.5", "10"),
        _entry("gpt-4o-mini", "GPT-4o Mini", "0.15", "0.6"),
        _entry("gpt-4-turbo", "GPT-4 Turbo", "10", "30"),
        _entry("o1", "o1", "15", "60"),
        _entry("o1-mini", "o1-mini", "3", "12"),
        _entry("o1-pro", "o1 Pro", "150", "600"),
    ],
    "Anthropic": [
        _entry("claude-3-5-sonnet", "Claude 3.5 Sonnet", "3", "15"),
        _entry("claude-3-5-haiku", "Claude 3.5 Haiku", "0.8", "4"),
        _entry("claude-3-opus", "Claude 3 Opus", "15", "75"),
        _entry("claude-opus-4-5", "Claude Opus 4.5", "15", "75"),
        _entry("claude-sonnet-4", "Claude Sonnet 4", "3", "15"),
    ],
    "Google": [
        _entry("gemini-1-5-pro", "Gemini 1.5 Pro", "1.25", "5"),
        _entry("gemini-1-5-flash", "Gemini 1.5 Flash", "0.075", "0.3"),
        _entry("gemini-2-0-flash", "Gemini 2.0 Flash", "0.1", "0.4"),
        _entry("gemini-2-0-flash-thinking", "Gemini 2.0 Flash Thinking", "0.1", "0.4"),
    ],
    "Mistral": [
        _entry("mistral-large", "Mistral Large", "2", "6"),
        _entry("mistral-small", "Mistral Small", "0.2", "0.6"),
        _entry("mistral-nemo", "Mistral Nemo", "0.15", "0.15"),
        _entry("codestral", "Codestral", "0.2", "0.6"),
    ],
    "Meta": [
        _entry("llama-3-1-405b", "Llama 3.1 405B", "3", "3"),
        _entry("llama-3-1-70b", "Llama 3.1 70B", "0.88", "0.88"),
        _entry("llama-3-2-90b", "Llama 3.2 90B", "0.9", "0.9"),
        _entry("llama-3-3-70b", "Llama 3.3 70B", "0.59", "0.79"),
    ],
}


@dataclass
class FetchResult:
    """Price updates collected from a feed plus per-provider failures."""

    updates: list[PriceUpdate] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class PriceFeed(Protocol):
    """Anything that can report current prices."""

    async def fetch_all(self) -> FetchResult: ...


def _parse_provider(provider: str, entries: Any) -> list[PriceUpdate]:
    if not isinstance(entries, list):
        raise ValueError("expected a list of models")

    updates = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError("expected a mapping per model")
        updates.append(
            PriceUpdate(
                id=entry["id"],
                name=entry.get("name", entry["id"]),
                provider=entry.get("provider", provider),
                input_cost_per_million=Decimal(str(entry["input_cost_per_million"])),
                output_cost_per_million=Decimal(str(entry["output_cost_per_million"])),
            )
        )
    return updates


def parse_pricing_table(table: dict[str, Any]) -> FetchResult:
    """
    Parse a provider-grouped pricing table.

    Each provider is parsed independently so one malformed section does not
    hide the others.
    """
    result = FetchResult()
    for provider, entries in table.items():
        try:
            result.updates.extend(_parse_provider(provider, entries))
        except (KeyError, TypeError, ValueError, ArithmeticError, ValidationError) as e:
            logger.warning("Invalid pricing section", provider=provider, error=str(e))
            result.errors.append(f"Failed to fetch {provider} pricing: {e}")
    return result


class StaticPriceFeed:
    """
    Price feed backed by a YAML pricing table.

    Falls back to the built-in table when the file is missing or unreadable.
    """

    def __init__(self, config_path: str | None = None):
        self.config_path = config_path or settings.pricing_feed_path
        self._pricing_data: dict[str, Any] = {}
        self._load_pricing()

    def _load_pricing(self) -> None:
        """Load pricing table from YAML file."""
        config_file = Path(self.config_path)

        if not config_file.exists():
            logger.warning("Pricing table not found, using built-in prices", path=self.config_path)
            self._pricing_data = LATEST_PRICING
            return

        try:
            with open(config_file, encoding="utf-8") as f:
                data = yaml.safe_load(f)
            if not isinstance(data, dict):
                raise ValueError("pricing table must be a mapping of provider to models")
            self._pricing_data = data
            logger.info("Loaded pricing table", path=self.config_path, providers=len(data))
        except Exception as e:
            logger.error("Failed to load pricing table", path=self.config_path, error=str(e))
            self._pricing_data = LATEST_PRICING

    def reload(self) -> None:
        """Reload pricing table from file."""
        self._load_pricing()

    def available_providers(self) -> list[str]:
        return list(self._pricing_data.keys())

    async def fetch_all(self) -> FetchResult:
        return parse_pricing_table(self._pricing_data)

    async def fetch_provider(self, provider: str) -> FetchResult:
        if provider not in self._pricing_data:
            return FetchResult(errors=[f"Unknown provider: {provider}"])
        return parse_pricing_table({provider: self._pricing_data[provider]})


class RemotePriceFeed:
    """
    Price feed reading a provider-grouped JSON table over HTTP.

    Transport failures are reported in ``FetchResult.errors``.
    """

    def __init__(
        self,
        url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout = timeout or settings.pricing_feed_timeout
        self._transport = transport

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.HTTPError, httpx.TimeoutException)),
        reraise=True,
    )
    async def _fetch_table(self) -> Any:
        """Download the pricing table with retry."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(self.url, headers={"Accept": "application/json"})
            response.raise_for_status()
            return response.json()

    async def fetch_all(self) -> FetchResult:
        try:
            table = await self._fetch_table()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Failed to fetch remote pricing", url=self.url, error=str(e))
            return FetchResult(errors=[f"Failed to fetch pricing feed: {e}"])

        if not isinstance(table, dict):
            return FetchResult(errors=["Failed to fetch pricing feed: expected a JSON object"])
        return parse_pricing_table(table)


@lru_cache
def get_price_feed() -> PriceFeed:
    """Get the configured price feed."""
    if settings.pricing_feed_url:
        return RemotePriceFeed(settings.pricing_feed_url)
    return StaticPriceFeed()
