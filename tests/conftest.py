"""
Test Configuration
==================
Pytest fixtures for AI Cost Estimator tests.
"""

from collections.abc import AsyncGenerator, Generator
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from cost_estimator import database
from cost_estimator.api.endpoints import health
from cost_estimator.config import settings
from cost_estimator.core.tokenizer import TokenCounter
from cost_estimator.main import app
from cost_estimator.models.base import Base
from cost_estimator.schemas.catalog import AIModel, PriceUpdate
from cost_estimator.services import ingestion, pricing_update
from cost_estimator.services.price_feed import StaticPriceFeed

# Test database URL (use in-memory SQLite for service tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
SEED_PATH = CONFIG_DIR / "models.yaml"
PRICING_PATH = CONFIG_DIR / "pricing.yaml"


@pytest.fixture
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def fallback_counter() -> TokenCounter:
    """Token counter using the character estimate (no encoding download)."""
    return TokenCounter(encoding_name="missing-test-encoding")


@pytest.fixture
def client(tmp_path, monkeypatch, fallback_counter) -> Generator[TestClient, None, None]:
    """Create test client backed by a throwaway SQLite file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    monkeypatch.setattr(database, "engine", engine)
    monkeypatch.setattr(
        database,
        "async_session_factory",
        async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False),
    )
    monkeypatch.setattr(settings, "pricing_auto_update", False)
    monkeypatch.setattr(settings, "catalog_seed_path", str(SEED_PATH))
    monkeypatch.setattr(pricing_update, "get_price_feed", lambda: StaticPriceFeed(str(PRICING_PATH)))
    monkeypatch.setattr(ingestion, "get_token_counter", lambda: fallback_counter)
    monkeypatch.setattr(health, "get_token_counter", lambda: fallback_counter)

    # Entering the context runs startup: schema creation and catalog seeding
    with TestClient(app) as c:
        yield c


def make_model(
    model_id: str,
    input_price: str = "1",
    output_price: str = "2",
    provider: str = "OpenAI",
    is_custom: bool = False,
) -> AIModel:
    return AIModel(
        id=model_id,
        name=model_id.upper(),
        provider=provider,
        input_cost_per_million=Decimal(input_price),
        output_cost_per_million=Decimal(output_price),
        is_custom=is_custom,
    )


def make_update(
    model_id: str,
    input_price: str = "1",
    output_price: str = "2",
    provider: str = "OpenAI",
) -> PriceUpdate:
    return PriceUpdate(
        id=model_id,
        name=model_id.upper(),
        provider=provider,
        input_cost_per_million=Decimal(input_price),
        output_cost_per_million=Decimal(output_price),
    )


@pytest.fixture
def model_factory():
    """Factory for catalog models."""
    return make_model


@pytest.fixture
def update_factory():
    """Factory for price feed updates."""
    return make_update


@pytest.fixture
def base_catalog() -> list[AIModel]:
    """Small catalog of pre-loaded models plus one custom model."""
    return [
        make_model("gpt-4o", "2.5", "10"),
        make_model("claude-3-5-haiku", "1", "5", provider="Anthropic"),
        make_model("custom-mine-1", "9", "9", provider="Acme", is_custom=True),
    ]
