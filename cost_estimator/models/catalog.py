"""
Catalog Models
==============
Models for the priced model catalog, price overrides and update history.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from cost_estimator.models.base import Base, TimestampMixin


class AIModelRecord(Base, TimestampMixin):
    """
    A priced model.
    Pre-loaded models come from the seed file and price feeds;
    custom models are created by users.
    """

    __tablename__ = "ai_model"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    # Preserves catalog order across load/save
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    provider: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    input_cost_per_million: Mapped[Decimal] = mapped_column(
        Numeric(20, 10),
        nullable=False,
    )
    output_cost_per_million: Mapped[Decimal] = mapped_column(
        Numeric(20, 10),
        nullable=False,
    )
    is_custom: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_model_custom_position", "is_custom", "position"),
    )


class PriceOverrideRecord(Base, TimestampMixin):
    """
    User price for a pre-loaded model.
    Shadows the catalog price without changing it.
    """

    __tablename__ = "price_override"

    model_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("ai_model.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # NULL keeps the catalog price for that field
    input_cost_per_million: Mapped[Decimal | None] = mapped_column(
        Numeric(20, 10),
        nullable=True,
    )
    output_cost_per_million: Mapped[Decimal | None] = mapped_column(
        Numeric(20, 10),
        nullable=True,
    )


class PricingUpdateRun(Base):
    """
    One reconciliation against a price feed.
    Used to decide when the next automatic update is due.
    """

    __tablename__ = "pricing_update_run"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    change_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_models: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    errors_json: Mapped[str | None] = mapped_column(Text, nullable=True)
