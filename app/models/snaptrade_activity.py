from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from app.models.trade import Trade


class SnapTradeActivity(Base, TimestampMixin):
    """Account activity (trade, dividend, fee, transfer...) mirrored from SnapTrade."""

    __tablename__ = "snaptrade_activities"
    __table_args__ = (
        UniqueConstraint(
            "snaptrade_account_id",
            "snaptrade_activity_id",
            name="uq_snaptrade_activities_account_activity",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    snaptrade_account_id: Mapped[str] = mapped_column(String(100), index=True)
    snaptrade_activity_id: Mapped[str] = mapped_column(String(100))
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)

    activity_type: Mapped[str] = mapped_column(String(50), index=True)  # BUY, SELL, DIVIDEND, etc.
    symbol_ticker: Mapped[str | None] = mapped_column(String(50), index=True)
    company_name: Mapped[str | None] = mapped_column(String(255))

    price: Mapped[Decimal] = mapped_column(Numeric(28, 10), default=0)
    units: Mapped[Decimal] = mapped_column(Numeric(28, 10), default=0)
    amount: Mapped[Decimal] = mapped_column(Numeric(28, 10), default=0)
    fee: Mapped[Decimal] = mapped_column(Numeric(28, 10), default=0)
    currency_code: Mapped[str] = mapped_column(String(3), default="USD")

    trade_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), index=True)
    settlement_date: Mapped[date | None] = mapped_column(Date)
    institution: Mapped[str | None] = mapped_column(String(100))

    # Groups multi-leg trades
    external_reference_id: Mapped[str | None] = mapped_column(String(100), index=True)

    sync_batch_id: Mapped[str] = mapped_column(String(36), index=True)
    last_synced_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    # Full SnapTrade payload, kept verbatim
    raw_activity_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    # Relationships
    trade: Mapped["Trade"] = relationship(back_populates="activity")
