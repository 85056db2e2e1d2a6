from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, Date, DateTime, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.snaptrade_connection import SnapTradeConnection


class SnapTradeAccount(Base, TimestampMixin):
    """Brokerage account synced from SnapTrade."""

    __tablename__ = "snaptrade_accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    snaptrade_account_id: Mapped[str] = mapped_column(
        String(100), unique=True, index=True
    )
    user_id: Mapped[str | None] = mapped_column(String(100), index=True)
    snaptrade_user_id: Mapped[str | None] = mapped_column(String(100), index=True)
    snaptrade_connection_id: Mapped[str | None] = mapped_column(
        String(100), index=True
    )

    account_name: Mapped[str | None] = mapped_column(String(255))
    account_number: Mapped[str | None] = mapped_column(String(50))
    institution_name: Mapped[str | None] = mapped_column(String(100))
    account_type: Mapped[str | None] = mapped_column(String(50))  # e.g., "TFSA", "Margin"
    status: Mapped[str | None] = mapped_column(String(20))

    balance_amount: Mapped[Decimal | None] = mapped_column(Numeric(28, 10))
    balance_currency: Mapped[str] = mapped_column(String(3), default="USD")

    # Aggregator-side sync state
    holdings_sync_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    holdings_last_synced_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True)
    )
    transactions_sync_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    transactions_last_synced_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True)
    )
    transactions_first_transaction_date: Mapped[date | None] = mapped_column(Date)

    raw_account_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    raw_balance_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    raw_sync_status: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    # Relationships
    connection: Mapped["SnapTradeConnection"] = relationship(
        back_populates="accounts",
        primaryjoin="SnapTradeConnection.snaptrade_connection_id"
        " == foreign(SnapTradeAccount.snaptrade_connection_id)",
        viewonly=True,
    )
