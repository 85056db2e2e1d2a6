from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.snaptrade_account import SnapTradeAccount


class SnapTradeConnection(Base, TimestampMixin):
    """Brokerage authorization created through the SnapTrade connection portal."""

    __tablename__ = "snaptrade_connections"

    id: Mapped[int] = mapped_column(primary_key=True)
    snaptrade_connection_id: Mapped[str] = mapped_column(
        String(100), unique=True, index=True
    )
    user_id: Mapped[str | None] = mapped_column(String(100), index=True)
    snaptrade_user_id: Mapped[str | None] = mapped_column(String(100), index=True)

    brokerage_name: Mapped[str | None] = mapped_column(String(100))
    brokerage_slug: Mapped[str | None] = mapped_column(String(100))
    brokerage_logo_url: Mapped[str | None] = mapped_column(String(500))
    connection_type: Mapped[str] = mapped_column(String(20), default="read")
    status: Mapped[str] = mapped_column(String(20), default="active")

    disabled: Mapped[bool] = mapped_column(Boolean, default=False)
    disabled_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    connection_created_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True)
    )
    last_sync_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Store raw API response for debugging
    raw_connection_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    # Relationships
    accounts: Mapped[list["SnapTradeAccount"]] = relationship(
        back_populates="connection",
        primaryjoin="SnapTradeConnection.snaptrade_connection_id"
        " == foreign(SnapTradeAccount.snaptrade_connection_id)",
        viewonly=True,
    )
