from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.snaptrade_activity import SnapTradeActivity
    from app.models.user import User


class Trade(Base, TimestampMixin):
    """Simplified BUY/SELL record shown in the social feed."""

    __tablename__ = "trades"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)

    symbol: Mapped[str] = mapped_column(String(50), index=True)
    company_name: Mapped[str | None] = mapped_column(String(255))
    asset_type: Mapped[str] = mapped_column(String(20), default="stock")
    trade_type: Mapped[str] = mapped_column(String(10), index=True)  # BUY, SELL
    quantity: Mapped[Decimal] = mapped_column(Numeric(28, 10))
    price: Mapped[Decimal] = mapped_column(Numeric(28, 10))
    total_value: Mapped[Decimal] = mapped_column(Numeric(28, 10))

    # Placeholder until cost-basis tracking exists; not a realized gain
    profit_loss: Mapped[Decimal | None] = mapped_column(Numeric(28, 10))
    profit_loss_percentage: Mapped[Decimal | None] = mapped_column(Numeric(10, 4))

    executed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), index=True)
    description: Mapped[str | None] = mapped_column(String(500))

    # Privacy, copied from the user's defaults when the trade is derived
    show_amounts: Mapped[bool] = mapped_column(Boolean, default=False)
    show_quantity: Mapped[bool] = mapped_column(Boolean, default=False)
    visibility: Mapped[str] = mapped_column(String(20), default="public")
    is_public: Mapped[bool] = mapped_column(Boolean, default=True)

    data_source: Mapped[str] = mapped_column(String(20), default="snaptrade")
    snaptrade_activity_id: Mapped[int | None] = mapped_column(
        ForeignKey("snaptrade_activities.id"), unique=True, index=True
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="trades")
    activity: Mapped["SnapTradeActivity"] = relationship(back_populates="trade")
