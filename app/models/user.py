from datetime import datetime
from typing import TYPE_CHECKING
import uuid

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.trade import Trade


class User(Base, TimestampMixin):
    """Application user, with feed privacy defaults and SnapTrade credentials."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    display_name: Mapped[str | None] = mapped_column(String(100))

    # Defaults applied to trades derived from brokerage activity
    show_amounts: Mapped[bool | None] = mapped_column(Boolean, default=False)
    show_quantity: Mapped[bool | None] = mapped_column(Boolean, default=False)
    visibility: Mapped[str | None] = mapped_column(
        String(20), default="public"
    )  # public, friends, private

    snaptrade_user_id: Mapped[str | None] = mapped_column(String(100), index=True)
    snaptrade_user_secret: Mapped[str | None] = mapped_column(String(255))
    snaptrade_created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True)
    )
    last_trade_sync_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True)
    )

    # Relationships
    trades: Mapped[list["Trade"]] = relationship(back_populates="user")
