"""Derive social-feed trades from stored BUY/SELL activities."""

from dataclasses import dataclass
from decimal import Decimal
import logging

from sqlalchemy.orm import Session

from app.models import SnapTradeActivity, Trade
from app.models.base import utcnow
from app.services.sync.snaptrade_parser import NormalizedActivity

logger = logging.getLogger(__name__)

# Activity types that represent an actual execution
TRADE_ACTIVITY_TYPES = frozenset({"BUY", "SELL"})

DEFAULT_ASSET_TYPE = "stock"
DATA_SOURCE = "snaptrade"


@dataclass(frozen=True)
class PrivacyDefaults:
    """A user's standing privacy settings for new trades."""

    show_amounts: bool = False
    show_quantity: bool = False
    visibility: str = "public"

    @property
    def is_public(self) -> bool:
        return self.visibility == "public"


def is_trade_activity(activity: NormalizedActivity) -> bool:
    """True when the activity is a BUY/SELL with a known ticker."""
    return bool(activity.ticker) and activity.activity_type in TRADE_ACTIVITY_TYPES


def get_trade_for_activity(db: Session, activity_row_id: int) -> Trade | None:
    """Get the trade already derived from a stored activity, if any."""
    return (
        db.query(Trade)
        .filter(Trade.snaptrade_activity_id == activity_row_id)
        .first()
    )


def _profit_loss(activity: NormalizedActivity) -> tuple[Decimal | None, Decimal | None]:
    """
    Placeholder P&L: (profit_loss, profit_loss_percentage).

    No cost basis is looked up, so these are not realized gains. SELLs carry
    the sale amount and, when it is positive, a zero percentage.
    """
    if activity.activity_type != "SELL":
        return None, None
    percentage = Decimal("0") if activity.amount > 0 else None
    return activity.amount, percentage


def derive_trade_if_applicable(
    db: Session,
    stored: SnapTradeActivity,
    activity: NormalizedActivity,
    privacy: PrivacyDefaults,
) -> tuple[Trade | None, bool]:
    """
    Create the feed trade for a stored activity when it qualifies.

    Returns (trade, created). Ineligible activities give (None, False); an
    activity that already has a trade gives (existing, False) and nothing is
    written. Privacy flags are copied from ``privacy`` now and never
    re-evaluated. Flushes but does not commit.
    """
    if not is_trade_activity(activity):
        return None, False

    existing = get_trade_for_activity(db, stored.id)
    if existing:
        return existing, False

    profit_loss, profit_loss_percentage = _profit_loss(activity)
    trade = Trade(
        user_id=stored.user_id,
        symbol=activity.ticker,
        company_name=activity.company_name,
        asset_type=DEFAULT_ASSET_TYPE,
        trade_type=activity.activity_type,
        quantity=abs(activity.units),
        price=activity.price,
        total_value=abs(activity.amount),
        profit_loss=profit_loss,
        profit_loss_percentage=profit_loss_percentage,
        executed_at=activity.trade_date,
        description=f"{activity.activity_type} {activity.ticker}",
        show_amounts=privacy.show_amounts,
        show_quantity=privacy.show_quantity,
        visibility=privacy.visibility,
        is_public=privacy.is_public,
        data_source=DATA_SOURCE,
        snaptrade_activity_id=stored.id,
        # feed is ordered by execution time
        created_at=activity.trade_date or utcnow(),
    )
    db.add(trade)
    db.flush()
    logger.debug("Derived %s trade %s from activity %s", trade.trade_type, trade.id, stored.id)
    return trade, True
