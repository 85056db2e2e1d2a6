"""Idempotent storage of SnapTrade activities."""

from sqlalchemy.orm import Session

from app.exceptions import ValidationError
from app.models import SnapTradeActivity
from app.models.base import utcnow
from app.services import base
from app.services.sync.snaptrade_parser import NormalizedActivity

ACTIVITY_KEY = ("snaptrade_account_id", "snaptrade_activity_id")


def upsert_activity(
    db: Session,
    activity: NormalizedActivity,
    account_id: str,
    user_id: str,
    sync_batch_id: str,
) -> SnapTradeActivity:
    """
    Store an activity exactly once per (account, SnapTrade activity id).

    A repeat sync overwrites every field with the latest fetch and advances
    last_synced_at; created_at keeps the first-seen time. Does not commit.
    """
    if not activity.activity_id:
        raise ValidationError("Activity has no SnapTrade id", field="id")

    row = {
        "snaptrade_account_id": account_id,
        "snaptrade_activity_id": activity.activity_id,
        "user_id": user_id,
        "raw_activity_data": activity.raw,
        "activity_type": activity.activity_type,
        "symbol_ticker": activity.ticker,
        "company_name": activity.company_name,
        "price": activity.price,
        "units": activity.units,
        "amount": activity.amount,
        "currency_code": activity.currency_code,
        "fee": activity.fee,
        "trade_date": activity.trade_date,
        "settlement_date": activity.settlement_date,
        "institution": activity.institution,
        "external_reference_id": activity.external_reference_id,
        "sync_batch_id": sync_batch_id,
        "last_synced_at": utcnow(),
    }
    return base.upsert(db, SnapTradeActivity, row, ACTIVITY_KEY)


def get_activity(
    db: Session, account_id: str, snaptrade_activity_id: str
) -> SnapTradeActivity | None:
    """Get a stored activity by its idempotency key."""
    return (
        db.query(SnapTradeActivity)
        .filter(
            SnapTradeActivity.snaptrade_account_id == account_id,
            SnapTradeActivity.snaptrade_activity_id == snaptrade_activity_id,
        )
        .first()
    )
