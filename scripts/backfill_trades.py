#!/usr/bin/env python
"""Derive feed trades for stored activities that never got one.

A trade can be missing when derivation failed during a sync. Re-running
derivation here is safe: activities that already have a trade are left alone.

Usage: uv run python scripts/backfill_trades.py [--user USER_ID]
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.exc import SQLAlchemyError

from app.database import SessionLocal
from app.exceptions import TradeFeedError
from app.logging_config import configure_logging
from app.models import SnapTradeActivity, Trade
from app.services import user_service
from app.services.sync.snaptrade_parser import NormalizedActivity
from app.services.sync.trade_deriver import (
    TRADE_ACTIVITY_TYPES,
    derive_trade_if_applicable,
)

logger = logging.getLogger(__name__)


def _from_stored(activity: SnapTradeActivity) -> NormalizedActivity:
    """Rebuild the normalized view of a stored activity from its columns."""
    return NormalizedActivity(
        activity_id=activity.snaptrade_activity_id,
        activity_type=activity.activity_type,
        ticker=activity.symbol_ticker,
        company_name=activity.company_name,
        currency_code=activity.currency_code,
        price=activity.price,
        units=activity.units,
        amount=activity.amount,
        fee=activity.fee,
        trade_date=activity.trade_date,
        settlement_date=activity.settlement_date,
        institution=activity.institution,
        external_reference_id=activity.external_reference_id,
        raw=activity.raw_activity_data,
    )


def backfill_trades(db, user_id: str | None = None) -> dict[str, int]:
    """Create missing trades. Returns counts of created and failed activities."""
    query = (
        db.query(SnapTradeActivity)
        .outerjoin(Trade, Trade.snaptrade_activity_id == SnapTradeActivity.id)
        .filter(
            Trade.id.is_(None),
            SnapTradeActivity.activity_type.in_(TRADE_ACTIVITY_TYPES),
            SnapTradeActivity.symbol_ticker.isnot(None),
        )
        .order_by(SnapTradeActivity.id)
    )
    if user_id:
        query = query.filter(SnapTradeActivity.user_id == user_id)

    privacy_by_user = {}
    created = 0
    failed = 0

    for activity in query.all():
        try:
            if activity.user_id not in privacy_by_user:
                privacy_by_user[activity.user_id] = user_service.get_privacy_defaults(
                    db, activity.user_id
                )
            with db.begin_nested():
                _, was_created = derive_trade_if_applicable(
                    db,
                    activity,
                    _from_stored(activity),
                    privacy_by_user[activity.user_id],
                )
            if was_created:
                created += 1
        except (TradeFeedError, SQLAlchemyError) as e:
            logger.warning("Could not derive trade for activity %s: %s", activity.id, e)
            failed += 1

    db.commit()
    return {"created": created, "failed": failed}


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--user", help="Only backfill this app user's activities")
    args = parser.parse_args()

    configure_logging()
    db = SessionLocal()
    try:
        counts = backfill_trades(db, user_id=args.user)
        print(f"Created {counts['created']} trades ({counts['failed']} failed)")
    finally:
        db.close()


if __name__ == "__main__":
    main()
