"""Activity sync for a single SnapTrade account."""

import logging
import uuid

from snaptrade_client import SnapTrade
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import TradeFeedError
from app.schemas.sync import SyncResult
from app.services import user_service
from app.services.snaptrade_client import fetch_account_activities
from app.services.sync.activity_store import upsert_activity
from app.services.sync.brokerage_upsert import get_account, touch_connection_sync
from app.services.sync.snaptrade_parser import normalize_activity
from app.services.sync.trade_deriver import PrivacyDefaults, derive_trade_if_applicable

logger = logging.getLogger(__name__)


def sync_account_activities(
    db: Session,
    client: SnapTrade,
    user_id: str,
    user_secret: str,
    account_id: str,
    app_user_id: str,
    full_sync: bool = False,
) -> SyncResult:
    """
    Pull an account's activities, store them and derive feed trades.

    Reading the user's privacy defaults and fetching from SnapTrade are
    fatal: their errors propagate and nothing is written. After that each
    activity is stored and derived inside its own savepoint; a failure rolls
    back just that activity and counts it as skipped. Commits once at the
    end, after stamping the user's last sync time.
    """
    sync_batch_id = str(uuid.uuid4())
    logger.info(
        "Starting activity sync %s for account %s (user %s, full_sync=%s)",
        sync_batch_id,
        account_id,
        app_user_id,
        full_sync,
    )

    privacy = user_service.get_privacy_defaults(db, app_user_id)
    activities = fetch_account_activities(
        client, user_id, user_secret, account_id, full_sync=full_sync
    )

    result = SyncResult(
        total_activities_fetched=len(activities),
        sync_batch_id=sync_batch_id,
        account_id=account_id,
        full_sync=full_sync,
    )

    for raw in activities:
        stored, trade_created = _ingest_activity(
            db, raw, account_id, app_user_id, sync_batch_id, privacy
        )
        if not stored:
            result.skipped_activities += 1
            continue
        result.new_activities_stored += 1
        if trade_created:
            result.new_trades_created += 1

    user_service.mark_trade_sync(db, app_user_id)
    account = get_account(db, account_id)
    if account:
        touch_connection_sync(db, account.snaptrade_connection_id)
    db.commit()

    logger.info(
        "Finished activity sync %s for account %s: fetched=%d stored=%d trades=%d skipped=%d",
        sync_batch_id,
        account_id,
        result.total_activities_fetched,
        result.new_activities_stored,
        result.new_trades_created,
        result.skipped_activities,
    )
    return result


def _ingest_activity(
    db: Session,
    raw: dict,
    account_id: str,
    app_user_id: str,
    sync_batch_id: str,
    privacy: PrivacyDefaults,
) -> tuple[bool, bool]:
    """Store one activity and derive its trade. Returns (stored, trade_created)."""
    activity = normalize_activity(raw)
    try:
        with db.begin_nested():
            stored = upsert_activity(db, activity, account_id, app_user_id, sync_batch_id)
            _, created = derive_trade_if_applicable(db, stored, activity, privacy)
    except (TradeFeedError, SQLAlchemyError) as e:
        logger.warning(
            "Skipping activity %s on account %s: %s",
            activity.activity_id,
            account_id,
            e,
        )
        return False, False
    return True, created
