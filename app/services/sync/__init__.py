"""Sync service package for SnapTrade data synchronization."""

from app.services.sync.activity_store import upsert_activity
from app.services.sync.activity_sync import sync_account_activities
from app.services.sync.brokerage_upsert import (
    save_accounts,
    save_connection,
    upsert_account,
    upsert_connection,
)
from app.services.sync.snaptrade_parser import (
    normalize_activity,
    parse_account,
    parse_connection,
)
from app.services.sync.trade_deriver import PrivacyDefaults, derive_trade_if_applicable

__all__ = [
    "normalize_activity",
    "parse_account",
    "parse_connection",
    "upsert_activity",
    "derive_trade_if_applicable",
    "PrivacyDefaults",
    "upsert_account",
    "upsert_connection",
    "save_accounts",
    "save_connection",
    "sync_account_activities",
]
