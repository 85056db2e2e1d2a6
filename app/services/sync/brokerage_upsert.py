"""Create-or-update of brokerage connections and accounts."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError, TradeFeedError
from app.models import SnapTradeAccount, SnapTradeConnection
from app.models.base import utcnow
from app.schemas.sync import AccountSaveResult, SaveAccountsResponse, SaveAccountsSummary
from app.services import base
from app.services.sync.snaptrade_parser import (
    AccountRecord,
    ConnectionRecord,
    parse_account,
    parse_connection,
)

logger = logging.getLogger(__name__)


def upsert_connection(db: Session, record: ConnectionRecord) -> SnapTradeConnection:
    """Insert or update a connection by its SnapTrade authorization id."""
    return base.upsert(
        db, SnapTradeConnection, record.to_row(), ["snaptrade_connection_id"]
    )


def upsert_account(db: Session, record: AccountRecord) -> SnapTradeAccount:
    """Insert or update an account by its SnapTrade account id."""
    return base.upsert(db, SnapTradeAccount, record.to_row(), ["snaptrade_account_id"])


def get_connection(db: Session, connection_id: str) -> SnapTradeConnection:
    """Get a stored connection by SnapTrade authorization id."""
    connection = (
        db.query(SnapTradeConnection)
        .filter(SnapTradeConnection.snaptrade_connection_id == connection_id)
        .first()
    )
    if not connection:
        raise NotFoundError("SnapTradeConnection", connection_id)
    return connection


def get_account(db: Session, account_id: str) -> SnapTradeAccount | None:
    return (
        db.query(SnapTradeAccount)
        .filter(SnapTradeAccount.snaptrade_account_id == account_id)
        .first()
    )


def save_connection(
    db: Session,
    user_id: str,
    authorization_id: str,
    brokerage_name: str | None = None,
    connection_type: str = "read",
    connection_data: dict[str, Any] | None = None,
    snaptrade_user_id: str | None = None,
) -> SnapTradeConnection:
    """Save a brokerage connection after the user finishes the portal flow."""
    record = parse_connection(
        connection_data or {},
        user_id=user_id,
        snaptrade_user_id=snaptrade_user_id,
        authorization_id=authorization_id,
        brokerage_name=brokerage_name,
        connection_type=connection_type,
    )
    connection = upsert_connection(db, record)
    db.commit()
    logger.info(
        "Saved connection %s (%s) for user %s",
        authorization_id,
        connection.brokerage_name,
        user_id,
    )
    return connection


def save_accounts(
    db: Session, connection_id: str, accounts: list[dict[str, Any]]
) -> SaveAccountsResponse:
    """
    Save a batch of accounts under a stored connection.

    Each account is written in its own savepoint, so one bad payload only
    fails its own entry. The owning user comes from the connection.
    """
    connection = get_connection(db, connection_id)
    results: list[AccountSaveResult] = []

    for raw in accounts:
        account_id = raw.get("id") if isinstance(raw, dict) else None
        try:
            with db.begin_nested():
                record = parse_account(
                    raw,
                    user_id=connection.user_id,
                    snaptrade_user_id=connection.snaptrade_user_id,
                    connection_id=connection_id,
                )
                upsert_account(db, record)
            results.append(AccountSaveResult(account_id=account_id, success=True))
        except (TradeFeedError, SQLAlchemyError) as e:
            logger.warning("Failed to save account %s: %s", account_id, e)
            results.append(
                AccountSaveResult(account_id=account_id, success=False, error=str(e))
            )

    succeeded = sum(1 for r in results if r.success)
    summary = SaveAccountsSummary(
        total=len(results), success=succeeded, errors=len(results) - succeeded
    )
    db.commit()
    logger.info("Saved accounts for connection %s: %s", connection_id, summary)
    return SaveAccountsResponse(results=results, summary=summary)


def touch_connection_sync(db: Session, connection_id: str | None) -> None:
    """Stamp last_sync_at on a connection, if it is stored. Does not commit."""
    if not connection_id:
        return
    connection = (
        db.query(SnapTradeConnection)
        .filter(SnapTradeConnection.snaptrade_connection_id == connection_id)
        .first()
    )
    if connection:
        connection.last_sync_at = utcnow()
