"""SnapTrade pass-through operations that touch the database."""

import logging
from typing import Any

from snaptrade_client import SnapTrade
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import ExternalAPIError, SyncError, TradeFeedError
from app.services import snaptrade_client, user_service
from app.services.sync.brokerage_upsert import upsert_account
from app.services.sync.snaptrade_parser import parse_account

logger = logging.getLogger(__name__)


def refresh_account_details(
    db: Session,
    client: SnapTrade,
    user_id: str,
    user_secret: str,
    account_id: str,
    app_user_id: str | None = None,
) -> dict:
    """
    Fetch one account's details, saving them when an app user is given.

    The stored row picks up the latest balance and sync status.
    """
    details = snaptrade_client.fetch_account_details(
        client, user_id, user_secret, account_id
    )
    if app_user_id and details:
        record = parse_account(details, user_id=app_user_id, snaptrade_user_id=user_id)
        upsert_account(db, record)
        db.commit()
        logger.info("Refreshed account %s for user %s", account_id, app_user_id)
    return details


def delete_user(
    db: Session,
    client: SnapTrade,
    user_id: str | None = None,
    app_user_id: str | None = None,
    delete_from_database: bool = False,
    force_delete: bool = False,
) -> dict[str, Any]:
    """
    Delete a SnapTrade user and optionally clear the app user's credentials.

    Returns the outcome of each part:
        {"snapTrade": {...}, "database": {...}, "overall": {...}}

    A SnapTrade failure is raised unless ``force_delete`` is set, in which
    case cleanup continues and the failure becomes a warning. Raises
    SyncError when no part succeeded and the delete was not forced.
    """
    warnings: list[str] = []
    snaptrade_part: dict[str, Any] = {"success": False, "error": "Not attempted"}
    database_part: dict[str, Any] = {"success": False, "error": "Not attempted"}

    if user_id and user_id != "unknown":
        try:
            data = snaptrade_client.delete_user(client, user_id)
            snaptrade_part = {"success": True, "data": data}
            logger.info("Deleted SnapTrade user %s", user_id)
        except ExternalAPIError as e:
            if not force_delete:
                raise
            logger.warning("SnapTrade deletion of %s failed, forcing: %s", user_id, e)
            snaptrade_part = {"success": False, "error": str(e)}
            warnings.append(f"SnapTrade deletion failed: {e}")
    else:
        logger.info("No SnapTrade user id given, skipping SnapTrade deletion")

    if delete_from_database and app_user_id:
        try:
            user_service.clear_snaptrade_credentials(db, app_user_id)
            database_part = {
                "success": True,
                "data": {"message": "Database cleaned up successfully"},
            }
        except (TradeFeedError, SQLAlchemyError) as e:
            db.rollback()
            logger.warning("Database cleanup for %s failed: %s", app_user_id, e)
            database_part = {"success": False, "error": str(e)}
            warnings.append(f"Database cleanup failed: {e}")

    outcome = {
        "snapTrade": snaptrade_part,
        "database": database_part,
        "overall": {
            "success": True,
            "message": "Cleanup completed",
            "warnings": warnings,
        },
    }
    if not (snaptrade_part["success"] or database_part["success"] or force_delete):
        raise SyncError("All cleanup operations failed")
    return outcome
