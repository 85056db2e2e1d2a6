"""Thin wrappers over the SnapTrade SDK.

Every call goes through ``_call`` so SDK/transport failures surface as
``ExternalAPIError`` and response bodies come back as plain JSON-ready
Python values.
"""

from collections.abc import Callable, Mapping
from datetime import date, datetime
from decimal import Decimal
from functools import lru_cache
import logging
from typing import Any

from snaptrade_client import SnapTrade
from snaptrade_client.exceptions import ApiException
from snaptrade_client.schemas import BoolClass, NoneClass, Unset

from app.config import get_settings
from app.exceptions import ConfigurationError, ExternalAPIError

logger = logging.getLogger(__name__)

API_NAME = "SnapTrade"


@lru_cache
def get_snaptrade_client() -> SnapTrade:
    """Get the process-wide SnapTrade client (FastAPI dependency)."""
    settings = get_settings()
    if not settings.snaptrade_client_id or not settings.snaptrade_consumer_key:
        raise ConfigurationError(
            "SNAPTRADE_CLIENT_ID and SNAPTRADE_CONSUMER_KEY must be set"
        )
    return SnapTrade(
        consumer_key=settings.snaptrade_consumer_key,
        client_id=settings.snaptrade_client_id,
    )


def to_plain(value: Any) -> Any:
    """Convert SDK schema objects into plain JSON-compatible values."""
    if value is None or isinstance(value, (Unset, NoneClass)):
        return None
    if isinstance(value, BoolClass):
        return bool(value)
    if isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return str(value)
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, Mapping):
        return {str(key): to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _call(operation: str, func: Callable[..., Any], **kwargs) -> Any:
    """Invoke an SDK method and return its plain response body."""
    try:
        response = func(**kwargs)
    except ApiException as e:
        status = getattr(e, "status", None)
        body = getattr(e, "body", None)
        logger.error("SnapTrade %s failed (%s): %s", operation, status, body)
        raise ExternalAPIError(
            f"{operation} failed",
            api_name=API_NAME,
            status_code=status,
            response_body=str(body) if body is not None else None,
        ) from e
    except Exception as e:
        logger.error("SnapTrade %s failed: %s", operation, e)
        raise ExternalAPIError(f"{operation} failed: {e}", api_name=API_NAME) from e

    body = getattr(response, "body", None)
    if isinstance(body, Unset):
        return None
    return to_plain(body)


def _as_list(body: Any) -> list[Any]:
    if not body:
        return []
    if isinstance(body, list):
        return body
    return [body]


def fetch_account_activities(
    client: SnapTrade,
    user_id: str,
    user_secret: str,
    account_id: str,
    full_sync: bool = False,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[dict]:
    """
    Fetch transactions for a specific account.

    Uses the per-account endpoint. Response format:
    {"data": [...], "pagination": {"offset", "limit", "total"}}

    Without ``full_sync`` only the first page is read. With it, pages are
    walked until a short page comes back or the page budget runs out.
    """
    settings = get_settings()
    limit = settings.activity_page_size
    max_pages = settings.activity_max_pages if full_sync else 1

    # The SDK treats an explicit None as a value, so only send dates that are set
    dates = {
        key: value
        for key, value in (("start_date", start_date), ("end_date", end_date))
        if value is not None
    }

    all_activities: list[dict] = []
    offset = 0

    for page in range(max_pages):
        body = _call(
            "get_account_activities",
            client.account_information.get_account_activities,
            account_id=account_id,
            user_id=user_id,
            user_secret=user_secret,
            offset=offset,
            limit=limit,
            **dates,
        )
        if not body:
            break

        if isinstance(body, dict):
            activities = body.get("data") or []
        else:
            activities = _as_list(body)
        if not activities:
            break
        all_activities.extend(activities)
        logger.debug(
            "Fetched activity page %d for %s (%d rows, pagination=%s)",
            page + 1,
            account_id,
            len(activities),
            body.get("pagination") if isinstance(body, dict) else None,
        )

        # If we got fewer than limit, we've reached the end
        if len(activities) < limit:
            break

        offset += limit
    else:
        if full_sync:
            logger.warning(
                "Stopped activity fetch for %s after %d pages (page budget)",
                account_id,
                max_pages,
            )

    return all_activities


def fetch_accounts(client: SnapTrade, user_id: str, user_secret: str) -> list[Any]:
    """Fetch all accounts for user."""
    body = _call(
        "list_user_accounts",
        client.account_information.list_user_accounts,
        user_id=user_id,
        user_secret=user_secret,
    )
    return _as_list(body)


def fetch_account_details(
    client: SnapTrade, user_id: str, user_secret: str, account_id: str
) -> dict:
    """Fetch a single account, including balance and sync status."""
    body = _call(
        "get_user_account_details",
        client.account_information.get_user_account_details,
        account_id=account_id,
        user_id=user_id,
        user_secret=user_secret,
    )
    return body or {}


def fetch_positions(
    client: SnapTrade, user_id: str, user_secret: str, account_id: str
) -> list[Any]:
    """Fetch stock/ETF/crypto/mutual fund positions for an account."""
    body = _call(
        "get_user_account_positions",
        client.account_information.get_user_account_positions,
        account_id=account_id,
        user_id=user_id,
        user_secret=user_secret,
    )
    return _as_list(body)


def fetch_option_positions(
    client: SnapTrade, user_id: str, user_secret: str, account_id: str
) -> list[Any]:
    """Fetch option holdings for an account (separate endpoint)."""
    body = _call(
        "list_option_holdings",
        client.options.list_option_holdings,
        account_id=account_id,
        user_id=user_id,
        user_secret=user_secret,
    )
    return _as_list(body)


def create_connection_portal_url(
    client: SnapTrade,
    user_id: str,
    user_secret: str,
    broker: str | None = None,
    custom_redirect: str | None = None,
    immediate_redirect: bool | None = None,
    connection_type: str | None = None,
) -> dict:
    """Generate a connection portal login link for brokerage linking."""
    optional = {
        "broker": broker,
        "custom_redirect": custom_redirect,
        "immediate_redirect": immediate_redirect,
        "connection_type": connection_type,
    }
    body = _call(
        "login_snap_trade_user",
        client.authentication.login_snap_trade_user,
        user_id=user_id,
        user_secret=user_secret,
        **{key: value for key, value in optional.items() if value is not None},
    )
    return body or {}


def register_user(client: SnapTrade, user_id: str) -> dict:
    """Register a SnapTrade user; the body carries userId and userSecret."""
    body = _call(
        "register_snap_trade_user",
        client.authentication.register_snap_trade_user,
        user_id=user_id,
    )
    return body or {}


def delete_user(client: SnapTrade, user_id: str) -> dict:
    """Queue deletion of a SnapTrade user and all of its connections."""
    body = _call(
        "delete_snap_trade_user",
        client.authentication.delete_snap_trade_user,
        user_id=user_id,
    )
    return body or {}


def list_users(client: SnapTrade) -> list[Any]:
    """List SnapTrade user ids registered under this client id."""
    body = _call("list_snap_trade_users", client.authentication.list_snap_trade_users)
    return _as_list(body)


def list_connections(client: SnapTrade, user_id: str, user_secret: str) -> list[Any]:
    """List brokerage authorizations (connections) for a user."""
    body = _call(
        "list_brokerage_authorizations",
        client.connections.list_brokerage_authorizations,
        user_id=user_id,
        user_secret=user_secret,
    )
    return _as_list(body)


def delete_connection(
    client: SnapTrade, user_id: str, user_secret: str, authorization_id: str
) -> None:
    """Remove a brokerage authorization. SnapTrade answers 204 with no body."""
    _call(
        "remove_brokerage_authorization",
        client.connections.remove_brokerage_authorization,
        authorization_id=authorization_id,
        user_id=user_id,
        user_secret=user_secret,
    )


def check_api_status(client: SnapTrade) -> dict:
    """Check SnapTrade API availability."""
    body = _call("api_status", client.api_status.check)
    return body or {}
