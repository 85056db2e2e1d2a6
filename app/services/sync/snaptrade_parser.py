"""Parsing utilities for SnapTrade API responses.

Turns raw activity, account and connection payloads into flat records ready
for storage. Nothing here raises on a malformed field: absent or unparseable
values degrade to None / 0 / a documented default, so one bad record cannot
abort a batch.
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import Decimal
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from app.exceptions import ValidationError
from app.schemas.snaptrade import AccountPayload, ActivityPayload, ConnectionPayload

logger = logging.getLogger(__name__)

# Assumed when a payload carries no currency code. This is a fixed default,
# not inferred from the account or institution.
DEFAULT_CURRENCY = "USD"

ZERO = Decimal("0")


@dataclass(frozen=True)
class NormalizedActivity:
    """Canonical shape of one SnapTrade activity."""

    activity_id: str | None
    activity_type: str
    ticker: str | None
    company_name: str | None
    currency_code: str
    price: Decimal
    units: Decimal
    amount: Decimal
    fee: Decimal
    trade_date: datetime | None
    settlement_date: date | None
    institution: str | None
    external_reference_id: str | None
    raw: dict | None


@dataclass(frozen=True)
class AccountRecord:
    """Column values for one snaptrade_accounts row."""

    snaptrade_account_id: str
    user_id: str | None
    snaptrade_user_id: str | None
    snaptrade_connection_id: str | None
    account_name: str | None
    account_number: str | None
    institution_name: str | None
    account_type: str | None
    status: str | None
    balance_amount: Decimal | None
    balance_currency: str
    holdings_sync_completed: bool
    holdings_last_synced_at: datetime | None
    transactions_sync_completed: bool
    transactions_last_synced_at: datetime | None
    transactions_first_transaction_date: date | None
    raw_account_data: dict | None
    raw_balance_data: dict | None
    raw_sync_status: dict | None

    def to_row(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ConnectionRecord:
    """Column values for one snaptrade_connections row."""

    snaptrade_connection_id: str
    user_id: str | None
    snaptrade_user_id: str | None
    brokerage_name: str | None
    brokerage_slug: str | None
    brokerage_logo_url: str | None
    connection_type: str
    status: str
    disabled: bool
    disabled_date: datetime | None
    connection_created_date: datetime | None
    raw_connection_data: dict | None

    def to_row(self) -> dict[str, Any]:
        return asdict(self)


def _validate(model, raw: Any):
    """Validate a payload, falling back to an empty model."""
    if not isinstance(raw, dict):
        return model()
    try:
        return model.model_validate(raw)
    except PydanticValidationError as e:
        logger.warning("Unreadable %s payload, using defaults: %s", model.__name__, e)
        return model()


def parse_activity(raw: Any) -> ActivityPayload:
    return _validate(ActivityPayload, raw)


def extract_symbol_info(payload: ActivityPayload) -> tuple[str | None, str | None]:
    """
    Extract (ticker, company name) from an activity.

    Prefers ``symbol.raw_symbol`` over ``symbol.symbol``. A missing symbol
    object yields (None, None); callers treat that as "not tradable".
    """
    symbol = payload.symbol
    if symbol is None:
        return None, None
    return symbol.raw_symbol or symbol.symbol, symbol.description


def extract_currency(payload: ActivityPayload) -> str:
    """Extract currency code from an activity, defaulting to USD."""
    if payload.currency and payload.currency.code:
        return payload.currency.code
    return DEFAULT_CURRENCY


def normalize_activity(raw: Any) -> NormalizedActivity:
    """Normalize one raw activity. Never raises."""
    payload = parse_activity(raw)
    ticker, company_name = extract_symbol_info(payload)

    return NormalizedActivity(
        activity_id=payload.id,
        activity_type=payload.type or "UNKNOWN",
        ticker=ticker,
        company_name=company_name,
        currency_code=extract_currency(payload),
        price=payload.price or ZERO,
        units=payload.units or ZERO,
        amount=payload.amount or ZERO,
        fee=payload.fee or ZERO,
        trade_date=payload.trade_date,
        settlement_date=payload.settlement_date,
        institution=payload.institution,
        external_reference_id=payload.external_reference_id,
        raw=raw if isinstance(raw, dict) else None,
    )


def parse_account(
    raw: Any,
    user_id: str | None = None,
    snaptrade_user_id: str | None = None,
    connection_id: str | None = None,
) -> AccountRecord:
    """
    Build an account record from a SnapTrade account payload.

    Reads the nested shapes defensively:
    - balance.total.amount / balance.total.currency (or a flat balance.total)
    - sync_status.holdings.* and sync_status.transactions.*
    - meta.type / meta.status / meta.institution_name as fallbacks

    Raises ValidationError when the payload has no account id, since the
    row cannot be keyed without one.
    """
    payload = _validate(AccountPayload, raw)
    if not payload.id:
        raise ValidationError("Account payload has no id", field="id")

    meta = payload.meta
    balance = payload.balance
    total = balance.total if balance else None
    sync_status = payload.sync_status
    holdings = sync_status.holdings if sync_status else None
    transactions = sync_status.transactions if sync_status else None

    raw_dict = raw if isinstance(raw, dict) else {}
    raw_balance = raw_dict.get("balance")
    raw_sync_status = raw_dict.get("sync_status")

    return AccountRecord(
        snaptrade_account_id=payload.id,
        user_id=user_id,
        snaptrade_user_id=snaptrade_user_id,
        snaptrade_connection_id=connection_id or payload.brokerage_authorization,
        account_name=payload.name,
        account_number=payload.number,
        institution_name=(
            payload.institution_name
            or payload.brokerage
            or (meta.institution_name if meta else None)
        ),
        account_type=(meta.type if meta else None) or payload.raw_type or payload.type,
        status=payload.status or (meta.status if meta else None),
        balance_amount=total.amount if total else None,
        balance_currency=(
            (total.currency if total else None)
            or (balance.currency if balance else None)
            or DEFAULT_CURRENCY
        ),
        holdings_sync_completed=holdings.initial_sync_completed if holdings else False,
        holdings_last_synced_at=holdings.last_successful_sync if holdings else None,
        transactions_sync_completed=(
            transactions.initial_sync_completed if transactions else False
        ),
        transactions_last_synced_at=(
            transactions.last_successful_sync if transactions else None
        ),
        transactions_first_transaction_date=(
            transactions.first_transaction_date if transactions else None
        ),
        raw_account_data=raw_dict or None,
        raw_balance_data=raw_balance if isinstance(raw_balance, dict) else None,
        raw_sync_status=raw_sync_status if isinstance(raw_sync_status, dict) else None,
    )


def parse_connection(
    raw: Any,
    user_id: str | None = None,
    snaptrade_user_id: str | None = None,
    authorization_id: str | None = None,
    brokerage_name: str | None = None,
    connection_type: str | None = None,
) -> ConnectionRecord:
    """
    Build a connection record from a brokerage authorization payload.

    Explicit arguments win over payload values. Raises ValidationError when
    neither supplies an authorization id.
    """
    payload = _validate(ConnectionPayload, raw)
    connection_id = authorization_id or payload.id
    if not connection_id:
        raise ValidationError("Connection has no authorization id", field="id")

    brokerage = payload.brokerage
    brokerage_logo_url = None
    if brokerage:
        brokerage_logo_url = brokerage.aws_s3_square_logo_url or brokerage.aws_s3_logo_url

    return ConnectionRecord(
        snaptrade_connection_id=connection_id,
        user_id=user_id,
        snaptrade_user_id=snaptrade_user_id,
        brokerage_name=(
            brokerage_name
            or (brokerage.display_name or brokerage.name if brokerage else None)
            or payload.name
        ),
        brokerage_slug=brokerage.slug if brokerage else None,
        brokerage_logo_url=brokerage_logo_url,
        connection_type=connection_type or payload.type or "read",
        status="disabled" if payload.disabled else "active",
        disabled=payload.disabled,
        disabled_date=payload.disabled_date,
        connection_created_date=payload.created_date,
        raw_connection_data=raw if isinstance(raw, dict) and raw else None,
    )
