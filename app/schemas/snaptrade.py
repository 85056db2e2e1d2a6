"""Typed views of SnapTrade response payloads.

SnapTrade responses are loosely shaped: fields go missing, nested objects
arrive as null, and numbers sometimes come back as strings. These models
absorb that in one place. Every field is optional and coerced leniently,
so validating a dict never fails on a single bad field; unknown keys are
kept (``extra="allow"``) so nothing is lost when the API adds fields.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict

from app.utils.parsing import parse_date, parse_datetime, to_decimal, to_str


def _object_or_none(value: Any) -> dict | None:
    return value if isinstance(value, dict) else None


def _symbol_object(value: Any) -> dict | None:
    # Some endpoints send the ticker as a bare string
    if isinstance(value, str):
        return {"symbol": value} if value.strip() else None
    return _object_or_none(value)


def _nested_symbol(value: Any) -> str | None:
    # Holdings nest one level deeper: symbol.symbol.symbol
    if isinstance(value, dict):
        return to_str(value.get("symbol"))
    return to_str(value)


def _balance_total(value: Any) -> dict | None:
    # Older payloads send balance.total as a bare number
    if isinstance(value, (int, float, str)) and not isinstance(value, bool):
        return {"amount": value}
    return _object_or_none(value)


def _flag(value: Any) -> bool:
    return value if isinstance(value, bool) else False


Text = Annotated[str | None, BeforeValidator(to_str)]
Amount = Annotated[Decimal | None, BeforeValidator(to_decimal)]
Day = Annotated[date | None, BeforeValidator(parse_date)]
Timestamp = Annotated[datetime | None, BeforeValidator(parse_datetime)]
Flag = Annotated[bool, BeforeValidator(_flag)]


class SnapTradePayload(BaseModel):
    model_config = ConfigDict(extra="allow")


class CurrencyPayload(SnapTradePayload):
    code: Text = None


class SymbolPayload(SnapTradePayload):
    id: Text = None
    symbol: Annotated[str | None, BeforeValidator(_nested_symbol)] = None
    raw_symbol: Text = None
    description: Text = None


class ActivityPayload(SnapTradePayload):
    """One entry of ``get_account_activities`` → ``data``."""

    id: Text = None
    type: Text = None
    symbol: Annotated[SymbolPayload | None, BeforeValidator(_symbol_object)] = None
    currency: Annotated[CurrencyPayload | None, BeforeValidator(_object_or_none)] = None
    price: Amount = None
    units: Amount = None
    amount: Amount = None
    fee: Amount = None
    trade_date: Timestamp = None
    settlement_date: Day = None
    institution: Text = None
    external_reference_id: Text = None
    description: Text = None


class BalanceTotalPayload(SnapTradePayload):
    amount: Amount = None
    currency: Text = None


class BalancePayload(SnapTradePayload):
    total: Annotated[BalanceTotalPayload | None, BeforeValidator(_balance_total)] = None
    currency: Text = None


class SyncStatusDetailPayload(SnapTradePayload):
    initial_sync_completed: Flag = False
    last_successful_sync: Timestamp = None
    first_transaction_date: Day = None


class SyncStatusPayload(SnapTradePayload):
    holdings: Annotated[
        SyncStatusDetailPayload | None, BeforeValidator(_object_or_none)
    ] = None
    transactions: Annotated[
        SyncStatusDetailPayload | None, BeforeValidator(_object_or_none)
    ] = None


class AccountMetaPayload(SnapTradePayload):
    type: Text = None
    status: Text = None
    institution_name: Text = None


class AccountPayload(SnapTradePayload):
    """Account as returned by ``list_user_accounts`` / ``get_user_account_details``."""

    id: Text = None
    brokerage_authorization: Text = None
    name: Text = None
    number: Text = None
    institution_name: Text = None
    status: Text = None
    raw_type: Text = None
    # Flat shape used by the web client
    brokerage: Text = None
    type: Text = None
    meta: Annotated[AccountMetaPayload | None, BeforeValidator(_object_or_none)] = None
    balance: Annotated[BalancePayload | None, BeforeValidator(_object_or_none)] = None
    sync_status: Annotated[
        SyncStatusPayload | None, BeforeValidator(_object_or_none)
    ] = None


class BrokeragePayload(SnapTradePayload):
    id: Text = None
    slug: Text = None
    name: Text = None
    display_name: Text = None
    aws_s3_logo_url: Text = None
    aws_s3_square_logo_url: Text = None


class ConnectionPayload(SnapTradePayload):
    """Brokerage authorization from ``list_brokerage_authorizations``."""

    id: Text = None
    name: Text = None
    type: Text = None
    brokerage: Annotated[BrokeragePayload | None, BeforeValidator(_object_or_none)] = None
    disabled: Flag = False
    disabled_date: Timestamp = None
    created_date: Timestamp = None
