"""Pydantic schemas for the SnapTrade API request/response bodies."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, as the web client sends them."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserCredentialsRequest(CamelModel):
    user_id: str = Field(min_length=1)
    user_secret: str = Field(min_length=1)


class AccountRequest(UserCredentialsRequest):
    account_id: str = Field(min_length=1)
    # When set, the fetched details are saved against this app user
    app_user_id: str | None = None


class SyncActivitiesRequest(UserCredentialsRequest):
    account_id: str = Field(min_length=1)
    app_user_id: str = Field(min_length=1)
    full_sync: bool = False


class SyncResult(CamelModel):
    """Outcome of one activity sync batch."""

    success: bool = True
    total_activities_fetched: int = 0
    new_activities_stored: int = 0
    new_trades_created: int = 0
    skipped_activities: int = 0
    sync_batch_id: str
    account_id: str
    full_sync: bool = False


class SaveAccountsRequest(CamelModel):
    connection_id: str = Field(min_length=1)
    accounts: list[dict[str, Any]]


class AccountSaveResult(CamelModel):
    account_id: str | None
    success: bool
    error: str | None = None


class SaveAccountsSummary(CamelModel):
    total: int = 0
    success: int = 0
    errors: int = 0


class SaveAccountsResponse(CamelModel):
    success: bool = True
    results: list[AccountSaveResult]
    summary: SaveAccountsSummary


class SaveConnectionRequest(CamelModel):
    user_id: str = Field(min_length=1)
    authorization_id: str = Field(min_length=1)
    brokerage_name: str | None = None
    connection_type: str = "read"
    connection_data: dict[str, Any] | None = None


class ConnectionRead(BaseModel):
    """Stored connection row, returned with its column names."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    snaptrade_connection_id: str
    user_id: str | None
    snaptrade_user_id: str | None
    brokerage_name: str | None
    brokerage_slug: str | None
    connection_type: str
    status: str
    disabled: bool
    last_sync_at: datetime | None


class SaveConnectionResponse(BaseModel):
    success: bool = True
    data: ConnectionRead


class ConnectionPortalRequest(UserCredentialsRequest):
    broker: str | None = None
    custom_redirect: str | None = None
    immediate_redirect: bool | None = None
    connection_type: str | None = None


class RegisterUserRequest(CamelModel):
    user_id: str = Field(min_length=1)


class DeleteUserRequest(CamelModel):
    user_id: str | None = None
    app_user_id: str | None = None
    delete_from_database: bool = False
    force_delete: bool = False


class DeleteConnectionRequest(UserCredentialsRequest):
    authorization_id: str = Field(min_length=1)


class AssignToUserRequest(CamelModel):
    app_user_id: str = Field(min_length=1)
    snap_trade_user_id: str = Field(min_length=1)
    snap_trade_user_secret: str = Field(min_length=1)


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    display_name: str | None
    snaptrade_user_id: str | None
    snaptrade_user_secret: str | None
    snaptrade_created_at: datetime | None
