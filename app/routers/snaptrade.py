"""SnapTrade endpoints: brokerage linking, account data and activity sync."""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from snaptrade_client import SnapTrade
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.sync import (
    AccountRequest,
    AssignToUserRequest,
    ConnectionPortalRequest,
    ConnectionRead,
    DeleteConnectionRequest,
    DeleteUserRequest,
    RegisterUserRequest,
    SaveAccountsRequest,
    SaveAccountsResponse,
    SaveConnectionRequest,
    SaveConnectionResponse,
    SyncActivitiesRequest,
    SyncResult,
    UserCredentialsRequest,
    UserRead,
)
from app.services import brokerage_service, snaptrade_client, user_service
from app.services.snaptrade_client import get_snaptrade_client
from app.services.sync import save_accounts, save_connection, sync_account_activities

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/sync-account-activities")
def sync_activities(
    body: SyncActivitiesRequest,
    db: Session = Depends(get_db),
    client: SnapTrade = Depends(get_snaptrade_client),
) -> SyncResult:
    """Fetch an account's activities, store them and derive feed trades."""
    return sync_account_activities(
        db,
        client,
        body.user_id,
        body.user_secret,
        body.account_id,
        body.app_user_id,
        full_sync=body.full_sync,
    )


@router.post("/save-accounts")
def save_accounts_route(
    body: SaveAccountsRequest, db: Session = Depends(get_db)
) -> SaveAccountsResponse:
    """Save accounts under a stored connection, reporting each one."""
    return save_accounts(db, body.connection_id, body.accounts)


@router.post("/save-connection")
def save_connection_route(
    body: SaveConnectionRequest, db: Session = Depends(get_db)
) -> SaveConnectionResponse:
    connection = save_connection(
        db,
        user_id=body.user_id,
        authorization_id=body.authorization_id,
        brokerage_name=body.brokerage_name,
        connection_type=body.connection_type,
        connection_data=body.connection_data,
    )
    return SaveConnectionResponse(data=ConnectionRead.model_validate(connection))


@router.post("/accounts")
def list_accounts(
    body: UserCredentialsRequest,
    client: SnapTrade = Depends(get_snaptrade_client),
) -> list[Any]:
    return snaptrade_client.fetch_accounts(client, body.user_id, body.user_secret)


@router.post("/account-details")
def account_details(
    body: AccountRequest,
    db: Session = Depends(get_db),
    client: SnapTrade = Depends(get_snaptrade_client),
) -> dict[str, Any]:
    """Get one account's details; saves them when appUserId is given."""
    return brokerage_service.refresh_account_details(
        db,
        client,
        body.user_id,
        body.user_secret,
        body.account_id,
        app_user_id=body.app_user_id,
    )


@router.post("/account-positions")
def account_positions(
    body: AccountRequest,
    client: SnapTrade = Depends(get_snaptrade_client),
) -> list[Any]:
    return snaptrade_client.fetch_positions(
        client, body.user_id, body.user_secret, body.account_id
    )


@router.post("/option-positions")
def option_positions(
    body: AccountRequest,
    client: SnapTrade = Depends(get_snaptrade_client),
) -> list[Any]:
    return snaptrade_client.fetch_option_positions(
        client, body.user_id, body.user_secret, body.account_id
    )


@router.post("/connection-portal")
def connection_portal(
    body: ConnectionPortalRequest,
    client: SnapTrade = Depends(get_snaptrade_client),
) -> dict[str, Any]:
    """Get a connection portal link for linking a brokerage."""
    return snaptrade_client.create_connection_portal_url(
        client,
        body.user_id,
        body.user_secret,
        broker=body.broker,
        custom_redirect=body.custom_redirect,
        immediate_redirect=body.immediate_redirect,
        connection_type=body.connection_type,
    )


@router.post("/register-user")
def register_user(
    body: RegisterUserRequest,
    client: SnapTrade = Depends(get_snaptrade_client),
) -> dict[str, Any]:
    return snaptrade_client.register_user(client, body.user_id)


@router.post("/delete-user")
def delete_user(
    body: DeleteUserRequest,
    db: Session = Depends(get_db),
    client: SnapTrade = Depends(get_snaptrade_client),
) -> dict[str, Any]:
    return brokerage_service.delete_user(
        db,
        client,
        user_id=body.user_id,
        app_user_id=body.app_user_id,
        delete_from_database=body.delete_from_database,
        force_delete=body.force_delete,
    )


@router.post("/list-connections")
def list_connections(
    body: UserCredentialsRequest,
    client: SnapTrade = Depends(get_snaptrade_client),
) -> list[Any]:
    return snaptrade_client.list_connections(client, body.user_id, body.user_secret)


@router.delete("/delete-connection")
def delete_connection(
    body: DeleteConnectionRequest,
    client: SnapTrade = Depends(get_snaptrade_client),
) -> dict[str, Any]:
    snaptrade_client.delete_connection(
        client, body.user_id, body.user_secret, body.authorization_id
    )
    logger.info("Removed connection %s", body.authorization_id)
    return {
        "success": True,
        "message": "Connection deleted successfully",
        "authorizationId": body.authorization_id,
    }


@router.get("/status")
def api_status(client: SnapTrade = Depends(get_snaptrade_client)) -> dict[str, Any]:
    """Check that SnapTrade is reachable."""
    return snaptrade_client.check_api_status(client)


@router.get("/list-users")
def list_snaptrade_users(
    client: SnapTrade = Depends(get_snaptrade_client),
) -> list[Any]:
    return snaptrade_client.list_users(client)


@router.post("/assign-to-user")
def assign_to_user(
    body: AssignToUserRequest, db: Session = Depends(get_db)
) -> dict[str, Any]:
    """Attach existing SnapTrade credentials to an app user."""
    user = user_service.assign_snaptrade_credentials(
        db, body.app_user_id, body.snap_trade_user_id, body.snap_trade_user_secret
    )
    return {"success": True, "user": UserRead.model_validate(user)}


@router.get("/get-users")
def get_users(db: Session = Depends(get_db)) -> dict[str, list[UserRead]]:
    users = user_service.list_users(db)
    return {"users": [UserRead.model_validate(u) for u in users]}
