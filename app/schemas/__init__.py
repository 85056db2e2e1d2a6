from app.schemas.snaptrade import (
    AccountPayload,
    ActivityPayload,
    ConnectionPayload,
)
from app.schemas.sync import (
    AccountRequest,
    AccountSaveResult,
    AssignToUserRequest,
    ConnectionPortalRequest,
    ConnectionRead,
    DeleteConnectionRequest,
    DeleteUserRequest,
    RegisterUserRequest,
    SaveAccountsRequest,
    SaveAccountsResponse,
    SaveAccountsSummary,
    SaveConnectionRequest,
    SaveConnectionResponse,
    SyncActivitiesRequest,
    SyncResult,
    UserCredentialsRequest,
    UserRead,
)

__all__ = [
    "AccountPayload",
    "ActivityPayload",
    "ConnectionPayload",
    "AccountRequest",
    "AccountSaveResult",
    "AssignToUserRequest",
    "ConnectionPortalRequest",
    "ConnectionRead",
    "DeleteConnectionRequest",
    "DeleteUserRequest",
    "RegisterUserRequest",
    "SaveAccountsRequest",
    "SaveAccountsResponse",
    "SaveAccountsSummary",
    "SaveConnectionRequest",
    "SaveConnectionResponse",
    "SyncActivitiesRequest",
    "SyncResult",
    "UserCredentialsRequest",
    "UserRead",
]
