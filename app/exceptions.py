"""Exceptions raised by the sync services.

Each carries the HTTP status the API answers with when it escapes a route.
"""


class TradeFeedError(Exception):
    """Base exception for TradeFeed."""

    http_status = 500


class NotFoundError(TradeFeedError):
    """A user, connection or account the request names does not exist."""

    http_status = 404

    def __init__(self, resource_type: str, resource_id: int | str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} with id {resource_id} not found")


class SyncError(TradeFeedError):
    """Raised when a sync or cleanup could not make any progress."""

    def __init__(self, message: str, original_error: Exception | None = None):
        self.original_error = original_error
        super().__init__(message)


class ValidationError(TradeFeedError):
    """A SnapTrade payload or request value cannot be stored as given."""

    http_status = 400

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class ConfigurationError(TradeFeedError):
    """Missing credentials or an unsupported database."""


class ExternalAPIError(TradeFeedError):
    """SnapTrade rejected a call or could not be reached.

    ``status_code`` is the upstream status, if SnapTrade answered at all.
    """

    http_status = 502

    def __init__(
        self,
        message: str,
        api_name: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        self.api_name = api_name
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(f"{api_name}: {message}")
