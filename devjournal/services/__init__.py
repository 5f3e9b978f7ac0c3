"""Service layer — business logic orchestration."""

from sqlalchemy.exc import InterfaceError, OperationalError


class ServiceError(Exception):
    """Base service exception."""


class NotFoundError(ServiceError):
    """Resource not found (-> HTTP 404)."""


class ValidationError(ServiceError):
    """Caller input failed a whitelist or required-field check (-> HTTP 422)."""


class AuthenticationError(ServiceError):
    """Missing or invalid caller identity (-> HTTP 401)."""


class SignatureInvalidError(AuthenticationError):
    """Webhook signature did not match the configured secret (-> HTTP 401)."""


class SourceUnavailableError(ServiceError):
    """GitHub returned a non-success status or could not be reached (-> HTTP 502)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class StoreUnavailableError(ServiceError):
    """The database is not configured or cannot be reached (-> HTTP 503)."""


# ``Unauthorized`` is the name used at the HTTP boundary.
Unauthorized = AuthenticationError


# Raised by SQLAlchemy or the driver when the database cannot be reached.
# asyncpg lets socket errors such as ConnectionRefusedError through unwrapped.
STORE_CONNECTION_ERRORS: tuple[type[Exception], ...] = (
    OperationalError,
    InterfaceError,
    OSError,
)
