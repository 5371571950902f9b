"""Exception hierarchy shared by the repository, services and HTTP layer.

Every error carries the HTTP status it maps to and a message that is safe to
return to clients. Internal causes are chained with ``raise ... from`` and
only ever reach the logs.
"""


class ServiceError(Exception):
    """Base class for errors that end a request with a JSON error envelope."""

    status_code = 500
    default_message = "internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DecodeError(ServiceError):
    """Request body could not be decoded into the expected payload."""

    status_code = 400
    default_message = "body contains badly-formed JSON"


class NotFound(ServiceError):
    status_code = 404
    default_message = "user not found"


class QueryError(ServiceError):
    """Store unreachable or query failed."""

    status_code = 500
    default_message = "database error"


class QueryTimeout(QueryError):
    status_code = 504
    default_message = "database operation timed out"


class DuplicateEmail(QueryError):
    status_code = 400
    default_message = "a user with this email already exists"


class HashError(ServiceError):
    """Password hashing or hash verification failed."""

    status_code = 500
    default_message = "password hashing failed"


class CredentialMismatch(ServiceError):
    status_code = 400
    default_message = "password does not match"


class InvalidCredentials(ServiceError):
    """The only failure the authentication flow reports for lookup or verification."""

    status_code = 400
    default_message = "invalid credentials"


class DatabaseUnavailable(Exception):
    """Raised at startup when the database never became reachable."""


class Forbidden(ServiceError):
    status_code = 403
    default_message = "forbidden"
