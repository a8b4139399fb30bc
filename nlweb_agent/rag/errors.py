from __future__ import annotations

"""Error taxonomy shared by the query pipeline and the HTTP layer."""

VALIDATION = "validation"
REMOTE_SERVICE = "remote_service"
INTERNAL = "internal"

UNAUTHORIZED = "unauthorized"
RATE_LIMITED = "rate_limited"
UPSTREAM_UNAVAILABLE = "upstream_unavailable"
GENERIC = "generic"

_REMOTE_STATUS = {
    UNAUTHORIZED: 401,
    RATE_LIMITED: 429,
    UPSTREAM_UNAVAILABLE: 502,
    GENERIC: 502,
}


class QueryError(RuntimeError):
    """Base class for errors surfaced to callers of the query pipeline."""
    kind = INTERNAL
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(QueryError):
    """Raised when a query or its context fails validation."""
    kind = VALIDATION
    status_code = 400

    def __init__(self, message: str, rule: str | None = None) -> None:
        super().__init__(message)
        self.rule = rule


class RemoteServiceError(QueryError):
    """Raised when the remote language model call fails."""
    kind = REMOTE_SERVICE

    def __init__(self, message: str, remote_kind: str = GENERIC) -> None:
        super().__init__(message)
        self.remote_kind = remote_kind if remote_kind in _REMOTE_STATUS else GENERIC
        self.status_code = _REMOTE_STATUS[self.remote_kind]


class InternalError(QueryError):
    """Raised for unexpected failures; carries no internal detail."""
    kind = INTERNAL
    status_code = 500

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(message)
