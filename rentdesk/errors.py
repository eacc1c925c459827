"""
Error taxonomy for the rental desk client.

- AuthenticationError: the backend rejected the session token
- ConnectivityError: no HTTP response, even after the failover retry
- BackendError: the backend answered with an error status
- QueryDisabledError: a read was attempted without an authenticated session
"""

from typing import Any, Optional


class RentDeskError(Exception):
    """Base class for all rental desk client errors."""


class AuthenticationError(RentDeskError):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class ConnectivityError(RentDeskError):
    """Raised when no backend answered the request."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class BackendError(RentDeskError):
    """An error response from the backend, carrying its message verbatim."""

    def __init__(self, status_code: int, detail: Any = None, url: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail
        self.url = url
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if isinstance(self.detail, dict):
            for key in ("message", "error", "detail"):
                if self.detail.get(key):
                    return str(self.detail[key])
        if self.detail:
            return str(self.detail)
        return f"Backend returned HTTP {self.status_code}"


class QueryDisabledError(RentDeskError):
    def __init__(self, key: Any = None):
        super().__init__(f"Query {key!r} is disabled until the session is authenticated")
        self.key = key
