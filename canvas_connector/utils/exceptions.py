"""Custom exceptions for the Canvas connector."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classified failure kinds for Canvas API calls."""

    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    BAD_REQUEST = "bad_request"
    TRANSPORT = "transport"
    MALFORMED = "malformed"


class CanvasConnectorError(Exception):
    """Base exception for connector errors."""

    pass


class CanvasAPIError(CanvasConnectorError):
    """A failed Canvas call, normalized into one of the ErrorKind values."""

    kind: ErrorKind = ErrorKind.TRANSPORT
    label: str = "Canvas API request failed"

    def __init__(self, detail: str = "", status_code: Optional[int] = None):
        self.detail = detail
        self.status_code = status_code
        message = f"{self.label}: {detail}" if detail else self.label
        super().__init__(message)


class UnauthorizedError(CanvasAPIError):
    """Raised when the access token is missing or invalid (401)."""

    kind = ErrorKind.UNAUTHORIZED
    label = "Canvas API authentication failed. Please check your access token"


class ForbiddenError(CanvasAPIError):
    """Raised when the token lacks permission for a resource (403)."""

    kind = ErrorKind.FORBIDDEN
    label = "Canvas API access forbidden. Please check your permissions"


class NotFoundError(CanvasAPIError):
    """Raised when a resource does not exist (404 or domain-level lookup)."""

    kind = ErrorKind.NOT_FOUND
    label = "Canvas resource not found"


class RateLimitedError(CanvasAPIError):
    """Raised when Canvas throttles us despite client-side pacing (429)."""

    kind = ErrorKind.RATE_LIMITED
    label = "Canvas API rate limit exceeded. Please try again later"


class ServerError(CanvasAPIError):
    """Raised on 5xx responses."""

    kind = ErrorKind.SERVER_ERROR
    label = "Canvas API server error. Please try again later"


class BadRequestError(CanvasAPIError):
    """Raised on 4xx responses without a more specific kind."""

    kind = ErrorKind.BAD_REQUEST
    label = "Canvas API rejected the request"


class TransportError(CanvasAPIError):
    """Raised on network failures and timeouts."""

    kind = ErrorKind.TRANSPORT
    label = "Canvas API request failed"


class MalformedResponseError(CanvasAPIError):
    """Raised when a response body does not have the expected shape."""

    kind = ErrorKind.MALFORMED
    label = "Canvas API returned a malformed response"


class UnknownToolError(CanvasConnectorError):
    """Raised when a tool, prompt or resource name is not registered."""

    pass


class ToolArgumentError(CanvasConnectorError):
    """Raised when a tool call is missing a required argument."""

    pass
