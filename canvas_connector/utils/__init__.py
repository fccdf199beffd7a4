"""Utility functions and configurations."""

from .logging_config import setup_logging, get_logger
from .exceptions import (
    ErrorKind,
    CanvasConnectorError,
    CanvasAPIError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    BadRequestError,
    TransportError,
    MalformedResponseError,
    UnknownToolError,
    ToolArgumentError,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "ErrorKind",
    "CanvasConnectorError",
    "CanvasAPIError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "BadRequestError",
    "TransportError",
    "MalformedResponseError",
    "UnknownToolError",
    "ToolArgumentError",
]
