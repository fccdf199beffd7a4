"""Rate-limited, paginating Canvas API client."""

from .rate_limiter import RateLimiter
from .response_classifier import ResponseClassifier
from .dispatcher import RequestDispatcher, build_async_client
from .fetchers import SingleResourceFetcher, PagingFetcher

__all__ = [
    "RateLimiter",
    "ResponseClassifier",
    "RequestDispatcher",
    "build_async_client",
    "SingleResourceFetcher",
    "PagingFetcher",
]
