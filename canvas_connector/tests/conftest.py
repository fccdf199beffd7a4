"""Shared fixtures for Canvas connector tests."""

import asyncio
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from canvas_connector.client import (
    PagingFetcher,
    RateLimiter,
    RequestDispatcher,
    SingleResourceFetcher,
    build_async_client,
)
from canvas_connector.config import ConnectorConfig, PaginationConfig, RateLimitConfig
from canvas_connector.models.canvas import ModuleItem
from canvas_connector.models.credential import Credential
from canvas_connector.service import CanvasService

BASE_URL = "https://canvas.example.edu"
API_URL = BASE_URL + "/api/v1"
API_PATH = "/api/v1"


class FakeCanvas:
    """
    In-memory Canvas API for ``httpx.MockTransport``.

    Routes are keyed by API-relative path. Every request is recorded;
    unknown paths answer 404 the way Canvas does.
    """

    def __init__(self):
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        path: str,
        json: Any = None,
        status: int = 200,
        headers: Optional[Dict[str, str]] = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> None:
        if handler is None:
            def handler(request):
                return httpx.Response(status, json=json, headers=headers)
        self.routes[API_PATH + path] = handler

    def add_pages(self, path: str, pages: List[list]) -> None:
        """Serve ``pages`` one per request, linking each to the next."""
        def handler(request):
            number = int(request.url.params.get("page", "1"))
            headers = {}
            if number < len(pages):
                headers["Link"] = f'<{API_URL}{path}?page={number + 1}&per_page=100>; rel="next"'
            return httpx.Response(200, json=pages[number - 1], headers=headers)

        self.add(path, handler=handler)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(
                404, json={"errors": [{"message": "The specified resource does not exist."}]}
            )
        return route(request)

    def paths(self) -> List[str]:
        return [request.url.path[len(API_PATH):] for request in self.requests]


# --- Helpers ---


@pytest.fixture
def run():
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run


@pytest.fixture
def make_item():
    """Factory for module items."""
    def _make(item_id: int, item_type: str = "Page", position: Optional[int] = None, **fields):
        data = {"id": item_id, "title": f"Item {item_id}", "type": item_type, "position": position}
        data.update(fields)
        return ModuleItem.model_validate(data)
    return _make


# --- Configuration Fixtures ---


@pytest.fixture
def credential():
    return Credential(base_url=BASE_URL, token="test-token")


@pytest.fixture
def fast_rate_limit():
    """RateLimitConfig for fast testing (no spacing, no retries)."""
    return RateLimitConfig(min_interval_seconds=0, max_retries=0)


@pytest.fixture
def connector_config(fast_rate_limit):
    return ConnectorConfig(rate_limit=fast_rate_limit)


# --- HTTP Fixtures ---


@pytest.fixture
def canvas():
    return FakeCanvas()


@pytest.fixture
def client(credential, canvas):
    return build_async_client(credential, transport=httpx.MockTransport(canvas))


@pytest.fixture
def rate_limiter(fast_rate_limit):
    return RateLimiter(fast_rate_limit)


@pytest.fixture
def dispatcher(client, rate_limiter):
    return RequestDispatcher(client, rate_limiter)


@pytest.fixture
def fetcher(dispatcher):
    return SingleResourceFetcher(dispatcher)


@pytest.fixture
def paging(dispatcher):
    return PagingFetcher(dispatcher, PaginationConfig())


@pytest.fixture
def service(credential, connector_config, canvas):
    return CanvasService(credential, connector_config, transport=httpx.MockTransport(canvas))
