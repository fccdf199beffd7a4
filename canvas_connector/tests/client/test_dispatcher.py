"""Tests for RequestDispatcher and build_async_client."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from canvas_connector.client import RateLimiter, RequestDispatcher, build_async_client
from canvas_connector.config import CanvasConfig, RateLimitConfig
from canvas_connector.models.request import PageCursor, RequestTicket
from canvas_connector.utils.exceptions import (
    MalformedResponseError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    TransportError,
    UnauthorizedError,
)

API_URL = "https://canvas.example.edu/api/v1"


class TestBuildAsyncClient:
    """Tests for client construction."""

    def test_base_url_is_api_root(self, credential):
        """Test requests are rooted at /api/v1."""
        client = build_async_client(credential)
        assert str(client.base_url).rstrip("/") == API_URL

    def test_auth_headers(self, credential):
        """Test the bearer token and JSON accept headers are set."""
        client = build_async_client(credential)
        assert client.headers["Authorization"] == "Bearer test-token"
        assert client.headers["Accept"] == "application/json"

    def test_timeout_from_config(self, credential):
        """Test the configured timeout is applied."""
        client = build_async_client(credential, CanvasConfig(timeout_seconds=12))
        assert client.timeout.read == 12


class TestSend:
    """Tests for sending tickets."""

    def test_successful_request(self, run, canvas, dispatcher):
        """Test a 2xx response is returned."""
        canvas.add("/courses/1", json={"id": 1})

        response = run(dispatcher.send(RequestTicket(path="/courses/1")))

        assert response.json() == {"id": 1}
        assert canvas.paths() == ["/courses/1"]

    def test_request_carries_token(self, run, canvas, dispatcher):
        """Test the bearer token is sent."""
        canvas.add("/courses/1", json={"id": 1})

        run(dispatcher.send(RequestTicket(path="/courses/1")))

        assert canvas.requests[0].headers["Authorization"] == "Bearer test-token"

    def test_query_params_sent(self, run, canvas, dispatcher):
        """Test list params are encoded Canvas style."""
        canvas.add("/courses", json=[])

        run(dispatcher.send(RequestTicket(path="/courses", params={"include[]": ["term", "total_students"]})))

        assert canvas.requests[0].url.params.get_list("include[]") == ["term", "total_students"]

    def test_post_sends_json(self, run, canvas, dispatcher):
        """Test POST bodies are JSON encoded."""
        canvas.add("/courses/1/pages", json={"url": "intro"})

        run(dispatcher.send(RequestTicket(method="POST", path="/courses/1/pages", json_body={"title": "Intro"})))

        assert canvas.requests[0].method == "POST"
        assert json.loads(canvas.requests[0].content) == {"title": "Intro"}

    def test_each_send_acquires_rate_limiter(self, run, canvas, dispatcher, rate_limiter):
        """Test every request passes through the rate limiter."""
        canvas.add("/courses/1", json={"id": 1})

        run(dispatcher.send(RequestTicket(path="/courses/1")))
        run(dispatcher.send(RequestTicket(path="/courses/1")))

        assert rate_limiter.request_count == 2

    @pytest.mark.parametrize("status_code,error_class", [
        (401, UnauthorizedError),
        (404, NotFoundError),
        (429, RateLimitedError),
        (503, ServerError),
    ])
    def test_status_errors_classified(self, run, canvas, dispatcher, status_code, error_class):
        """Test failed statuses raise the classified error."""
        canvas.add("/courses/1", status=status_code, json={"errors": [{"message": "nope"}]})

        with pytest.raises(error_class) as exc_info:
            run(dispatcher.send(RequestTicket(path="/courses/1")))

        assert exc_info.value.status_code == status_code
        assert "nope" in str(exc_info.value)

    def test_transport_error_classified(self, run, canvas, dispatcher):
        """Test connection failures raise TransportError."""
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)
        canvas.add("/courses/1", handler=fail)

        with pytest.raises(TransportError):
            run(dispatcher.send(RequestTicket(path="/courses/1")))

    def test_timeout_classified(self, run, canvas, dispatcher):
        """Test timeouts raise TransportError."""
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)
        canvas.add("/courses/1", handler=slow)

        with pytest.raises(TransportError) as exc_info:
            run(dispatcher.send(RequestTicket(path="/courses/1")))

        assert "timed out" in str(exc_info.value)


class TestRetries:
    """Tests for optional retries of throttled and 5xx responses."""

    def make_dispatcher(self, client, max_retries):
        limiter = RateLimiter(RateLimitConfig(min_interval_seconds=0, max_retries=max_retries))
        return RequestDispatcher(client, limiter)

    def test_no_retry_by_default(self, run, canvas, client):
        """Test a throttled request fails immediately without retries."""
        canvas.add("/courses/1", status=429)
        dispatcher = self.make_dispatcher(client, 0)

        with pytest.raises(RateLimitedError):
            run(dispatcher.send(RequestTicket(path="/courses/1")))

        assert len(canvas.requests) == 1

    def test_retries_then_succeeds(self, run, canvas, client):
        """Test a throttled request is retried after backoff."""
        responses = iter([httpx.Response(429), httpx.Response(200, json={"id": 1})])
        canvas.add("/courses/1", handler=lambda request: next(responses))
        dispatcher = self.make_dispatcher(client, 2)

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            response = run(dispatcher.send(RequestTicket(path="/courses/1")))

        assert response.json() == {"id": 1}
        assert len(canvas.requests) == 2
        mock_sleep.assert_awaited_once()

    def test_gives_up_after_max_retries(self, run, canvas, client):
        """Test the last failure propagates once retries are exhausted."""
        canvas.add("/courses/1", status=500)
        dispatcher = self.make_dispatcher(client, 2)

        with patch("asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(ServerError):
                run(dispatcher.send(RequestTicket(path="/courses/1")))

        assert len(canvas.requests) == 3

    def test_client_errors_not_retried(self, run, canvas, client):
        """Test 404 is never retried."""
        dispatcher = self.make_dispatcher(client, 3)

        with pytest.raises(NotFoundError):
            run(dispatcher.send(RequestTicket(path="/courses/404")))

        assert len(canvas.requests) == 1


class TestCursor:
    """Tests for following pagination cursors."""

    def test_absolute_cursor_followed(self, run, canvas, dispatcher):
        """Test a same-origin absolute cursor URL is requested verbatim."""
        canvas.add("/courses", json=[])
        cursor = PageCursor(url=f"{API_URL}/courses?page=2&per_page=100")

        run(dispatcher.send(RequestTicket(path="/courses", cursor=cursor)))

        url = canvas.requests[0].url
        assert url.path == "/api/v1/courses"
        assert url.params["page"] == "2"
        assert url.params["per_page"] == "100"

    def test_relative_cursor_not_double_prefixed(self, run, canvas, dispatcher):
        """Test a relative cursor that repeats /api/v1 resolves once."""
        canvas.add("/courses", json=[])
        cursor = PageCursor(url="/api/v1/courses?page=3")

        run(dispatcher.send(RequestTicket(path="/courses", cursor=cursor)))

        assert canvas.requests[0].url.path == "/api/v1/courses"
        assert canvas.requests[0].url.params["page"] == "3"

    def test_foreign_origin_rejected(self, run, canvas, dispatcher, rate_limiter):
        """Test a cursor on another host is refused without sending the token."""
        cursor = PageCursor(url="https://evil.example.com/api/v1/courses?page=2")

        with pytest.raises(MalformedResponseError):
            run(dispatcher.send(RequestTicket(path="/courses", cursor=cursor)))

        assert canvas.requests == []
        assert rate_limiter.request_count == 0

    def test_foreign_scheme_rejected(self, run, canvas, dispatcher):
        """Test a downgrade to plain http is refused."""
        cursor = PageCursor(url="http://canvas.example.edu/api/v1/courses?page=2")

        with pytest.raises(MalformedResponseError):
            run(dispatcher.send(RequestTicket(path="/courses", cursor=cursor)))
