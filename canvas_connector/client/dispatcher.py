"""Shared request path: every Canvas call is rate limited, sent and classified here."""

import asyncio
from typing import Optional, Union

import httpx

from ..config import CanvasConfig
from ..models.credential import Credential
from ..models.request import PageCursor, RequestTicket
from ..utils.exceptions import MalformedResponseError, RateLimitedError, ServerError
from ..utils.logging_config import get_logger
from .rate_limiter import RateLimiter
from .response_classifier import ResponseClassifier

logger = get_logger()

USER_AGENT = "canvas-connector/1.0"


def build_async_client(
    credential: Credential,
    config: Optional[CanvasConfig] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create an ``httpx.AsyncClient`` rooted at the credential's API URL."""
    config = config or CanvasConfig()
    headers = {
        "Authorization": f"Bearer {credential.token}",
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }
    return httpx.AsyncClient(
        base_url=credential.api_url,
        headers=headers,
        timeout=httpx.Timeout(config.timeout_seconds),
        follow_redirects=True,
        transport=transport,
    )


class RequestDispatcher:
    """Sends RequestTickets through the rate limiter and classifies failures."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        rate_limiter: RateLimiter,
        classifier: Optional[ResponseClassifier] = None,
    ):
        """
        Initialize dispatcher.

        Args:
            client: HTTP client with base URL and auth headers set
            rate_limiter: Rate limiter shared by all fetchers
            classifier: Failure classifier
        """
        self.client = client
        self.rate_limiter = rate_limiter
        self.classifier = classifier or ResponseClassifier()

    async def send(self, ticket: RequestTicket) -> httpx.Response:
        """
        Send one request, retrying throttled or 5xx responses if configured.

        Args:
            ticket: Request to send

        Returns:
            Successful (2xx) response

        Raises:
            CanvasAPIError: Classified failure
        """
        max_retries = self.rate_limiter.config.max_retries
        attempt = 0

        while True:
            try:
                return await self._send_once(ticket)
            except (RateLimitedError, ServerError) as e:
                if attempt >= max_retries:
                    raise
                delay = self.rate_limiter.backoff(attempt)
                logger.warning(
                    f"{ticket.describe()} failed ({e.kind.value}), "
                    f"retry {attempt + 1}/{max_retries} in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
                attempt += 1

    async def _send_once(self, ticket: RequestTicket) -> httpx.Response:
        if ticket.cursor is not None:
            url: Union[str, httpx.URL] = self._cursor_target(ticket.cursor)
            params = None
        else:
            url = ticket.path
            params = ticket.params or None

        await self.rate_limiter.acquire()
        logger.debug(f"-> {ticket.describe()}")

        try:
            response = await self.client.request(
                ticket.method, url, params=params, json=ticket.json_body
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            error = self.classifier.classify(e)
            logger.error(f"{ticket.describe()} failed: {error}")
            raise error from e

        return response

    def _cursor_target(self, cursor: PageCursor) -> Union[str, httpx.URL]:
        """Resolve a pagination cursor, refusing links to other origins."""
        base = self.client.base_url
        try:
            target = httpx.URL(cursor.url)
        except httpx.InvalidURL as e:
            raise MalformedResponseError(f"Invalid pagination link: {cursor.url}") from e

        if target.is_absolute_url:
            if (target.scheme, target.host, target.port) != (base.scheme, base.host, base.port):
                raise MalformedResponseError(
                    f"Pagination link points outside the Canvas API: {cursor.url}"
                )
            return target

        # Relative links may repeat the API prefix already held by base_url
        prefix = base.path.rstrip("/")
        relative = cursor.url
        if prefix and relative.startswith(prefix + "/"):
            relative = relative[len(prefix):]
        return relative
