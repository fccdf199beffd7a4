"""Single-resource and paginated fetchers built on the request dispatcher."""

from typing import Any, Dict, List, Optional, Type

import httpx
from pydantic import BaseModel, ValidationError

from ..config import PaginationConfig
from ..models.request import PageCursor, RequestTicket
from ..utils.exceptions import MalformedResponseError
from ..utils.logging_config import get_logger
from .dispatcher import RequestDispatcher

logger = get_logger()


def _decode_json(response: httpx.Response, dispatcher: RequestDispatcher) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise dispatcher.classifier.classify(e) from e


def _validate(payload: Any, model: Optional[Type[BaseModel]], dispatcher: RequestDispatcher) -> Any:
    if model is None:
        return payload
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise dispatcher.classifier.classify(e) from e


class SingleResourceFetcher:
    """One rate-limited call, one decode. Used for by-id lookups."""

    def __init__(self, dispatcher: RequestDispatcher):
        self.dispatcher = dispatcher

    async def fetch(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        model: Optional[Type[BaseModel]] = None,
    ) -> Any:
        """
        GET a single resource.

        Args:
            path: Path relative to the API root
            params: Query parameters
            model: Optional pydantic model to validate the payload into

        Returns:
            Decoded JSON, or a model instance when ``model`` is given

        Raises:
            CanvasAPIError: Classified failure (decode errors as MalformedResponseError)
        """
        response = await self.dispatcher.send(RequestTicket(path=path, params=params or {}))
        return _validate(_decode_json(response, self.dispatcher), model, self.dispatcher)

    async def post(
        self,
        path: str,
        json: Optional[Any] = None,
        model: Optional[Type[BaseModel]] = None,
    ) -> Any:
        """POST a JSON body and decode the response."""
        ticket = RequestTicket(method="POST", path=path, json_body=json)
        response = await self.dispatcher.send(ticket)
        return _validate(_decode_json(response, self.dispatcher), model, self.dispatcher)


class PagingFetcher:
    """Collects every page of a listing endpoint by following Link rel="next"."""

    def __init__(self, dispatcher: RequestDispatcher, config: Optional[PaginationConfig] = None):
        """
        Initialize paging fetcher.

        Args:
            dispatcher: Shared request dispatcher
            config: Page size and page-count safety bound
        """
        self.dispatcher = dispatcher
        self.config = config or PaginationConfig()

    async def fetch_all(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        model: Optional[Type[BaseModel]] = None,
    ) -> List[Any]:
        """
        Fetch all records of a listing, in server page order.

        Stops when a page carries no next link, or silently (with a logged
        warning) once ``max_pages`` pages have been read. Any page failure
        fails the whole call; partial results are never returned.

        Args:
            path: Listing path relative to the API root
            params: Query parameters for the first page
            model: Optional pydantic model to validate each record into

        Returns:
            Concatenated records of all pages
        """
        query = dict(params or {})
        query["per_page"] = self.config.per_page
        ticket = RequestTicket(path=path, params=query)

        records: List[Any] = []
        pages = 0

        while True:
            response = await self.dispatcher.send(ticket)
            pages += 1
            records.extend(self._decode_page(response))

            cursor = self._next_cursor(response)
            if cursor is None:
                break
            if pages >= self.config.max_pages:
                logger.warning(
                    f"Stopped paginating {path} after {pages} pages; "
                    f"returning the first {len(records)} records"
                )
                break
            ticket = RequestTicket(path=path, cursor=cursor)

        logger.debug(f"Fetched {len(records)} records from {path} in {pages} page(s)")
        return [_validate(record, model, self.dispatcher) for record in records]

    def _decode_page(self, response: httpx.Response) -> List[Any]:
        payload = _decode_json(response, self.dispatcher)
        if not isinstance(payload, list):
            raise MalformedResponseError(
                f"Expected a JSON list from {response.request.url}, got {type(payload).__name__}"
            )
        return payload

    @staticmethod
    def _next_cursor(response: httpx.Response) -> Optional[PageCursor]:
        next_link = response.links.get("next")
        if next_link and next_link.get("url"):
            return PageCursor(url=next_link["url"])
        return None
