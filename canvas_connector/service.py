"""Canvas service facade: one async operation per logical resource."""

import asyncio
from typing import Any, Dict, List, Optional, Union

import httpx

from .aggregation import ContentAggregator, ContentExtractor, WeekResolver
from .client import (
    PagingFetcher,
    RateLimiter,
    RequestDispatcher,
    SingleResourceFetcher,
    build_async_client,
)
from .config import ConnectorConfig
from .formatters import (
    render_aggregation,
    render_assignment_list,
    render_course,
    render_course_list,
    render_media,
    render_module_items,
    render_module_list,
    render_week_not_found,
    truncate,
)
from .models.canvas import (
    Assignment,
    Course,
    ItemKind,
    MediaObject,
    MediaTrack,
    Module,
    ModuleItem,
)
from .models.credential import Credential
from .models.results import AggregationResult, RequestStats, ToolResponse, WeekNotFound
from .utils.exceptions import CanvasAPIError
from .utils.logging_config import get_logger

logger = get_logger()

PREVIEW_FALLBACK = "Content available - use get_page_content to extract"

SEARCH_CATEGORIES = ("assignment", "announcement", "page", "file")


class CanvasService:
    """
    Facade over the Canvas REST API.

    Owns the HTTP client and the single rate limiter every request goes
    through. Text-producing operations return a ToolResponse; the others
    return decoded upstream JSON.

    Usage:
        async with CanvasService(credential) as service:
            response = await service.list_courses()
    """

    def __init__(
        self,
        credential: Credential,
        config: Optional[ConnectorConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize service.

        Args:
            credential: Validated base URL and access token
            config: Connector configuration
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.credential = credential
        self.config = config or ConnectorConfig()

        self.client = build_async_client(credential, self.config.canvas, transport=transport)
        self.rate_limiter = RateLimiter(self.config.rate_limit)
        self.dispatcher = RequestDispatcher(self.client, self.rate_limiter)
        self.fetcher = SingleResourceFetcher(self.dispatcher)
        self.paging = PagingFetcher(self.dispatcher, self.config.pagination)

        self.extractor = ContentExtractor(self.fetcher)
        self.aggregator = ContentAggregator(self.paging, self.extractor)
        self.week_resolver = WeekResolver(self.paging, self.aggregator)

    async def __aenter__(self) -> "CanvasService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    # --- Courses and modules ---

    async def list_courses(self) -> ToolResponse:
        courses = await self.paging.fetch_all(
            "/courses",
            {"enrollment_state": "active", "include[]": ["total_students", "term"]},
            model=Course,
        )
        return ToolResponse.from_text(render_course_list(courses))

    async def get_course_record(self, course_id: str) -> Course:
        return await self.fetcher.fetch(
            f"/courses/{course_id}",
            params={"include[]": ["total_students", "term", "course_progress"]},
            model=Course,
        )

    async def get_course(self, course_id: str) -> ToolResponse:
        course = await self.get_course_record(course_id)
        return ToolResponse.from_text(render_course(course))

    async def list_modules(self, course_id: str) -> ToolResponse:
        modules = await self.paging.fetch_all(
            f"/courses/{course_id}/modules",
            {"include[]": ["items", "content_details"]},
            model=Module,
        )
        return ToolResponse.from_text(render_module_list(course_id, modules))

    async def get_module_items(self, course_id: str, module_id: str) -> ToolResponse:
        """
        List a module's items with a short preview of each page.

        A page whose preview cannot be fetched gets a pointer to the page
        tool instead; the listing itself must succeed.
        """
        items = await self.aggregator.list_items(course_id, module_id)
        pages = [item for item in items if item.kind == ItemKind.PAGE and item.page_url]

        previews = await asyncio.gather(*(self._page_preview(course_id, item) for item in pages))
        by_item = {item.id: preview for item, preview in zip(pages, previews)}

        return ToolResponse.from_text(render_module_items(module_id, items, by_item))

    async def _page_preview(self, course_id: str, item: ModuleItem) -> str:
        try:
            _, text = await self.extractor.page_text(course_id, item.page_url)
        except Exception as e:
            logger.debug(f"No preview for page {item.page_url}: {e}")
            return PREVIEW_FALLBACK
        return truncate(text, self.config.aggregation.preview_chars)

    async def get_page(self, course_id: str, page_url: str) -> ToolResponse:
        return ToolResponse.from_text(await self.extractor.page(course_id, page_url))

    # --- Assignments ---

    async def list_assignments(self, course_id: str) -> ToolResponse:
        assignments = await self.paging.fetch_all(
            f"/courses/{course_id}/assignments",
            {"include[]": ["assignment_group", "rubric", "submission"], "order_by": "due_at"},
            model=Assignment,
        )
        limit = self.config.aggregation.description_preview_chars
        descriptions = {
            assignment.id: truncate(self.extractor.html_to_text(assignment.description), limit)
            for assignment in assignments
            if assignment.description
        }
        return ToolResponse.from_text(render_assignment_list(course_id, assignments, descriptions))

    async def get_assignment_record(self, course_id: str, assignment_id: str) -> Assignment:
        return await self.extractor.assignment_record(course_id, assignment_id)

    async def get_assignment(self, course_id: str, assignment_id: str) -> ToolResponse:
        return ToolResponse.from_text(await self.extractor.assignment(course_id, assignment_id))

    async def list_assignment_submissions(self, course_id: str, assignment_id: str) -> List[Any]:
        return await self.paging.fetch_all(
            f"/courses/{course_id}/assignments/{assignment_id}/submissions",
            {"include[]": ["assignment", "course", "user"]},
        )

    # --- Announcements and files ---

    async def list_announcements(self, course_id: str) -> List[Any]:
        return await self.paging.fetch_all(
            f"/courses/{course_id}/discussion_topics",
            {"only_announcements": "true", "order_by": "recent_activity"},
        )

    async def get_announcement(self, course_id: str, announcement_id: str) -> Any:
        return await self.fetcher.fetch(f"/courses/{course_id}/discussion_topics/{announcement_id}")

    async def list_files(self, course_id: str) -> List[Any]:
        return await self.paging.fetch_all(
            f"/courses/{course_id}/files",
            {"sort": "updated_at", "order": "desc"},
        )

    async def get_file(self, file_id: str) -> Any:
        return await self.fetcher.fetch(f"/files/{file_id}")

    async def search_content(self, course_id: str, query: str) -> List[Dict[str, Any]]:
        """
        Search assignments, announcements, pages and files of a course.

        The four listings run concurrently and are joined all-settled: a
        category that fails is logged and left out of the results.

        Args:
            course_id: Canvas course ID
            query: Search term

        Returns:
            Matching records, each tagged with a ``content_type``
        """
        listings = [
            self.paging.fetch_all(f"/courses/{course_id}/assignments", {"search_term": query}),
            self.paging.fetch_all(
                f"/courses/{course_id}/discussion_topics",
                {"search_term": query, "only_announcements": "true"},
            ),
            self.paging.fetch_all(f"/courses/{course_id}/pages", {"search_term": query}),
            self.paging.fetch_all(f"/courses/{course_id}/files", {"search_term": query}),
        ]
        settled = await asyncio.gather(*listings, return_exceptions=True)

        results: List[Dict[str, Any]] = []
        for category, outcome in zip(SEARCH_CATEGORIES, settled):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.warning(f"Search of {category}s in course {course_id} failed: {outcome}")
                continue
            results.extend({**record, "content_type": category} for record in outcome)

        logger.info(f"Search for '{query}' in course {course_id} returned {len(results)} results")
        return results

    # --- Content extraction ---

    async def get_file_content(self, file_id: str) -> ToolResponse:
        return ToolResponse.from_text(await self.extractor.file(file_id))

    async def get_media(self, media_id: str) -> ToolResponse:
        """
        Describe a media object with its sources and captions.

        The media object itself must be readable; caption tracks are
        optional and a failure to list them is tolerated.
        """
        media = await self.fetcher.fetch(f"/media_objects/{media_id}", model=MediaObject)
        try:
            tracks = await self.paging.fetch_all(
                f"/media_objects/{media_id}/media_tracks", model=MediaTrack
            )
        except CanvasAPIError as e:
            logger.info(f"Media tracks unavailable for {media_id}: {e}")
            tracks = []
        return ToolResponse.from_text(render_media(media_id, media, tracks))

    async def extract_module(self, course_id: str, module_id: str) -> ToolResponse:
        result = await self.aggregator.extract_module(course_id, module_id)
        return ToolResponse.from_text(render_aggregation(result))

    async def resolve_week(self, course_id: str, week: str) -> ToolResponse:
        result = await self.week_resolver.resolve_week(course_id, week)
        return ToolResponse.from_text(render_week_result(result))

    # --- Misc ---

    async def get_user_profile(self) -> Any:
        return await self.fetcher.fetch("/users/self/profile")

    def get_request_stats(self) -> RequestStats:
        return self.rate_limiter.stats()


def render_week_result(result: Union[AggregationResult, WeekNotFound]) -> str:
    if isinstance(result, WeekNotFound):
        return render_week_not_found(result)
    return render_aggregation(result)
