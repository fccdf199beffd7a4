"""Module content aggregation with per-item failure isolation."""

import asyncio
from typing import List, Union

from ..client.fetchers import PagingFetcher
from ..formatters import truncate
from ..models.canvas import ModuleItem
from ..models.results import AggregationResult, ItemOutcome
from ..utils.exceptions import CanvasAPIError
from ..utils.logging_config import get_logger
from .extractors import ContentExtractor

logger = get_logger()

MAX_ERROR_CHARS = 500


def order_items(items: List[ModuleItem]) -> List[ModuleItem]:
    """Stable sort by declared position; items without one go last."""
    return sorted(items, key=lambda item: (item.position is None, item.position or 0))


def settle(item: ModuleItem, result: Union[str, BaseException]) -> ItemOutcome:
    """Turn one all-settled result into an outcome, capturing failures as values."""
    if not isinstance(result, BaseException):
        return ItemOutcome(item=item, content=result)
    if not isinstance(result, Exception):
        raise result

    message = truncate(str(result) or type(result).__name__, MAX_ERROR_CHARS)
    kind = result.kind if isinstance(result, CanvasAPIError) else None
    logger.warning(f"Extraction failed for item {item.id} ({item.title}): {message}")
    return ItemOutcome(item=item, error=message, error_kind=kind)


class ContentAggregator:
    """Builds a unified, ordered extract of every item in a module."""

    ITEM_INCLUDES = ["content_details"]

    def __init__(self, paging: PagingFetcher, extractor: ContentExtractor):
        """
        Initialize aggregator.

        Args:
            paging: Fetcher for the module item listing
            extractor: Per-item content extractor
        """
        self.paging = paging
        self.extractor = extractor

    async def list_items(self, course_id: str, module_id: str) -> List[ModuleItem]:
        """Fetch a module's items sorted by position."""
        items = await self.paging.fetch_all(
            f"/courses/{course_id}/modules/{module_id}/items",
            {"include[]": self.ITEM_INCLUDES},
            model=ModuleItem,
        )
        return order_items(items)

    async def extract_module(self, course_id: str, module_id: str) -> AggregationResult:
        """
        Extract the content of every item in a module.

        The item listing is a prerequisite: its failure propagates. Each
        item is then extracted concurrently; an item that fails becomes an
        inline failure outcome without affecting its siblings. Outcomes keep
        the items' position order whatever order they complete in.

        Args:
            course_id: Canvas course ID
            module_id: Canvas module ID

        Returns:
            AggregationResult with one outcome per item
        """
        items = await self.list_items(course_id, module_id)
        logger.info(f"Extracting {len(items)} items from module {module_id} of course {course_id}")

        settled = await asyncio.gather(
            *(self.extractor.extract(course_id, item) for item in items),
            return_exceptions=True,
        )
        outcomes = [settle(item, result) for item, result in zip(items, settled)]

        failed = sum(1 for outcome in outcomes if not outcome.ok)
        if failed:
            logger.info(f"Module {module_id}: {failed}/{len(outcomes)} items could not be extracted")

        return AggregationResult(
            title=f"Module {module_id} - Complete Content Extract",
            course_id=course_id,
            module_id=module_id,
            outcomes=outcomes,
        )
