"""Resolve a week number to a course module and extract it."""

import re
from typing import List, Optional, Union

from ..client.fetchers import PagingFetcher
from ..models.canvas import Module
from ..models.results import AggregationResult, ModuleSummary, WeekNotFound
from ..utils.logging_config import get_logger
from .content_aggregator import ContentAggregator

logger = get_logger()


def module_matches_week(name: str, token: str) -> bool:
    """
    Check whether a module name refers to the given week.

    Matches "week {token}", "week{token}" or the pattern ``week\\s*{token}\\b``,
    case-insensitively.
    """
    name = name.lower()
    token = token.strip().lower()
    if not token:
        return False
    return (
        f"week {token}" in name
        or f"week{token}" in name
        or re.search(rf"week\s*{re.escape(token)}\b", name) is not None
    )


def find_week_module(modules: List[Module], token: str) -> Optional[Module]:
    """First module in listing order whose name matches the week token."""
    for module in modules:
        if module_matches_week(module.name, token):
            return module
    return None


class WeekResolver:
    """Maps a user-supplied week token onto a module by name."""

    def __init__(self, paging: PagingFetcher, aggregator: ContentAggregator):
        self.paging = paging
        self.aggregator = aggregator

    async def resolve_week(
        self, course_id: str, week_token: str
    ) -> Union[AggregationResult, WeekNotFound]:
        """
        Extract the module for a week, or describe the available modules.

        Args:
            course_id: Canvas course ID
            week_token: Week identifier as typed by the user, e.g. "10"

        Returns:
            AggregationResult relabelled for the week, or WeekNotFound
        """
        week = week_token.strip()
        modules = await self.paging.fetch_all(f"/courses/{course_id}/modules", model=Module)

        module = find_week_module(modules, week)
        if module is None:
            logger.info(f"No module matches week '{week}' in course {course_id}")
            return WeekNotFound(
                course_id=course_id,
                week=week,
                available_modules=[ModuleSummary(id=m.id, name=m.name) for m in modules],
            )

        logger.info(f"Week '{week}' resolved to module {module.id} ({module.name})")
        result = await self.aggregator.extract_module(course_id, str(module.id))
        return result.model_copy(update={
            "title": f"Week {week} Content - Complete Extract",
            "module_name": module.name,
        })
