"""Module content aggregation and week resolution."""

from .extractors import ContentExtractor
from .content_aggregator import ContentAggregator, order_items
from .week_resolver import WeekResolver, module_matches_week

__all__ = [
    "ContentExtractor",
    "ContentAggregator",
    "order_items",
    "WeekResolver",
    "module_matches_week",
]
