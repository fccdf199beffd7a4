"""Tests for ContentAggregator."""

import asyncio

import pytest

from canvas_connector.aggregation import ContentAggregator, ContentExtractor, order_items
from canvas_connector.utils.exceptions import ErrorKind, NotFoundError, ServerError


def item_json(item_id, item_type="Page", position=None, **fields):
    data = {"id": item_id, "title": f"Item {item_id}", "type": item_type, "position": position}
    data.update(fields)
    return data


class ScriptedExtractor:
    """Extractor stub: fails chosen items and completes in a chosen order."""

    def __init__(self, fail_ids=(), delays=None):
        self.fail_ids = set(fail_ids)
        self.delays = delays or {}

    async def extract(self, course_id, item):
        await asyncio.sleep(self.delays.get(item.id, 0))
        if item.id in self.fail_ids:
            raise ServerError("upstream exploded", status_code=500)
        return f"content of {item.id}"


class TestOrderItems:
    """Tests for position ordering."""

    def test_sorted_by_position(self, make_item):
        """Test items sort ascending by position."""
        items = [make_item(1, position=3), make_item(2, position=1), make_item(3, position=2)]
        assert [item.id for item in order_items(items)] == [2, 3, 1]

    def test_missing_position_last_and_stable(self, make_item):
        """Test items without position go last, keeping listing order."""
        items = [make_item(1), make_item(2, position=2), make_item(3), make_item(4, position=1)]
        assert [item.id for item in order_items(items)] == [4, 2, 1, 3]

    def test_equal_positions_stable(self, make_item):
        """Test equal positions keep listing order."""
        items = [make_item(1, position=1), make_item(2, position=1)]
        assert [item.id for item in order_items(items)] == [1, 2]


class TestExtractModule:
    """Tests for module extraction."""

    def test_items_listing_params(self, run, canvas, paging):
        """Test items are listed with content details."""
        canvas.add("/courses/1/modules/9/items", json=[])
        aggregator = ContentAggregator(paging, ScriptedExtractor())

        run(aggregator.extract_module("1", "9"))

        assert canvas.requests[0].url.params.get_list("include[]") == ["content_details"]

    def test_outcome_per_item_in_position_order(self, run, canvas, paging):
        """Test one outcome per item, ordered by position."""
        canvas.add("/courses/1/modules/9/items", json=[
            item_json(1, position=2), item_json(2, position=1), item_json(3, position=3),
        ])
        aggregator = ContentAggregator(paging, ScriptedExtractor())

        result = run(aggregator.extract_module("1", "9"))

        assert [outcome.item.id for outcome in result.outcomes] == [2, 1, 3]
        assert [outcome.content for outcome in result.outcomes] == [
            "content of 2", "content of 1", "content of 3",
        ]
        assert result.title == "Module 9 - Complete Content Extract"
        assert result.failures == []

    def test_failure_isolated_to_item(self, run, canvas, paging):
        """Test item k failing yields N outcomes with the failure at k."""
        canvas.add("/courses/1/modules/9/items", json=[
            item_json(item_id, position=item_id) for item_id in range(1, 6)
        ])
        aggregator = ContentAggregator(paging, ScriptedExtractor(fail_ids={3}))

        result = run(aggregator.extract_module("1", "9"))

        assert len(result.outcomes) == 5
        failed = result.outcomes[2]
        assert failed.item.id == 3
        assert not failed.ok
        assert failed.content is None
        assert "upstream exploded" in failed.error
        assert failed.error_kind == ErrorKind.SERVER_ERROR
        assert all(outcome.ok for index, outcome in enumerate(result.outcomes) if index != 2)

    def test_order_independent_of_completion(self, run, canvas, paging):
        """Test outcomes keep position order when later items finish first."""
        canvas.add("/courses/1/modules/9/items", json=[
            item_json(1, position=1), item_json(2, position=2), item_json(3, position=3),
        ])
        extractor = ScriptedExtractor(fail_ids={1}, delays={1: 0.03, 2: 0.02, 3: 0})
        aggregator = ContentAggregator(paging, extractor)

        result = run(aggregator.extract_module("1", "9"))

        assert [outcome.item.id for outcome in result.outcomes] == [1, 2, 3]
        assert [outcome.ok for outcome in result.outcomes] == [False, True, True]

    def test_unexpected_exception_captured(self, run, canvas, paging):
        """Test non-Canvas exceptions are captured too, without an error kind."""
        class Broken(ScriptedExtractor):
            async def extract(self, course_id, item):
                raise RuntimeError("boom")

        canvas.add("/courses/1/modules/9/items", json=[item_json(1, position=1)])

        result = run(ContentAggregator(paging, Broken()).extract_module("1", "9"))

        assert result.outcomes[0].error == "boom"
        assert result.outcomes[0].error_kind is None

    def test_items_listing_failure_propagates(self, run, paging):
        """Test a failed item listing fails the whole extraction."""
        aggregator = ContentAggregator(paging, ScriptedExtractor())

        with pytest.raises(NotFoundError):
            run(aggregator.extract_module("1", "404"))

    def test_empty_module(self, run, canvas, paging):
        """Test a module without items yields no outcomes."""
        canvas.add("/courses/1/modules/9/items", json=[])

        result = run(ContentAggregator(paging, ScriptedExtractor()).extract_module("1", "9"))

        assert result.outcomes == []

    def test_end_to_end_with_real_extractor(self, run, canvas, paging, fetcher):
        """Test a mixed module through the real extractor, with one missing page."""
        canvas.add("/courses/1/modules/9/items", json=[
            item_json(1, "Page", position=1, page_url="intro"),
            item_json(2, "Page", position=2, page_url="missing"),
            item_json(3, "Quiz", position=3, content_id=4),
        ])
        canvas.add("/courses/1/pages/intro", json={"title": "Intro", "body": "<p>Hello</p>"})
        aggregator = ContentAggregator(paging, ContentExtractor(fetcher))

        result = run(aggregator.extract_module("1", "9"))

        assert [outcome.ok for outcome in result.outcomes] == [True, False, True]
        assert "Hello" in result.outcomes[0].content
        assert result.outcomes[1].error_kind == ErrorKind.NOT_FOUND
        assert "Quiz Information" in result.outcomes[2].content
