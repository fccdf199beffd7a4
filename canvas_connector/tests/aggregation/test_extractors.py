"""Tests for ContentExtractor."""

import pytest

from canvas_connector.aggregation import ContentExtractor
from canvas_connector.utils.exceptions import NotFoundError


@pytest.fixture
def extractor(fetcher):
    return ContentExtractor(fetcher)


class TestPageExtraction:
    """Tests for page items."""

    def test_page_body_cleaned(self, run, canvas, extractor, make_item):
        """Test a page item renders its cleaned body."""
        canvas.add("/courses/1/pages/intro", json={
            "title": "Introduction",
            "body": "<h2>Welcome</h2><p>Read <a href='https://example.org'>this</a>.</p><script>x()</script>",
            "published": True,
        })
        item = make_item(10, "Page", page_url="intro")

        block = run(extractor.extract("1", item))

        assert block.startswith("### Page Content")
        assert "# Introduction" in block
        assert "## Welcome" in block
        assert "[this](https://example.org)" in block
        assert "x()" not in block

    def test_page_without_url_is_metadata_only(self, run, canvas, extractor, make_item):
        """Test a page item lacking page_url is not fetched."""
        item = make_item(10, "Page")

        block = run(extractor.extract("1", item))

        assert "Content Information" in block
        assert canvas.requests == []

    def test_page_failure_propagates(self, run, extractor, make_item):
        """Test a missing page raises the classified error."""
        with pytest.raises(NotFoundError):
            run(extractor.extract("1", make_item(10, "Page", page_url="gone")))


class TestFileExtraction:
    """Tests for file items."""

    def test_file_classified(self, run, canvas, extractor, make_item):
        """Test a file item is fetched and classified by content type."""
        canvas.add("/files/55", json={
            "id": 55,
            "display_name": "slides.pptx",
            "content-type": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
            "size": 2048,
            "url": "https://canvas.example.edu/files/55/download",
        })

        block = run(extractor.extract("1", make_item(11, "File", content_id=55)))

        assert block.startswith("### File Information")
        assert "Presentation File" in block
        assert "slides.pptx" in block
        assert canvas.paths() == ["/files/55"]

    def test_file_without_content_id(self, run, canvas, extractor, make_item):
        """Test a file item lacking content_id is metadata only."""
        block = run(extractor.extract("1", make_item(11, "File")))

        assert "Content Information" in block
        assert canvas.requests == []


class TestAssignmentExtraction:
    """Tests for assignment items."""

    def test_assignment_rendered(self, run, canvas, extractor, make_item):
        """Test an assignment item renders details and description text."""
        canvas.add("/courses/1/assignments/77", json={
            "id": 77,
            "name": "Essay",
            "description": "<p>Write 2000 words.</p>",
            "points_possible": 20,
            "due_at": "2024-03-01T23:59:00Z",
        })

        block = run(extractor.extract("1", make_item(12, "Assignment", content_id=77)))

        assert block.startswith("### Assignment Details")
        assert "Essay" in block
        assert "Write 2000 words." in block
        assert canvas.requests[0].url.params.get_list("include[]") == [
            "assignment_group", "rubric", "submission",
        ]


class TestMetadataOnly:
    """Tests for kinds rendered from metadata."""

    @pytest.mark.parametrize("item_type,heading", [
        ("Quiz", "Quiz Information"),
        ("Discussion", "Discussion Information"),
        ("SubHeader", "Content Information"),
    ])
    def test_metadata_kinds(self, run, canvas, extractor, make_item, item_type, heading):
        """Test quizzes, discussions and unknown kinds are not fetched."""
        item = make_item(13, item_type, content_id=5, html_url="https://canvas.example.edu/x")

        block = run(extractor.extract("1", item))

        assert heading in block
        assert canvas.requests == []

    def test_external_url(self, run, extractor, make_item):
        """Test external links render as a link."""
        item = make_item(14, "ExternalUrl", external_url="https://example.org/reading")

        block = run(extractor.extract("1", item))

        assert "[Item 14](https://example.org/reading)" in block
