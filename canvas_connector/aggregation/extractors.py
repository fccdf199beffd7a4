"""Per-item content extraction, one handler per module item kind."""

from typing import Awaitable, Callable, Dict, Optional, Tuple

from ..client.fetchers import SingleResourceFetcher
from ..formatters import render_assignment, render_file, render_item_metadata, render_page
from ..models.canvas import Assignment, CanvasFile, ItemKind, ModuleItem, Page
from ..processors.file_classifier import FileClassifier
from ..processors.html_cleaner import HTMLCleaner
from ..processors.text_normalizer import TextNormalizer

ASSIGNMENT_INCLUDES = ["assignment_group", "rubric", "submission"]


class ContentExtractor:
    """Fetches and renders the content behind pages, files and assignments."""

    def __init__(
        self,
        fetcher: SingleResourceFetcher,
        cleaner: Optional[HTMLCleaner] = None,
        normalizer: Optional[TextNormalizer] = None,
        file_classifier: Optional[FileClassifier] = None,
    ):
        self.fetcher = fetcher
        self.cleaner = cleaner or HTMLCleaner()
        self.normalizer = normalizer or TextNormalizer()
        self.file_classifier = file_classifier or FileClassifier()

        self._handlers: Dict[ItemKind, Callable[[str, ModuleItem], Awaitable[str]]] = {
            ItemKind.PAGE: self._extract_page,
            ItemKind.FILE: self._extract_file,
            ItemKind.ASSIGNMENT: self._extract_assignment,
        }

    def html_to_text(self, html: Optional[str]) -> str:
        return self.normalizer.normalize(self.cleaner.clean(html or ""))

    async def page_text(self, course_id: str, page_url: str) -> Tuple[Page, str]:
        """Fetch a page and convert its body to text."""
        page = await self.fetcher.fetch(f"/courses/{course_id}/pages/{page_url}", model=Page)
        return page, self.html_to_text(page.body)

    async def page(self, course_id: str, page_url: str) -> str:
        page, text = await self.page_text(course_id, page_url)
        return render_page(page, page_url, text)

    async def file(self, file_id: str) -> str:
        file = await self.fetcher.fetch(f"/files/{file_id}", model=CanvasFile)
        return render_file(file, self.file_classifier.classify(file.content_type))

    async def assignment_record(self, course_id: str, assignment_id: str) -> Assignment:
        return await self.fetcher.fetch(
            f"/courses/{course_id}/assignments/{assignment_id}",
            params={"include[]": ASSIGNMENT_INCLUDES},
            model=Assignment,
        )

    async def assignment(self, course_id: str, assignment_id: str) -> str:
        assignment = await self.assignment_record(course_id, assignment_id)
        return render_assignment(assignment, self.html_to_text(assignment.description))

    async def extract(self, course_id: str, item: ModuleItem) -> str:
        """
        Render the content block for one module item.

        Raises whatever the underlying fetch raises; the caller decides
        whether that is fatal.
        """
        handler = self._handlers.get(item.kind, self._extract_metadata)
        return await handler(course_id, item)

    async def _extract_page(self, course_id: str, item: ModuleItem) -> str:
        if not item.page_url:
            return await self._extract_metadata(course_id, item)
        return "### Page Content\n\n" + await self.page(course_id, item.page_url)

    async def _extract_file(self, course_id: str, item: ModuleItem) -> str:
        if item.content_id is None:
            return await self._extract_metadata(course_id, item)
        return "### File Information\n\n" + await self.file(str(item.content_id))

    async def _extract_assignment(self, course_id: str, item: ModuleItem) -> str:
        if item.content_id is None:
            return await self._extract_metadata(course_id, item)
        return "### Assignment Details\n\n" + await self.assignment(course_id, str(item.content_id))

    async def _extract_metadata(self, course_id: str, item: ModuleItem) -> str:
        return render_item_metadata(item)
