"""HTML to readable text conversion for Canvas page bodies and descriptions."""

import re

import html2text
from bs4 import BeautifulSoup

from ..utils.logging_config import get_logger

logger = get_logger()

INLINE_SPACE = re.compile(r"[ \t]+")
BLANK_RUNS = re.compile(r"\n{3,}")


class HTMLCleaner:
    """
    Renders Canvas rich-content editor HTML as markdown-flavoured text.

    The soup is pruned in three passes (noise removal, embed rewriting and
    table flattening) and then handed to html2text, so headings, links and
    images survive as markdown.
    """

    # Never carry readable course content
    REMOVE_TAGS = [
        "script", "style", "noscript", "svg", "canvas",
        "form", "button", "input", "select", "textarea",
    ]

    # Screen-reader duplicates of visible text
    REMOVE_SELECTORS = [
        ".screenreader-only",
        ".sr-only",
        ".visually-hidden",
        ".hidden",
        ".hidden-readable",
    ]

    EMBED_LABEL = "Embedded content"

    def __init__(self):
        self.h2t = self._build_converter()

    @staticmethod
    def _build_converter() -> html2text.HTML2Text:
        converter = html2text.HTML2Text()
        converter.body_width = 0
        converter.ignore_links = False
        converter.ignore_images = False
        converter.unicode_snob = True
        converter.skip_internal_links = True
        return converter

    def _remove_unwanted_elements(self, soup: BeautifulSoup) -> BeautifulSoup:
        doomed = soup.find_all(self.REMOVE_TAGS) + soup.select(", ".join(self.REMOVE_SELECTORS))
        for element in doomed:
            # Nested matches go away with their ancestor
            if not element.decomposed:
                element.decompose()
        return soup

    def _convert_embeds(self, soup: BeautifulSoup) -> BeautifulSoup:
        """Swap iframes (videos, LTI tools) for links; drop those with no src."""
        for iframe in soup.find_all("iframe"):
            if not iframe.get("src"):
                iframe.decompose()
                continue
            anchor = soup.new_tag("a", href=iframe["src"])
            anchor.string = iframe.get("title") or self.EMBED_LABEL
            iframe.replace_with(anchor)
        return soup

    def _clean_tables(self, soup: BeautifulSoup) -> BeautifulSoup:
        """Flatten each table to one ``a | b`` line per row."""
        for table in soup.find_all("table"):
            lines = [
                " | ".join(cell.get_text(" ", strip=True) for cell in row.find_all(["th", "td"]))
                for row in table.find_all("tr")
            ]
            lines = [line for line in lines if line]
            if lines:
                table.replace_with(soup.new_string("\n" + "\n".join(lines) + "\n"))
            else:
                table.decompose()
        return soup

    @staticmethod
    def _tidy(text: str) -> str:
        lines = (INLINE_SPACE.sub(" ", line).strip() for line in text.split("\n"))
        return BLANK_RUNS.sub("\n\n", "\n".join(lines)).strip()

    def clean(self, html: str) -> str:
        """
        Convert HTML to clean text.

        Paragraphs and ``<br>`` become newlines, headings become ``#`` lines,
        links become ``[text](href)`` and images ``![alt](src)``. If html2text
        fails the plain text of the document is returned instead.

        Args:
            html: Raw HTML content

        Returns:
            Clean text content, "" for empty input
        """
        if not html:
            return ""

        soup = BeautifulSoup(html, "lxml")
        try:
            for prune in (self._remove_unwanted_elements, self._convert_embeds, self._clean_tables):
                soup = prune(soup)
            return self._tidy(self.h2t.handle(str(soup)))
        except Exception as e:
            logger.warning(f"HTML conversion failed, falling back to plain text: {e}")
            return BeautifulSoup(html, "lxml").get_text(separator="\n", strip=True)
