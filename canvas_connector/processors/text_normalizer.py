"""Text normalization applied to page bodies and descriptions after HTML cleaning."""

import re
import unicodedata
from typing import Dict

# C0/C1 control characters other than tab, newline and carriage return
CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
SPACE_RUNS = re.compile(r" {2,}")
BLANK_RUNS = re.compile(r"\n{3,}")


class TextNormalizer:
    """Maps typographic characters to ASCII and tidies whitespace."""

    CHAR_REPLACEMENTS: Dict[str, str] = {
        "\u2018": "'",  # Left single quote
        "\u2019": "'",  # Right single quote
        "\u201c": '"',  # Left double quote
        "\u201d": '"',  # Right double quote
        "\u2013": "-",  # En dash
        "\u2014": "-",  # Em dash
        "\u2026": "...",  # Ellipsis
        "\u00a0": " ",  # Non-breaking space
        "\u200b": "",  # Zero-width space
        "\ufeff": "",  # BOM
    }

    BULLET_CHARS = ["\u2022", "\u25cf", "\u25cb", "\u25aa", "\u25e6", "\u2023", "\u2043"]

    def __init__(self):
        self._char_table = str.maketrans(self.CHAR_REPLACEMENTS)
        self._bullet_table = str.maketrans({bullet: "-" for bullet in self.BULLET_CHARS})

    def normalize_unicode(self, text: str) -> str:
        return unicodedata.normalize("NFC", text)

    def replace_special_chars(self, text: str) -> str:
        return text.translate(self._char_table)

    def remove_control_characters(self, text: str) -> str:
        """Drop control characters, keeping line structure and tabs."""
        return CONTROL_CHARS.sub("", text)

    def standardize_bullets(self, text: str) -> str:
        return text.translate(self._bullet_table)

    def normalize_whitespace(self, text: str) -> str:
        """
        Unify line endings, turn tabs into spaces, collapse space runs,
        strip each line and keep at most one blank line in a row.
        """
        text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\t", " ")
        lines = (SPACE_RUNS.sub(" ", line).strip() for line in text.split("\n"))
        return BLANK_RUNS.sub("\n\n", "\n".join(lines)).strip()

    def normalize(self, text: str) -> str:
        """
        Apply every normalization step in order.

        Args:
            text: Text produced by HTMLCleaner

        Returns:
            Normalized text, or "" for empty input
        """
        if not text:
            return ""

        for step in (
            self.normalize_unicode,
            self.replace_special_chars,
            self.remove_control_characters,
            self.standardize_bullets,
            self.normalize_whitespace,
        ):
            text = step(text)
        return text
