"""Content-type classification of Canvas files."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class FileFamily(str, Enum):
    DOCUMENT = "document"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    PRESENTATION = "presentation"
    SPREADSHEET = "spreadsheet"
    OTHER = "other"


@dataclass(frozen=True)
class FileKind:
    """Family of a file plus the labels shown to the user."""

    family: FileFamily
    label: str
    access_note: str


class FileClassifier:
    """Maps a MIME type onto a FileKind by substring rules, first match wins."""

    RULES: Tuple[Tuple[Tuple[str, ...], FileKind], ...] = (
        (("pdf",), FileKind(
            FileFamily.DOCUMENT, "PDF Document",
            "PDF content requires download to view. Use the download URL below.",
        )),
        (("image",), FileKind(
            FileFamily.IMAGE, "Image File",
            "Image can be viewed directly through the URL below.",
        )),
        (("video",), FileKind(
            FileFamily.VIDEO, "Video File",
            "Video can be streamed through Canvas or downloaded.",
        )),
        (("audio",), FileKind(
            FileFamily.AUDIO, "Audio File",
            "Audio can be played through Canvas or downloaded.",
        )),
        (("powerpoint", "presentation"), FileKind(
            FileFamily.PRESENTATION, "Presentation File",
            "Presentation requires download to view fully.",
        )),
        (("excel", "spreadsheet"), FileKind(
            FileFamily.SPREADSHEET, "Spreadsheet File",
            "Spreadsheet requires download for full functionality.",
        )),
        (("word", "document"), FileKind(
            FileFamily.DOCUMENT, "Document File",
            "Document requires download for full formatting.",
        )),
    )

    DEFAULT = FileKind(FileFamily.OTHER, "File", "Download required to access content.")

    def classify(self, content_type: Optional[str]) -> FileKind:
        """
        Classify a file by its content type.

        Args:
            content_type: MIME type reported by Canvas (may be missing)

        Returns:
            Matching FileKind, or DEFAULT when nothing matches
        """
        mime = (content_type or "").lower()
        for needles, kind in self.RULES:
            if any(needle in mime for needle in needles):
                return kind
        return self.DEFAULT
