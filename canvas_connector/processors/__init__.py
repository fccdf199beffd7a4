"""Processors for converting Canvas content to readable text."""

from .html_cleaner import HTMLCleaner
from .text_normalizer import TextNormalizer
from .file_classifier import FileClassifier, FileFamily, FileKind

__all__ = ["HTMLCleaner", "TextNormalizer", "FileClassifier", "FileFamily", "FileKind"]
