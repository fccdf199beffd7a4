"""Canvas LMS connector: rate-limited API access and module content extraction."""

__version__ = "1.0.0"
