"""Data models for Canvas resources, requests and results."""

from .credential import Credential
from .request import PageCursor, RequestTicket
from .canvas import (
    Course,
    Module,
    ModuleItem,
    ItemKind,
    Page,
    Assignment,
    Announcement,
    CanvasFile,
    Submission,
    MediaObject,
    MediaTrack,
    UserProfile,
)
from .results import (
    ItemOutcome,
    AggregationResult,
    ModuleSummary,
    WeekNotFound,
    RequestStats,
    ToolResponse,
)

__all__ = [
    "Credential",
    "PageCursor",
    "RequestTicket",
    "Course",
    "Module",
    "ModuleItem",
    "ItemKind",
    "Page",
    "Assignment",
    "Announcement",
    "CanvasFile",
    "Submission",
    "MediaObject",
    "MediaTrack",
    "UserProfile",
    "ItemOutcome",
    "AggregationResult",
    "ModuleSummary",
    "WeekNotFound",
    "RequestStats",
    "ToolResponse",
]
