"""Canvas REST resource models.

Only identifiers are required. Every other field is optional and unknown
fields are ignored, so upstream shape changes do not break decoding.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CanvasModel(BaseModel):
    """Base for upstream resources."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Term(CanvasModel):
    id: Optional[int] = None
    name: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None


class Calendar(CanvasModel):
    ics: Optional[str] = None


class Course(CanvasModel):
    """A course the user is enrolled in."""

    id: int = Field(..., description="Course ID")
    name: str = Field(default="", description="Course name")
    course_code: Optional[str] = None
    workflow_state: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    total_students: Optional[int] = None
    time_zone: Optional[str] = None
    default_view: Optional[str] = None
    license: Optional[str] = None
    term: Optional[Term] = None
    calendar: Optional[Calendar] = None


class Module(CanvasModel):
    """A course module (often one per week)."""

    id: int = Field(..., description="Module ID")
    name: str = Field(default="", description="Module name")
    position: Optional[int] = None
    unlock_at: Optional[datetime] = None
    require_sequential_progress: Optional[bool] = None
    prerequisite_module_ids: Optional[List[int]] = None
    items_count: Optional[int] = None
    state: Optional[str] = None
    published: Optional[bool] = None


class ItemKind(str, Enum):
    """Module item variants; unknown upstream types map to OTHER."""

    PAGE = "Page"
    FILE = "File"
    ASSIGNMENT = "Assignment"
    QUIZ = "Quiz"
    DISCUSSION = "Discussion"
    EXTERNAL_URL = "ExternalUrl"
    OTHER = "Other"

    @classmethod
    def from_type(cls, value: Optional[str]) -> "ItemKind":
        for kind in cls:
            if kind.value == value:
                return kind
        return cls.OTHER


class CompletionRequirement(CanvasModel):
    type: Optional[str] = None
    min_score: Optional[float] = None
    completed: Optional[bool] = None


class ModuleItem(CanvasModel):
    """An entry inside a module pointing at a page, file, assignment, etc."""

    id: int = Field(..., description="Module item ID")
    title: str = Field(default="", description="Item title")
    position: Optional[int] = Field(default=None, description="Declared order within the module")
    indent: Optional[int] = 0
    type: Optional[str] = Field(default=None, description="Upstream type tag")
    content_id: Optional[int] = None
    html_url: Optional[str] = None
    url: Optional[str] = None
    page_url: Optional[str] = None
    external_url: Optional[str] = None
    completion_requirement: Optional[CompletionRequirement] = None
    published: Optional[bool] = None

    @property
    def kind(self) -> ItemKind:
        return ItemKind.from_type(self.type)


class Page(CanvasModel):
    """A wiki page."""

    page_id: Optional[int] = None
    url: Optional[str] = None
    title: str = ""
    body: Optional[str] = None
    published: Optional[bool] = None
    updated_at: Optional[datetime] = None
    html_url: Optional[str] = None


class AssignmentGroup(CanvasModel):
    id: Optional[int] = None
    name: Optional[str] = None


class Assignment(CanvasModel):
    """An assignment with its grading details."""

    id: int = Field(..., description="Assignment ID")
    name: str = ""
    description: Optional[str] = None
    due_at: Optional[datetime] = None
    unlock_at: Optional[datetime] = None
    lock_at: Optional[datetime] = None
    points_possible: Optional[float] = None
    grading_type: Optional[str] = None
    submission_types: Optional[List[str]] = None
    allowed_attempts: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    course_id: Optional[int] = None
    html_url: Optional[str] = None
    assignment_group: Optional[AssignmentGroup] = None


class Author(CanvasModel):
    id: Optional[int] = None
    display_name: Optional[str] = None


class Announcement(CanvasModel):
    """An announcement (a discussion topic flagged as announcement)."""

    id: int = Field(..., description="Announcement ID")
    title: str = ""
    message: Optional[str] = None
    html_url: Optional[str] = None
    posted_at: Optional[datetime] = None
    author: Optional[Author] = None
    read_state: Optional[str] = None


class CanvasFile(CanvasModel):
    """File metadata; Canvas names the MIME field 'content-type'."""

    id: int = Field(..., description="File ID")
    uuid: Optional[str] = None
    folder_id: Optional[int] = None
    display_name: str = ""
    filename: Optional[str] = None
    content_type: Optional[str] = Field(default=None, alias="content-type")
    url: Optional[str] = None
    size: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    locked: Optional[bool] = None
    hidden: Optional[bool] = None
    thumbnail_url: Optional[str] = None
    mime_class: Optional[str] = None


class Submission(CanvasModel):
    id: Optional[int] = None
    user_id: Optional[int] = None
    assignment_id: Optional[int] = None
    grade: Optional[str] = None
    score: Optional[float] = None
    submitted_at: Optional[datetime] = None
    workflow_state: Optional[str] = None
    late: Optional[bool] = None
    missing: Optional[bool] = None


class MediaSource(CanvasModel):
    url: Optional[str] = None
    content_type: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class MediaTrack(CanvasModel):
    locale: Optional[str] = None
    kind: Optional[str] = None
    content: Optional[str] = None


class MediaObject(CanvasModel):
    """A media object (lecture recording, audio, etc.)."""

    media_id: Optional[str] = None
    title: Optional[str] = None
    media_type: Optional[str] = None
    duration: Optional[float] = None
    media_sources: Optional[List[MediaSource]] = None


class UserProfile(CanvasModel):
    id: int = Field(..., description="User ID")
    name: Optional[str] = None
    short_name: Optional[str] = None
    primary_email: Optional[str] = None
    login_id: Optional[str] = None
    time_zone: Optional[str] = None
