"""Markdown rendering of Canvas resources and extraction results."""

from datetime import datetime
from typing import Dict, List, Optional

from .models.canvas import (
    Assignment,
    CanvasFile,
    Course,
    ItemKind,
    MediaObject,
    MediaTrack,
    Module,
    ModuleItem,
    Page,
)
from .models.results import AggregationResult, ItemOutcome, WeekNotFound
from .processors.file_classifier import FileKind


def _date(value: Optional[datetime], default: str = "Unknown") -> str:
    return value.strftime("%Y-%m-%d") if value else default


def _due(value: Optional[datetime]) -> str:
    if not value:
        return "**Due:** No due date"
    return f"**Due:** {value.strftime('%Y-%m-%d')} at {value.strftime('%H:%M')}"


def _points(value: Optional[float]) -> str:
    if not value:
        return "**Points:** Not specified"
    return f"**Points:** {value:g}"


def _lines(*parts: Optional[str]) -> str:
    """Join lines, skipping the ones given as None."""
    return "\n".join(part for part in parts if part is not None)


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def render_course_list(courses: List[Course]) -> str:
    active = [course for course in courses if course.workflow_state == "available"]
    if not active:
        return "## No active courses found."

    entries = []
    for index, course in enumerate(active, start=1):
        term = f" ({course.term.name})" if course.term and course.term.name else ""
        students = f" - {course.total_students} students" if course.total_students else ""
        entries.append(_lines(
            f"{index}. **{course.name}** ({course.course_code or 'no code'}){term}",
            f"   - Course ID: {course.id}",
            f"   - Status: {course.workflow_state}{students}",
            f"   - Time Zone: {course.time_zone or 'Unknown'}",
        ))

    return f"## Your Canvas Courses ({len(active)} courses found)\n\n" + "\n\n".join(entries)


def render_course(course: Course) -> str:
    calendar = course.calendar.ics if course.calendar and course.calendar.ics else "Not available"
    return _lines(
        f"## {course.name} ({course.course_code or 'no code'})",
        "",
        f"**Course ID:** {course.id}",
        f"**Status:** {course.workflow_state or 'Unknown'}",
        f"**Term:** {course.term.name}" if course.term and course.term.name else None,
        f"**Start Date:** {_date(course.start_at)}" if course.start_at else None,
        f"**End Date:** {_date(course.end_at)}" if course.end_at else None,
        f"**Total Students:** {course.total_students}" if course.total_students else None,
        f"**Time Zone:** {course.time_zone or 'Unknown'}",
        f"**Default View:** {course.default_view or 'Unknown'}",
        f"**License:** {course.license or 'Unknown'}",
        "",
        f"**Calendar Feed:** {calendar}",
    )


def render_module_list(course_id: str, modules: List[Module]) -> str:
    if not modules:
        return "## No modules found for this course."

    ordered = sorted(modules, key=lambda module: module.position if module.position is not None else float("inf"))
    entries = []
    for module in ordered:
        prerequisites = module.prerequisite_module_ids or []
        entries.append(_lines(
            f"### {module.position if module.position is not None else '-'}. {module.name}",
            "",
            f"**Module ID:** {module.id}",
            f"**Status:** {module.state}" if module.state else None,
            f"**Items:** {module.items_count}" if module.items_count else None,
            f"**Unlocks:** {_date(module.unlock_at)}" if module.unlock_at else None,
            "**Sequential Progress Required**" if module.require_sequential_progress else None,
            f"**Prerequisites:** Module IDs {', '.join(str(i) for i in prerequisites)}" if prerequisites else None,
            "",
            "---",
        ))

    return (
        f"## Course Modules for Course {course_id} ({len(modules)} modules)\n\n"
        + "\n".join(entries)
        + '\n\nTip: use "get_module_items" with a module ID to see the content of each module.'
    )


def item_reference(item: ModuleItem) -> Optional[str]:
    """The id or url line that identifies an item's underlying content."""
    kind = item.kind
    if kind == ItemKind.PAGE:
        return f"**Page URL:** {item.page_url}" if item.page_url else None
    if kind == ItemKind.EXTERNAL_URL:
        return f"**External URL:** {item.external_url}" if item.external_url else None
    if item.content_id is None:
        return None
    label = {
        ItemKind.ASSIGNMENT: "Assignment ID",
        ItemKind.QUIZ: "Quiz ID",
        ItemKind.DISCUSSION: "Discussion ID",
        ItemKind.FILE: "File ID",
    }.get(kind, "Content ID")
    return f"**{label}:** {item.content_id}"


def render_module_items(module_id: str, items: List[ModuleItem], previews: Dict[int, str]) -> str:
    """
    Render a module's items, in the order given.

    Args:
        module_id: Module identifier for the header
        items: Items sorted by position
        previews: Page preview text keyed by item id
    """
    if not items:
        return "## No items found in this module."

    entries = []
    for item in items:
        indent = "  " * (item.indent or 0)
        if item.html_url:
            status = "Accessible"
        elif item.published:
            status = "Published"
        else:
            status = "Not available"

        completion = None
        requirement = item.completion_requirement
        if requirement:
            done = "Completed" if requirement.completed else "Not completed"
            completion = f"**Completion:** {requirement.type} - {done}"
            if requirement.min_score:
                completion += f" (Min score: {requirement.min_score:g})"

        preview = previews.get(item.id)
        lines = [
            f"### {item.position}. {item.title}",
            "",
            f"**Type:** {item.type or 'Unknown'}",
            f"**Item ID:** {item.id}",
            f"**Status:** {status}",
            item_reference(item),
            f"**Preview:** {preview}" if preview else None,
            completion,
            f"**Link:** [View Content]({item.html_url})" if item.html_url else None,
            "",
            "---",
        ]
        entries.append("\n".join(indent + line if line else line for line in lines if line is not None))

    return f"## Module {module_id} - Course Items ({len(items)} items)\n\n" + "\n".join(entries)


def render_page(page: Page, page_url: str, text: str) -> str:
    status = "Published" if page.published else "Unpublished"
    return _lines(
        f"# {page.title}",
        "",
        f"**Page URL:** {page_url}",
        f"**Status:** {status}",
        f"**Last Updated:** {_date(page.updated_at)}",
        f"**Page ID:** {page.page_id}" if page.page_id is not None else None,
        "",
        "---",
        "",
        "## Content",
        "",
        text or "_This page has no content._",
        "",
        "---",
        "",
        f"**Original URL:** {page.html_url or 'Not available'}",
    )


def render_assignment_list(course_id: str, assignments: List[Assignment], descriptions: Dict[int, str]) -> str:
    """Render assignments sorted by due date, undated ones last."""
    if not assignments:
        return "## No assignments found for this course."

    dated = sorted((a for a in assignments if a.due_at), key=lambda a: a.due_at)
    undated = [a for a in assignments if not a.due_at]

    entries = []
    for index, assignment in enumerate(dated + undated, start=1):
        group = assignment.assignment_group.name if assignment.assignment_group else None
        entries.append(_lines(
            f"### {index}. {assignment.name}",
            "",
            _due(assignment.due_at),
            _points(assignment.points_possible),
            f"**Group:** {group}" if group else None,
            f"**Assignment ID:** {assignment.id}",
            "",
            f"**Description:** {descriptions.get(assignment.id) or 'No description provided'}",
            "",
            "---",
        ))

    return f"## Assignments for Course {course_id} ({len(assignments)} assignments)\n\n" + "\n".join(entries)


def render_assignment(assignment: Assignment, description: str) -> str:
    attempts = assignment.allowed_attempts
    group = assignment.assignment_group.name if assignment.assignment_group else None
    return _lines(
        f"# {assignment.name}",
        "",
        f"**Assignment ID:** {assignment.id}",
        _due(assignment.due_at),
        _points(assignment.points_possible),
        f"**Grading Type:** {assignment.grading_type or 'Unknown'}",
        f"**Assignment Group:** {group}" if group else None,
        f"**Submission Types:** {', '.join(assignment.submission_types)}" if assignment.submission_types else None,
        f"**Allowed Attempts:** {attempts}" if attempts and attempts > 0 else "**Allowed Attempts:** Unlimited",
        "",
        "---",
        "",
        "## Description",
        "",
        description or "No description provided",
        "",
        "---",
        "",
        "## Assignment Details",
        "",
        f"**Created:** {_date(assignment.created_at)}",
        f"**Updated:** {_date(assignment.updated_at)}",
        f"**Course ID:** {assignment.course_id}" if assignment.course_id is not None else None,
        f"**HTML URL:** [View Assignment]({assignment.html_url})" if assignment.html_url else None,
    )


def _file_size(size: Optional[int]) -> str:
    if not size:
        return "Unknown size"
    return f"{size / 1024 / 1024:.2f} MB"


def render_file(file: CanvasFile, kind: FileKind) -> str:
    return _lines(
        f"# {file.display_name}",
        "",
        kind.label,
        "",
        f"**File ID:** {file.id}",
        f"**Filename:** {file.filename or file.display_name}",
        f"**Content Type:** {file.content_type or 'Unknown'}",
        f"**Size:** {_file_size(file.size)}",
        f"**Uploaded:** {_date(file.created_at)}",
        "**File is locked**" if file.locked else "**File is accessible**",
        "**File is hidden**" if file.hidden else "**File is visible**",
        "",
        "---",
        "",
        "## Access Information",
        "",
        f"**Note:** {kind.access_note}",
        "",
        f"**Download URL:** [Download File]({file.url})" if file.url else "**Download URL:** Not available",
        f"**Thumbnail:** [View Thumbnail]({file.thumbnail_url})" if file.thumbnail_url else None,
        "",
        "---",
        "",
        "## File Details",
        "",
        f"**Folder ID:** {file.folder_id}" if file.folder_id is not None else None,
        f"**UUID:** {file.uuid}" if file.uuid else None,
        f"**MIME Class:** {file.mime_class}" if file.mime_class else None,
        f"**Last Modified:** {_date(file.modified_at)}" if file.modified_at else None,
    )


def render_media(media_id: str, media: MediaObject, tracks: List[MediaTrack]) -> str:
    lines = ["# Media Content", ""]
    if media.title:
        lines.append(f"**Title:** {media.title}")
    lines.append(f"**Media ID:** {media_id}")
    if media.media_type:
        lines.append(f"**Type:** {media.media_type}")
    if media.duration:
        minutes, seconds = divmod(int(media.duration), 60)
        lines.append(f"**Duration:** {minutes}:{seconds:02d}")

    lines += ["", "---", "", "## Available Sources", ""]
    sources = media.media_sources or []
    if not sources:
        lines += ["No direct media sources available through API.", ""]
    for index, source in enumerate(sources, start=1):
        lines.append(f"### Source {index}")
        lines.append(f"**Quality:** {source.width or 'Unknown'}x{source.height or 'Unknown'}")
        lines.append(f"**Format:** {source.content_type or 'Unknown'}")
        if source.url:
            lines.append(f"**Stream URL:** [Play Media]({source.url})")
        lines.append("")

    if tracks:
        lines += ["## Available Captions/Subtitles", ""]
        for track in tracks:
            lines.append(f"**Language:** {track.locale or 'Unknown'}")
            lines.append(f"**Kind:** {track.kind or 'Unknown'}")
            if track.content:
                lines.append(f"**Content Available:** Yes ({len(track.content)} characters)")
            lines.append("")

    lines.append("Note: media content may require a Canvas login to access.")
    return "\n".join(lines)


def render_item_metadata(item: ModuleItem) -> str:
    """Content block for items rendered from their metadata only."""
    kind = item.kind
    if kind == ItemKind.EXTERNAL_URL and item.external_url:
        return f"### External Link\n\n**URL:** [{item.title}]({item.external_url})"
    if kind == ItemKind.QUIZ:
        heading, access = "Quiz Information", "Take Quiz"
    elif kind == ItemKind.DISCUSSION:
        heading, access = "Discussion Information", "Join Discussion"
    else:
        heading, access = "Content Information", "View Content"
    return _lines(
        f"### {heading}",
        "",
        item_reference(item) or f"**Content ID:** {item.content_id or 'Not available'}",
        f"**Access:** [{access}]({item.html_url})" if item.html_url else None,
    )


def render_outcome(number: int, outcome: ItemOutcome) -> str:
    item = outcome.item
    header = _lines(
        f"## {number}. {item.title}",
        "",
        f"**Type:** {item.type or 'Unknown'}",
        f"**Item ID:** {item.id}",
        f"**Published:** {'Yes' if item.published else 'No'}",
    )
    if outcome.ok:
        body = outcome.content or ""
    else:
        body = f"### Content Extraction Error\n\n**Error:** {outcome.error}"
    return f"{header}\n\n{body}\n\n---"


def render_aggregation(result: AggregationResult) -> str:
    if not result.outcomes:
        return f"## No content found in module {result.module_id}"

    header = _lines(
        f"# {result.title}",
        "",
        f"**Course ID:** {result.course_id}",
        f"**Module Name:** {result.module_name}" if result.module_name else None,
        f"**Module ID:** {result.module_id}" if result.module_name else None,
        f"**Total Items:** {len(result.outcomes)}",
        f"**Items With Errors:** {len(result.failures)}" if result.failures else None,
        "",
        "---",
    )
    blocks = [render_outcome(number, outcome) for number, outcome in enumerate(result.outcomes, start=1)]
    return header + "\n\n" + "\n\n".join(blocks)


def render_week_not_found(result: WeekNotFound) -> str:
    available = "\n".join(
        f"{index}. {module.name} (ID: {module.id})"
        for index, module in enumerate(result.available_modules, start=1)
    ) or "No modules in this course."
    return _lines(
        f"# Week {result.week} - Not Found",
        "",
        f"**No module found for Week {result.week}**",
        "",
        f"**Course ID:** {result.course_id}",
        f"**Searched for:** Week {result.week}",
        "",
        "**Available modules:**",
        available,
        "",
        'Tip: use "extract_module_content" with a module ID from the list above.',
    )
