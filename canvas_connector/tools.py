"""Tool, resource and prompt registry mapping names onto service operations."""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel

from .models.results import ToolResponse
from .service import CanvasService
from .utils.exceptions import ToolArgumentError, UnknownToolError
from .utils.logging_config import get_logger

logger = get_logger()


@dataclass(frozen=True)
class Argument:
    name: str
    description: str
    required: bool = True


@dataclass(frozen=True)
class Tool:
    """A callable operation: ``method`` is the CanvasService coroutine it runs."""

    name: str
    description: str
    method: str
    arguments: Tuple[Argument, ...] = ()

    def schema(self) -> Dict[str, Any]:
        """JSON-schema style description of the tool's input."""
        return {
            "type": "object",
            "properties": {
                arg.name: {"type": "string", "description": arg.description}
                for arg in self.arguments
            },
            "required": [arg.name for arg in self.arguments if arg.required],
        }


COURSE_ID = Argument("course_id", "The Canvas course ID")
MODULE_ID = Argument("module_id", "The Canvas module ID")
ASSIGNMENT_ID = Argument("assignment_id", "The Canvas assignment ID")
FILE_ID = Argument("file_id", "The Canvas file ID")

TOOLS: Dict[str, Tool] = {tool.name: tool for tool in [
    # Courses
    Tool("list_courses", "List all courses the student is enrolled in", "list_courses"),
    Tool("get_course_details", "Get detailed information about a specific course",
         "get_course", (COURSE_ID,)),
    Tool("list_course_modules", "List all modules in a course with their structure and content",
         "list_modules", (COURSE_ID,)),
    Tool("get_module_items",
         "Get all items within a specific course module (pages, assignments, quizzes, discussions, etc.)",
         "get_module_items", (COURSE_ID, MODULE_ID)),
    Tool("get_page_content", "Get the content of a specific course page",
         "get_page", (COURSE_ID, Argument("page_url", "The page URL slug or ID"))),
    # Assignments
    Tool("list_assignments", "List all assignments for a course, including due dates and requirements",
         "list_assignments", (COURSE_ID,)),
    Tool("get_assignment_details",
         "Get detailed information about a specific assignment including description, "
         "requirements, due date, and grading criteria",
         "get_assignment", (COURSE_ID, ASSIGNMENT_ID)),
    Tool("list_assignment_submissions",
         "Get submission details for an assignment (useful for checking submission status and feedback)",
         "list_assignment_submissions", (COURSE_ID, ASSIGNMENT_ID)),
    # Announcements
    Tool("list_announcements", "List all course announcements and important updates from instructors",
         "list_announcements", (COURSE_ID,)),
    Tool("get_announcement_details", "Get detailed content of a specific announcement",
         "get_announcement",
         (COURSE_ID, Argument("announcement_id", "The Canvas announcement/discussion topic ID"))),
    # Library
    Tool("list_course_files",
         "List all files and resources available in a course (documents, presentations, readings, etc.)",
         "list_files", (COURSE_ID,)),
    Tool("get_file_details",
         "Get detailed information about a specific file including metadata, download URL, "
         "and access permissions",
         "get_file", (FILE_ID,)),
    Tool("search_course_content",
         "Search across all course content including assignments, announcements, pages, and files",
         "search_content", (COURSE_ID, Argument("query", "Search query to find relevant content"))),
    # Content extraction
    Tool("get_file_content",
         "Get detailed information about a specific file including type, size, download URL "
         "and access instructions",
         "get_file_content", (FILE_ID,)),
    Tool("get_media_content",
         "Extract information about video, audio, or other media content including sources and captions",
         "get_media", (Argument("media_id", "The Canvas media object ID"),)),
    Tool("extract_module_content",
         "Extract complete content from all items in a module including pages, files, "
         "assignments, and media",
         "extract_module", (COURSE_ID, MODULE_ID)),
    Tool("get_week_content",
         "Extract all content from a specific week module by searching for week number "
         "(e.g., Week 10, Week 1)",
         "resolve_week", (COURSE_ID, Argument("week_number", "The week number (e.g., '10', '1', '5')"))),
    Tool("get_user_profile", "Get the profile of the authenticated user", "get_user_profile"),
]}


def _argument_values(tool: Tool, arguments: Mapping[str, Any]) -> List[str]:
    values = []
    for arg in tool.arguments:
        value = arguments.get(arg.name)
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str) or not value.strip():
            raise ToolArgumentError(f"Tool '{tool.name}' requires a non-empty '{arg.name}' argument")
        values.append(value.strip())
    return values


def to_tool_response(result: Any) -> ToolResponse:
    """Wrap an operation result in the text envelope, JSON-encoding raw data."""
    if isinstance(result, ToolResponse):
        return result
    if isinstance(result, BaseModel):
        return ToolResponse.from_text(result.model_dump_json(indent=2, exclude_none=True))
    return ToolResponse.from_text(json.dumps(result, indent=2, default=str))


async def call_tool(
    service: CanvasService,
    name: str,
    arguments: Optional[Mapping[str, Any]] = None,
) -> ToolResponse:
    """
    Run a registered tool.

    Args:
        service: Service the tool's operation runs on
        name: Tool name
        arguments: Tool arguments by name

    Returns:
        ToolResponse with the rendered or JSON-encoded result

    Raises:
        UnknownToolError: If no tool has this name
        ToolArgumentError: If a required argument is missing or empty
        CanvasAPIError: If the operation itself fails
    """
    tool = TOOLS.get(name)
    if tool is None:
        raise UnknownToolError(f"Unknown tool: {name}")

    values = _argument_values(tool, arguments or {})
    logger.info(f"Calling tool {name}")
    result = await getattr(service, tool.method)(*values)
    return to_tool_response(result)


# --- Resources ---

RESOURCE_URI = re.compile(r"^canvas://(?P<kind>[a-z]+)/(?P<path>.+)$")

RESOURCES = [
    {"uri": "canvas://course/{course_id}", "name": "Course Information",
     "description": "Detailed information about a specific course", "mimeType": "application/json"},
    {"uri": "canvas://assignment/{course_id}/{assignment_id}", "name": "Assignment Details",
     "description": "Detailed information about a specific assignment", "mimeType": "application/json"},
    {"uri": "canvas://announcement/{course_id}/{announcement_id}", "name": "Announcement Content",
     "description": "Full content of a course announcement", "mimeType": "application/json"},
    {"uri": "canvas://file/{file_id}", "name": "File Information",
     "description": "Metadata of a course file", "mimeType": "application/json"},
]


def _resource_ids(uri: str, path: str, count: int) -> List[str]:
    ids = path.split("/")
    if len(ids) != count or not all(ids):
        raise ToolArgumentError(f"Invalid resource URI: {uri}")
    return ids


async def read_resource(service: CanvasService, uri: str) -> str:
    """
    Read a ``canvas://`` resource as JSON text.

    Raises:
        ToolArgumentError: If the URI is malformed
        UnknownToolError: If the resource type is not supported
    """
    match = RESOURCE_URI.match(uri)
    if not match:
        raise ToolArgumentError(f"Invalid resource URI: {uri}")

    kind, path = match.group("kind"), match.group("path")
    if kind == "course":
        (course_id,) = _resource_ids(uri, path, 1)
        result: Any = await service.get_course_record(course_id)
    elif kind == "assignment":
        course_id, assignment_id = _resource_ids(uri, path, 2)
        result = await service.get_assignment_record(course_id, assignment_id)
    elif kind == "announcement":
        course_id, announcement_id = _resource_ids(uri, path, 2)
        result = await service.get_announcement(course_id, announcement_id)
    elif kind == "file":
        (file_id,) = _resource_ids(uri, path, 1)
        result = await service.get_file(file_id)
    else:
        raise UnknownToolError(f"Unknown resource type: {kind}")

    return to_tool_response(result).text


# --- Prompts ---

@dataclass(frozen=True)
class Prompt:
    name: str
    description: str
    template: str
    arguments: Tuple[Argument, ...] = ()


PROMPTS: Dict[str, Prompt] = {prompt.name: prompt for prompt in [
    Prompt(
        "study_plan",
        "Generate a personalized study plan based on upcoming assignments and course content",
        "Create a study plan for course {course_id} focusing on upcoming assignments "
        "and important deadlines.",
        (Argument("course_id", "The Canvas course ID to create a study plan for"),),
    ),
    Prompt(
        "assignment_helper",
        "Get help understanding assignment requirements and creating a completion plan",
        "Help me understand and plan for assignment {assignment_id} in course {course_id}.",
        (COURSE_ID, ASSIGNMENT_ID),
    ),
    Prompt(
        "deadline_tracker",
        "Track and prioritize upcoming deadlines across all courses",
        "List my upcoming deadlines across all courses for the next {days_ahead} days, "
        "ordered by due date and flagging anything at risk.",
        (Argument("days_ahead", "Number of days to look ahead for deadlines (default: 14)", required=False),),
    ),
    Prompt(
        "course_summary",
        "Generate a comprehensive summary of course content, progress, and requirements",
        "Summarize course {course_id}: its modules, key content, assignments and requirements.",
        (Argument("course_id", "The Canvas course ID to summarize"),),
    ),
]}

PROMPT_DEFAULTS = {"days_ahead": "14"}


def get_prompt(name: str, arguments: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Render a prompt into a single user message.

    Missing arguments are filled with their default, or a ``[name]``
    placeholder when there is none.
    """
    prompt = PROMPTS.get(name)
    if prompt is None:
        raise UnknownToolError(f"Unknown prompt: {name}")

    arguments = arguments or {}
    values = {}
    for arg in prompt.arguments:
        value = arguments.get(arg.name)
        if value is None or str(value).strip() == "":
            value = PROMPT_DEFAULTS.get(arg.name, f"[{arg.name}]")
        values[arg.name] = str(value).strip()

    return {
        "description": prompt.description,
        "messages": [
            {"role": "user", "content": {"type": "text", "text": prompt.template.format(**values)}}
        ],
    }
