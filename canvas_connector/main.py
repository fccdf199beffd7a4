#!/usr/bin/env python3
"""
Canvas LMS Connector

Command-line front end for the Canvas connector: every command runs one
service operation and prints the result to stdout. Logs go to stderr.

Usage:
    canvas-connector courses                 # List active courses
    canvas-connector modules COURSE_ID       # List a course's modules
    canvas-connector module COURSE_ID ID     # Extract all content of a module
    canvas-connector week COURSE_ID 10       # Extract the module for week 10
    canvas-connector call TOOL key=value     # Run any registered tool
"""

import asyncio
import json
import sys
from typing import Any, Awaitable, Callable, Dict, Tuple

import click
from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from .config import config
from .models.credential import Credential
from .models.results import RequestStats, ToolResponse
from .service import CanvasService
from .tools import TOOLS, call_tool
from .utils.exceptions import CanvasConnectorError
from .utils.logging_config import get_logger, setup_logging

console = Console()

Operation = Callable[[CanvasService], Awaitable[Any]]


def setup_environment():
    """Initialize logging."""
    setup_logging(level=config.log_level, log_file=config.log_file)
    return get_logger()


def load_credential() -> Credential:
    """Build the credential from the environment, exiting if it is unusable."""
    try:
        return Credential(base_url=config.canvas.base_url, token=config.canvas.access_token)
    except ValidationError as e:
        console.print("[bold red]Missing or invalid Canvas credentials.[/bold red]")
        for error in e.errors():
            console.print(f"  {'.'.join(str(part) for part in error['loc'])}: {error['msg']}")
        console.print("Set CANVAS_BASE_URL and CANVAS_ACCESS_TOKEN (or add them to .env).")
        sys.exit(1)


def build_service(credential: Credential) -> CanvasService:
    return CanvasService(credential, config)


def run_operation(operation: Operation) -> None:
    """Run one operation against a fresh service and print its result."""
    logger = setup_environment()
    credential = load_credential()

    async def _run() -> Tuple[Any, RequestStats]:
        async with build_service(credential) as service:
            result = await operation(service)
            return result, service.get_request_stats()

    try:
        result, stats = asyncio.run(_run())
    except CanvasConnectorError as e:
        logger.debug(f"Command failed: {e!r}")
        console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)

    show_result(result)

    ctx = click.get_current_context()
    if ctx.find_root().params.get("stats"):
        show_stats(stats)


def show_result(result: Any) -> None:
    ctx = click.get_current_context()
    plain = ctx.find_root().params.get("plain", False)

    if isinstance(result, ToolResponse):
        if plain:
            click.echo(result.text)
        else:
            console.print(Markdown(result.text))
    elif isinstance(result, BaseModel):
        console.print_json(result.model_dump_json(exclude_none=True))
    else:
        console.print_json(json.dumps(result, default=str))


def show_stats(stats: RequestStats) -> None:
    table = Table(title="Request Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Requests", str(stats.request_count))
    table.add_row("Last Request", f"{stats.last_request_time:.3f}")
    console.print(table)


@click.group()
@click.version_option(version="1.0.0")
@click.option("--stats", is_flag=True, help="Print request statistics after the command")
@click.option("--plain", is_flag=True, help="Print text results without markdown rendering")
def cli(stats: bool, plain: bool):
    """Canvas LMS connector: courses, modules and content extraction."""
    pass


# --- Courses and modules ---


@cli.command()
def courses():
    """List active courses."""
    run_operation(lambda service: service.list_courses())


@cli.command()
@click.argument("course_id")
def course(course_id: str):
    """Show course details."""
    run_operation(lambda service: service.get_course(course_id))


@cli.command()
@click.argument("course_id")
def modules(course_id: str):
    """List the modules of a course."""
    run_operation(lambda service: service.list_modules(course_id))


@cli.command()
@click.argument("course_id")
@click.argument("module_id")
def items(course_id: str, module_id: str):
    """List the items of a module with page previews."""
    run_operation(lambda service: service.get_module_items(course_id, module_id))


@cli.command()
@click.argument("course_id")
@click.argument("page_url")
def page(course_id: str, page_url: str):
    """Show the content of a page."""
    run_operation(lambda service: service.get_page(course_id, page_url))


# --- Assignments and announcements ---


@cli.command()
@click.argument("course_id")
def assignments(course_id: str):
    """List assignments sorted by due date."""
    run_operation(lambda service: service.list_assignments(course_id))


@cli.command()
@click.argument("course_id")
@click.argument("assignment_id")
def assignment(course_id: str, assignment_id: str):
    """Show assignment details."""
    run_operation(lambda service: service.get_assignment(course_id, assignment_id))


@cli.command()
@click.argument("course_id")
def announcements(course_id: str):
    """List course announcements."""
    run_operation(lambda service: service.list_announcements(course_id))


# --- Files and search ---


@cli.command()
@click.argument("course_id")
def files(course_id: str):
    """List course files, most recently updated first."""
    run_operation(lambda service: service.list_files(course_id))


@cli.command()
@click.argument("file_id")
def file(file_id: str):
    """Describe a file and how to access it."""
    run_operation(lambda service: service.get_file_content(file_id))


@cli.command()
@click.argument("course_id")
@click.argument("query")
def search(course_id: str, query: str):
    """Search assignments, announcements, pages and files."""
    run_operation(lambda service: service.search_content(course_id, query))


@cli.command()
@click.argument("media_id")
def media(media_id: str):
    """Describe a media object, its sources and captions."""
    run_operation(lambda service: service.get_media(media_id))


# --- Content extraction ---


@cli.command()
@click.argument("course_id")
@click.argument("module_id")
def module(course_id: str, module_id: str):
    """Extract the complete content of a module."""
    run_operation(lambda service: service.extract_module(course_id, module_id))


@cli.command()
@click.argument("course_id")
@click.argument("week_number")
def week(course_id: str, week_number: str):
    """Extract the module for a week (e.g. 10)."""
    run_operation(lambda service: service.resolve_week(course_id, week_number))


@cli.command()
def profile():
    """Show the authenticated user's profile."""
    run_operation(lambda service: service.get_user_profile())


@cli.command()
@click.argument("name")
@click.argument("arguments", nargs=-1)
def call(name: str, arguments: Tuple[str, ...]):
    """Run a registered tool: ARGUMENTS are key=value pairs."""
    if name not in TOOLS:
        console.print(f"[bold red]Unknown tool:[/bold red] {name}")
        console.print("Available tools: " + ", ".join(sorted(TOOLS)))
        sys.exit(1)

    values: Dict[str, str] = {}
    for argument in arguments:
        key, sep, value = argument.partition("=")
        if not sep:
            raise click.BadParameter(f"expected key=value, got '{argument}'", param_hint="ARGUMENTS")
        values[key] = value

    run_operation(lambda service: call_tool(service, name, values))


if __name__ == "__main__":
    cli()
