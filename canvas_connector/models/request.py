"""Outbound request models."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class PageCursor(BaseModel):
    """Locator of the next page of a listing, taken from the Link header."""

    url: str = Field(..., description="Absolute or API-relative URL of the next page")


class RequestTicket(BaseModel):
    """One outbound call: method, path, query and an optional page cursor."""

    method: str = Field(default="GET", description="HTTP method")
    path: str = Field(..., description="Path relative to the API root")
    params: Dict[str, Any] = Field(default_factory=dict, description="Query parameters")
    json_body: Optional[Any] = Field(default=None, description="JSON request body")
    cursor: Optional[PageCursor] = Field(
        default=None, description="When set, the cursor URL replaces path and params"
    )

    def describe(self) -> str:
        """Short form for log lines."""
        target = self.cursor.url if self.cursor else self.path
        return f"{self.method} {target}"
