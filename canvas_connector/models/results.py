"""Result models produced by the connector's operations."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .canvas import ModuleItem
from ..utils.exceptions import ErrorKind


class ItemOutcome(BaseModel):
    """Extraction outcome for one module item: a content block or a captured failure."""

    item: ModuleItem
    content: Optional[str] = Field(default=None, description="Rendered content block")
    error: Optional[str] = Field(default=None, description="Failure message if extraction failed")
    error_kind: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AggregationResult(BaseModel):
    """Ordered per-item outcomes of one module extraction."""

    title: str = Field(..., description="Header line of the extract")
    course_id: str
    module_id: str
    module_name: Optional[str] = None
    outcomes: List[ItemOutcome] = Field(default_factory=list)

    @property
    def failures(self) -> List[ItemOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]


class ModuleSummary(BaseModel):
    id: int
    name: str


class WeekNotFound(BaseModel):
    """No module matched the requested week; lists what is available."""

    course_id: str
    week: str
    available_modules: List[ModuleSummary] = Field(default_factory=list)


class RequestStats(BaseModel):
    """Rate limiter counters exposed to the host process."""

    request_count: int = 0
    last_request_time: float = Field(default=0.0, description="Epoch seconds of last admission")


class TextBlock(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResponse(BaseModel):
    """Rendered-text envelope returned by text-producing operations."""

    content: List[TextBlock] = Field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> "ToolResponse":
        return cls(content=[TextBlock(text=text)])

    @property
    def text(self) -> str:
        return "\n\n".join(block.text for block in self.content)
