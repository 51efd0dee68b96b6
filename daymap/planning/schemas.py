# daymap/planning/schemas.py
"""
Schemas for roadmap generator input and output.

The generator speaks camelCase JSON (isFeasible, suggestedValue, isBuffer);
models accept both the alias and the field name.
"""

import base64
import mimetypes
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from daymap.models.entities import DATE_PATTERN, TASK_TYPES, TaskType


class _GeneratorModel(BaseModel):
    model_config = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)


class PlannedTask(_GeneratorModel):
    """A task entry as emitted by the generator for one day."""

    content: str = Field(..., description="Actionable task description")
    type: TaskType = Field(default="normal", description="normal, review or check")
    is_buffer: bool = Field(default=False, description="Buffer/slack task")

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        if value is None:
            return "normal"
        normalized = str(value).strip().lower()
        return normalized if normalized in TASK_TYPES else "normal"

    @field_validator("is_buffer", mode="before")
    @classmethod
    def _default_buffer(cls, value):
        return False if value is None else value


class DayPlan(_GeneratorModel):
    """All tasks the generator scheduled for one date."""

    date: str = Field(..., pattern=DATE_PATTERN, description="YYYY-MM-DD")
    tasks: list[PlannedTask] = Field(default_factory=list)


class FeasibilityOption(_GeneratorModel):
    """A single suggested adjustment to an infeasible draft."""

    type: Literal["hours", "deadline", "goal"] = Field(
        ..., description="Which draft field the suggestion replaces"
    )
    description: str = Field(default="", description="Human-readable explanation")
    suggested_value: str | float = Field(..., description="Replacement value")

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        return str(value).strip().lower() if value is not None else value


class FeasibilityResult(_GeneratorModel):
    """Verdict of the feasibility check."""

    is_feasible: bool
    reasoning: str = ""
    options: list[FeasibilityOption] = Field(default_factory=list)

    @field_validator("options", mode="before")
    @classmethod
    def _default_options(cls, value):
        return [] if value is None else value


class Attachment(BaseModel):
    """A file sent alongside the draft, base64-encoded."""

    model_config = ConfigDict(extra="ignore")

    name: str
    data: str = Field(..., description="Base64 payload, optionally as a data: URL")
    mime_type: str = "application/octet-stream"

    @property
    def payload(self) -> str:
        """Base64 payload without any data-URL prefix."""
        if self.data.startswith("data:") and "," in self.data:
            return self.data.split(",", 1)[1]
        return self.data

    def decoded(self) -> bytes:
        return base64.b64decode(self.payload)

    @classmethod
    def from_path(cls, path: str | Path) -> "Attachment":
        """Read a file from disk and encode it."""
        file_path = Path(path)
        mime_type, _ = mimetypes.guess_type(file_path.name)
        return cls(
            name=file_path.name,
            data=base64.b64encode(file_path.read_bytes()).decode("ascii"),
            mime_type=mime_type or "application/octet-stream",
        )
