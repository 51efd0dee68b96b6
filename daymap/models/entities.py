# daymap/models/entities.py
"""
Project and Task entities.

Tasks are stored inside their owning Project. A Task's project_id is a
back-reference only and is never used to mutate the Project.
"""

from enum import Enum
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

TaskType = Literal["normal", "review", "check"]
TASK_TYPES: tuple[str, ...] = ("normal", "review", "check")

DRAFT_ID = "draft"


class Priority(str, Enum):
    """Buffer-allocation strategy passed through to the roadmap generator."""

    ON_TIME = "On-time"
    IN_TIME = "In-time"
    JUST_DONE = "Just Done"


class Task(BaseModel):
    """A single unit of work scheduled on one day of a project."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Unique across all projects")
    project_id: str = Field(..., description="Owning project id")
    date: str = Field(..., pattern=DATE_PATTERN, description="Day bucket (YYYY-MM-DD)")
    content: str = Field(default="", description="Task description")
    completion_percent: int = Field(
        default=0, ge=0, le=100, description="Completion in percent (100 = done)"
    )
    notes: str = Field(default="", description="Free-form notes")
    order_index: int = Field(
        default=0, ge=0, description="Position among tasks sharing the same date"
    )
    is_buffer_task: bool = Field(
        default=False, description="Set from generator output, never mutated"
    )
    type: TaskType = Field(default="normal")

    @property
    def is_complete(self) -> bool:
        return self.completion_percent == 100


class ProjectDraft(BaseModel):
    """Project fields assembled before a roadmap exists."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default=DRAFT_ID, description="Placeholder id, not reused")
    name: str
    goal: str
    background: str = ""
    priority: Priority = Priority.ON_TIME
    start_date: str = Field(..., pattern=DATE_PATTERN)
    end_date: str = Field(..., pattern=DATE_PATTERN)
    daily_work_time: float = Field(default=2.0, gt=0, description="Hours per day")


class Project(ProjectDraft):
    """A materialized project and its roadmap."""

    id: str = Field(..., description="Unique project id, immutable")
    tasks: list[Task] | None = Field(
        default=None, description="Tasks in insertion order (None until materialized)"
    )


def generate_id() -> str:
    """
    Generate a unique entity ID.

    Returns:
        32-character hex string from uuid4 (122 random bits, collisions
        are negligible for any realistic number of projects and tasks)
    """
    return uuid4().hex
