# daymap/models/responses.py
"""
Pydantic response models for tool outputs.

All tools return structured responses using these models for consistency.
"""

from pydantic import BaseModel, Field

from daymap.models.entities import Task


class TaskView(BaseModel):
    """A task as shown to users."""

    id: str = Field(description="Task identifier")
    date: str = Field(description="Scheduled day (YYYY-MM-DD)")
    position: int = Field(description="1-based position within its day")
    content: str = Field(description="Task description")
    completion_percent: int = Field(ge=0, le=100, description="Completion in percent")
    notes: str = Field(default="", description="Free-form notes")
    type: str = Field(description="normal, review or check")
    is_buffer_task: bool = Field(default=False, description="Buffer task from the generator")

    @classmethod
    def from_task(cls, task: Task) -> "TaskView":
        return cls(
            id=task.id,
            date=task.date,
            position=task.order_index + 1,
            content=task.content,
            completion_percent=task.completion_percent,
            notes=task.notes,
            type=task.type,
            is_buffer_task=task.is_buffer_task,
        )


class FeasibilityOptionView(BaseModel):
    """One suggested adjustment for an infeasible draft."""

    index: int = Field(description="0-based option index for apply_adjustment")
    type: str = Field(description="hours, deadline or goal")
    description: str = Field(description="Why this adjustment helps")
    suggested_value: str | float = Field(description="Replacement value")


class CreateProjectResponse(BaseModel):
    """Response from create_project, apply_adjustment and submit_draft."""

    status: str = Field(description="created, needs_adjustment or failed")
    project_id: str | None = Field(default=None, description="New project id when created")
    name: str = Field(description="Project name")
    task_count: int = Field(default=0, description="Number of generated tasks")
    day_count: int = Field(default=0, description="Number of scheduled days")
    negotiation_id: str | None = Field(
        default=None, description="Pending negotiation id (needs_adjustment or failed)"
    )
    reasoning: str | None = Field(default=None, description="Why the draft looks infeasible")
    options: list[FeasibilityOptionView] = Field(
        default_factory=list, description="Suggested adjustments"
    )
    error: str | None = Field(default=None, description="Generation error when failed")
    next_steps: str = Field(default="", description="What to do next")


class ProjectSummary(BaseModel):
    """Summary information for a single project (used in list_projects)."""

    project_id: str = Field(description="Project identifier")
    name: str = Field(description="Project name")
    goal: str = Field(description="Project goal (truncated to 80 chars)")
    priority: str = Field(description="Buffer strategy")
    start_date: str = Field(description="First day")
    end_date: str = Field(description="Deadline")
    task_count: int = Field(description="Total tasks")
    completed_count: int = Field(description="Tasks at 100%")
    active: bool = Field(default=False, description="Whether this is the active project")


class ListProjectsResponse(BaseModel):
    """Response from list_projects."""

    projects: list[ProjectSummary] = Field(default_factory=list, description="Newest first")
    total: int = Field(description="Total number of projects")
    active_project_id: str | None = Field(default=None, description="Active project")


class DayViewResponse(BaseModel):
    """Response from get_day."""

    project_id: str = Field(description="Project identifier")
    project_name: str = Field(description="Project name")
    goal: str = Field(description="Project goal")
    date: str | None = Field(default=None, description="Shown day (None if no tasks)")
    dates: list[str] = Field(default_factory=list, description="All scheduled days")
    progress: int = Field(default=0, ge=0, le=100, description="Mean completion of the day")
    tasks: list[TaskView] = Field(default_factory=list, description="Tasks in order")


class TaskUpdateResponse(BaseModel):
    """Response from task-level tools."""

    task: TaskView = Field(description="Updated task")
    message: str = Field(description="Human-readable confirmation")


class ReorderResponse(BaseModel):
    """Response from reorder_tasks."""

    date: str = Field(description="Reordered day")
    tasks: list[TaskView] = Field(description="Day in new order")


class DeleteProjectResponse(BaseModel):
    """Response from delete_project."""

    project_id: str = Field(description="Deleted project")
    name: str = Field(description="Deleted project name")
    deleted_tasks: int = Field(description="Number of tasks removed with it")


class CalendarLinkResponse(BaseModel):
    """Response from calendar_link."""

    date: str = Field(description="Exported day")
    url: str = Field(description="Prefilled calendar event URL")
    task_count: int = Field(description="Tasks listed in the event body")


class ListTasksResponse(BaseModel):
    """Response from edit_roadmap: the whole roadmap grouped by day."""

    project_id: str = Field(description="Project identifier")
    tasks: list[TaskView] = Field(description="All tasks, ascending by date")
    total: int = Field(description="Number of tasks")
