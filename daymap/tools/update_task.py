# daymap/tools/update_task.py
"""
Task-level tool implementations: update_task, push_task and reorder_tasks.

Each tool runs the change through a DailySchedule over the project's
current tasks, then writes the changed records back to the workspace.
"""

import logging

from fastmcp.exceptions import ToolError

from daymap.errors import NoFurtherDay, TaskNotFound
from daymap.models.responses import ReorderResponse, TaskUpdateResponse, TaskView
from daymap.models.workspace import ProjectWorkspace
from daymap.schedule.daily import DailySchedule
from daymap.tools.common import resolve_project
from daymap.validation.sanitize import sanitize_date, sanitize_id, sanitize_text

logger = logging.getLogger(__name__)


def _schedule(workspace: ProjectWorkspace, project_id: str | None) -> tuple[str, DailySchedule]:
    project = resolve_project(workspace, project_id)
    return project.id, DailySchedule(project.tasks or [])


def update_task(
    task_id: str,
    workspace: ProjectWorkspace,
    project_id: str | None = None,
    toggle: bool = False,
    completion_percent: int | None = None,
    notes: str | None = None,
    content: str | None = None,
) -> dict:
    """
    Change one task's completion, notes or content.

    Args:
        task_id: Task to change
        workspace: Project collection
        project_id: Owning project; defaults to the active project
        toggle: Flip between done (100%) and not started (0%)
        completion_percent: Slider value 0-100, snapped to steps of 5
        notes: Replacement notes
        content: Replacement task description

    Returns:
        TaskUpdateResponse as dict

    Raises:
        ToolError: Unknown task, nothing to change, or invalid values
    """
    task_id = sanitize_id(task_id, "task_id")
    if not toggle and completion_percent is None and notes is None and content is None:
        raise ToolError("Nothing to update: pass toggle, completion_percent, notes or content")

    owner_id, schedule = _schedule(workspace, project_id)

    try:
        task = schedule.get(task_id)
        if toggle:
            task = schedule.toggle_complete(task_id)
        if completion_percent is not None:
            task = schedule.set_completion(task_id, completion_percent)
        if notes is not None:
            task = schedule.set_notes(task_id, sanitize_text(notes, "notes", required=False))
        if content is not None:
            task = schedule.edit_content(task_id, sanitize_text(content, "content", max_length=500))
    except TaskNotFound as e:
        raise ToolError(str(e))
    except ValueError as e:
        raise ToolError(str(e))

    workspace.upsert_tasks(owner_id, [task], require_existing=True)
    logger.info(f"Updated task {task_id} ({task.completion_percent}%)")

    return TaskUpdateResponse(
        task=TaskView.from_task(task),
        message=f"Task updated: {task.completion_percent}% complete",
    ).model_dump()


def push_task(task_id: str, workspace: ProjectWorkspace, project_id: str | None = None) -> dict:
    """
    Move a task to the next scheduled day.

    Returns:
        TaskUpdateResponse as dict

    Raises:
        ToolError: Unknown task, or the task is already on the last day
    """
    task_id = sanitize_id(task_id, "task_id")
    owner_id, schedule = _schedule(workspace, project_id)

    try:
        original = schedule.get(task_id)
        task = schedule.push_to_tomorrow(task_id)
    except (TaskNotFound, NoFurtherDay) as e:
        raise ToolError(str(e))

    workspace.upsert_tasks(owner_id, [task], require_existing=True)
    logger.info(f"Pushed task {task_id} from {original.date} to {task.date}")

    return TaskUpdateResponse(
        task=TaskView.from_task(task),
        message=f"Moved from {original.date} to {task.date}",
    ).model_dump()


def reorder_tasks(
    date: str,
    from_position: int,
    to_position: int,
    workspace: ProjectWorkspace,
    project_id: str | None = None,
) -> dict:
    """
    Move a task within one day's list.

    Args:
        date: Day to reorder (YYYY-MM-DD)
        from_position: Current 1-based position of the task
        to_position: Target 1-based position

    Returns:
        ReorderResponse as dict

    Raises:
        ToolError: Unscheduled date or out-of-range position
    """
    day = sanitize_date(date)
    owner_id, schedule = _schedule(workspace, project_id)
    if day not in schedule.dates:
        raise ToolError(f"No tasks scheduled on {day}")
    schedule.select(day)

    try:
        reordered = schedule.reorder(from_position - 1, to_position - 1)
    except IndexError:
        raise ToolError(
            f"Positions must be between 1 and {len(schedule.daily_tasks)}, "
            f"got {from_position} and {to_position}"
        )

    workspace.upsert_tasks(owner_id, reordered, require_existing=True)
    logger.info(f"Reordered {day}: position {from_position} -> {to_position}")

    return ReorderResponse(
        date=day,
        tasks=[TaskView.from_task(t) for t in reordered],
    ).model_dump()
