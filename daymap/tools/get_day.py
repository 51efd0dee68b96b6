# daymap/tools/get_day.py
"""get_day tool implementation: one day of the active (or given) project."""

import logging

from fastmcp.exceptions import ToolError

from daymap.models.responses import DayViewResponse, TaskView
from daymap.models.workspace import ProjectWorkspace
from daymap.schedule.daily import DailySchedule
from daymap.tools.common import resolve_project
from daymap.validation.sanitize import sanitize_date

logger = logging.getLogger(__name__)


def get_day(
    workspace: ProjectWorkspace,
    date: str | None = None,
    project_id: str | None = None,
) -> dict:
    """
    Show the tasks and progress of one scheduled day.

    Args:
        workspace: Project collection
        date: Day to show (YYYY-MM-DD); defaults to the first scheduled day
        project_id: Project to show; defaults to the active project

    Returns:
        DayViewResponse as dict

    Raises:
        ToolError: Unknown project, or a date with no scheduled tasks
    """
    project = resolve_project(workspace, project_id)
    schedule = DailySchedule(project.tasks or [])

    if date is not None:
        wanted = sanitize_date(date)
        if schedule.dates and wanted not in schedule.dates:
            raise ToolError(
                f"No tasks scheduled on {wanted}. "
                f"Roadmap runs {schedule.dates[0]} to {schedule.dates[-1]}."
            )
        schedule.select(wanted)

    logger.info(f"Showing {schedule.selected_date} of project {project.id}")
    return DayViewResponse(
        project_id=project.id,
        project_name=project.name,
        goal=project.goal,
        date=schedule.selected_date,
        dates=schedule.dates,
        progress=schedule.progress,
        tasks=[TaskView.from_task(t) for t in schedule.daily_tasks],
    ).model_dump()
