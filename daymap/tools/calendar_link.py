# daymap/tools/calendar_link.py
"""calendar_link tool implementation."""

import logging

from fastmcp.exceptions import ToolError

from daymap.config.schema import CalendarConfig
from daymap.export.calendar import build_calendar_url
from daymap.models.responses import CalendarLinkResponse
from daymap.models.workspace import ProjectWorkspace
from daymap.schedule.daily import DailySchedule
from daymap.tools.common import resolve_project
from daymap.validation.sanitize import sanitize_date

logger = logging.getLogger(__name__)


def calendar_link(
    workspace: ProjectWorkspace,
    calendar: CalendarConfig,
    date: str | None = None,
    start_time: str | None = None,
    end_time: str | None = None,
    project_id: str | None = None,
) -> dict:
    """
    Build a calendar event link for one day's focus session.

    Args:
        workspace: Project collection
        calendar: Default session times and calendar endpoint
        date: Day to export; defaults to the first scheduled day
        start_time: Session start (HH:MM); defaults from config
        end_time: Session end (HH:MM); defaults from config
        project_id: Project to export; defaults to the active project

    Returns:
        CalendarLinkResponse as dict

    Raises:
        ToolError: No tasks on the day, or malformed times
    """
    project = resolve_project(workspace, project_id)
    schedule = DailySchedule(project.tasks or [])
    if date is not None:
        wanted = sanitize_date(date)
        if wanted not in schedule.dates:
            raise ToolError(f"No tasks scheduled on {wanted}")
        schedule.select(wanted)

    day = schedule.selected_date
    if day is None:
        raise ToolError(f"Project '{project.name}' has no scheduled tasks")

    start = start_time or calendar.start_time
    end = end_time or calendar.end_time
    if end <= start:
        raise ToolError(f"Session end {end} must be after start {start}")

    tasks = schedule.daily_tasks
    try:
        url = build_calendar_url(day, start, end, project.name, tasks, base_url=calendar.base_url)
    except ValueError as e:
        raise ToolError(str(e))

    logger.info(f"Built calendar link for {day} of project {project.id}")
    return CalendarLinkResponse(date=day, url=url, task_count=len(tasks)).model_dump()
