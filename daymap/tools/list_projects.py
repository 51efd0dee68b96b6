# daymap/tools/list_projects.py
"""
list_projects and select_project tool implementations.

Lists stored projects (newest first) and switches the active project.
"""

import logging

from daymap.models.responses import ListProjectsResponse, ProjectSummary
from daymap.models.workspace import ProjectWorkspace
from daymap.tools.common import resolve_project

logger = logging.getLogger(__name__)


def list_projects(workspace: ProjectWorkspace) -> dict:
    """
    List all projects.

    Args:
        workspace: Project collection

    Returns:
        ListProjectsResponse as dict
    """
    active_id = workspace.current_project_id

    summaries = []
    for project in workspace.projects:
        tasks = project.tasks or []

        # Truncate goal to 80 chars
        goal = project.goal
        if len(goal) > 80:
            goal = goal[:77] + "..."

        summaries.append(
            ProjectSummary(
                project_id=project.id,
                name=project.name,
                goal=goal,
                priority=project.priority.value,
                start_date=project.start_date,
                end_date=project.end_date,
                task_count=len(tasks),
                completed_count=sum(1 for t in tasks if t.is_complete),
                active=project.id == active_id,
            )
        )

    response = ListProjectsResponse(
        projects=summaries, total=len(summaries), active_project_id=active_id
    )

    logger.info(f"Listed {len(summaries)} projects")
    return response.model_dump()


def select_project(project_id: str, workspace: ProjectWorkspace) -> dict:
    """
    Make a project the active one (remembered across restarts).

    Returns:
        ProjectSummary of the selected project as dict

    Raises:
        ToolError: Unknown project
    """
    project = resolve_project(workspace, project_id)
    workspace.select(project.id)
    logger.info(f"Selected project {project.id}")

    tasks = project.tasks or []
    return ProjectSummary(
        project_id=project.id,
        name=project.name,
        goal=project.goal,
        priority=project.priority.value,
        start_date=project.start_date,
        end_date=project.end_date,
        task_count=len(tasks),
        completed_count=sum(1 for t in tasks if t.is_complete),
        active=True,
    ).model_dump()
