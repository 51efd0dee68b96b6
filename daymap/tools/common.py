# daymap/tools/common.py
"""Helpers shared by the tool implementations."""

from fastmcp.exceptions import ToolError

from daymap.errors import ProjectNotFound
from daymap.models.entities import Project
from daymap.models.workspace import ProjectWorkspace
from daymap.validation.sanitize import sanitize_id


def resolve_project(workspace: ProjectWorkspace, project_id: str | None) -> Project:
    """
    Look up a project by id, or the active project when no id is given.

    Raises:
        ToolError: Unknown id, or no id and no active project
    """
    if project_id is None:
        project = workspace.current_project
        if project is None:
            raise ToolError("No active project. Create one or select one with select_project.")
        return project

    try:
        return workspace.get(sanitize_id(project_id, "project_id"))
    except ProjectNotFound as e:
        raise ToolError(str(e))
