# daymap/tools/delete_project.py
"""delete_project tool implementation."""

import logging

from fastmcp.exceptions import ToolError

from daymap.errors import DestructiveConfirmationRequired
from daymap.models.responses import DeleteProjectResponse
from daymap.models.workspace import ProjectWorkspace
from daymap.tools.common import resolve_project

logger = logging.getLogger(__name__)


def delete_project(project_id: str, workspace: ProjectWorkspace, confirm: bool = False) -> dict:
    """
    Delete a project and all of its tasks.

    Args:
        project_id: Project to delete
        workspace: Project collection
        confirm: Must be True; the caller has asked the user first

    Returns:
        DeleteProjectResponse as dict

    Raises:
        ToolError: Unknown project, or confirm is not True
    """
    project = resolve_project(workspace, project_id)

    try:
        removed = workspace.delete_project(project.id, confirmed=confirm)
    except DestructiveConfirmationRequired as e:
        raise ToolError(f"{e}. Ask the user, then call again with confirm=true.")

    return DeleteProjectResponse(
        project_id=removed.id,
        name=removed.name,
        deleted_tasks=len(removed.tasks or []),
    ).model_dump()
