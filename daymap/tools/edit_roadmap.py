# daymap/tools/edit_roadmap.py
"""edit_roadmap tool implementation: batch edits across the whole roadmap."""

import logging

from fastmcp.exceptions import ToolError

from daymap.errors import TaskNotFound
from daymap.models.responses import ListTasksResponse, TaskView
from daymap.models.workspace import ProjectWorkspace
from daymap.schedule.editor import RoadmapEditor
from daymap.tools.common import resolve_project
from daymap.validation.sanitize import sanitize_id, sanitize_text

logger = logging.getLogger(__name__)


def edit_roadmap(
    workspace: ProjectWorkspace,
    edits: list[dict] | None = None,
    delete_task_ids: list[str] | None = None,
    project_id: str | None = None,
) -> dict:
    """
    Apply content/type edits and deletions to any tasks, then save them at once.

    Either every change is saved or none is: the edits run on a working
    copy that only replaces the project's tasks when all of them succeed.

    Args:
        workspace: Project collection
        edits: Items of {"task_id": ..., "content": ..., "type": ...}
        delete_task_ids: Tasks to remove
        project_id: Project to edit; defaults to the active project

    Returns:
        ListTasksResponse (the saved roadmap) as dict

    Raises:
        ToolError: Unknown task, invalid type, or nothing to change
    """
    if not edits and not delete_task_ids:
        raise ToolError("Nothing to change: pass edits or delete_task_ids")

    project = resolve_project(workspace, project_id)
    editor = RoadmapEditor(project)

    try:
        for item in edits or []:
            content = item.get("content")
            editor.edit(
                sanitize_id(item.get("task_id", ""), "task_id"),
                content=sanitize_text(content, "content", max_length=500) if content is not None else None,
                type=item.get("type"),
            )
        for task_id in delete_task_ids or []:
            editor.delete(sanitize_id(task_id, "task_id"))
    except (TaskNotFound, ValueError) as e:
        editor.discard()
        raise ToolError(str(e))

    tasks = editor.commit()
    workspace.replace_tasks(project.id, tasks)
    logger.info(f"Saved roadmap of project {project.id} ({len(tasks)} tasks)")

    return ListTasksResponse(
        project_id=project.id,
        tasks=[TaskView.from_task(t) for _, bucket in editor.grouped() for t in bucket],
        total=len(tasks),
    ).model_dump()
