# daymap/tools/__init__.py
"""Tool implementations shared by the CLI and the MCP server."""

from .calendar_link import calendar_link
from .create_project import (
    PendingNegotiations,
    apply_adjustment,
    create_project,
    load_attachments,
    revise_draft,
)
from .delete_project import delete_project
from .edit_roadmap import edit_roadmap
from .get_day import get_day
from .list_projects import list_projects, select_project
from .update_task import push_task, reorder_tasks, update_task

__all__ = [
    "PendingNegotiations",
    "create_project",
    "apply_adjustment",
    "revise_draft",
    "load_attachments",
    "list_projects",
    "select_project",
    "get_day",
    "update_task",
    "push_task",
    "reorder_tasks",
    "edit_roadmap",
    "delete_project",
    "calendar_link",
]
