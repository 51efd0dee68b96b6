# daymap/schedule/__init__.py
"""Day-level views and edit sessions over a project's tasks."""

from .daily import (
    DailySchedule,
    available_dates,
    day_progress,
    merge_tasks,
    push_to_tomorrow,
    reorder,
    replace_task,
    resolve_selected_date,
    set_completion,
    tasks_for_date,
    toggle_complete,
)
from .editor import RoadmapEditor, group_by_date

__all__ = [
    "DailySchedule",
    "RoadmapEditor",
    "available_dates",
    "day_progress",
    "group_by_date",
    "merge_tasks",
    "push_to_tomorrow",
    "reorder",
    "replace_task",
    "resolve_selected_date",
    "set_completion",
    "tasks_for_date",
    "toggle_complete",
]
