# daymap/export/__init__.py
"""Export of scheduled days to external services."""

from .calendar import build_calendar_url, task_checklist

__all__ = ["build_calendar_url", "task_checklist"]
