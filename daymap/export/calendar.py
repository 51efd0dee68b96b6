# daymap/export/calendar.py
"""Google Calendar event links for a day's tasks."""

import re
from collections.abc import Iterable
from urllib.parse import quote

from daymap.models.entities import Task

GOOGLE_CALENDAR_URL = "https://www.google.com/calendar/render"

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

# Characters encodeURIComponent leaves alone
_URI_SAFE = "-_.!~*'()"


def _encode(text: str) -> str:
    return quote(text, safe=_URI_SAFE)


def _stamp(date: str, time_of_day: str) -> str:
    if not _TIME_PATTERN.match(time_of_day):
        raise ValueError(f"Invalid time '{time_of_day}', expected HH:MM")
    return f"{date.replace('-', '')}T{time_of_day.replace(':', '')}00"


def task_checklist(tasks: Iterable[Task]) -> str:
    """One line per task: '[x] content' when complete, '[ ] content' otherwise."""
    return "\n".join(f"{'[x]' if t.completion_percent == 100 else '[ ]'} {t.content}" for t in tasks)


def build_calendar_url(
    date: str,
    start_time: str,
    end_time: str,
    project_name: str,
    tasks: Iterable[Task],
    base_url: str = GOOGLE_CALENDAR_URL,
) -> str:
    """
    Build an event-template URL for a focus session.

    Args:
        date: Day of the session (YYYY-MM-DD)
        start_time: Session start (HH:MM)
        end_time: Session end (HH:MM)
        project_name: Used in the title and the body
        tasks: The day's tasks, in display order

    Returns:
        Calendar URL that opens a prefilled event

    Raises:
        ValueError: A time is not HH:MM
    """
    dates = f"{_stamp(date, start_time)}/{_stamp(date, end_time)}"
    details = f"Project: {project_name}\n\nTasks:\n{task_checklist(tasks)}"
    title = f"{project_name} Focus Session"
    return (
        f"{base_url}?action=TEMPLATE&text={_encode(title)}"
        f"&dates={dates}&details={_encode(details)}"
    )
