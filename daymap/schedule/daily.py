# daymap/schedule/daily.py
"""
Daily scheduling view model.

Everything here is derived from a flat task collection. The module-level
functions are pure; DailySchedule keeps a snapshot plus the selected date
and hands updated Task records back to its owner for persistence.
"""

import logging
from collections.abc import Iterable, Sequence

from daymap.errors import NoFurtherDay, TaskNotFound
from daymap.models.entities import Task

logger = logging.getLogger(__name__)

SLIDER_STEP = 5


def available_dates(tasks: Iterable[Task]) -> list[str]:
    """Distinct task dates in ascending order (YYYY-MM-DD sorts chronologically)."""
    return sorted({task.date for task in tasks})


def resolve_selected_date(dates: Sequence[str], selected: str | None) -> str | None:
    """Keep the selection if it still exists, otherwise fall back to the earliest date."""
    if not dates:
        return selected
    if selected in dates:
        return selected
    return dates[0]


def tasks_for_date(tasks: Iterable[Task], date: str | None) -> list[Task]:
    return sorted((t for t in tasks if t.date == date), key=lambda t: t.order_index)


def day_progress(tasks: Iterable[Task], date: str | None) -> int:
    """
    Mean completion of all tasks on a date, rounded half up.

    Returns 0 when the date has no tasks.
    """
    percents = [t.completion_percent for t in tasks if t.date == date]
    if not percents:
        return 0
    total, count = sum(percents), len(percents)
    return (2 * total + count) // (2 * count)


def replace_task(tasks: Iterable[Task], task: Task) -> list[Task]:
    """
    Overwrite the task with the same id by the given full record.

    Raises:
        TaskNotFound: No task with that id exists
    """
    result = list(tasks)
    for i, existing in enumerate(result):
        if existing.id == task.id:
            result[i] = task
            return result
    raise TaskNotFound(task.id)


def merge_tasks(tasks: Iterable[Task], updates: Iterable[Task]) -> list[Task]:
    """Write a batch of records by id; untouched tasks keep their values and position."""
    merged = {t.id: t for t in tasks}
    for task in updates:
        merged[task.id] = task
    return list(merged.values())


def toggle_complete(task: Task) -> Task:
    """Binary toggle: 100 becomes 0, anything else becomes 100."""
    return task.model_copy(update={"completion_percent": 0 if task.completion_percent == 100 else 100})


def set_completion(task: Task, percent: int, step: int = SLIDER_STEP) -> Task:
    """
    Set completion from a slider value, snapped to the slider step.

    Raises:
        ValueError: percent outside 0..100
    """
    if not 0 <= percent <= 100:
        raise ValueError(f"Completion must be between 0 and 100, got {percent}")
    snapped = min(100, (percent + step // 2) // step * step)
    return task.model_copy(update={"completion_percent": snapped})


def push_to_tomorrow(task: Task, dates: Sequence[str]) -> Task:
    """
    Move a task to the next scheduled date after its current one.

    "Tomorrow" is the next entry of the derived date list, not the next
    calendar day. The order_index is left as is; DailySchedule.push_to_tomorrow
    places the task after the ones already on the destination date.

    Raises:
        NoFurtherDay: The task is already on the last date
    """
    later = [d for d in dates if d > task.date]
    if not later:
        raise NoFurtherDay(task.date)
    return task.model_copy(update={"date": min(later)})


def reorder(daily_tasks: Sequence[Task], from_index: int, to_index: int) -> list[Task]:
    """
    Move one task within a day's ordered list and renumber the day.

    Args:
        daily_tasks: One day's tasks in display order
        from_index: Current position of the task to move
        to_index: Target position

    Returns:
        The whole day, in new order, with order_index 0..N-1

    Raises:
        IndexError: Either position is out of range
        ValueError: The list spans more than one date
    """
    size = len(daily_tasks)
    if not (0 <= from_index < size and 0 <= to_index < size):
        raise IndexError(f"Cannot move position {from_index} to {to_index} in a list of {size}")
    if len({t.date for t in daily_tasks}) > 1:
        raise ValueError("Reorder is limited to tasks of a single date")

    moved = list(daily_tasks)
    moved.insert(to_index, moved.pop(from_index))
    return [task.model_copy(update={"order_index": i}) for i, task in enumerate(moved)]


class DailySchedule:
    """
    Per-day view over one project's tasks.

    The selected date always belongs to the derived date set while it is
    non-empty; an orphaned selection silently falls back to the earliest
    date. Operations update the snapshot and return the changed records.
    """

    def __init__(self, tasks: Iterable[Task] = (), selected_date: str | None = None) -> None:
        self._tasks: tuple[Task, ...] = tuple(tasks)
        self._selected_date = selected_date
        self._reselect()

    def _reselect(self) -> None:
        resolved = resolve_selected_date(self.dates, self._selected_date)
        if resolved != self._selected_date:
            logger.debug(f"Selected date {self._selected_date} unavailable, using {resolved}")
        self._selected_date = resolved

    # ---- derived state

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._tasks

    @property
    def dates(self) -> list[str]:
        return available_dates(self._tasks)

    @property
    def selected_date(self) -> str | None:
        return self._selected_date

    @property
    def daily_tasks(self) -> list[Task]:
        return tasks_for_date(self._tasks, self._selected_date)

    @property
    def progress(self) -> int:
        return day_progress(self._tasks, self._selected_date)

    def get(self, task_id: str) -> Task:
        for task in self._tasks:
            if task.id == task_id:
                return task
        raise TaskNotFound(task_id)

    # ---- selection

    def select(self, date: str) -> str | None:
        self._selected_date = date
        self._reselect()
        return self._selected_date

    def refresh(self, tasks: Iterable[Task]) -> None:
        """Replace the snapshot (e.g. after a commit) and revalidate the selection."""
        self._tasks = tuple(tasks)
        self._reselect()

    # ---- operations

    def update_task(self, task: Task) -> Task:
        self.refresh(replace_task(self._tasks, task))
        return task

    def toggle_complete(self, task_id: str) -> Task:
        return self.update_task(toggle_complete(self.get(task_id)))

    def set_completion(self, task_id: str, percent: int) -> Task:
        return self.update_task(set_completion(self.get(task_id), percent))

    def set_notes(self, task_id: str, notes: str) -> Task:
        return self.update_task(self.get(task_id).model_copy(update={"notes": notes}))

    def edit_content(self, task_id: str, content: str) -> Task:
        return self.update_task(self.get(task_id).model_copy(update={"content": content}))

    def push_to_tomorrow(self, task_id: str) -> Task:
        """
        Move a task to the next scheduled date, after the tasks already there.

        Raises:
            NoFurtherDay: The task is on the last date (nothing changes)
        """
        pushed = push_to_tomorrow(self.get(task_id), self.dates)
        destination = tasks_for_date(self._tasks, pushed.date)
        next_index = max((t.order_index for t in destination), default=-1) + 1
        return self.update_task(pushed.model_copy(update={"order_index": next_index}))

    def reorder(self, from_index: int, to_index: int) -> list[Task]:
        """Reorder the selected day; returns the whole renumbered day."""
        reordered = reorder(self.daily_tasks, from_index, to_index)
        self.refresh(merge_tasks(self._tasks, reordered))
        return reordered
