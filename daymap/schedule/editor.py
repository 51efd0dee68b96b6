# daymap/schedule/editor.py
"""Full-roadmap editor: bulk edits on a disposable working copy."""

import logging
from collections.abc import Iterable

from daymap.errors import TaskNotFound
from daymap.models.entities import TASK_TYPES, Project, Task, TaskType

logger = logging.getLogger(__name__)


def group_by_date(tasks: Iterable[Task]) -> list[tuple[str, list[Task]]]:
    """
    Partition tasks into date buckets.

    Buckets come in ascending date order; tasks inside a bucket keep their
    input order.
    """
    buckets: dict[str, list[Task]] = {}
    for task in tasks:
        buckets.setdefault(task.date, []).append(task)
    return [(date, buckets[date]) for date in sorted(buckets)]


class RoadmapEditor:
    """
    Edits all tasks of one project, independent of any selected day.

    Changes accumulate in a working copy. Nothing reaches the project until
    commit() hands the working copy to the owner, which replaces the
    project's entire task collection with it.
    """

    def __init__(self, project: Project) -> None:
        self._project = project
        self._working: list[Task] = []
        self._dirty = False
        self.discard()

    @property
    def project(self) -> Project:
        return self._project

    @property
    def tasks(self) -> list[Task]:
        return list(self._working)

    @property
    def dirty(self) -> bool:
        return self._dirty

    def grouped(self) -> list[tuple[str, list[Task]]]:
        return group_by_date(self._working)

    def _index(self, task_id: str) -> int:
        for i, task in enumerate(self._working):
            if task.id == task_id:
                return i
        raise TaskNotFound(task_id)

    def edit(self, task_id: str, content: str | None = None, type: TaskType | None = None) -> Task:
        """
        Overwrite content and/or type of one task in the working copy.

        Raises:
            TaskNotFound: Unknown task id
            ValueError: type is not one of normal, review, check
        """
        index = self._index(task_id)
        update: dict = {}
        if content is not None:
            update["content"] = content
        if type is not None:
            if type not in TASK_TYPES:
                raise ValueError(f"Invalid task type '{type}'. Must be one of: {', '.join(TASK_TYPES)}")
            update["type"] = type

        if update:
            self._working[index] = self._working[index].model_copy(update=update)
            self._dirty = True
        return self._working[index]

    def delete(self, task_id: str) -> Task:
        removed = self._working.pop(self._index(task_id))
        self._dirty = True
        return removed

    def commit(self) -> list[Task]:
        """
        Finish the session.

        Returns:
            The working copy, to be stored as the project's full task list
        """
        logger.info(
            f"Committing roadmap edits for project {self._project.id} "
            f"({len(self._working)} tasks, dirty={self._dirty})"
        )
        committed = list(self._working)
        self._dirty = False
        return committed

    def discard(self) -> None:
        """Reset the working copy from the project."""
        self._working = [t.model_copy(deep=True) for t in self._project.tasks or []]
        self._dirty = False
