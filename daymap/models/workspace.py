# daymap/models/workspace.py
"""
In-memory project collection with an explicit commit boundary.

Every accepted mutation replaces the affected Project with a new snapshot
and then notifies subscribers. ProjectWorkspace.open() subscribes the
persistence adapter so each commit is saved (last write wins).
"""

import logging
from collections.abc import Callable, Iterable

from daymap.errors import DestructiveConfirmationRequired, ProjectNotFound, TaskNotFound
from daymap.models.entities import Project, Task
from daymap.models.persistence import ProjectPersistence

logger = logging.getLogger(__name__)

Listener = Callable[["ProjectWorkspace"], None]


class ProjectWorkspace:
    """
    The full project collection plus the active project selection.

    Projects are kept newest first. Stored Project and Task objects are
    treated as immutable snapshots: mutations build new objects.
    """

    def __init__(
        self,
        projects: Iterable[Project] = (),
        current_project_id: str | None = None,
    ) -> None:
        self._projects: list[Project] = list(projects)
        self._current_project_id: str | None = None
        self._listeners: list[Listener] = []

        if current_project_id is not None and self._find(current_project_id) is not None:
            self._current_project_id = current_project_id
        elif current_project_id is not None:
            logger.warning(f"Last active project {current_project_id} no longer exists")

    @classmethod
    def open(cls, persistence: ProjectPersistence) -> "ProjectWorkspace":
        """Load the stored collection and save it back on every commit."""
        workspace = cls(
            persistence.load(),
            current_project_id=persistence.load_last_active_project_id(),
        )

        def _save(ws: "ProjectWorkspace") -> None:
            persistence.save(ws.projects)
            persistence.save_last_active_project_id(ws.current_project_id)

        workspace.subscribe(_save)
        return workspace

    # ---- subscriptions

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called after every committed mutation.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _commit(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ---- queries

    @property
    def projects(self) -> list[Project]:
        return list(self._projects)

    @property
    def current_project_id(self) -> str | None:
        return self._current_project_id

    @property
    def current_project(self) -> Project | None:
        if self._current_project_id is None:
            return None
        return self._find(self._current_project_id)

    def get(self, project_id: str) -> Project:
        project = self._find(project_id)
        if project is None:
            raise ProjectNotFound(project_id)
        return project

    def _find(self, project_id: str) -> Project | None:
        for project in self._projects:
            if project.id == project_id:
                return project
        return None

    def _index(self, project_id: str) -> int:
        for i, project in enumerate(self._projects):
            if project.id == project_id:
                return i
        raise ProjectNotFound(project_id)

    # ---- commands

    def select(self, project_id: str) -> Project:
        project = self.get(project_id)
        self._current_project_id = project_id
        self._commit()
        return project

    def add_project(self, project: Project) -> None:
        """Insert a materialized project at the front and make it active."""
        if self._find(project.id) is not None:
            raise ValueError(f"Project {project.id} already exists")

        for task in project.tasks or []:
            if task.project_id != project.id:
                raise ValueError(f"Task {task.id} belongs to project {task.project_id}, not {project.id}")

        self._projects.insert(0, project)
        self._current_project_id = project.id
        logger.info(f"Added project {project.id} ({len(project.tasks or [])} tasks)")
        self._commit()

    def update_task(self, task: Task) -> Task:
        """Overwrite one stored task (matched by id) with a full record."""
        self.upsert_tasks(task.project_id, [task], require_existing=True)
        return task

    def upsert_tasks(
        self,
        project_id: str,
        tasks: Iterable[Task],
        require_existing: bool = False,
    ) -> None:
        """
        Write a batch of task records into a project.

        Tasks whose id already exists keep their position in the collection;
        tasks not in the batch are left untouched.

        Raises:
            ProjectNotFound: Unknown project
            TaskNotFound: require_existing=True and a task id is unknown
            ValueError: A task references a different project
        """
        index = self._index(project_id)
        project = self._projects[index]
        merged = {t.id: t for t in project.tasks or []}

        for task in tasks:
            if task.project_id != project_id:
                raise ValueError(f"Task {task.id} belongs to project {task.project_id}, not {project_id}")
            if require_existing and task.id not in merged:
                raise TaskNotFound(task.id)
            merged[task.id] = task

        self._projects[index] = project.model_copy(update={"tasks": list(merged.values())})
        self._commit()

    def replace_tasks(self, project_id: str, tasks: Iterable[Task]) -> None:
        """Replace a project's entire task collection."""
        index = self._index(project_id)
        new_tasks = list(tasks)
        for task in new_tasks:
            if task.project_id != project_id:
                raise ValueError(f"Task {task.id} belongs to project {task.project_id}, not {project_id}")

        self._projects[index] = self._projects[index].model_copy(update={"tasks": new_tasks})
        logger.info(f"Replaced tasks of project {project_id} ({len(new_tasks)} tasks)")
        self._commit()

    def delete_project(self, project_id: str, confirmed: bool = False) -> Project:
        """
        Delete a project together with all of its tasks.

        Args:
            project_id: Project to delete
            confirmed: Must be True; the caller obtains explicit user consent

        Returns:
            The removed project

        Raises:
            DestructiveConfirmationRequired: confirmed is False (nothing changes)
            ProjectNotFound: Unknown project
        """
        index = self._index(project_id)
        if not confirmed:
            raise DestructiveConfirmationRequired(
                f"Deleting project '{self._projects[index].name}' requires confirmation"
            )

        removed = self._projects.pop(index)
        if self._current_project_id == project_id:
            self._current_project_id = None

        logger.info(f"Deleted project {project_id} ({len(removed.tasks or [])} tasks)")
        self._commit()
        return removed
