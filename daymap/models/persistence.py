# daymap/models/persistence.py
"""
Persistence adapter for the project collection.

Serializes the full project list and the last active project id into a
BlobStore. Last write wins; there is no conflict detection.
"""

import logging

from pydantic import TypeAdapter, ValidationError

from daymap.models.entities import Project
from daymap.models.storage import BlobStore

logger = logging.getLogger(__name__)

PROJECTS_KEY = "projects"
LAST_ACTIVE_KEY = "last_active_project_id"

_projects_adapter = TypeAdapter(list[Project])


class ProjectPersistence:
    """Load/save of the project collection through a BlobStore."""

    def __init__(self, store: BlobStore) -> None:
        self._store = store

    def load(self) -> list[Project]:
        """
        Load all stored projects.

        Returns:
            Projects in stored order, or an empty list when nothing is stored

        Raises:
            ValueError: If the stored blob is not a valid project list
        """
        raw = self._store.get(PROJECTS_KEY)
        if raw is None:
            return []

        try:
            projects = _projects_adapter.validate_json(raw)
        except ValidationError as e:
            raise ValueError(f"Stored projects are corrupt: {e}") from e

        logger.info(f"Loaded {len(projects)} project(s)")
        return projects

    def load_last_active_project_id(self) -> str | None:
        raw = self._store.get(LAST_ACTIVE_KEY)
        if raw is None:
            return None
        return raw.strip() or None

    def save(self, projects: list[Project]) -> None:
        self._store.set(PROJECTS_KEY, _projects_adapter.dump_json(projects).decode("utf-8"))
        logger.debug(f"Saved {len(projects)} project(s)")

    def save_last_active_project_id(self, project_id: str | None) -> None:
        if project_id is None:
            self._store.delete(LAST_ACTIVE_KEY)
        else:
            self._store.set(LAST_ACTIVE_KEY, project_id)
