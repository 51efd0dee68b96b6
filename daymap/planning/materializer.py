# daymap/planning/materializer.py
"""Turns a generated day-plan into Task entities attached to a new Project."""

import logging
from collections.abc import Callable, Iterable

from daymap.models.entities import Project, ProjectDraft, Task, generate_id
from daymap.planning.schemas import DayPlan

logger = logging.getLogger(__name__)


def project_from_draft(
    draft: ProjectDraft, id_factory: Callable[[], str] = generate_id
) -> Project:
    """Create a new, not yet materialized Project with a fresh id."""
    return Project(**draft.model_dump(exclude={"id"}), id=id_factory(), tasks=None)


def materialize_roadmap(
    project: Project,
    plan: Iterable[DayPlan],
    id_factory: Callable[[], str] = generate_id,
) -> Project:
    """
    Build the task collection of a newly created project.

    Days are processed in the given order; within a day, each task's
    order_index is its position in the generator output.

    Args:
        project: New project without tasks
        plan: Day entries from the generator
        id_factory: Task id generator

    Returns:
        Copy of project with tasks populated
    """
    tasks: list[Task] = []
    for day in plan:
        for idx, entry in enumerate(day.tasks):
            tasks.append(
                Task(
                    id=id_factory(),
                    project_id=project.id,
                    date=day.date,
                    content=entry.content,
                    completion_percent=0,
                    notes="",
                    order_index=idx,
                    is_buffer_task=entry.is_buffer or False,
                    type=entry.type or "normal",
                )
            )

    logger.info(f"Materialized {len(tasks)} tasks for project {project.id}")
    return project.model_copy(update={"tasks": tasks})
