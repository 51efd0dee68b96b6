# tests/unit/conftest.py
"""Shared fixtures: entity factories, an in-memory workspace and a fake roadmap service."""

import itertools
from unittest.mock import AsyncMock, MagicMock

import pytest

from daymap.models import (
    InMemoryBlobStore,
    Project,
    ProjectDraft,
    ProjectPersistence,
    ProjectWorkspace,
    Task,
)
from daymap.planning.schemas import DayPlan, FeasibilityResult, PlannedTask


def _task(
    id="t1",
    project_id="p1",
    date="2024-01-01",
    order_index=0,
    completion_percent=0,
    content=None,
    **kwargs,
) -> Task:
    return Task(
        id=id,
        project_id=project_id,
        date=date,
        content=content or f"Task {id}",
        order_index=order_index,
        completion_percent=completion_percent,
        **kwargs,
    )


def _project(id="p1", tasks=None, **kwargs) -> Project:
    fields = {
        "name": "Learn Rust",
        "goal": "Build a small CLI in Rust",
        "start_date": "2024-01-01",
        "end_date": "2024-01-03",
        "daily_work_time": 2.0,
    }
    fields.update(kwargs)
    return Project(id=id, tasks=tasks, **fields)


@pytest.fixture
def make_task():
    return _task


@pytest.fixture
def make_project():
    return _project


@pytest.fixture
def sample_project():
    """Three days with a gap (01, 02, 05); two tasks on the first day."""
    return _project(
        tasks=[
            _task("t1", date="2024-01-01", order_index=0, content="Install toolchain"),
            _task("t2", date="2024-01-01", order_index=1, content="Read chapter 1"),
            _task("t3", date="2024-01-02", order_index=0, content="Write hello world"),
            _task("t4", date="2024-01-05", order_index=0, content="Review week", type="review"),
        ]
    )


@pytest.fixture
def store():
    return InMemoryBlobStore()


@pytest.fixture
def workspace(store):
    return ProjectWorkspace.open(ProjectPersistence(store))


@pytest.fixture
def draft():
    return ProjectDraft(
        name="Learn Rust",
        goal="Build a small CLI in Rust",
        start_date="2024-01-01",
        end_date="2024-01-02",
        daily_work_time=2.0,
    )


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


@pytest.fixture
def two_day_plan():
    return [
        DayPlan(
            date="2024-01-01",
            tasks=[PlannedTask(content="A"), PlannedTask(content="B", type="review")],
        ),
        DayPlan(date="2024-01-02", tasks=[PlannedTask(content="C", is_buffer=True)]),
    ]


@pytest.fixture
def service(two_day_plan):
    """Roadmap service that finds every draft feasible and returns two_day_plan."""
    fake = MagicMock()
    fake.check_feasibility = AsyncMock(return_value=FeasibilityResult(is_feasible=True))
    fake.generate_roadmap = AsyncMock(return_value=two_day_plan)
    return fake


@pytest.fixture
def infeasible_result():
    return FeasibilityResult.model_validate(
        {
            "isFeasible": False,
            "reasoning": "Two days is not enough for this goal.",
            "options": [
                {"type": "hours", "description": "Work longer", "suggestedValue": "5"},
                {"type": "deadline", "description": "More days", "suggestedValue": "2024-01-10"},
                {"type": "goal", "description": "Smaller scope", "suggestedValue": "Print hello"},
            ],
        }
    )
