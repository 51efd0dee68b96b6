# daymap/tools/create_project.py
"""
create_project, apply_adjustment and revise_draft tool implementations.

Runs the feasibility negotiation for a new project. Infeasible drafts and
failed generations are parked in a PendingNegotiations registry so the
caller can pick an option or revise the draft in a follow-up call.
"""

import logging
from pathlib import Path

from fastmcp.exceptions import ToolError
from pydantic import ValidationError

from daymap.errors import GenerationFailure, NegotiationBusy
from daymap.models.entities import ProjectDraft, generate_id
from daymap.models.responses import CreateProjectResponse, FeasibilityOptionView
from daymap.models.workspace import ProjectWorkspace
from daymap.planning.negotiation import FeasibilityNegotiation, Negotiation, NegotiationState
from daymap.planning.schemas import Attachment
from daymap.planning.service import RoadmapService
from daymap.validation.sanitize import (
    sanitize_date,
    sanitize_hours,
    sanitize_id,
    sanitize_priority,
    sanitize_text,
)

logger = logging.getLogger(__name__)


class PendingNegotiations:
    """In-memory registry of negotiations waiting for a user decision."""

    def __init__(self) -> None:
        self._negotiations: dict[str, FeasibilityNegotiation] = {}

    def add(self, negotiation: FeasibilityNegotiation) -> str:
        negotiation_id = generate_id()
        self._negotiations[negotiation_id] = negotiation
        return negotiation_id

    def get(self, negotiation_id: str) -> FeasibilityNegotiation:
        """
        Raises:
            ToolError: If no pending negotiation has this id
        """
        negotiation = self._negotiations.get(sanitize_id(negotiation_id, "negotiation_id"))
        if negotiation is None:
            raise ToolError(f"Negotiation '{negotiation_id}' not found or already finished")
        return negotiation

    def remove(self, negotiation_id: str) -> None:
        self._negotiations.pop(negotiation_id, None)

    def __len__(self) -> int:
        return len(self._negotiations)


def load_attachments(paths: list[str] | None) -> list[Attachment]:
    """
    Read attachment files from disk.

    Raises:
        ToolError: If a path is not a readable file
    """
    attachments = []
    for raw_path in paths or []:
        path = Path(raw_path).expanduser()
        if not path.is_file():
            raise ToolError(f"Attachment not found: {raw_path}")
        try:
            attachments.append(Attachment.from_path(path))
        except OSError as e:
            raise ToolError(f"Cannot read attachment {raw_path}: {e}")
    return attachments


def _check_date_range(start_date: str, end_date: str) -> None:
    if end_date < start_date:
        raise ToolError(f"end_date {end_date} is before start_date {start_date}")


def _response(
    snapshot: Negotiation,
    negotiation_id: str | None,
) -> CreateProjectResponse:
    draft = snapshot.draft

    if snapshot.state is NegotiationState.MATERIALIZED:
        project = snapshot.project
        tasks = project.tasks or []
        return CreateProjectResponse(
            status="created",
            project_id=project.id,
            name=project.name,
            task_count=len(tasks),
            day_count=len({t.date for t in tasks}),
            next_steps="Use get_day to see today's tasks.",
        )

    if snapshot.state is NegotiationState.PRESENTING_OPTIONS:
        feasibility = snapshot.feasibility
        return CreateProjectResponse(
            status="needs_adjustment",
            name=draft.name,
            negotiation_id=negotiation_id,
            reasoning=feasibility.reasoning,
            options=[
                FeasibilityOptionView(
                    index=i,
                    type=option.type,
                    description=option.description,
                    suggested_value=option.suggested_value,
                )
                for i, option in enumerate(feasibility.options)
            ],
            next_steps=(
                "Call apply_adjustment with an option index, "
                "or revise_draft with your own changes."
            ),
        )

    return CreateProjectResponse(
        status="failed",
        name=draft.name,
        negotiation_id=negotiation_id,
        error=snapshot.error,
        next_steps="Call revise_draft to retry, optionally with changes.",
    )


async def _drive(
    negotiation: FeasibilityNegotiation,
    action,
    workspace: ProjectWorkspace,
    negotiations: PendingNegotiations,
    negotiation_id: str | None = None,
) -> dict:
    """Run one negotiation step and store or park the outcome."""
    try:
        snapshot = await action()
    except GenerationFailure as e:
        logger.warning(f"Generation failed for '{negotiation.draft.name}': {e}")
        snapshot = negotiation.snapshot
    except NegotiationBusy as e:
        raise ToolError(str(e))
    except ValueError as e:
        raise ToolError(f"Cannot apply adjustment: {e}")

    if snapshot.state is NegotiationState.MATERIALIZED:
        workspace.add_project(snapshot.project)
        if negotiation_id is not None:
            negotiations.remove(negotiation_id)
        logger.info(f"Created project {snapshot.project.id}: {snapshot.project.name}")
        return _response(snapshot, None).model_dump()

    if negotiation_id is None:
        negotiation_id = negotiations.add(negotiation)
    return _response(snapshot, negotiation_id).model_dump()


async def create_project(
    name: str,
    goal: str,
    start_date: str,
    end_date: str,
    workspace: ProjectWorkspace,
    service: RoadmapService,
    negotiations: PendingNegotiations,
    daily_work_time: float = 2.0,
    background: str | None = None,
    priority: str = "On-time",
    attachments: list[str] | None = None,
) -> dict:
    """
    Create a project: check feasibility, then generate and store its roadmap.

    Args:
        name: Project name
        goal: What the project should achieve
        start_date: First day (YYYY-MM-DD)
        end_date: Deadline (YYYY-MM-DD)
        workspace: Project collection the new project is added to
        service: Roadmap generator
        negotiations: Registry for drafts that need a decision
        daily_work_time: Hours available per day
        background: Optional prior knowledge or context
        priority: Buffer strategy (On-time, In-time, Just Done)
        attachments: Optional file paths sent to the generator

    Returns:
        CreateProjectResponse as dict (created, needs_adjustment or failed)

    Raises:
        ToolError: If any input is invalid
    """
    start = sanitize_date(start_date, "start_date")
    end = sanitize_date(end_date, "end_date")
    _check_date_range(start, end)

    draft = ProjectDraft(
        name=sanitize_text(name, "name", max_length=200),
        goal=sanitize_text(goal, "goal"),
        background=sanitize_text(background, "background", required=False),
        priority=sanitize_priority(priority),
        start_date=start,
        end_date=end,
        daily_work_time=sanitize_hours(daily_work_time),
    )

    negotiation = FeasibilityNegotiation(draft, service, attachments=load_attachments(attachments))
    logger.info(f"Planning project '{draft.name}' ({draft.start_date} to {draft.end_date})")
    return await _drive(negotiation, negotiation.submit, workspace, negotiations)


async def apply_adjustment(
    negotiation_id: str,
    option_index: int,
    workspace: ProjectWorkspace,
    negotiations: PendingNegotiations,
) -> dict:
    """
    Accept one suggested adjustment and generate the roadmap.

    Raises:
        ToolError: Unknown negotiation, no options pending, or bad index
    """
    negotiation = negotiations.get(negotiation_id)
    if negotiation.state is not NegotiationState.PRESENTING_OPTIONS:
        raise ToolError(
            f"Negotiation '{negotiation_id}' has no pending options "
            f"(state: {negotiation.state.value})"
        )

    options = negotiation.feasibility.options
    if not 0 <= option_index < len(options):
        raise ToolError(f"Option index {option_index} out of range (0-{len(options) - 1})")

    option = options[option_index]
    logger.info(f"Applying {option.type} adjustment to '{negotiation.draft.name}'")
    return await _drive(
        negotiation,
        lambda: negotiation.apply_option(option),
        workspace,
        negotiations,
        negotiation_id=negotiation_id,
    )


async def revise_draft(
    negotiation_id: str,
    workspace: ProjectWorkspace,
    negotiations: PendingNegotiations,
    name: str | None = None,
    goal: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    daily_work_time: float | None = None,
    background: str | None = None,
    priority: str | None = None,
) -> dict:
    """
    Change a pending draft and submit it again (feasibility is re-checked).

    Only the given fields change. Works both after an infeasible verdict
    and after a failed generation.

    Raises:
        ToolError: Unknown negotiation or invalid field values
    """
    negotiation = negotiations.get(negotiation_id)

    changes: dict = {}
    if name is not None:
        changes["name"] = sanitize_text(name, "name", max_length=200)
    if goal is not None:
        changes["goal"] = sanitize_text(goal, "goal")
    if background is not None:
        changes["background"] = sanitize_text(background, "background", required=False)
    if start_date is not None:
        changes["start_date"] = sanitize_date(start_date, "start_date")
    if end_date is not None:
        changes["end_date"] = sanitize_date(end_date, "end_date")
    if daily_work_time is not None:
        changes["daily_work_time"] = sanitize_hours(daily_work_time)
    if priority is not None:
        changes["priority"] = sanitize_priority(priority)

    draft = negotiation.draft
    _check_date_range(changes.get("start_date", draft.start_date), changes.get("end_date", draft.end_date))

    try:
        negotiation.revise(**changes)
    except NegotiationBusy as e:
        raise ToolError(str(e))
    except ValidationError as e:
        raise ToolError(f"Invalid draft changes: {e}")

    logger.info(f"Resubmitting revised draft '{negotiation.draft.name}'")
    return await _drive(
        negotiation, negotiation.submit, workspace, negotiations, negotiation_id=negotiation_id
    )
