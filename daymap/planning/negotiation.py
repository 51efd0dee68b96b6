# daymap/planning/negotiation.py
"""
Feasibility negotiation between a project draft and the roadmap service.

The protocol is a finite state machine:

    DRAFTING -> CHECKING_FEASIBILITY -> GENERATING -> MATERIALIZED
                                     -> PRESENTING_OPTIONS -> GENERATING (apply option)
                                                           -> DRAFTING   (revise)

transition() is a pure function from (snapshot, event) to (snapshot, effect).
FeasibilityNegotiation drives it: it executes each effect (the two service
calls are the only suspension points) and feeds the outcome back in as the
next event.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum

from pydantic import ValidationError

from daymap.errors import GenerationFailure, InvalidTransition, NegotiationBusy
from daymap.models.entities import Project, ProjectDraft, generate_id
from daymap.planning.materializer import materialize_roadmap, project_from_draft
from daymap.planning.schemas import Attachment, FeasibilityOption, FeasibilityResult
from daymap.planning.service import RoadmapService

logger = logging.getLogger(__name__)

# Option type -> draft field it replaces
OPTION_FIELDS = {
    "hours": "daily_work_time",
    "deadline": "end_date",
    "goal": "goal",
}


class NegotiationState(Enum):
    """Negotiation lifecycle states."""

    DRAFTING = "drafting"
    CHECKING_FEASIBILITY = "checking_feasibility"
    PRESENTING_OPTIONS = "presenting_options"
    GENERATING = "generating"
    MATERIALIZED = "materialized"


BUSY_STATES = frozenset({NegotiationState.CHECKING_FEASIBILITY, NegotiationState.GENERATING})


@dataclass(frozen=True)
class Negotiation:
    """Immutable snapshot of a negotiation."""

    draft: ProjectDraft
    state: NegotiationState = NegotiationState.DRAFTING
    feasibility: FeasibilityResult | None = None
    project: Project | None = None
    error: str | None = None  # Last generation failure, kept until the next submit


# ---- events


@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class FeasibilityChecked:
    result: FeasibilityResult


@dataclass(frozen=True)
class FeasibilityCheckFailed:
    error: str


@dataclass(frozen=True)
class ApplyOption:
    option: FeasibilityOption


@dataclass(frozen=True)
class Revise:
    changes: dict = field(default_factory=dict)


@dataclass(frozen=True)
class RoadmapGenerated:
    project: Project


@dataclass(frozen=True)
class GenerationFailed:
    error: str


Event = (
    Submit
    | FeasibilityChecked
    | FeasibilityCheckFailed
    | ApplyOption
    | Revise
    | RoadmapGenerated
    | GenerationFailed
)


# ---- effects


@dataclass(frozen=True)
class CheckFeasibility:
    draft: ProjectDraft


@dataclass(frozen=True)
class GenerateRoadmap:
    draft: ProjectDraft


@dataclass(frozen=True)
class DeliverProject:
    project: Project


@dataclass(frozen=True)
class ReportFailure:
    error: str


Effect = CheckFeasibility | GenerateRoadmap | DeliverProject | ReportFailure


def apply_option(draft: ProjectDraft, option: FeasibilityOption) -> ProjectDraft:
    """
    Merge exactly one suggested value into the draft.

    hours -> daily_work_time, deadline -> end_date, goal -> goal.

    Raises:
        ValueError: If the suggested value is invalid for the target field
    """
    field_name = OPTION_FIELDS[option.type]
    value = option.suggested_value
    if option.type == "hours":
        value = float(value)
    else:
        value = str(value).strip()

    try:
        return ProjectDraft.model_validate({**draft.model_dump(), field_name: value})
    except ValidationError as e:
        raise ValueError(f"Invalid suggested value for {option.type}: {option.suggested_value!r}") from e


def revise_draft(draft: ProjectDraft, changes: dict) -> ProjectDraft:
    """Return a validated copy of the draft with changes applied."""
    if not changes:
        return draft
    return ProjectDraft.model_validate({**draft.model_dump(), **changes})


def transition(negotiation: Negotiation, event: Event) -> tuple[Negotiation, Effect | None]:
    """
    Compute the next negotiation snapshot and the effect to execute.

    Raises:
        InvalidTransition: If event is not allowed in the current state
    """
    state = negotiation.state

    if state is NegotiationState.DRAFTING:
        if isinstance(event, Submit):
            return (
                replace(negotiation, state=NegotiationState.CHECKING_FEASIBILITY, error=None),
                CheckFeasibility(negotiation.draft),
            )
        if isinstance(event, Revise):
            return replace(negotiation, draft=revise_draft(negotiation.draft, event.changes)), None

    elif state is NegotiationState.CHECKING_FEASIBILITY:
        if isinstance(event, FeasibilityChecked):
            if event.result.is_feasible:
                return (
                    replace(negotiation, state=NegotiationState.GENERATING),
                    GenerateRoadmap(negotiation.draft),
                )
            return (
                replace(
                    negotiation,
                    state=NegotiationState.PRESENTING_OPTIONS,
                    feasibility=event.result,
                ),
                None,
            )
        if isinstance(event, FeasibilityCheckFailed):
            # A failed check never blocks generation
            return (
                replace(negotiation, state=NegotiationState.GENERATING),
                GenerateRoadmap(negotiation.draft),
            )

    elif state is NegotiationState.PRESENTING_OPTIONS:
        if isinstance(event, ApplyOption):
            draft = apply_option(negotiation.draft, event.option)
            return (
                replace(
                    negotiation,
                    state=NegotiationState.GENERATING,
                    draft=draft,
                    feasibility=None,
                ),
                GenerateRoadmap(draft),
            )
        if isinstance(event, Revise):
            return (
                replace(
                    negotiation,
                    state=NegotiationState.DRAFTING,
                    draft=revise_draft(negotiation.draft, event.changes),
                    feasibility=None,
                ),
                None,
            )

    elif state is NegotiationState.GENERATING:
        if isinstance(event, RoadmapGenerated):
            return (
                replace(negotiation, state=NegotiationState.MATERIALIZED, project=event.project),
                DeliverProject(event.project),
            )
        if isinstance(event, GenerationFailed):
            return (
                replace(negotiation, state=NegotiationState.DRAFTING, error=event.error),
                ReportFailure(event.error),
            )

    raise InvalidTransition(f"{type(event).__name__} is not allowed in state {state.value}")


class FeasibilityNegotiation:
    """
    Async driver for one draft's negotiation.

    Runs transition() and executes the resulting effects against the
    roadmap service. Calls made while a service request is in flight raise
    NegotiationBusy.
    """

    def __init__(
        self,
        draft: ProjectDraft,
        service: RoadmapService,
        attachments: Sequence[Attachment] = (),
        id_factory: Callable[[], str] = generate_id,
    ) -> None:
        """
        Initialize a negotiation in DRAFTING state.

        Args:
            draft: Project draft (placeholder id)
            service: Feasibility/roadmap collaborator
            attachments: Files sent with every service call
            id_factory: Id generator for the materialized project and tasks
        """
        self._snapshot = Negotiation(draft=draft)
        self._service = service
        self._attachments = list(attachments)
        self._id_factory = id_factory

    @property
    def snapshot(self) -> Negotiation:
        return self._snapshot

    @property
    def state(self) -> NegotiationState:
        return self._snapshot.state

    @property
    def draft(self) -> ProjectDraft:
        return self._snapshot.draft

    @property
    def feasibility(self) -> FeasibilityResult | None:
        return self._snapshot.feasibility

    @property
    def project(self) -> Project | None:
        return self._snapshot.project

    @property
    def error(self) -> str | None:
        return self._snapshot.error

    @property
    def busy(self) -> bool:
        return self._snapshot.state in BUSY_STATES

    @property
    def attachments(self) -> list[Attachment]:
        return list(self._attachments)

    async def submit(self) -> Negotiation:
        """
        Check feasibility and, if feasible, generate the roadmap.

        Returns:
            Snapshot in PRESENTING_OPTIONS or MATERIALIZED state

        Raises:
            GenerationFailure: Generation failed (state is back to DRAFTING)
            NegotiationBusy: A request is already in flight
        """
        return await self._run(Submit())

    async def apply_option(self, option: FeasibilityOption) -> Negotiation:
        """
        Merge one suggested adjustment and generate without re-checking.

        Raises:
            GenerationFailure: Generation failed (state is back to DRAFTING)
            ValueError: The suggested value is invalid for its field
        """
        return await self._run(ApplyOption(option))

    def revise(self, **changes) -> Negotiation:
        """Return to DRAFTING (from PRESENTING_OPTIONS) with optional field changes."""
        self._guard()
        self._snapshot, _ = transition(self._snapshot, Revise(changes))
        return self._snapshot

    def _guard(self) -> None:
        if self.busy:
            raise NegotiationBusy(
                f"Negotiation is {self._snapshot.state.value}; wait for it to settle"
            )

    async def _run(self, event: Event) -> Negotiation:
        self._guard()
        before = self._snapshot

        next_event: Event | None = event
        try:
            while next_event is not None:
                self._snapshot, effect = transition(self._snapshot, next_event)
                logger.debug(f"Negotiation {type(next_event).__name__} -> {self._snapshot.state.value}")
                next_event = await self._execute(effect)
        except BaseException:
            # Cancelled mid-call: never leave the negotiation parked in a busy state
            if self.busy:
                logger.warning(f"Negotiation interrupted in {self._snapshot.state.value}; restoring")
                self._snapshot = before
            raise

        return self._snapshot

    async def _execute(self, effect: Effect | None) -> Event | None:
        if effect is None or isinstance(effect, DeliverProject):
            return None

        if isinstance(effect, ReportFailure):
            raise GenerationFailure(effect.error)

        if isinstance(effect, CheckFeasibility):
            try:
                result = await self._service.check_feasibility(effect.draft, self._attachments)
            except Exception as e:
                logger.warning(f"Feasibility check failed, proceeding as feasible: {e}")
                return FeasibilityCheckFailed(str(e))
            return FeasibilityChecked(result)

        if isinstance(effect, GenerateRoadmap):
            try:
                plan = await self._service.generate_roadmap(effect.draft, self._attachments)
                project = materialize_roadmap(
                    project_from_draft(effect.draft, self._id_factory),
                    plan,
                    id_factory=self._id_factory,
                )
            except Exception as e:
                logger.error(f"Roadmap generation failed: {e}")
                return GenerationFailed(str(e))
            return RoadmapGenerated(project)

        raise TypeError(f"Unknown effect {effect!r}")
