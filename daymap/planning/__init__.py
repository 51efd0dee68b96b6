# daymap/planning/__init__.py
"""Roadmap planning: generator schemas, LLM service, negotiation and materialization."""

from daymap.planning.materializer import materialize_roadmap, project_from_draft
from daymap.planning.negotiation import (
    FeasibilityNegotiation,
    Negotiation,
    NegotiationState,
    apply_option,
    transition,
)
from daymap.planning.schemas import (
    Attachment,
    DayPlan,
    FeasibilityOption,
    FeasibilityResult,
    PlannedTask,
)
from daymap.planning.service import LLMRoadmapService, RoadmapService

__all__ = [
    "Attachment",
    "DayPlan",
    "PlannedTask",
    "FeasibilityOption",
    "FeasibilityResult",
    "LLMRoadmapService",
    "RoadmapService",
    "FeasibilityNegotiation",
    "Negotiation",
    "NegotiationState",
    "apply_option",
    "transition",
    "materialize_roadmap",
    "project_from_draft",
]
