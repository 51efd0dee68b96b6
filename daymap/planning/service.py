# daymap/planning/service.py
"""
Roadmap generation service backed by a local LLM.

Implements the two external calls of the planning flow:
check_feasibility() and generate_roadmap(). Both build a chat prompt from
the project draft and its attachments, call the configured LLM client, and
validate the JSON answer with pydantic.
"""

import logging
from datetime import date
from typing import Any, Protocol, Sequence

from pydantic import TypeAdapter, ValidationError

from daymap.errors import FeasibilityCheckFailure, GenerationFailure
from daymap.models.entities import Priority, ProjectDraft
from daymap.planning.parsing import extract_json
from daymap.planning.prompts import load_prompt
from daymap.planning.schemas import Attachment, DayPlan, FeasibilityResult

logger = logging.getLogger(__name__)

BUFFER_STRATEGIES = {
    Priority.ON_TIME: (
        "Plan tasks within 90% of available time. Reserve 10% for 'review' tasks. "
        "Each day must include a daily 'check' task."
    ),
    Priority.IN_TIME: (
        "Plan tasks within 98% of available time. Reserve 2% for 'review' tasks. "
        "Each day must include a daily 'check' task."
    ),
    Priority.JUST_DONE: (
        "Spread out planning. Actual tasks can extend the deadline by 20% if needed. "
        "Focus on a relaxed pace."
    ),
}

# Longest text attachment inlined into a prompt
MAX_INLINE_CHARS = 20_000

_TEXT_MIME_TYPES = {"application/json", "application/xml", "application/x-yaml", "application/yaml"}

_day_plans_adapter = TypeAdapter(list[DayPlan])


class RoadmapService(Protocol):
    """External plan-generation collaborator."""

    async def check_feasibility(
        self, draft: ProjectDraft, attachments: Sequence[Attachment]
    ) -> FeasibilityResult: ...

    async def generate_roadmap(
        self, draft: ProjectDraft, attachments: Sequence[Attachment]
    ) -> list[DayPlan]: ...


def _day_count(draft: ProjectDraft) -> int:
    try:
        start = date.fromisoformat(draft.start_date)
        end = date.fromisoformat(draft.end_date)
    except ValueError:
        return 0
    return max((end - start).days + 1, 0)


def _is_text(mime_type: str) -> bool:
    return mime_type.startswith("text/") or mime_type in _TEXT_MIME_TYPES


def build_user_message(prompt: str, attachments: Sequence[Attachment]) -> dict:
    """
    Build a chat message carrying the prompt and attachments.

    Images travel as base64 `images` with their mime types alongside in
    `image_types`; text files are inlined into the prompt; anything else is
    only mentioned by name.
    """
    content = [prompt]
    images: list[str] = []
    image_types: list[str] = []

    for attachment in attachments:
        if attachment.mime_type.startswith("image/"):
            images.append(attachment.payload)
            image_types.append(attachment.mime_type)
        elif _is_text(attachment.mime_type):
            text = attachment.decoded().decode("utf-8", errors="replace")
            if len(text) > MAX_INLINE_CHARS:
                logger.warning(
                    f"Attachment {attachment.name} truncated from {len(text)} to {MAX_INLINE_CHARS} chars"
                )
                text = text[:MAX_INLINE_CHARS]
            content.append(f"Attached file {attachment.name}:\n{text}")
        else:
            content.append(
                f"Attached file {attachment.name} ({attachment.mime_type}) is not readable as text."
            )

    message: dict[str, Any] = {"role": "user", "content": "\n\n".join(content)}
    if images:
        message["images"] = images
        message["image_types"] = image_types
    return message


class LLMRoadmapService:
    """
    RoadmapService implementation over an OllamaClient or LMStudioClient.

    Failures are normalized: any error during the feasibility check raises
    FeasibilityCheckFailure, any error during generation raises
    GenerationFailure.
    """

    def __init__(self, client: Any) -> None:
        """
        Initialize the service.

        Args:
            client: LLM client exposing generate_with_fallback(messages, format=...)
        """
        self._client = client
        self._system_prompt = load_prompt("system").strip()

    def _messages(self, prompt: str, attachments: Sequence[Attachment]) -> list[dict]:
        return [
            {"role": "system", "content": self._system_prompt},
            build_user_message(prompt, attachments),
        ]

    async def check_feasibility(
        self, draft: ProjectDraft, attachments: Sequence[Attachment]
    ) -> FeasibilityResult:
        prompt = load_prompt("feasibility").format(
            name=draft.name,
            goal=draft.goal,
            background=draft.background or "none",
            start_date=draft.start_date,
            end_date=draft.end_date,
            day_count=_day_count(draft),
            daily_work_time=draft.daily_work_time,
        )

        try:
            raw, model_used = await self._client.generate_with_fallback(
                self._messages(prompt, attachments),
                format=FeasibilityResult.model_json_schema(by_alias=True),
            )
            result = FeasibilityResult.model_validate(extract_json(raw))
        except Exception as e:
            raise FeasibilityCheckFailure(f"Feasibility check failed: {e}") from e

        logger.info(
            f"Feasibility check ({model_used}): feasible={result.is_feasible}, "
            f"options={len(result.options)}"
        )
        return result

    async def generate_roadmap(
        self, draft: ProjectDraft, attachments: Sequence[Attachment]
    ) -> list[DayPlan]:
        prompt = load_prompt("roadmap").format(
            name=draft.name,
            goal=draft.goal,
            background=draft.background or "none",
            start_date=draft.start_date,
            end_date=draft.end_date,
            daily_work_time=draft.daily_work_time,
            priority=draft.priority.value,
            buffer_strategy=BUFFER_STRATEGIES[draft.priority],
        )

        try:
            raw, model_used = await self._client.generate_with_fallback(
                self._messages(prompt, attachments)
            )
            data = extract_json(raw)
        except Exception as e:
            raise GenerationFailure(f"Roadmap generation failed: {e}") from e

        # Some models wrap the array in an object despite the instructions
        if isinstance(data, dict):
            data = data.get("days", data.get("roadmap", data))

        try:
            plan = _day_plans_adapter.validate_python(data)
        except ValidationError as e:
            raise GenerationFailure(f"Roadmap output did not match the expected shape: {e}") from e

        if not any(day.tasks for day in plan):
            raise GenerationFailure("Roadmap output contained no tasks")

        logger.info(
            f"Generated roadmap ({model_used}): {len(plan)} days, "
            f"{sum(len(day.tasks) for day in plan)} tasks"
        )
        return plan
