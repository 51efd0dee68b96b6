# daymap/validation/sanitize.py
"""
Input sanitization and validation utilities.

All failures raise ToolError so the same messages reach CLI and MCP users.
"""

import logging
import re
from datetime import date

from fastmcp.exceptions import ToolError

from daymap.models.entities import Priority

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"^[a-zA-Z0-9-]{1,64}$")


def sanitize_text(text: str | None, field: str, max_length: int = 5000, required: bool = True) -> str:
    """
    Strip and length-limit free text.

    Args:
        text: User-provided text
        field: Field name used in error messages
        max_length: Longer text is truncated
        required: Reject empty text

    Returns:
        Cleaned text

    Raises:
        ToolError: If required text is empty after stripping
    """
    cleaned = (text or "").strip()

    if required and not cleaned:
        raise ToolError(f"{field} cannot be empty")

    if len(cleaned) > max_length:
        logger.warning(f"{field} truncated from {len(cleaned)} to {max_length} characters")
        cleaned = cleaned[:max_length]

    return cleaned


def sanitize_date(value: str, field: str = "date") -> str:
    """
    Validate a calendar date in YYYY-MM-DD form.

    Raises:
        ToolError: If the value is not a real date in that form
    """
    cleaned = (value or "").strip()
    try:
        parsed = date.fromisoformat(cleaned)
    except ValueError:
        raise ToolError(f"Invalid {field} '{value}': expected YYYY-MM-DD")

    if parsed.isoformat() != cleaned:
        raise ToolError(f"Invalid {field} '{value}': expected YYYY-MM-DD")
    return cleaned


def sanitize_hours(value: float) -> float:
    """
    Validate the daily work-time budget.

    Raises:
        ToolError: If hours are not in (0, 24]
    """
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise ToolError(f"Invalid daily hours '{value}'")

    if not 0 < hours <= 24:
        raise ToolError(f"Daily hours must be between 0 and 24, got {hours:g}")
    return hours


def sanitize_priority(value: str | Priority) -> Priority:
    """
    Accept a Priority or its value/name ("On-time", "ON_TIME", "on_time").

    Raises:
        ToolError: If the value names no priority
    """
    if isinstance(value, Priority):
        return value

    cleaned = str(value).strip()
    for priority in Priority:
        if cleaned.lower() in (priority.value.lower(), priority.name.lower()):
            return priority

    valid = ", ".join(p.value for p in Priority)
    raise ToolError(f"Invalid priority '{value}'. Must be one of: {valid}")


def sanitize_id(value: str, field: str = "id") -> str:
    """
    Validate an entity id (alphanumeric and hyphens, up to 64 chars).

    Raises:
        ToolError: If the id format is invalid
    """
    cleaned = (value or "").strip()
    if not _ID_PATTERN.match(cleaned):
        raise ToolError(
            f"Invalid {field} '{value}': must be 1-64 alphanumeric characters or hyphens"
        )
    return cleaned
