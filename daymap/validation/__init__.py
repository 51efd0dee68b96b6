# daymap/validation/__init__.py
"""Input validation and sanitization utilities."""

from .sanitize import (
    sanitize_date,
    sanitize_hours,
    sanitize_id,
    sanitize_priority,
    sanitize_text,
)

__all__ = [
    "sanitize_text",
    "sanitize_date",
    "sanitize_hours",
    "sanitize_priority",
    "sanitize_id",
]
