# daymap/planning/parsing.py
"""
JSON extraction from LLM output.

Local models often wrap JSON in prose or code fences, and sometimes stop
mid-document when they hit their token limit. extract_json() recovers the
payload in all of these cases or raises ValueError.
"""

import json
import re
from typing import Any

_FENCE = re.compile(r"```(?:json)?\s*\n(.*?)\n```", re.DOTALL | re.IGNORECASE)
_BARE = re.compile(r"(\{.*\}|\[.*\])", re.DOTALL)

_MAX_TRIMS = 200


def _open_delimiters(text: str) -> tuple[list[str], bool]:
    """Return the stack of unclosed '{'/'[' and whether text ends inside a string."""
    stack: list[str] = []
    in_string = False
    escape = False
    for ch in text:
        if escape:
            escape = False
            continue
        if in_string:
            if ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "{[":
            stack.append(ch)
        elif ch in "}]" and stack:
            stack.pop()
    return stack, in_string


def _closing(stack: list[str]) -> str:
    return "".join("}" if ch == "{" else "]" for ch in reversed(stack))


def repair_truncated_json(candidate: str) -> Any | None:
    """
    Close a truncated JSON document.

    Trims trailing partial tokens (dangling commas, colons, keys) one step
    at a time and closes every open container in nesting order until the
    result parses.

    Returns:
        Parsed value, or None if nothing parseable remains
    """
    text = candidate
    for _ in range(_MAX_TRIMS):
        stack, in_string = _open_delimiters(text)
        attempt = text + ('"' if in_string else "") + _closing(stack)
        try:
            return json.loads(attempt)
        except json.JSONDecodeError:
            pass

        text = text.rstrip()
        if not text:
            return None
        if text[-1] in ",:":
            text = text[:-1]
            continue
        if text.endswith('"') and not in_string:
            # Dangling string after a separator is a key without a value
            quote_start = text.rfind('"', 0, len(text) - 1)
            before = text[:quote_start].rstrip() if quote_start >= 0 else ""
            if before and before[-1] in ",:[{":
                text = before.rstrip(",")
                continue
        text = text[:-1]
    return None


def extract_json(raw_output: str) -> Any:
    """
    Extract a JSON value from LLM output.

    Strategies, in order:
    1. Whole output is JSON
    2. Fenced code block (```json ... ```)
    3. Outermost {...} or [...] span
    4. Truncation repair starting at the first '{' or '['

    Args:
        raw_output: Raw text from the model

    Returns:
        Parsed JSON value (object or array)

    Raises:
        ValueError: If no valid JSON can be recovered
    """
    try:
        return json.loads(raw_output.strip())
    except json.JSONDecodeError:
        pass

    fence = _FENCE.search(raw_output)
    if fence:
        try:
            return json.loads(fence.group(1).strip())
        except json.JSONDecodeError:
            pass

    bare = _BARE.search(raw_output)
    if bare:
        try:
            return json.loads(bare.group(1))
        except json.JSONDecodeError:
            pass

    starts = [i for i in (raw_output.find("{"), raw_output.find("[")) if i != -1]
    if starts:
        repaired = repair_truncated_json(raw_output[min(starts):])
        if repaired is not None:
            return repaired

    preview = raw_output[:300].replace("\n", "\\n")
    raise ValueError(
        f"Could not extract valid JSON from output ({len(raw_output)} chars). "
        f"Preview: {preview}"
    )
