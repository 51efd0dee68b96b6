# tests/unit/test_retry.py
"""Tests for retry classification of LLM errors."""

import httpx
import pytest
from ollama import ResponseError

from daymap.llm.retry import is_retryable


@pytest.mark.parametrize(
    "exc",
    [
        ConnectionError("refused"),
        httpx.ConnectError("refused"),
        ResponseError(error="busy", status_code=503),
        ResponseError(error="rate limited", status_code=429),
        ResponseError(error="internal", status_code=500),
    ],
)
def test_retryable(exc):
    assert is_retryable(exc) is True


@pytest.mark.parametrize(
    "exc",
    [
        ResponseError(error="model requires more system memory", status_code=500),
        ResponseError(error="not found", status_code=404),
        ValueError("bad json"),
    ],
)
def test_not_retryable(exc):
    assert is_retryable(exc) is False
