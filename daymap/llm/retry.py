# daymap/llm/retry.py
"""Retry logic for LLM API calls with exponential backoff."""

import logging

import httpx
from ollama import ResponseError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = {408, 429, 500, 502, 503, 504}


def is_retryable(exception: BaseException) -> bool:
    """
    Returns True if the exception should be retried.

    Retryable conditions:
    - ConnectionError or httpx transport errors (server unavailable)
    - ResponseError with a transient HTTP status, except status 500 with
      "requires more system memory" (OOM is handled by model fallback)
    """
    if isinstance(exception, (ConnectionError, httpx.TransportError)):
        return True

    if isinstance(exception, ResponseError):
        if exception.status_code not in RETRYABLE_STATUSES:
            return False
        if exception.status_code == 500 and "requires more system memory" in str(exception).lower():
            return False
        return True

    return False


llm_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=4, max=60),
    retry=retry_if_exception(is_retryable),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
