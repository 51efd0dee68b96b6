# daymap/llm/client.py
"""Ollama client with health checks, streaming generation, and fallback support."""

import logging
from typing import Any

import httpx
from ollama import AsyncClient, ResponseError

from .retry import llm_retry

logger = logging.getLogger(__name__)


def _model_names(models_response: Any) -> list[str]:
    """Model names from a list() response (dict or ollama ListResponse)."""
    names = []
    for m in models_response.get("models", []) or []:
        name = m.get("model") or m.get("name")
        if name:
            names.append(name)
    return names


def _to_ollama_message(message: dict) -> dict:
    """Drop keys the Ollama chat API does not know (image_types)."""
    return {k: v for k, v in message.items() if k != "image_types"}


class OllamaClient:
    """
    Async Ollama client with health checks, streaming, and OOM fallback.

    Handles:
    - Health checks (server + model availability)
    - Streaming generation with content accumulation
    - Optional JSON mode / JSON schema constrained output
    - Automatic fallback to a smaller model on OOM errors
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        fallback_model: str | None = None,
        timeout: int = 300,
    ):
        """
        Initialize Ollama client.

        Args:
            base_url: Ollama API base URL (e.g., "http://localhost:11434")
            model: Primary model name
            fallback_model: Smaller model used when the primary runs out of memory
            timeout: Request timeout in seconds (generous for model loading)
        """
        self.base_url = base_url
        self.model = model
        self.fallback_model = fallback_model
        self.client = AsyncClient(host=base_url, timeout=httpx.Timeout(timeout))

    async def health_check(self) -> bool:
        """
        Check Ollama server health and model availability.

        Returns:
            True if server is reachable (a missing model can be pulled on demand).
            False if server is down or unreachable.
        """
        try:
            available_models = _model_names(await self.client.list())

            model_base = self.model.split(":")[0]
            if not any(model_base in m or self.model == m for m in available_models):
                logger.warning(
                    f"Model {self.model} not found in available models. "
                    f"It can be pulled on demand during generation."
                )
            return True

        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return False

    @llm_retry
    async def generate(
        self,
        messages: list[dict],
        model: str | None = None,
        format: str | dict | None = None,
    ) -> str:
        """
        Generate a response from Ollama with streaming.

        Args:
            messages: Chat messages; user messages may carry base64 "images"
            model: Model to use (defaults to self.model)
            format: "json" or a JSON schema to constrain the output

        Returns:
            Full accumulated response text.

        Raises:
            ResponseError: On API errors (retry decorator handles transient errors)
        """
        model = model or self.model
        logger.info(f"Generating with model={model}, messages={len(messages)}")

        kwargs: dict[str, Any] = {}
        if format is not None:
            kwargs["format"] = format

        accumulated = []
        async for chunk in await self.client.chat(
            model=model,
            messages=[_to_ollama_message(m) for m in messages],
            stream=True,
            **kwargs,
        ):
            if content := chunk.get("message", {}).get("content"):
                accumulated.append(content)

        result = "".join(accumulated)
        logger.info(f"Generated {len(result)} chars")
        return result

    async def generate_with_fallback(
        self, messages: list[dict], format: str | dict | None = None
    ) -> tuple[str, str]:
        """
        Generate with automatic fallback to smaller model on OOM.

        Returns:
            (response_text, model_used)

        Raises:
            ResponseError: On non-OOM errors or if fallback also fails
        """
        try:
            result = await self.generate(messages, model=self.model, format=format)
            return result, self.model

        except ResponseError as e:
            if e.status_code == 500 and "requires more system memory" in str(e).lower():
                if self.fallback_model is None:
                    logger.error("OOM error but no fallback model configured")
                    raise

                logger.warning(
                    f"OOM error on {self.model}, falling back to {self.fallback_model}"
                )
                result = await self.generate(messages, model=self.fallback_model, format=format)
                return result, self.fallback_model

            raise
