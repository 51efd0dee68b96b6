# daymap/llm/lm_studio.py
"""LM Studio client using OpenAI-compatible API."""

import logging
from typing import Any

import httpx

try:
    from openai import AsyncOpenAI
except ImportError:
    AsyncOpenAI = None  # type: ignore[assignment,misc]

logger = logging.getLogger(__name__)


def _to_openai_message(message: dict) -> dict:
    """
    Convert an Ollama-style message to the OpenAI chat format.

    Base64 "images" become image_url content parts next to the text, labelled
    with the matching "image_types" entry (image/png when missing).
    """
    images = message.get("images")
    if not images:
        return {"role": message["role"], "content": message.get("content", "")}

    image_types = message.get("image_types") or []
    parts: list[dict[str, Any]] = [{"type": "text", "text": message.get("content", "")}]
    for i, image in enumerate(images):
        mime_type = image_types[i] if i < len(image_types) else "image/png"
        url = image if image.startswith("data:") else f"data:{mime_type};base64,{image}"
        parts.append({"type": "image_url", "image_url": {"url": url}})
    return {"role": message["role"], "content": parts}


def _response_format(format: str | dict | None) -> dict | None:
    """
    OpenAI response_format for an Ollama-style format argument.

    LM Studio only accepts json_schema or text, so bare "json" mode sends no
    constraint and relies on the prompt plus extract_json.
    """
    if format is None or format == "json":
        return None
    return {"type": "json_schema", "json_schema": {"name": "response", "schema": format}}


class LMStudioClient:
    """
    Async LM Studio client using the OpenAI-compatible API.

    LM Studio exposes an OpenAI-compatible endpoint at http://localhost:1234/v1.
    Requires: pip install daymap[lm-studio]
    """

    def __init__(
        self,
        base_url: str = "http://localhost:1234/v1",
        model: str = "local-model",
        fallback_model: str | None = None,
        timeout: int = 300,
    ):
        """
        Initialize LM Studio client.

        Args:
            base_url:       LM Studio API base URL
            model:          Primary model name
            fallback_model: Unused (kept for interface parity with OllamaClient)
            timeout:        Request timeout in seconds
        """
        if AsyncOpenAI is None:
            raise ImportError(
                "openai package required for LM Studio support. "
                "Install with: pip install daymap[lm-studio]"
            )

        self.base_url = base_url
        self.model = model
        self.fallback_model = fallback_model
        self._client = AsyncOpenAI(base_url=base_url, api_key="lm-studio", timeout=timeout)

    async def health_check(self) -> bool:
        """
        Check LM Studio server health by listing available models.

        Returns:
            True if server is reachable, False otherwise.
        """
        try:
            async with httpx.AsyncClient(timeout=5.0) as http:
                response = await http.get(f"{self.base_url}/models")
            return response.status_code == 200
        except Exception as e:
            logger.error(f"LM Studio health check failed: {e}")
            return False

    async def generate(
        self,
        messages: list[dict],
        model: str | None = None,
        format: str | dict | None = None,
    ) -> str:
        """
        Generate a streaming response from LM Studio.

        Args:
            messages: Chat messages (Ollama-style, converted here)
            model:    Model override (defaults to self.model)
            format:   "json" or a JSON schema to constrain the output

        Returns:
            Full accumulated response text.
        """
        model = model or self.model
        logger.info(f"LMStudio.generate: model={model}, messages={len(messages)}")

        kwargs: dict[str, Any] = {}
        response_format = _response_format(format)
        if response_format is not None:
            kwargs["response_format"] = response_format

        accumulated = []
        stream = await self._client.chat.completions.create(
            model=model,
            messages=[_to_openai_message(m) for m in messages],
            stream=True,
            **kwargs,
        )
        async for chunk in stream:
            delta = chunk.choices[0].delta if chunk.choices else None
            if delta and delta.content:
                accumulated.append(delta.content)

        result = "".join(accumulated)
        logger.info(f"LMStudio.generate: {len(result)} chars")
        return result

    async def generate_with_fallback(
        self, messages: list[dict], format: str | dict | None = None
    ) -> tuple[str, str]:
        """
        Generate without OOM handling (LM Studio manages its own memory).

        Returns:
            (response_text, model_used)
        """
        result = await self.generate(messages, format=format)
        return result, self.model
