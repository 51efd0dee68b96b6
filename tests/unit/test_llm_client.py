# tests/unit/test_llm_client.py
"""Tests for OllamaClient with health checks, streaming, and fallback."""

import pytest
from ollama import ResponseError
from unittest.mock import AsyncMock, patch

from daymap.config import DaymapConfig
from daymap.llm import LMStudioClient, OllamaClient, create_llm_client

MESSAGES = [{"role": "user", "content": "Plan my week"}]


def _client(fallback_model="qwen2.5:7b-instruct"):
    return OllamaClient(
        base_url="http://localhost:11434",
        model="qwen2.5:14b-instruct",
        fallback_model=fallback_model,
    )


def _stream(*parts):
    async def stream():
        for part in parts:
            yield {"message": {"content": part}}

    return stream()


class TestOllamaClientHealthCheck:
    """Test health check functionality."""

    @pytest.mark.asyncio
    async def test_health_check_model_available(self):
        client = _client()
        with patch.object(client.client, "list", new_callable=AsyncMock) as mock_list:
            mock_list.return_value = {"models": [{"model": "qwen2.5:14b-instruct"}]}
            assert await client.health_check() is True
            mock_list.assert_called_once()

    @pytest.mark.asyncio
    async def test_health_check_model_missing_still_ok(self):
        """Missing models can be pulled on demand."""
        client = _client()
        with patch.object(client.client, "list", new_callable=AsyncMock) as mock_list:
            mock_list.return_value = {"models": [{"name": "llama3:8b"}]}
            assert await client.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_server_down(self):
        client = _client()
        with patch.object(client.client, "list", new_callable=AsyncMock) as mock_list:
            mock_list.side_effect = ConnectionError("Connection refused")
            assert await client.health_check() is False


class TestOllamaClientGenerate:
    """Test streaming generation."""

    @pytest.mark.asyncio
    async def test_generate_streams_and_accumulates(self):
        client = _client()
        with patch.object(client.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.return_value = _stream("[{", '"date": ', '"2024-01-01"}]')
            result = await client.generate(MESSAGES)

        assert result == '[{"date": "2024-01-01"}]'
        kwargs = mock_chat.call_args.kwargs
        assert kwargs["model"] == "qwen2.5:14b-instruct"
        assert kwargs["stream"] is True
        assert "format" not in kwargs

    @pytest.mark.asyncio
    async def test_generate_passes_format(self):
        client = _client()
        with patch.object(client.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.return_value = _stream('{"isFeasible": true}')
            await client.generate(MESSAGES, format="json")
        assert mock_chat.call_args.kwargs["format"] == "json"

    @pytest.mark.asyncio
    async def test_generate_drops_image_types(self):
        client = _client()
        message = {"role": "user", "content": "see", "images": ["QUJD"], "image_types": ["image/jpeg"]}
        with patch.object(client.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.return_value = _stream("ok")
            await client.generate([message])
        assert mock_chat.call_args.kwargs["messages"] == [
            {"role": "user", "content": "see", "images": ["QUJD"]}
        ]

    @pytest.mark.asyncio
    async def test_generate_does_not_retry_client_errors(self):
        client = _client()
        with patch.object(client.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.side_effect = ResponseError(error="model not found", status_code=404)
            with pytest.raises(ResponseError):
                await client.generate(MESSAGES)
        assert mock_chat.call_count == 1


class TestOllamaClientFallback:
    """Test OOM fallback behavior."""

    @pytest.mark.asyncio
    async def test_oom_triggers_fallback(self):
        client = _client()
        with patch.object(client, "generate", new_callable=AsyncMock) as mock_gen:
            mock_gen.side_effect = [
                ResponseError(error="model requires more system memory than available", status_code=500),
                "Fallback success",
            ]
            result, model_used = await client.generate_with_fallback(MESSAGES, format="json")

        assert (result, model_used) == ("Fallback success", "qwen2.5:7b-instruct")
        assert mock_gen.call_args.kwargs == {"model": "qwen2.5:7b-instruct", "format": "json"}

    @pytest.mark.asyncio
    async def test_oom_without_fallback_reraises(self):
        client = _client(fallback_model=None)
        with patch.object(client, "generate", new_callable=AsyncMock) as mock_gen:
            mock_gen.side_effect = ResponseError(
                error="model requires more system memory than available", status_code=500
            )
            with pytest.raises(ResponseError):
                await client.generate_with_fallback(MESSAGES)

    @pytest.mark.asyncio
    async def test_non_oom_error_not_caught(self):
        client = _client()
        with patch.object(client, "generate", new_callable=AsyncMock) as mock_gen:
            mock_gen.side_effect = ResponseError(error="Invalid model format", status_code=400)
            with pytest.raises(ResponseError) as exc_info:
                await client.generate_with_fallback(MESSAGES)
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_primary_success(self):
        client = _client()
        with patch.object(client, "generate", new_callable=AsyncMock) as mock_gen:
            mock_gen.return_value = "ok"
            assert await client.generate_with_fallback(MESSAGES) == ("ok", "qwen2.5:14b-instruct")
            mock_gen.assert_called_once()


class TestFactory:
    def test_ollama_by_default(self):
        client = create_llm_client(DaymapConfig())
        assert isinstance(client, OllamaClient)
        assert client.fallback_model == "qwen2.5:7b-instruct"

    def test_lm_studio(self):
        with patch("daymap.llm.lm_studio.AsyncOpenAI"):
            client = create_llm_client(DaymapConfig(provider="lm_studio"))
        assert isinstance(client, LMStudioClient)
        assert client.model == "local-model"
