# tests/unit/test_lm_studio_client.py
"""Unit tests for LMStudioClient."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from daymap.llm.lm_studio import LMStudioClient, _response_format, _to_openai_message
from daymap.planning.service import LLMRoadmapService


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_client(**kwargs):
    """Create LMStudioClient with openai patched out."""
    with patch("daymap.llm.lm_studio.AsyncOpenAI"):
        client = LMStudioClient(**kwargs)
    return client


def _chunk(content):
    chunk = MagicMock()
    chunk.choices = [MagicMock()]
    chunk.choices[0].delta.content = content
    return chunk


def _stream(*contents):
    async def stream():
        for content in contents:
            yield _chunk(content)

    return stream()


# ---------------------------------------------------------------------------
# Message conversion
# ---------------------------------------------------------------------------

class TestToOpenaiMessage:
    def test_plain_message(self):
        assert _to_openai_message({"role": "user", "content": "hi"}) == {"role": "user", "content": "hi"}

    def test_images_become_parts(self):
        message = _to_openai_message({"role": "user", "content": "see", "images": ["QUJD"]})
        assert message["content"][0] == {"type": "text", "text": "see"}
        assert message["content"][1]["image_url"]["url"] == "data:image/png;base64,QUJD"

    def test_image_types_label_urls(self):
        message = _to_openai_message(
            {"role": "user", "content": "", "images": ["QUJD", "REVG"], "image_types": ["image/jpeg"]}
        )
        assert message["content"][1]["image_url"]["url"] == "data:image/jpeg;base64,QUJD"
        assert message["content"][2]["image_url"]["url"] == "data:image/png;base64,REVG"

    def test_data_url_kept(self):
        url = "data:image/jpeg;base64,QUJD"
        message = _to_openai_message({"role": "user", "content": "", "images": [url]})
        assert message["content"][1]["image_url"]["url"] == url


class TestResponseFormat:
    def test_none(self):
        assert _response_format(None) is None

    def test_json_mode_sends_no_constraint(self):
        assert _response_format("json") is None

    def test_schema(self):
        schema = {"type": "array"}
        assert _response_format(schema)["json_schema"]["schema"] == schema


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

class TestGenerate:
    @pytest.mark.asyncio
    async def test_streams_and_accumulates(self):
        client = _make_client(model="mistral")
        client._client.chat.completions.create = AsyncMock(return_value=_stream("Hel", None, "lo"))

        result = await client.generate([{"role": "user", "content": "hi"}], format="json")

        assert result == "Hello"
        kwargs = client._client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "mistral"
        assert "response_format" not in kwargs

    @pytest.mark.asyncio
    async def test_generate_with_fallback_reports_model(self):
        client = _make_client(model="mistral")
        client._client.chat.completions.create = AsyncMock(return_value=_stream("ok"))
        assert await client.generate_with_fallback([{"role": "user", "content": "hi"}]) == ("ok", "mistral")


class TestHealthCheck:
    @pytest.mark.asyncio
    async def test_server_down(self):
        client = _make_client(base_url="http://127.0.0.1:9/v1")
        with patch("daymap.llm.lm_studio.httpx.AsyncClient") as mock_http:
            mock_http.return_value.__aenter__.return_value.get = AsyncMock(
                side_effect=ConnectionError("refused")
            )
            assert await client.health_check() is False


def test_missing_openai_raises():
    with patch("daymap.llm.lm_studio.AsyncOpenAI", None):
        with pytest.raises(ImportError, match="lm-studio"):
            LMStudioClient()


class TestFeasibilityRequest:
    @pytest.mark.asyncio
    async def test_feasibility_check_sends_json_schema(self, draft):
        client = _make_client(model="mistral")
        client._client.chat.completions.create = AsyncMock(
            return_value=_stream('{"isFeasible": true}')
        )

        result = await LLMRoadmapService(client).check_feasibility(draft, [])

        assert result.is_feasible is True
        response_format = client._client.chat.completions.create.call_args.kwargs["response_format"]
        assert response_format["type"] == "json_schema"
        assert "isFeasible" in response_format["json_schema"]["schema"]["properties"]
