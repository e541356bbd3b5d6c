"""Unit tests for LLM service."""

import asyncio

import httpx
import openai
import pytest
from unittest.mock import AsyncMock, patch

from config.errors import GenerationError, ErrorCode, ErrorCategory


def _status_error(status_code: int) -> openai.APIStatusError:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status_code, request=request)
    return openai.APIStatusError(f"status {status_code}", response=response, body=None)


class TestLLMService:
    """Tests for LLMService."""

    def test_initialization(self, generation_config):
        """LLMService takes its settings from the explicit config."""
        with patch('services.llm_service.ChatOpenAI'):
            from services.llm_service import LLMService

            service = LLMService(generation_config)

            assert service.model == "gpt-4o"
            assert service.temperature == 0.4
            assert service.total_tokens_used == 0

    def test_client_built_without_retries(self, generation_config):
        with patch('services.llm_service.ChatOpenAI') as chat_cls:
            from services.llm_service import LLMService

            LLMService(generation_config).client

            kwargs = chat_cls.call_args.kwargs
            assert kwargs["max_retries"] == 0
            assert kwargs["max_tokens"] == 8192
            assert kwargs["timeout"] == 5.0
            assert kwargs["api_key"] == "test-api-key"

    @pytest.mark.asyncio
    async def test_generate(self, mock_llm_service):
        """Test generate method."""
        from langchain_core.messages import HumanMessage

        result = await mock_llm_service.generate([HumanMessage(content="Hello")])

        assert result["content"] == '{"items": []}'
        assert result["tokens_used"] == 100
        assert mock_llm_service.total_tokens_used == 100

    @pytest.mark.asyncio
    async def test_generate_requests_json_object(self, mock_llm_service):
        await mock_llm_service.generate_with_system_prompt("Rules", "Work")

        call = mock_llm_service._client.ainvoke.call_args
        assert call.kwargs["response_format"] == {"type": "json_object"}
        messages = call.args[0]
        assert messages[0].content == "Rules"
        assert messages[1].content == "Work"

    @pytest.mark.asyncio
    async def test_multimodal_content_passed_through(self, mock_llm_service):
        parts = [
            {"type": "text", "text": "Work"},
            {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}},
        ]

        await mock_llm_service.generate_with_system_prompt("Rules", parts)

        messages = mock_llm_service._client.ainvoke.call_args.args[0]
        assert messages[1].content == parts

    @pytest.mark.asyncio
    async def test_empty_content(self, llm_returning):
        service = llm_returning("   ")

        with pytest.raises(GenerationError) as exc_info:
            await service.generate_with_system_prompt("Rules", "Work")

        assert exc_info.value.code == ErrorCode.NO_USABLE_CONTENT
        assert exc_info.value.category == ErrorCategory.NO_USABLE_CONTENT

    @pytest.mark.asyncio
    async def test_list_content_is_flattened(self, llm_returning):
        service = llm_returning([{"type": "text", "text": '{"items": '}, {"type": "text", "text": "[]}"}])

        result = await service.generate_with_system_prompt("Rules", "Work")

        assert result["content"] == '{"items": []}'

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code,expected", [
        (400, ErrorCode.INVALID_REQUEST),
        (404, ErrorCode.INVALID_REQUEST),
        (422, ErrorCode.INVALID_REQUEST),
        (401, ErrorCode.ACCESS_DENIED),
        (403, ErrorCode.ACCESS_DENIED),
        (429, ErrorCode.UPSTREAM_RATE_LIMITED),
        (503, ErrorCode.UPSTREAM_OVERLOADED),
        (529, ErrorCode.UPSTREAM_OVERLOADED),
        (500, ErrorCode.UPSTREAM_FAILURE),
    ])
    async def test_status_errors_mapped(self, mock_llm_service, status_code, expected):
        mock_llm_service._client.ainvoke.side_effect = _status_error(status_code)

        with pytest.raises(GenerationError) as exc_info:
            await mock_llm_service.generate_with_system_prompt("Rules", "Work")

        assert exc_info.value.code == expected
        assert exc_info.value.status_code == status_code
        assert exc_info.value.category == ErrorCategory.UPSTREAM_UNAVAILABLE
        assert exc_info.value.http_status == 502

    @pytest.mark.asyncio
    async def test_timeout(self, generation_config, mock_chat_openai):
        from dataclasses import replace
        from services.llm_service import LLMService

        async def _slow(*args, **kwargs):
            await asyncio.sleep(1)

        service = LLMService(replace(generation_config, timeout_seconds=0.01))
        service._client = mock_chat_openai
        mock_chat_openai.ainvoke = AsyncMock(side_effect=_slow)

        with pytest.raises(GenerationError) as exc_info:
            await service.generate_with_system_prompt("Rules", "Work")

        assert exc_info.value.code == ErrorCode.LLM_TIMEOUT
        assert exc_info.value.category == ErrorCategory.TIMEOUT
        assert exc_info.value.http_status == 504

    @pytest.mark.asyncio
    async def test_client_timeout(self, mock_llm_service):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        mock_llm_service._client.ainvoke.side_effect = openai.APITimeoutError(request=request)

        with pytest.raises(GenerationError) as exc_info:
            await mock_llm_service.generate_with_system_prompt("Rules", "Work")

        assert exc_info.value.code == ErrorCode.LLM_TIMEOUT

    @pytest.mark.asyncio
    async def test_connection_error(self, mock_llm_service):
        mock_llm_service._client.ainvoke.side_effect = RuntimeError("connection reset")

        with pytest.raises(GenerationError) as exc_info:
            await mock_llm_service.generate_with_system_prompt("Rules", "Work")

        assert exc_info.value.code == ErrorCode.UPSTREAM_FAILURE
