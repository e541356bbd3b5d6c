"""LLM service for ObraCost.

Single-shot LangChain/OpenAI chat calls used by the estimate agents. One
attempt per request, bounded by the configured timeout; failures are
mapped to distinct error codes and never retried here.
"""

import asyncio
from typing import Any, Dict, List, Optional, Union

import openai
import structlog
from langchain_openai import ChatOpenAI
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from config.settings import GenerationConfig
from config.errors import GenerationError, ErrorCode

logger = structlog.get_logger()

JSON_RESPONSE_FORMAT = {"type": "json_object"}

# Upstream HTTP status -> internal error code
STATUS_CODE_MAP: Dict[int, str] = {
    400: ErrorCode.INVALID_REQUEST,
    404: ErrorCode.INVALID_REQUEST,
    422: ErrorCode.INVALID_REQUEST,
    401: ErrorCode.ACCESS_DENIED,
    403: ErrorCode.ACCESS_DENIED,
    429: ErrorCode.UPSTREAM_RATE_LIMITED,
    503: ErrorCode.UPSTREAM_OVERLOADED,
    529: ErrorCode.UPSTREAM_OVERLOADED,
}

UserContent = Union[str, List[Dict[str, Any]]]


def error_code_for_status(status_code: Optional[int]) -> str:
    """Map an upstream HTTP status to an internal error code."""
    if status_code is None:
        return ErrorCode.UPSTREAM_FAILURE
    return STATUS_CODE_MAP.get(status_code, ErrorCode.UPSTREAM_FAILURE)


def _content_text(content: Any) -> str:
    """Flatten message content (string or list of parts) to text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text") or "")
        return "".join(parts)
    return str(content)


class LLMService:
    """Service for LLM operations using LangChain.

    Wraps ChatOpenAI with the explicit GenerationConfig, token tracking
    and error mapping.
    """

    def __init__(self, config: GenerationConfig):
        """Initialize LLMService.

        Args:
            config: Endpoint, credentials, model and limits for generation.
        """
        self.config = config
        self.model = config.model
        self.temperature = config.temperature

        self._client: Optional[ChatOpenAI] = None
        self._total_tokens_used = 0

    @property
    def client(self) -> ChatOpenAI:
        """Get LangChain ChatOpenAI client (lazy initialization)."""
        if self._client is None:
            self._client = ChatOpenAI(
                model=self.config.model,
                temperature=self.config.temperature,
                api_key=self.config.api_key,
                base_url=self.config.base_url,
                max_tokens=self.config.max_tokens,
                timeout=self.config.timeout_seconds,
                max_retries=0,
            )
        return self._client

    @property
    def total_tokens_used(self) -> int:
        """Get total tokens used across all calls."""
        return self._total_tokens_used

    async def generate(
        self,
        messages: List[BaseMessage],
        json_mode: bool = True
    ) -> Dict[str, Any]:
        """Generate a response from the LLM.

        Args:
            messages: List of LangChain messages.
            json_mode: Ask the endpoint for a strict JSON object (advisory).

        Returns:
            Dict with non-empty text content and token usage.

        Raises:
            GenerationError: If the call fails, times out or returns no content.
        """
        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = JSON_RESPONSE_FORMAT

        try:
            response = await asyncio.wait_for(
                self.client.ainvoke(messages, **kwargs),
                timeout=self.config.timeout_seconds
            )
        except (asyncio.TimeoutError, openai.APITimeoutError) as e:
            logger.error("llm_timeout", model=self.model, timeout_seconds=self.config.timeout_seconds)
            raise GenerationError(
                code=ErrorCode.LLM_TIMEOUT,
                message=f"Generation timed out after {self.config.timeout_seconds}s",
                details={"original_error": str(e)}
            ) from e
        except openai.APIStatusError as e:
            code = error_code_for_status(e.status_code)
            logger.error("llm_status_error", model=self.model, status_code=e.status_code, code=code)
            raise GenerationError(
                code=code,
                message=f"Generation endpoint returned {e.status_code}",
                status_code=e.status_code,
                details={"original_error": str(e)[:500]}
            ) from e
        except Exception as e:
            logger.error("llm_call_failed", model=self.model, error=str(e))
            raise GenerationError(
                code=ErrorCode.UPSTREAM_FAILURE,
                message=f"LLM generation failed: {e}",
                details={"original_error": str(e)[:500]}
            ) from e

        tokens_used = 0
        metadata = getattr(response, "response_metadata", None) or {}
        usage = metadata.get("token_usage") or {}
        tokens_used = usage.get("total_tokens", 0) or 0
        self._total_tokens_used += tokens_used

        content = _content_text(getattr(response, "content", None))
        if not content.strip():
            logger.error("llm_empty_content", model=self.model, finish_reason=metadata.get("finish_reason"))
            raise GenerationError(
                code=ErrorCode.NO_USABLE_CONTENT,
                message="Generation returned no usable content",
            )

        logger.info(
            "llm_generated",
            model=self.model,
            tokens_used=tokens_used,
            content_length=len(content)
        )

        return {
            "content": content,
            "tokens_used": tokens_used
        }

    async def generate_with_system_prompt(
        self,
        system_prompt: str,
        user_content: UserContent,
        json_mode: bool = True
    ) -> Dict[str, Any]:
        """Generate a response with system prompt.

        Args:
            system_prompt: System prompt with the rules.
            user_content: User message text, or multimodal content parts.
            json_mode: Ask for a strict JSON object.

        Returns:
            Dict with content and token usage.
        """
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_content)
        ]
        return await self.generate(messages, json_mode=json_mode)
