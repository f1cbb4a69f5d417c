"""Anthropic API client."""

import os
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from anthropic import APIStatusError, AsyncAnthropic
from anthropic.types import ContentBlock as AnthropicContentBlock
from anthropic.types import Message

from voice_bridge.config import DEFAULT_ANTHROPIC_MODEL, DEFAULT_MAX_TOKENS, load_settings
from voice_bridge.models.llm import (
    BlockStart,
    BlockStop,
    ContentBlock,
    LLMMessage,
    LLMResponse,
    LLMToolDefinition,
    LLMUsage,
    MessageStop,
    StreamEvent,
    TextBlock,
    TextDelta,
    ToolArgumentsDelta,
    ToolUseBlock,
)
from voice_bridge.utils.logging import get_logger

logger = get_logger(__name__)


class AnthropicAPIError(Exception):
    """Non-success response from the Anthropic API."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Anthropic API error: {status_code} - {body}")


@dataclass
class AnthropicConfig:
    """Configuration for Anthropic API client."""

    model: str = DEFAULT_ANTHROPIC_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout: float = 60.0


class AnthropicClient:
    """Thin async Anthropic client speaking our provider-agnostic types.

    Requests are made once; failures propagate to the caller.
    """

    api_key: str
    client: AsyncAnthropic
    config: AnthropicConfig

    def __init__(self, api_key: str | None = None, config: AnthropicConfig | None = None):
        """Initialize Anthropic client.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var)
            config: Client configuration
        """
        anthropic_api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable is required")

        self.api_key = anthropic_api_key
        self.config = config or AnthropicConfig()
        self.client = AsyncAnthropic(api_key=self.api_key, timeout=self.config.timeout)

    def _build_request(
        self,
        messages: list[LLMMessage],
        system_prompt: str,
        tools: list[LLMToolDefinition] | None,
        **kwargs,
    ) -> dict[str, Any]:
        request_params: dict[str, Any] = {
            "model": kwargs.get("model") or self.config.model,
            "max_tokens": kwargs.get("max_tokens") or self.config.max_tokens,
            "system": system_prompt,
            "messages": [msg.model_dump() for msg in messages],
        }
        if tools:
            request_params["tools"] = [tool.model_dump() for tool in tools]
        if kwargs.get("temperature") is not None:
            request_params["temperature"] = kwargs["temperature"]
        return request_params

    async def create_message(
        self,
        messages: list[LLMMessage],
        system_prompt: str,
        tools: list[LLMToolDefinition] | None = None,
        **kwargs,
    ) -> LLMResponse:
        """Create a message with Claude API.

        Args:
            messages: Conversation history
            system_prompt: System prompt for Claude
            tools: Available tools for Claude
            **kwargs: model, max_tokens and temperature overrides

        Returns:
            Provider-agnostic response

        Raises:
            AnthropicAPIError: If the API answers with a non-success status
        """
        request_params = self._build_request(messages, system_prompt, tools, **kwargs)
        logger.debug(
            f"Creating message with model {request_params['model']}, "
            f"{len(messages)} messages, {len(tools) if tools else 0} tools"
        )

        try:
            response: Message = await self.client.messages.create(**request_params)
        except APIStatusError as e:
            logger.error(f"Anthropic API error: {e.status_code}")
            raise AnthropicAPIError(e.status_code, e.response.text) from e

        logger.debug(
            f"Response received - Stop reason: {response.stop_reason}, Content blocks: {len(response.content)}"
        )

        usage = LLMUsage()
        if response.usage:
            usage = LLMUsage(input_tokens=response.usage.input_tokens, output_tokens=response.usage.output_tokens)

        return LLMResponse(
            content=self._convert_content_blocks(response.content),
            stop_reason=response.stop_reason,
            usage=usage,
            model=response.model,
        )

    async def stream_message(
        self,
        messages: list[LLMMessage],
        system_prompt: str,
        tools: list[LLMToolDefinition] | None = None,
        **kwargs,
    ) -> AsyncIterator[StreamEvent]:
        """Stream a message, yielding one event per block transition.

        SDK convenience events (accumulated text, message deltas) are skipped.

        Raises:
            AnthropicAPIError: If the API answers with a non-success status
        """
        request_params = self._build_request(messages, system_prompt, tools, **kwargs)
        logger.debug(f"Streaming message with model {request_params['model']}, {len(messages)} messages")

        try:
            async with self.client.messages.stream(**request_params) as stream:
                async for event in stream:
                    converted = self._convert_stream_event(event)
                    if converted is not None:
                        yield converted
        except APIStatusError as e:
            logger.error(f"Anthropic API error while streaming: {e.status_code}")
            raise AnthropicAPIError(e.status_code, e.response.text) from e

    def _convert_stream_event(self, event: Any) -> StreamEvent | None:
        """Map an SDK stream event to a StreamEvent, or None to skip it."""
        if event.type == "content_block_start":
            block = event.content_block
            if block.type == "tool_use":
                return BlockStart(block_type="tool_use", id=block.id, name=block.name)
            return BlockStart(block_type="text")

        if event.type == "content_block_delta":
            delta = event.delta
            if delta.type == "text_delta":
                return TextDelta(text=delta.text)
            if delta.type == "input_json_delta":
                return ToolArgumentsDelta(partial_json=delta.partial_json)
            return None

        if event.type == "content_block_stop":
            return BlockStop()

        if event.type == "message_stop":
            return MessageStop()

        return None

    def _convert_content_blocks(self, anthropic_content: list[AnthropicContentBlock]) -> list[ContentBlock]:
        """Convert Anthropic content blocks to our ContentBlock types."""
        converted_blocks: list[ContentBlock] = []
        for block in anthropic_content:
            block_dict = block.model_dump() if hasattr(block, "model_dump") else dict(block)

            if block_dict.get("type") == "text":
                converted_blocks.append(TextBlock.model_validate(block_dict))
            elif block_dict.get("type") == "tool_use":
                converted_blocks.append(ToolUseBlock.model_validate(block_dict))
            else:
                logger.warning(f"Skipping unsupported content block type: {block_dict.get('type')}")

        return converted_blocks


_anthropic_client: AnthropicClient | None = None


def get_anthropic_client() -> AnthropicClient:
    """Get or create Anthropic client instance."""
    global _anthropic_client
    if _anthropic_client is None:
        settings = load_settings()
        _anthropic_client = AnthropicClient(
            api_key=settings.anthropic_api_key,
            config=AnthropicConfig(model=settings.anthropic_model, max_tokens=settings.anthropic_max_tokens),
        )
    return _anthropic_client
