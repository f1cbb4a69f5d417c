"""Shared fixtures for voice bridge tests."""

from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from voice_bridge.clients.anthropic import AnthropicClient, AnthropicConfig
from voice_bridge.models.llm import LLMResponse, LLMUsage, TextBlock, ToolUseBlock
from voice_bridge.models.voice import ToolErrorMessage, ToolResponseMessage
from voice_bridge.services.voice_session import ConnectionStatus
from voice_bridge.tools.registry import ToolsRegistry


class FakeVoiceSession:
    """In-memory voice session recording everything sent to it."""

    def __init__(self):
        self.status = ConnectionStatus.CONNECTED
        self.is_muted = False
        self.assistant_paused = False
        self.pause_calls = 0
        self.resume_calls = 0
        self.spoken: list[str] = []
        self.tool_messages: list[ToolResponseMessage | ToolErrorMessage] = []
        self.api_key: str | None = None
        self.config_id: str | None = None
        self.registered_tools: list[dict[str, Any]] = []

    async def connect(
        self, api_key: str, config_id: str | None = None, tools: list[dict[str, Any]] | None = None
    ) -> None:
        self.api_key = api_key
        self.config_id = config_id
        self.registered_tools = tools or []
        self.status = ConnectionStatus.CONNECTED

    async def disconnect(self) -> None:
        self.status = ConnectionStatus.DISCONNECTED

    def mute(self) -> None:
        self.is_muted = True

    def unmute(self) -> None:
        self.is_muted = False

    def send_assistant_input(self, text: str) -> None:
        self.spoken.append(text)

    def pause_assistant(self) -> None:
        self.pause_calls += 1
        self.assistant_paused = True

    def resume_assistant(self) -> None:
        self.resume_calls += 1
        self.assistant_paused = False

    def send_tool_message(self, message: ToolResponseMessage | ToolErrorMessage) -> None:
        self.tool_messages.append(message)


def make_text_response(text: str, stop_reason: str = "end_turn") -> LLMResponse:
    return LLMResponse(
        content=[TextBlock(text=text)],
        stop_reason=stop_reason,
        usage=LLMUsage(input_tokens=20, output_tokens=8),
        model="claude-sonnet-4-20250514",
    )


def make_tool_response(tool_id: str, name: str, tool_input: dict, text: str | None = None) -> LLMResponse:
    content = [TextBlock(text=text)] if text else []
    content.append(ToolUseBlock(id=tool_id, name=name, input=tool_input))
    return LLMResponse(
        content=content,
        stop_reason="tool_use",
        usage=LLMUsage(input_tokens=30, output_tokens=12),
        model="claude-sonnet-4-20250514",
    )


@pytest.fixture
def text_response():
    """Factory for plain text Claude replies."""
    return make_text_response


@pytest.fixture
def tool_response():
    """Factory for Claude replies that call a tool."""
    return make_tool_response


@pytest.fixture
def voice():
    """Connected fake voice session."""
    return FakeVoiceSession()


@pytest.fixture
def fake_client():
    """Anthropic client double with an awaitable create_message."""
    client = Mock(spec=AnthropicClient)
    client.config = AnthropicConfig()
    client.create_message = AsyncMock()
    return client


@pytest.fixture
def tools_registry():
    """Registry holding only the box color tool."""
    return ToolsRegistry()
