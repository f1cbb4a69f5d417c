"""Tests for the Anthropic client and settings."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from anthropic import APIStatusError
from anthropic.types import Message

from voice_bridge.clients.anthropic import AnthropicAPIError, AnthropicClient, AnthropicConfig
from voice_bridge.config import Settings, VoiceLLMMode, load_settings
from voice_bridge.models.llm import (
    BlockStart,
    BlockStop,
    LLMMessage,
    LLMToolDefinition,
    MessageStop,
    TextBlock,
    TextDelta,
    ToolArgumentsDelta,
    ToolUseBlock,
)

MESSAGES_URL = "https://api.anthropic.com/v1/messages"


def make_status_error(status_code: int, body: str) -> APIStatusError:
    request = httpx.Request("POST", MESSAGES_URL)
    return APIStatusError(body, response=httpx.Response(status_code, text=body, request=request), body=None)


class FakeMessageStream:
    """Async context manager yielding canned SDK stream events."""

    def __init__(self, events):
        self.events = events

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for event in self.events:
            yield event


@pytest.fixture
def anthropic_client():
    """Client with the SDK replaced by a mock."""
    client = AnthropicClient(api_key="test-key", config=AnthropicConfig(model="claude-test", max_tokens=256))
    client.client = MagicMock()
    return client


class TestClientSetup:
    """Tests for client construction."""

    def test_missing_api_key(self):
        """Test that a client cannot be built without a key."""
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
                AnthropicClient()

    def test_api_key_from_environment(self):
        """Test that the key falls back to the environment."""
        with patch.dict("os.environ", {"ANTHROPIC_API_KEY": "env-key"}, clear=True):
            client = AnthropicClient()
        assert client.api_key == "env-key"
        assert client.config.model == "claude-sonnet-4-20250514"

    def test_request_parameters(self, anthropic_client):
        """Test that optional parameters are only sent when set."""
        tools = [LLMToolDefinition(name="t", description="d", input_schema={"type": "object"})]

        bare = anthropic_client._build_request([LLMMessage(role="user", content="Hi")], "be brief", None)
        full = anthropic_client._build_request(
            [LLMMessage(role="user", content="Hi")], "be brief", tools, temperature=0.2, max_tokens=64
        )

        assert bare == {
            "model": "claude-test",
            "max_tokens": 256,
            "system": "be brief",
            "messages": [{"role": "user", "content": "Hi"}],
        }
        assert full["tools"] == [{"name": "t", "description": "d", "input_schema": {"type": "object"}}]
        assert full["temperature"] == 0.2
        assert full["max_tokens"] == 64


class TestCreateMessage:
    """Tests for non-streamed requests."""

    @pytest.mark.asyncio
    async def test_response_conversion(self, anthropic_client):
        """Test that SDK messages become provider-agnostic responses."""
        anthropic_client.client.messages.create = AsyncMock(
            return_value=Message.model_validate(
                {
                    "id": "msg_1",
                    "type": "message",
                    "role": "assistant",
                    "model": "claude-test",
                    "content": [
                        {"type": "text", "text": "On it."},
                        {"type": "tool_use", "id": "toolu_1", "name": "change_box_color", "input": {"color": "red"}},
                    ],
                    "stop_reason": "tool_use",
                    "stop_sequence": None,
                    "usage": {"input_tokens": 11, "output_tokens": 7},
                }
            )
        )

        response = await anthropic_client.create_message([LLMMessage(role="user", content="red")], "system")

        assert response.content == [
            TextBlock(text="On it."),
            ToolUseBlock(id="toolu_1", name="change_box_color", input={"color": "red"}),
        ]
        assert response.stop_reason == "tool_use"
        assert response.usage.total_tokens == 18
        assert response.model == "claude-test"

    @pytest.mark.asyncio
    async def test_status_error_wrapped(self, anthropic_client):
        """Test that API failures carry the upstream status and body."""
        anthropic_client.client.messages.create = AsyncMock(side_effect=make_status_error(429, "rate limited"))

        with pytest.raises(AnthropicAPIError) as exc_info:
            await anthropic_client.create_message([LLMMessage(role="user", content="Hi")], "system")

        assert exc_info.value.status_code == 429
        assert str(exc_info.value) == "Anthropic API error: 429 - rate limited"


class TestStreamMessage:
    """Tests for streamed requests."""

    def test_convert_stream_events(self, anthropic_client):
        """Test mapping of each SDK event type."""
        convert = anthropic_client._convert_stream_event

        assert convert(
            SimpleNamespace(type="content_block_start", content_block=SimpleNamespace(type="text"))
        ) == BlockStart(block_type="text")
        assert convert(
            SimpleNamespace(
                type="content_block_start",
                content_block=SimpleNamespace(type="tool_use", id="toolu_1", name="change_box_color"),
            )
        ) == BlockStart(block_type="tool_use", id="toolu_1", name="change_box_color")
        assert convert(
            SimpleNamespace(type="content_block_delta", delta=SimpleNamespace(type="text_delta", text="Hi"))
        ) == TextDelta(text="Hi")
        assert convert(
            SimpleNamespace(
                type="content_block_delta", delta=SimpleNamespace(type="input_json_delta", partial_json='{"co')
            )
        ) == ToolArgumentsDelta(partial_json='{"co')
        assert convert(SimpleNamespace(type="content_block_stop")) == BlockStop()
        assert convert(SimpleNamespace(type="message_stop")) == MessageStop()

    def test_skipped_stream_events(self, anthropic_client):
        """Test that convenience and unknown events are dropped."""
        convert = anthropic_client._convert_stream_event

        assert convert(SimpleNamespace(type="message_start")) is None
        assert convert(SimpleNamespace(type="text", text="Hi", snapshot="Hi")) is None
        assert convert(
            SimpleNamespace(type="content_block_delta", delta=SimpleNamespace(type="thinking_delta"))
        ) is None

    @pytest.mark.asyncio
    async def test_stream_yields_converted_events(self, anthropic_client):
        """Test streaming a short text reply."""
        anthropic_client.client.messages.stream = MagicMock(
            return_value=FakeMessageStream(
                [
                    SimpleNamespace(type="message_start"),
                    SimpleNamespace(type="content_block_start", content_block=SimpleNamespace(type="text")),
                    SimpleNamespace(type="content_block_delta", delta=SimpleNamespace(type="text_delta", text="Hi")),
                    SimpleNamespace(type="content_block_stop"),
                    SimpleNamespace(type="message_stop"),
                ]
            )
        )

        events = [
            event
            async for event in anthropic_client.stream_message([LLMMessage(role="user", content="Hi")], "system")
        ]

        assert events == [BlockStart(block_type="text"), TextDelta(text="Hi"), BlockStop(), MessageStop()]
        assert anthropic_client.client.messages.stream.call_args.kwargs["model"] == "claude-test"

    @pytest.mark.asyncio
    async def test_stream_status_error_wrapped(self, anthropic_client):
        """Test that a refused stream raises our API error."""
        anthropic_client.client.messages.stream = MagicMock(side_effect=make_status_error(401, "invalid x-api-key"))

        with pytest.raises(AnthropicAPIError) as exc_info:
            async for _ in anthropic_client.stream_message([LLMMessage(role="user", content="Hi")], "system"):
                pass

        assert exc_info.value.status_code == 401


class TestSettings:
    """Tests for environment-driven settings."""

    def test_load_settings_from_environment(self):
        """Test reading settings from environment variables."""
        env = {
            "ANTHROPIC_API_KEY": "sk-test",
            "ANTHROPIC_MAX_TOKENS": "512",
            "VOICE_LLM_MODE": "orchestrated",
            "HUME_CONFIG_ID": "cfg-default",
        }
        with patch.dict("os.environ", env, clear=True):
            settings = load_settings()

        assert settings.anthropic_api_key == "sk-test"
        assert settings.anthropic_max_tokens == 512
        assert settings.voice_llm_mode == VoiceLLMMode.ORCHESTRATED
        assert settings.anthropic_model == "claude-sonnet-4-20250514"
        assert settings.hume_custom_config_id is None

    def test_voice_config_id_by_mode(self):
        """Test that only custom mode uses the custom configuration."""
        settings = Settings(hume_config_id="cfg-default", hume_custom_config_id="cfg-custom")

        assert settings.voice_config_id() == "cfg-default"
        assert settings.voice_config_id(VoiceLLMMode.CUSTOM) == "cfg-custom"
        assert settings.voice_config_id(VoiceLLMMode.ORCHESTRATED) == "cfg-default"

    def test_custom_mode_without_custom_config(self):
        """Test custom mode when no custom configuration is set."""
        settings = Settings(hume_config_id="cfg-default", voice_llm_mode=VoiceLLMMode.CUSTOM)
        assert settings.voice_config_id() is None
