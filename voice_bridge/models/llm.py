"""LLM-related data models and types (provider-agnostic)."""

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel


# Content block types
class TextBlock(BaseModel):
    """Text content block."""

    type: Literal["text"] = "text"
    text: str

    class Config:
        extra = "ignore"  # Ignore any additional fields from Anthropic


class ToolUseBlock(BaseModel):
    """Tool use content block."""

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any]

    class Config:
        extra = "ignore"  # Ignore any additional fields from Anthropic


class ToolResultBlock(BaseModel):
    """Tool result content block."""

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str
    is_error: bool = False

    class Config:
        extra = "ignore"


ContentBlock = TextBlock | ToolUseBlock | ToolResultBlock


class LLMMessage(BaseModel):
    """A message for LLM conversation."""

    role: Literal["user", "assistant"]
    content: str | list[ContentBlock]


class LLMToolDefinition(BaseModel):
    """Tool definition in the shape the LLM expects."""

    name: str
    description: str
    input_schema: dict[str, Any]


@dataclass
class LLMUsage:
    """Token usage information from LLM provider."""

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass
class LLMResponse:
    """Provider-agnostic response from LLM service."""

    content: list[ContentBlock]
    stop_reason: str | None
    usage: LLMUsage = field(default_factory=LLMUsage)
    model: str = ""
    provider: str = "anthropic"

    @property
    def text(self) -> str:
        """All text blocks joined, block boundaries ignored."""
        return "".join(block.text for block in self.content if isinstance(block, TextBlock))

    @property
    def tool_uses(self) -> list[ToolUseBlock]:
        return [block for block in self.content if isinstance(block, ToolUseBlock)]

    @property
    def wants_tools(self) -> bool:
        """True when the model stopped to call one or more tools."""
        return self.stop_reason == "tool_use" and bool(self.tool_uses)


# Streamed events, one content block open at a time
@dataclass(frozen=True)
class BlockStart:
    """A content block opened; tool blocks carry their id and name."""

    block_type: Literal["text", "tool_use"]
    id: str | None = None
    name: str | None = None
    type: Literal["block_start"] = "block_start"


@dataclass(frozen=True)
class TextDelta:
    """Text fragment of the open text block."""

    text: str
    type: Literal["text_delta"] = "text_delta"


@dataclass(frozen=True)
class ToolArgumentsDelta:
    """Partial JSON fragment of the open tool block's arguments."""

    partial_json: str
    type: Literal["tool_arguments_delta"] = "tool_arguments_delta"


@dataclass(frozen=True)
class BlockStop:
    """The open content block closed."""

    type: Literal["block_stop"] = "block_stop"


@dataclass(frozen=True)
class MessageStop:
    """Terminal event of a streamed message."""

    type: Literal["message_stop"] = "message_stop"


StreamEvent = BlockStart | TextDelta | ToolArgumentsDelta | BlockStop | MessageStop
