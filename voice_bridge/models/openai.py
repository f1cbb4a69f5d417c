"""OpenAI-compatible chat completion request and response models."""

import json
from typing import Any, Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """A chat message as sent by an OpenAI-style client.

    Roles other than system/user/assistant are accepted and ignored during
    translation.
    """

    role: str
    content: str | list[dict[str, Any]] | None = None

    class Config:
        extra = "ignore"

    @property
    def text(self) -> str:
        """Message content as plain text, flattening content parts."""
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return "".join(part.get("text", "") for part in self.content if part.get("type", "text") == "text")


class ChatCompletionRequest(BaseModel):
    """Request body for the chat completions endpoint."""

    model: str = ""
    messages: list[ChatMessage] = Field(default_factory=list)
    stream: bool = False
    temperature: float | None = None
    max_tokens: int | None = None

    class Config:
        extra = "ignore"


class FunctionCall(BaseModel):
    """Function name and JSON-encoded arguments of a tool call."""

    name: str
    arguments: str


class ToolCall(BaseModel):
    """A tool call in OpenAI format."""

    index: int
    id: str
    type: Literal["function"] = "function"
    function: FunctionCall


class AssistantMessage(BaseModel):
    """Assistant message of a non-streamed completion."""

    role: Literal["assistant"] = "assistant"
    content: str
    tool_calls: list[ToolCall] | None = None


class CompletionChoice(BaseModel):
    index: int = 0
    message: AssistantMessage
    finish_reason: Literal["stop", "tool_calls"]


class CompletionUsage(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ChatCompletion(BaseModel):
    """Non-streamed chat completion response."""

    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int
    model: str
    choices: list[CompletionChoice]
    usage: CompletionUsage


class ChunkDelta(BaseModel):
    content: str | None = None
    tool_calls: list[ToolCall] | None = None


class ChunkChoice(BaseModel):
    index: int = 0
    delta: ChunkDelta = Field(default_factory=ChunkDelta)
    finish_reason: Literal["stop", "tool_calls"] | None = None


class ChatCompletionChunk(BaseModel):
    """One server-sent event chunk of a streamed completion."""

    id: str
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    created: int
    model: str
    choices: list[ChunkChoice]

    def to_sse(self) -> str:
        """Render as a `data:` frame.

        Unset delta fields are left out while `finish_reason` is always
        present, `null` on every chunk but the last.
        """
        data = self.model_dump()
        for choice in data["choices"]:
            choice["delta"] = {key: value for key, value in choice["delta"].items() if value is not None}
        return f"data: {json.dumps(data)}\n\n"


class ErrorDetail(BaseModel):
    message: str
    type: str = "api_error"


class ErrorResponse(BaseModel):
    """Error body returned by the chat completions endpoint."""

    error: ErrorDetail
