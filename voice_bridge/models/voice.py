"""Messages exchanged with the voice session provider."""

import json
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from voice_bridge.utils.logging import get_logger

logger = get_logger(__name__)


class TranscriptMessage(BaseModel):
    role: Literal["user", "assistant"] = "user"
    content: str = ""


class UserTranscript(BaseModel):
    """Speech-to-text result for one user utterance."""

    type: Literal["user_message"] = "user_message"
    message: TranscriptMessage = Field(default_factory=TranscriptMessage)

    class Config:
        extra = "ignore"

    @property
    def text(self) -> str:
        return self.message.content


class ToolCallMessage(BaseModel):
    """Tool invocation emitted by the voice provider's built-in LLM."""

    type: Literal["tool_call"] = "tool_call"
    tool_call_id: str
    name: str
    parameters: str | dict[str, Any] = Field(default_factory=dict)

    class Config:
        extra = "ignore"

    @property
    def arguments(self) -> dict[str, Any]:
        """Tool arguments; the provider sends them JSON-encoded."""
        if isinstance(self.parameters, dict):
            return self.parameters
        if not self.parameters:
            return {}
        try:
            parsed = json.loads(self.parameters)
        except json.JSONDecodeError:
            logger.warning(f"Tool call {self.tool_call_id} has malformed parameters: {self.parameters!r}")
            return {}
        return parsed if isinstance(parsed, dict) else {}


class ToolResponseMessage(BaseModel):
    """Successful tool result sent back to the voice session."""

    type: Literal["tool_response"] = "tool_response"
    tool_call_id: str
    content: str


class ToolErrorMessage(BaseModel):
    """Failed tool result sent back to the voice session."""

    type: Literal["tool_error"] = "tool_error"
    tool_call_id: str
    error: str
    content: str


VoiceMessage = Annotated[UserTranscript | ToolCallMessage, Field(discriminator="type")]


class ToolCallResult(BaseModel):
    """Result of a tool call execution."""

    success: bool
    result: str
    error_message: str | None = None
