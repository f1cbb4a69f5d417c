"""Routes voice session messages to the component that owns them."""

from typing import Any

from pydantic import TypeAdapter, ValidationError

from voice_bridge.config import VoiceLLMMode
from voice_bridge.models.voice import ToolCallMessage, UserTranscript, VoiceMessage
from voice_bridge.services.orchestrator import VoiceOrchestrator
from voice_bridge.services.tool_handler import VoiceToolCallHandler
from voice_bridge.utils.logging import get_logger

logger = get_logger(__name__)

_voice_message_adapter = TypeAdapter(VoiceMessage)


def parse_voice_message(raw: dict[str, Any]) -> UserTranscript | ToolCallMessage | None:
    """Parse a raw session message; types the bridge doesn't handle give None."""
    if raw.get("type") not in ("user_message", "tool_call"):
        return None
    try:
        return _voice_message_adapter.validate_python(raw)
    except ValidationError as e:
        logger.warning(f"Malformed {raw.get('type')} message: {e}")
        return None


class VoiceMessageDispatcher:
    """Sends transcripts and tool calls where the current mode wants them.

    In orchestrated mode the orchestrator answers every transcript itself.
    Otherwise the session's own LLM (built-in or the completions shim) is in
    charge and only its tool calls need executing here.
    """

    def __init__(
        self,
        mode: VoiceLLMMode,
        orchestrator: VoiceOrchestrator | None = None,
        tool_handler: VoiceToolCallHandler | None = None,
    ):
        if mode == VoiceLLMMode.ORCHESTRATED and orchestrator is None:
            raise ValueError("Orchestrated mode requires an orchestrator")
        self.mode = mode
        self.orchestrator = orchestrator
        self.tool_handler = tool_handler

    async def dispatch(self, raw: dict[str, Any]) -> None:
        """Handle one message from the voice session."""
        message = parse_voice_message(raw)
        if message is None:
            return

        if isinstance(message, UserTranscript):
            if self.mode == VoiceLLMMode.ORCHESTRATED and self.orchestrator:
                await self.orchestrator.handle_transcript(message.text)
            return

        if isinstance(message, ToolCallMessage):
            if self.mode == VoiceLLMMode.ORCHESTRATED:
                logger.warning(f"Ignoring session tool call {message.name} in orchestrated mode")
                return
            if self.tool_handler is None:
                logger.warning(f"No tool handler for session tool call {message.name}")
                return
            self.tool_handler.handle_tool_call(message)
