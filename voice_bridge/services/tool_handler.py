"""Executes tool calls made by the voice session's built-in LLM."""

from voice_bridge.models.voice import ToolCallMessage, ToolCallResult, ToolErrorMessage, ToolResponseMessage
from voice_bridge.services.orchestrator import ToolExecutedCallback
from voice_bridge.services.voice_session import VoiceSession
from voice_bridge.tools.base import ToolContext
from voice_bridge.tools.registry import ToolsRegistry, get_tools_registry
from voice_bridge.utils.logging import get_logger

logger = get_logger(__name__)


class VoiceToolCallHandler:
    """Answers `tool_call` messages with `tool_response` or `tool_error`.

    Each tool call id is handled once, however often the message is seen.
    """

    def __init__(
        self,
        voice: VoiceSession,
        context: ToolContext,
        tools_registry: ToolsRegistry | None = None,
        on_tool_executed: ToolExecutedCallback | None = None,
    ):
        self.voice = voice
        self.context = context
        self.tools_registry = tools_registry or get_tools_registry()
        self.on_tool_executed = on_tool_executed
        self._processed: set[str] = set()

    def handle_tool_call(self, message: ToolCallMessage) -> ToolCallResult | None:
        """Execute a tool call and reply on the voice session.

        Returns:
            The execution result, or None if this call was already handled
        """
        if message.tool_call_id in self._processed:
            return None
        self._processed.add(message.tool_call_id)

        arguments = message.arguments
        logger.info(f"Received tool call: {message.name} {arguments}")
        outcome = self.tools_registry.execute(message.name, arguments, self.context)

        reply: ToolResponseMessage | ToolErrorMessage
        if outcome.success:
            reply = ToolResponseMessage(tool_call_id=message.tool_call_id, content=outcome.result)
        else:
            reply = ToolErrorMessage(tool_call_id=message.tool_call_id, error=outcome.result, content=outcome.result)

        try:
            self.voice.send_tool_message(reply)
            logger.info(f"Sent {reply.type} for {message.tool_call_id}: {outcome.result}")
        except Exception as e:
            logger.error(f"Failed to send tool response for {message.tool_call_id}: {e}")

        if self.on_tool_executed:
            self.on_tool_executed(message.name, arguments, outcome.result)

        return outcome
