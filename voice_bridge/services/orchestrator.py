"""Client-side orchestration of voice turns through Claude.

Flow for one turn:
1. The voice session transcribes the user
2. The transcript goes to Claude with the tools attached
3. Tool calls are executed locally and their results sent back
4. Claude's final text goes to the voice session to be spoken
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from voice_bridge.models.llm import LLMResponse, TextBlock, ToolResultBlock, ToolUseBlock
from voice_bridge.services.llm import LLMConversation
from voice_bridge.services.voice_session import ConnectionStatus, VoiceSession
from voice_bridge.tools.base import ToolContext
from voice_bridge.tools.registry import ToolsRegistry, get_tools_registry
from voice_bridge.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_TOOL_ROUNDS = 5

ToolExecutedCallback = Callable[[str, dict[str, Any], str], None]


class OrchestratorPhase(StrEnum):
    IDLE = "idle"
    THINKING = "thinking"
    SPEAKING = "speaking"


@dataclass
class OrchestratorState:
    """Turn bookkeeping; only the orchestrator mutates it."""

    last_processed: str | None = None
    in_flight: bool = False
    phase: OrchestratorPhase = OrchestratorPhase.IDLE


class ToolRoundLimitExceeded(Exception):
    """Claude kept calling tools past the allowed number of round trips."""

    def __init__(self, max_rounds: int):
        self.max_rounds = max_rounds
        super().__init__(f"Claude requested tools for more than {max_rounds} consecutive rounds")


class VoiceOrchestrator:
    """Bridges voice session transcripts to Claude and back.

    While a turn runs, the session's built-in assistant is paused so only
    Claude's reply is spoken. At most one turn is in flight; a transcript that
    arrives meanwhile is dropped, not queued.
    """

    def __init__(
        self,
        voice: VoiceSession,
        conversation: LLMConversation,
        context: ToolContext,
        tools_registry: ToolsRegistry | None = None,
        *,
        max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
        on_tool_executed: ToolExecutedCallback | None = None,
        on_response: Callable[[str], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        enabled: bool = True,
    ):
        """Initialize orchestrator.

        Args:
            voice: Voice session to pause, resume and speak through
            conversation: Claude conversation owning the message history
            context: Capabilities available to tools (color handler)
            tools_registry: Tools executed on Claude's behalf
            max_tool_rounds: Follow-up calls allowed per turn before giving up
            on_tool_executed: Notified with (tool name, input, result text)
            on_response: Notified with the final text of each turn
            on_error: Notified when a turn fails
            enabled: Whether transcripts are processed at all
        """
        self.voice = voice
        self.conversation = conversation
        self.context = context
        self.tools_registry = tools_registry or get_tools_registry()
        self.max_tool_rounds = max_tool_rounds
        self.on_tool_executed = on_tool_executed
        self.on_response = on_response
        self.on_error = on_error
        self.enabled = enabled
        self.state = OrchestratorState()

    @property
    def phase(self) -> OrchestratorPhase:
        return self.state.phase

    def reset(self) -> None:
        """Forget the conversation and the last processed transcript."""
        self.conversation.clear_history()
        self.state.last_processed = None

    async def handle_transcript(self, text: str) -> str | None:
        """Process a new user transcript.

        Returns:
            The text sent to the voice session, or None if the transcript was
            skipped, produced no text, or the turn failed
        """
        if not self.enabled or self.voice.status != ConnectionStatus.CONNECTED:
            return None
        if not text:
            return None
        if text == self.state.last_processed:
            logger.debug("Transcript already processed, skipping")
            return None
        if self.state.in_flight:
            logger.info(f"Turn in flight, dropping transcript: {text[:50]}")
            return None

        self.state.in_flight = True
        self.state.last_processed = text
        self.state.phase = OrchestratorPhase.THINKING
        history_length = len(self.conversation.history)

        logger.info(f"Processing: {text}")
        try:
            self._voice_call("pause_assistant", self.voice.pause_assistant)

            response = await self.conversation.send_message(text)
            response = await self._resolve_tool_calls(response)

            reply = " ".join(block.text for block in response.content if isinstance(block, TextBlock))
            if not reply:
                return None

            self.state.phase = OrchestratorPhase.SPEAKING
            if self.on_response:
                self.on_response(reply)

            logger.info(f"Sending to TTS: {reply}")
            self._voice_call("send_assistant_input", self.voice.send_assistant_input, reply)
            return reply

        except Exception as e:
            logger.error(f"Turn failed: {e}", exc_info=True)
            # Keep tool results paired with their tool calls for the next turn
            self.conversation.truncate(history_length)
            if self.on_error:
                self.on_error(e)
            return None

        finally:
            self._voice_call("resume_assistant", self.voice.resume_assistant)
            self.state.in_flight = False
            self.state.phase = OrchestratorPhase.IDLE

    async def _resolve_tool_calls(self, response: LLMResponse) -> LLMResponse:
        """Answer tool calls until Claude replies without any."""
        rounds = 0
        while response.wants_tools:
            if rounds >= self.max_tool_rounds:
                raise ToolRoundLimitExceeded(self.max_tool_rounds)
            rounds += 1

            logger.info(f"Claude wants to use {len(response.tool_uses)} tools (round {rounds})")
            results = [self._execute_tool(block) for block in response.tool_uses]
            response = await self.conversation.send_tool_results(results)

        return response

    def _execute_tool(self, block: ToolUseBlock) -> ToolResultBlock:
        logger.info(f"Executing tool: {block.name} {block.input}")
        outcome = self.tools_registry.execute(block.name, block.input, self.context)

        if self.on_tool_executed:
            self.on_tool_executed(block.name, block.input, outcome.result)

        return ToolResultBlock(tool_use_id=block.id, content=outcome.result, is_error=not outcome.success)

    def _voice_call(self, name: str, call: Callable[..., None], *args: Any) -> None:
        """Call into the voice session; failures are logged, never raised."""
        try:
            call(*args)
        except Exception as e:
            logger.error(f"Voice session {name} failed: {e}")
