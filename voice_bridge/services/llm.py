"""LLM conversation service for the client-side orchestrator."""

from voice_bridge.clients.anthropic import AnthropicClient, get_anthropic_client
from voice_bridge.models.llm import LLMMessage, LLMResponse, ToolResultBlock
from voice_bridge.services.completions import VOICE_ASSISTANT_PREAMBLE
from voice_bridge.tools.registry import ToolsRegistry, get_tools_registry
from voice_bridge.utils.logging import get_logger

logger = get_logger(__name__)


class LLMConversation:
    """Running conversation with Claude, tools attached to every request.

    Each call appends the outgoing user turn and Claude's reply to the
    history, so a tool result always lands right after the assistant turn
    that asked for it.
    """

    def __init__(
        self,
        client: AnthropicClient | None = None,
        tools_registry: ToolsRegistry | None = None,
        system_prompt: str = VOICE_ASSISTANT_PREAMBLE,
    ):
        """Initialize conversation.

        Args:
            client: Anthropic client (defaults to global instance)
            tools_registry: Tools offered to Claude (defaults to global registry)
            system_prompt: System prompt sent with every request
        """
        self.client = client or get_anthropic_client()
        self.tools_registry = tools_registry or get_tools_registry()
        self.system_prompt = system_prompt
        self._history: list[LLMMessage] = []

    @property
    def history(self) -> list[LLMMessage]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history = []

    def truncate(self, length: int) -> None:
        """Drop every turn after the first `length`."""
        del self._history[length:]

    async def send_message(self, text: str) -> LLMResponse:
        """Send a user turn and return Claude's reply."""
        self._history.append(LLMMessage(role="user", content=text))
        return await self._complete()

    async def send_tool_results(self, results: list[ToolResultBlock]) -> LLMResponse:
        """Answer the previous reply's tool calls and return Claude's follow-up."""
        self._history.append(LLMMessage(role="user", content=list(results)))
        return await self._complete()

    async def _complete(self) -> LLMResponse:
        logger.debug(f"Calling Claude with {len(self._history)} messages")
        response = await self.client.create_message(
            messages=list(self._history),
            system_prompt=self.system_prompt,
            tools=self.tools_registry.get_llm_tools(),
        )
        self._history.append(LLMMessage(role="assistant", content=response.content))
        logger.debug(f"Claude response - Stop reason: {response.stop_reason}, blocks: {len(response.content)}")
        return response
