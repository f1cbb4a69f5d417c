"""Interface of the voice session provider the bridge talks to."""

from enum import StrEnum
from typing import Any, Protocol

from voice_bridge.config import Settings, VoiceLLMMode
from voice_bridge.models.voice import ToolErrorMessage, ToolResponseMessage
from voice_bridge.tools.registry import ToolsRegistry, get_tools_registry
from voice_bridge.utils.logging import get_logger

logger = get_logger(__name__)


class ConnectionStatus(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class VoiceSession(Protocol):
    """A live speech-to-text / text-to-speech session.

    Implementations wrap the voice provider's SDK; connection handling and
    audio stay on their side.
    """

    @property
    def status(self) -> ConnectionStatus: ...

    @property
    def is_muted(self) -> bool: ...

    async def connect(
        self, api_key: str, config_id: str | None = None, tools: list[dict[str, Any]] | None = None
    ) -> None:
        """Open the session, registering `tools` with the provider's LLM."""
        ...

    async def disconnect(self) -> None: ...

    def mute(self) -> None: ...

    def unmute(self) -> None: ...

    def send_assistant_input(self, text: str) -> None:
        """Have the session speak `text` as the assistant."""
        ...

    def pause_assistant(self) -> None:
        """Stop the session's built-in LLM from generating replies."""
        ...

    def resume_assistant(self) -> None: ...

    def send_tool_message(self, message: ToolResponseMessage | ToolErrorMessage) -> None: ...


async def connect_voice_session(
    voice: VoiceSession,
    settings: Settings,
    tools_registry: ToolsRegistry | None = None,
    mode: VoiceLLMMode | None = None,
) -> None:
    """Connect with the configuration for `mode` and the registry's tools.

    The tools come from the same registry the Claude side reads, so both
    LLMs are offered identical schemas.
    """
    registry = tools_registry or get_tools_registry()
    mode = mode or settings.voice_llm_mode
    if not settings.hume_api_key:
        logger.warning("HUME_API_KEY not set, connecting without a voice provider key")

    config_id = settings.voice_config_id(mode)
    tools = registry.get_voice_tools()
    logger.info(f"Connecting voice session in {mode} mode with config {config_id}, tools {registry.get_tool_names()}")
    await voice.connect(settings.hume_api_key or "", config_id, tools)
