"""Application settings loaded from the environment."""

import os
from enum import StrEnum

from pydantic import BaseModel

from voice_bridge.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 1024


class VoiceLLMMode(StrEnum):
    """Which LLM produces the voice session's replies."""

    BUILTIN = "builtin"  # voice provider's own LLM, tool calls over the session
    CUSTOM = "custom"  # voice provider calls our /api/chat/completions shim
    ORCHESTRATED = "orchestrated"  # client orchestrator talks to Claude directly


class Settings(BaseModel):
    """Runtime configuration for the bridge."""

    anthropic_api_key: str | None = None
    anthropic_model: str = DEFAULT_ANTHROPIC_MODEL
    anthropic_max_tokens: int = DEFAULT_MAX_TOKENS

    hume_api_key: str | None = None
    hume_config_id: str | None = None
    hume_custom_config_id: str | None = None

    voice_llm_mode: VoiceLLMMode = VoiceLLMMode.BUILTIN
    log_level: str = "INFO"

    def voice_config_id(self, mode: VoiceLLMMode | None = None) -> str | None:
        """Return the voice-session configuration id for a mode.

        The custom mode routes the voice provider through the completions shim,
        every other mode uses the provider's built-in configuration.
        """
        mode = mode or self.voice_llm_mode
        if mode == VoiceLLMMode.CUSTOM:
            if not self.hume_custom_config_id:
                logger.warning("HUME_CUSTOM_CONFIG_ID not set, custom LLM mode will use the default config")
            return self.hume_custom_config_id
        return self.hume_config_id


def load_settings() -> Settings:
    """Build settings from environment variables."""
    values: dict[str, str] = {}
    env_map = {
        "anthropic_api_key": "ANTHROPIC_API_KEY",
        "anthropic_model": "ANTHROPIC_MODEL",
        "anthropic_max_tokens": "ANTHROPIC_MAX_TOKENS",
        "hume_api_key": "HUME_API_KEY",
        "hume_config_id": "HUME_CONFIG_ID",
        "hume_custom_config_id": "HUME_CUSTOM_CONFIG_ID",
        "voice_llm_mode": "VOICE_LLM_MODE",
        "log_level": "LOG_LEVEL",
    }
    for field_name, env_name in env_map.items():
        value = os.getenv(env_name)
        if value:
            values[field_name] = value

    return Settings.model_validate(values)
