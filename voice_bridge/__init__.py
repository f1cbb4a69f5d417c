"""Voice Bridge: voice-session to Claude bridge with an OpenAI-compatible shim."""

__version__ = "0.1.0"
