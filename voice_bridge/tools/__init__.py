"""Tools for the voice assistant."""

from voice_bridge.tools.base import ToolContext, ToolDefinition
from voice_bridge.tools.box_color import CHANGE_BOX_COLOR_TOOL
from voice_bridge.tools.registry import ToolsRegistry, get_tools_registry

__all__ = ["CHANGE_BOX_COLOR_TOOL", "ToolContext", "ToolDefinition", "ToolsRegistry", "get_tools_registry"]
