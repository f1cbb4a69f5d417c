"""Tools registry for the voice assistant."""

from typing import Any

from pydantic import ValidationError

from voice_bridge.models.llm import LLMToolDefinition
from voice_bridge.models.voice import ToolCallResult
from voice_bridge.tools.base import ToolContext, ToolDefinition
from voice_bridge.tools.box_color import CHANGE_BOX_COLOR_TOOL
from voice_bridge.utils.logging import get_logger

logger = get_logger(__name__)


class ToolsRegistry:
    """Registry for managing assistant tools.

    The same registry feeds the LLM tool list and the voice session's tool
    registration, so the two always declare identical schemas.
    """

    def __init__(self, tools: list[ToolDefinition] | None = None):
        """Initialize registry, defaulting to the box color tool."""
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools if tools is not None else [CHANGE_BOX_COLOR_TOOL]:
            self.register_tool(tool)

    def register_tool(self, tool: ToolDefinition) -> None:
        """Register a new tool in the registry."""
        self._tools[tool.name] = tool

    def get_llm_tools(self) -> list[LLMToolDefinition]:
        """Tool definitions for the LLM request."""
        return [tool.as_llm_tool() for tool in self._tools.values()]

    def get_voice_tools(self) -> list[dict[str, Any]]:
        """Tool definitions for the voice session configuration."""
        return [tool.as_voice_tool() for tool in self._tools.values()]

    def get_tool_names(self) -> list[str]:
        """Get list of all registered tool names."""
        return list(self._tools.keys())

    def has_tool(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._tools

    def execute(self, name: str, raw_input: dict[str, Any], context: ToolContext) -> ToolCallResult:
        """Run a tool by name.

        Unknown tools and tool failures come back as unsuccessful results
        rather than exceptions so the conversation can carry on.
        """
        logger.debug(f"Executing tool: {name} with input: {raw_input}")

        tool = self._tools.get(name)
        if tool is None:
            logger.error(f"Unknown tool requested: {name}")
            return ToolCallResult(success=False, result=f"Unknown tool: {name}", error_message="unknown tool")

        try:
            params = tool.parse_input(raw_input)
            result = tool.handler(params, context)
        except ValidationError as e:
            logger.warning(f"Invalid input for tool {name}: {e}")
            return ToolCallResult(success=False, result=f"Error executing tool: {e}", error_message=str(e))
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}", exc_info=True)
            return ToolCallResult(success=False, result=f"Error executing tool: {e}", error_message=str(e))

        logger.debug(f"Tool {name} succeeded: {result[:100]}")
        return ToolCallResult(success=True, result=result)


_tools_registry: ToolsRegistry | None = None


def get_tools_registry() -> ToolsRegistry:
    """Get or create tools registry instance."""
    global _tools_registry
    if _tools_registry is None:
        _tools_registry = ToolsRegistry()
    return _tools_registry
