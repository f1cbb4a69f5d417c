"""Base types and definitions for tools."""

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from voice_bridge.models.llm import LLMToolDefinition

ColorChangeHandler = Callable[[str], str]


@dataclass
class ToolContext:
    """Capabilities a tool may act on, injected by whoever owns them.

    The color box registers its handler here when it is shown and clears it
    when it goes away; tools see `None` in between.
    """

    color_handler: ColorChangeHandler | None = None

    def register_color_handler(self, handler: ColorChangeHandler) -> None:
        self.color_handler = handler

    def clear_color_handler(self) -> None:
        self.color_handler = None


ToolHandler = Callable[[BaseModel, ToolContext], str]


@dataclass
class ToolDefinition:
    """Definition of a tool available to the assistant.

    The input schema class is the only description of the tool's parameters;
    both the LLM and the voice session get their copy from it.
    """

    name: str
    description: str
    input_schema_class: type[BaseModel]
    handler: ToolHandler

    def get_json_schema(self) -> dict[str, Any]:
        """Get JSON schema for this tool's input."""
        return self.input_schema_class.model_json_schema()

    def parse_input(self, raw_input: dict[str, Any]) -> BaseModel:
        """Parse and validate tool input."""
        return self.input_schema_class.model_validate(raw_input)

    def as_llm_tool(self) -> LLMToolDefinition:
        """Render for the LLM's `tools` parameter."""
        return LLMToolDefinition(name=self.name, description=self.description, input_schema=self.get_json_schema())

    def as_voice_tool(self) -> dict[str, Any]:
        """Render for the voice session's tool registration.

        The voice provider takes the parameter schema as a JSON string.
        """
        return {
            "type": "function",
            "name": self.name,
            "description": self.description,
            "parameters": json.dumps(self.get_json_schema()),
        }
