"""Box color tool."""

from pydantic import BaseModel, Field

from voice_bridge.tools.base import ToolContext, ToolDefinition
from voice_bridge.utils.logging import get_logger

logger = get_logger(__name__)


class ChangeBoxColorInput(BaseModel):
    """Input schema for the box color tool."""

    color: str = Field(
        ...,
        description="The color to change the box to (e.g., red, blue, green, yellow, purple, orange, pink)",
        examples=["blue", "purple"],
    )


def change_box_color(params: ChangeBoxColorInput, context: ToolContext) -> str:
    """Apply the color through the registered handler and confirm it."""
    color = params.color
    handler = context.color_handler
    if handler is None:
        logger.warning(f"No color handler registered, cannot apply {color}")
        return f"Color change requested: {color} (handler not found)"

    css_color = handler(color)
    logger.info(f"Box color changed to {color} ({css_color})")
    return f"Box color changed to {color}"


CHANGE_BOX_COLOR_TOOL = ToolDefinition(
    name="change_box_color",
    description=(
        "Changes the color of the box displayed on screen. "
        "Use this when the user asks to change, set, or make the box a different color."
    ),
    input_schema_class=ChangeBoxColorInput,
    handler=change_box_color,
)
