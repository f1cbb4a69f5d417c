"""State of the on-screen color box."""

from collections.abc import Callable

from voice_bridge.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BOX_COLOR = "#6b7280"

COLOR_MAP = {
    "red": "#ef4444",
    "blue": "#3b82f6",
    "green": "#22c55e",
    "yellow": "#eab308",
    "purple": "#a855f7",
    "orange": "#f97316",
    "pink": "#ec4899",
    "cyan": "#06b6d4",
    "white": "#ffffff",
    "black": "#000000",
    "gray": "#6b7280",
    "grey": "#6b7280",
}


def to_css_color(color: str) -> str:
    """Map a spoken color name to CSS; unknown values pass through normalized."""
    normalized = color.lower().strip()
    return COLOR_MAP.get(normalized, normalized)


class ColorBox:
    """The box whose color the `change_box_color` tool sets."""

    def __init__(self, on_color_change: Callable[[str], None] | None = None):
        self.color = DEFAULT_BOX_COLOR
        self.last_command: str | None = None
        self.tool_call_count = 0
        self.on_color_change = on_color_change

    def change_color(self, color: str) -> str:
        """Apply a color and return the CSS value now shown."""
        css_color = to_css_color(color)

        self.color = css_color
        self.last_command = color
        self.tool_call_count += 1
        if self.on_color_change:
            self.on_color_change(color)

        logger.info(f"Changed to: {color} ({css_color})")
        return css_color

    @property
    def label_color(self) -> str:
        """Text color readable on top of the box."""
        return "#000" if self.color in ("#ffffff", "#eab308") else "#fff"
