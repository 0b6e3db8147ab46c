"""
Transient state of one open editor.
"""
from dataclasses import dataclass
from enum import Enum

from ..core.annotations.models import Color

MIN_ZOOM = 0.5
MAX_ZOOM = 3.0
ZOOM_STEP = 0.25
DEFAULT_COLOR: Color = (255, 0, 0)


class Tool(Enum):
    SELECT = "select"
    TEXT = "text"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    FREEHAND = "freehand"
    ERASER = "eraser"


@dataclass
class ViewerState:
    """Current page, zoom, rotation and tool settings."""
    page_count: int = 0
    current_page: int = 1
    zoom: float = 1.0
    rotation: int = 0
    active_tool: Tool = Tool.SELECT
    active_color: Color = DEFAULT_COLOR

    def reset(self, page_count: int = 0) -> None:
        """Return to defaults for a newly loaded document."""
        self.page_count = page_count
        self.current_page = 1
        self.zoom = 1.0
        self.rotation = 0
        self.active_tool = Tool.SELECT
        self.active_color = DEFAULT_COLOR
