"""
Controller for the annotation tools of the viewer.
"""
import logging
from typing import List, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from ..core.annotations import (AnnotationSurface, CircleAnnotation,
                                FreehandAnnotation, PageAnnotationStore,
                                RectangleAnnotation, TextAnnotation, parse_color)
from ..core.annotations.models import Color, Point
from .viewer_state import Tool, ViewerState

logger = logging.getLogger(__name__)

DEFAULT_ANCHOR: Point = (100.0, 100.0)
DEFAULT_TEXT = "Click to edit text"
DEFAULT_FONT_SIZE = 16.0
DEFAULT_RECT_SIZE = (100.0, 60.0)
DEFAULT_CIRCLE_RADIUS = 30.0
STROKE_WIDTH = 2.0


class AnnotationCanvasController(QObject):
    """
    Binds a drawing surface to the current page and applies the active tool.

    Text, rectangle and circle tools place one default object as soon as
    they are chosen. Freehand turns on free drawing until another tool is
    chosen. The eraser is an action, not a mode: it empties the current
    page. Without a bound surface every operation does nothing.
    """

    # Signals
    tool_changed = pyqtSignal(object)  # Tool
    color_changed = pyqtSignal(tuple)
    annotations_changed = pyqtSignal()

    def __init__(self, store: PageAnnotationStore, state: ViewerState,
                 surface: Optional[AnnotationSurface] = None):
        super().__init__()
        self.store = store
        self.state = state
        self.surface: Optional[AnnotationSurface] = None
        if surface is not None:
            self.bind_surface(surface)

    @property
    def active_tool(self) -> Tool:
        return self.state.active_tool

    @property
    def active_color(self) -> Color:
        return self.state.active_color

    def bind_surface(self, surface: AnnotationSurface) -> None:
        """
        Attach a drawing surface and apply the current tool to it.

        Args:
            surface: Surface showing the current page's annotations
        """
        if self.surface is not None:
            self.surface.set_stroke_handler(None)
        self.surface = surface
        surface.set_stroke_handler(self.finish_stroke)
        surface.set_free_drawing(self.active_tool is Tool.FREEHAND,
                                 self.active_color, STROKE_WIDTH)

    def unbind_surface(self) -> None:
        if self.surface is not None:
            self.surface.set_stroke_handler(None)
            self.surface = None

    def select_tool(self, tool: Tool) -> None:
        """
        Activate a tool.

        Args:
            tool: Tool to activate. ERASER clears the current page and
                leaves the active tool unchanged.
        """
        if self.surface is None:
            return

        if tool is Tool.ERASER:
            self.clear_page()
            return

        self.state.active_tool = tool
        self.surface.set_free_drawing(tool is Tool.FREEHAND,
                                      self.active_color, STROKE_WIDTH)

        if tool is Tool.TEXT:
            text = TextAnnotation(position=DEFAULT_ANCHOR, content=DEFAULT_TEXT,
                                  color=self.active_color, font_size=DEFAULT_FONT_SIZE)
            self.surface.add_object(text, select=True)
            self.annotations_changed.emit()
        elif tool is Tool.RECTANGLE:
            rect = RectangleAnnotation(position=DEFAULT_ANCHOR, size=DEFAULT_RECT_SIZE,
                                       stroke_color=self.active_color,
                                       stroke_width=STROKE_WIDTH)
            self.surface.add_object(rect)
            self.annotations_changed.emit()
        elif tool is Tool.CIRCLE:
            circle = CircleAnnotation(position=DEFAULT_ANCHOR, radius=DEFAULT_CIRCLE_RADIUS,
                                      stroke_color=self.active_color,
                                      stroke_width=STROKE_WIDTH)
            self.surface.add_object(circle)
            self.annotations_changed.emit()

        self.tool_changed.emit(tool)

    def set_color(self, color) -> None:
        """
        Change the active color.

        Selected objects take the new color, and objects created afterwards
        use it. With the freehand tool active the brush is updated for the
        next stroke; strokes already drawn keep their color.

        Args:
            color: '#rrggbb' string or RGB tuple
        """
        if self.surface is None:
            return

        self.state.active_color = parse_color(color)
        if self.active_tool is Tool.FREEHAND:
            self.surface.set_free_drawing(True, self.active_color, STROKE_WIDTH)
        elif self.surface.recolor_selected(self.active_color):
            self.annotations_changed.emit()
        self.color_changed.emit(self.active_color)

    def finish_stroke(self, points: List[Point]) -> None:
        """
        Turn a completed pointer drag into a freehand annotation.

        Called by the surface when the pointer is released in free-drawing
        mode. Drags with fewer than two points are ignored.
        """
        if self.surface is None or self.active_tool is not Tool.FREEHAND:
            return
        if len(points) < 2:
            return

        stroke = FreehandAnnotation(points=[(float(x), float(y)) for x, y in points],
                                    stroke_color=self.active_color,
                                    stroke_width=STROKE_WIDTH)
        self.surface.add_object(stroke)
        self.annotations_changed.emit()

    def clear_page(self) -> None:
        """Remove every annotation on the current page and store the empty page."""
        if self.surface is None:
            return

        self.surface.clear()
        self.store.save_current_page(self.state.current_page, [])
        logger.debug("Cleared annotations on page %d", self.state.current_page)
        self.annotations_changed.emit()

    def delete_selected(self) -> int:
        """
        Delete the selected objects on the surface.

        Returns:
            Number of objects removed
        """
        if self.surface is None:
            return 0

        removed = self.surface.delete_selected()
        if removed:
            self.annotations_changed.emit()
        return removed

    def save_page(self, page_index: int) -> None:
        """Write the surface's objects to the store for a page."""
        if self.surface is None:
            return
        self.store.save_current_page(page_index, self.surface.get_objects())

    def load_page(self, page_index: int) -> None:
        """Replace the surface's objects with the stored ones for a page."""
        if self.surface is None:
            return
        self.surface.set_objects(self.store.load_page(page_index))
        self.annotations_changed.emit()

    def reset(self) -> None:
        """Drop everything on the surface and in the store."""
        self.store.clear()
        if self.surface is not None:
            self.surface.clear()
            self.surface.set_free_drawing(self.active_tool is Tool.FREEHAND,
                                          self.active_color, STROKE_WIDTH)
