"""
Interface between annotation controllers and a drawing surface.
"""
from typing import Callable, List, Optional, Protocol, Sequence

from .models import AnnotationObject, Color, Point

StrokeHandler = Callable[[List[Point]], None]


class AnnotationSurface(Protocol):
    """
    What AnnotationCanvasController needs from a drawing surface.

    The Qt implementation is ui.widgets.annotation_canvas.AnnotationCanvas.
    Objects returned by get_objects() reflect any moves, resizes or text
    edits the user made on the surface.
    """

    def get_objects(self) -> List[AnnotationObject]:
        ...

    def set_objects(self, objects: Sequence[AnnotationObject]) -> None:
        ...

    def add_object(self, obj: AnnotationObject, select: bool = False) -> None:
        ...

    def clear(self) -> None:
        ...

    def delete_selected(self) -> int:
        ...

    def recolor_selected(self, color: Color) -> int:
        ...

    def set_free_drawing(self, enabled: bool, color: Color, width: float) -> None:
        ...

    def set_stroke_handler(self, handler: Optional[StrokeHandler]) -> None:
        ...
