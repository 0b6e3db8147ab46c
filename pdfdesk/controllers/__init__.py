"""
Controllers connecting the viewer UI to the annotation and document logic.
"""
from .viewer_state import ViewerState, Tool, MIN_ZOOM, MAX_ZOOM, ZOOM_STEP, DEFAULT_COLOR
from .annotation_controller import AnnotationCanvasController
from .view_controller import ViewerNavigation, PREV, NEXT, ZOOM_IN, ZOOM_OUT

__all__ = [
    'ViewerState',
    'Tool',
    'MIN_ZOOM',
    'MAX_ZOOM',
    'ZOOM_STEP',
    'DEFAULT_COLOR',
    'AnnotationCanvasController',
    'ViewerNavigation',
    'PREV',
    'NEXT',
    'ZOOM_IN',
    'ZOOM_OUT',
]
