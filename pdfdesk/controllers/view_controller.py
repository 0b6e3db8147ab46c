"""
Controller for page navigation, zoom and rotation.
"""
import logging
from typing import Optional

from PyQt5.QtCore import QObject, pyqtSignal

from .annotation_controller import AnnotationCanvasController
from .viewer_state import MAX_ZOOM, MIN_ZOOM, ZOOM_STEP, ViewerState

logger = logging.getLogger(__name__)

PREV = "prev"
NEXT = "next"
ZOOM_IN = "in"
ZOOM_OUT = "out"


class ViewerNavigation(QObject):
    """
    Manages the current page, zoom level and rotation of the viewer.

    Page switches always store the outgoing page's annotations before the
    incoming page's annotations are loaded onto the surface.
    """

    # Signals
    page_changed = pyqtSignal(int)  # 1-based page number
    zoom_changed = pyqtSignal(float)
    rotation_changed = pyqtSignal(int)
    document_reset = pyqtSignal(int)  # page count

    def __init__(self, state: ViewerState, annotations: AnnotationCanvasController):
        super().__init__()
        self.state = state
        self.annotations = annotations

    @property
    def current_page(self) -> int:
        return self.state.current_page

    @property
    def page_count(self) -> int:
        return self.state.page_count

    def reset(self, page_count: int = 0) -> None:
        """
        Prepare for a newly loaded document.

        Args:
            page_count: Number of pages reported by the document; 0 while
                the document is still loading
        """
        self.state.reset(page_count)
        self.annotations.reset()
        logger.debug("Viewer reset for %d page(s)", page_count)
        self.document_reset.emit(page_count)

    def set_page_count(self, page_count: int) -> None:
        """Record the page count once the document finished loading."""
        self.state.page_count = max(0, page_count)
        if self.state.current_page > max(1, self.state.page_count):
            self.state.current_page = 1

    def go_to_page(self, direction: str) -> bool:
        """
        Move one page backwards or forwards.

        Args:
            direction: PREV or NEXT

        Returns:
            True if the page changed; False at the first/last page or when
            no document is loaded
        """
        if direction == PREV:
            target = self.state.current_page - 1
        elif direction == NEXT:
            target = self.state.current_page + 1
        else:
            raise ValueError(f"Unknown direction: {direction!r}")
        return self._switch_to(target)

    def jump_to_page(self, page_number: int) -> bool:
        """
        Go directly to a page.

        Args:
            page_number: 1-based page number

        Returns:
            True if the page changed
        """
        if page_number == self.state.current_page:
            return False
        return self._switch_to(page_number)

    def persist_current(self) -> None:
        """Store the annotations visible on the current page."""
        if self.state.page_count > 0:
            self.annotations.save_page(self.state.current_page)

    def set_zoom(self, direction: str) -> float:
        """
        Zoom in or out by one step.

        Args:
            direction: ZOOM_IN or ZOOM_OUT

        Returns:
            The zoom level after the change
        """
        if direction == ZOOM_IN:
            new_zoom = min(self.state.zoom + ZOOM_STEP, MAX_ZOOM)
        elif direction == ZOOM_OUT:
            new_zoom = max(self.state.zoom - ZOOM_STEP, MIN_ZOOM)
        else:
            raise ValueError(f"Unknown zoom direction: {direction!r}")

        if new_zoom != self.state.zoom:
            self.state.zoom = new_zoom
            self.zoom_changed.emit(new_zoom)
        return self.state.zoom

    def get_zoom_percent(self) -> int:
        return int(round(self.state.zoom * 100))

    def rotate(self) -> int:
        """
        Rotate the view a quarter turn clockwise.

        Returns:
            New rotation in degrees
        """
        self.state.rotation = (self.state.rotation + 90) % 360
        self.rotation_changed.emit(self.state.rotation)
        return self.state.rotation

    def _switch_to(self, target: int) -> bool:
        if not (1 <= target <= self.state.page_count):
            return False

        self.annotations.save_page(self.state.current_page)
        self.state.current_page = target
        self.annotations.load_page(target)

        self.page_changed.emit(target)
        return True

    def describe(self) -> Optional[str]:
        """Status line text, e.g. 'Page 2 of 5'."""
        if self.state.page_count == 0:
            return None
        return f"Page {self.state.current_page} of {self.state.page_count}"
