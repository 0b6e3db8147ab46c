"""
PDF page view: shows the annotation canvas with zoom and rotation applied.
"""
import logging
from typing import Optional

import fitz  # PyMuPDF
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QColor, QImage, QPainter, QPixmap, QTransform
from PyQt5.QtWidgets import QFrame, QGraphicsView

from ...core.document import PDFDocument
from .annotation_canvas import AnnotationCanvas

logger = logging.getLogger(__name__)


def pixmap_from_fitz(pix: fitz.Pixmap) -> QPixmap:
    """Convert a PyMuPDF pixmap without alpha to a QPixmap."""
    img = QImage(pix.samples, pix.width, pix.height, pix.stride, QImage.Format_RGB888)
    # QImage does not own the buffer; copy before pix goes away
    return QPixmap.fromImage(img.copy())


class PDFPageView(QGraphicsView):
    """
    Displays one page of a document.

    The page is rendered at the current zoom (times the screen's device
    pixel ratio) so it stays sharp; the view transform maps canvas
    coordinates to the screen.
    """

    def __init__(self, canvas: AnnotationCanvas, parent=None):
        super().__init__(canvas, parent)
        self.canvas = canvas
        self.document: Optional[PDFDocument] = None
        self.page_number = 0
        self.zoom = 1.0
        self.rotation = 0

        self.setRenderHints(QPainter.Antialiasing | QPainter.SmoothPixmapTransform
                            | QPainter.TextAntialiasing)
        self.setBackgroundBrush(QColor(64, 64, 72))
        self.setFrameShape(QFrame.NoFrame)
        self.setAlignment(Qt.AlignCenter)
        self.setDragMode(QGraphicsView.RubberBandDrag)
        self.setFocusPolicy(Qt.StrongFocus)

    def set_document(self, document: Optional[PDFDocument]) -> None:
        self.document = document
        self.page_number = 0
        if document is None:
            self.canvas.clear_page()

    def show_page(self, page_number: int) -> None:
        """
        Render a page behind the canvas.

        Args:
            page_number: 1-based page number
        """
        if self.document is None or not self.document.is_open():
            return
        self.page_number = page_number
        self._render()

    def set_view(self, zoom: float, rotation: int) -> None:
        """Apply a zoom factor and a clockwise rotation in degrees."""
        rerender = zoom != self.zoom
        self.zoom = zoom
        self.rotation = rotation % 360

        transform = QTransform()
        transform.scale(zoom, zoom)
        transform.rotate(self.rotation)
        self.setTransform(transform)

        if rerender and self.page_number:
            self._render()

    def set_free_drawing_cursor(self, enabled: bool) -> None:
        self.setDragMode(QGraphicsView.NoDrag if enabled else QGraphicsView.RubberBandDrag)
        self.viewport().setCursor(Qt.CrossCursor if enabled else Qt.ArrowCursor)

    def _render(self):
        render_zoom = self.zoom * self.devicePixelRatioF()
        try:
            pix = self.document.render_page(self.page_number, zoom=render_zoom)
        except (IndexError, RuntimeError) as e:
            logger.error("Failed to render page %d: %s", self.page_number, e)
            return
        self.canvas.set_page_pixmap(pixmap_from_fitz(pix), render_zoom)
