"""
Exporting annotated documents.

Raster export flattens every page (document content plus its annotation
overlay) into an image and places it on a fixed-size output page. Annotated
export keeps the original vector content and adds native PDF annotations.
"""
import logging
import os
import tempfile
from enum import Enum
from typing import Callable, List, Optional, Tuple

import fitz  # PyMuPDF

from ..annotations import (AnnotationObject, CircleAnnotation, FreehandAnnotation,
                           PageAnnotationStore, RectangleAnnotation, TextAnnotation)
from ..errors import ExportError
from .pdf_document import PDFDocument

logger = logging.getLogger(__name__)

A4_SIZE: Tuple[float, float] = (595.0, 842.0)  # points
RASTER_ZOOM = 2.0  # 144 dpi

ProgressCallback = Callable[[int, int], None]


class ExportMode(Enum):
    RASTER = "raster"
    ANNOTATED = "annotated"


def _rgb(color) -> List[float]:
    # PyMuPDF uses 0-1 range
    return [c / 255.0 for c in color]


def draw_overlay(page: fitz.Page, objects: List[AnnotationObject]) -> None:
    """
    Paint annotation objects into a page's content stream.

    Objects are committed one at a time so that their z-order is kept.

    Args:
        page: Unrotated page to draw on
        objects: Annotations in z-order
    """
    for obj in objects:
        shape = page.new_shape()

        if isinstance(obj, RectangleAnnotation):
            shape.draw_rect(fitz.Rect(*obj.bounds()))
            shape.finish(color=_rgb(obj.stroke_color), width=obj.stroke_width)

        elif isinstance(obj, CircleAnnotation):
            shape.draw_circle(fitz.Point(*obj.center), obj.radius)
            shape.finish(color=_rgb(obj.stroke_color), width=obj.stroke_width)

        elif isinstance(obj, FreehandAnnotation):
            if len(obj.points) < 2:
                continue
            shape.draw_polyline([fitz.Point(x, y) for x, y in obj.points])
            shape.finish(color=_rgb(obj.stroke_color), width=obj.stroke_width,
                         closePath=False, lineCap=1, lineJoin=1)

        elif isinstance(obj, TextAnnotation):
            x, y = obj.position
            # insert_text anchors at the baseline of the first line
            shape.insert_text(fitz.Point(x, y + obj.font_size), obj.content,
                              fontsize=obj.font_size, color=_rgb(obj.color))

        shape.commit()


def add_native_annotation(page: fitz.Page, obj: AnnotationObject) -> None:
    """Add one annotation object to a page as a native PDF annotation."""

    if isinstance(obj, RectangleAnnotation):
        annot = page.add_rect_annot(fitz.Rect(*obj.bounds()))
        annot.set_colors(stroke=_rgb(obj.stroke_color))
        annot.set_border(width=obj.stroke_width)
        annot.update()

    elif isinstance(obj, CircleAnnotation):
        annot = page.add_circle_annot(fitz.Rect(*obj.bounds()))
        annot.set_colors(stroke=_rgb(obj.stroke_color))
        annot.set_border(width=obj.stroke_width)
        annot.update()

    elif isinstance(obj, FreehandAnnotation):
        if len(obj.points) < 2:
            return
        # One ink annotation per stroke
        ink = page.add_ink_annot([[(float(x), float(y)) for x, y in obj.points]])
        ink.set_colors(stroke=_rgb(obj.stroke_color))
        ink.set_border(width=obj.stroke_width)
        ink.update()

    elif isinstance(obj, TextAnnotation):
        annot = page.add_freetext_annot(
            fitz.Rect(*obj.bounds()),
            obj.content,
            fontsize=obj.font_size,
            text_color=_rgb(obj.color),
        )
        annot.update()


class ExportPipeline:
    """Builds the output document for an annotated PDF."""

    def __init__(self, document: PDFDocument, store: PageAnnotationStore,
                 persist: Optional[Callable[[], None]] = None,
                 rotation: int = 0, zoom: float = RASTER_ZOOM,
                 page_size: Tuple[float, float] = A4_SIZE):
        """
        Args:
            document: Source document
            store: Annotations per page
            persist: Called before each page is rendered, so edits on the
                visible page reach the store
            rotation: Viewer rotation applied to every exported page
            zoom: Rasterization scale
            page_size: Output page size in points (raster mode)
        """
        self.document = document
        self.store = store
        self.persist = persist
        self.rotation = rotation % 360
        self.zoom = zoom
        self.page_size = page_size

    def render_composite(self, page_number: int) -> fitz.Pixmap:
        """
        Rasterize one page with its annotation overlay.

        Args:
            page_number: 1-based page number

        Returns:
            Flattened page image
        """
        scratch = fitz.open()
        try:
            scratch.insert_pdf(self.document.doc, from_page=page_number - 1,
                               to_page=page_number - 1)
            page = scratch[0]
            if page.rotation:
                page.remove_rotation()
            draw_overlay(page, self.store.load_page(page_number))
            page.set_rotation(self.rotation)
            return page.get_pixmap(matrix=fitz.Matrix(self.zoom, self.zoom), alpha=False)
        finally:
            scratch.close()

    def export(self, mode: ExportMode = ExportMode.RASTER,
               progress: Optional[ProgressCallback] = None) -> bytes:
        """
        Build the output document.

        Args:
            mode: Raster (flattened images) or annotated (native annotations)
            progress: Called with (pages done, total pages)

        Returns:
            The output PDF as bytes

        Raises:
            ExportError: if any page fails; nothing partial is returned
        """
        if not self.document.is_open() or self.document.page_count == 0:
            raise ExportError("No document to export.")

        if mode is ExportMode.ANNOTATED:
            return self._export_annotated(progress)
        return self._export_raster(progress)

    def export_to_file(self, output_path: str, mode: ExportMode = ExportMode.RASTER,
                       progress: Optional[ProgressCallback] = None) -> None:
        """
        Export and write the result, replacing output_path only on success.

        Raises:
            ExportError: if building or writing the output fails
        """
        data = self.export(mode, progress)

        output_dir = os.path.dirname(os.path.abspath(output_path))
        temp_path = None
        try:
            temp_fd, temp_path = tempfile.mkstemp(suffix='.pdf', dir=output_dir)
            with os.fdopen(temp_fd, 'wb') as f:
                f.write(data)
            os.replace(temp_path, output_path)
        except OSError as e:
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)
            raise ExportError(f"Could not write {output_path}: {e}") from e
        logger.info("Exported %s (%s)", output_path, mode.value)

    def _export_raster(self, progress: Optional[ProgressCallback]) -> bytes:
        total = self.document.page_count
        output = fitz.open()
        try:
            for page_number in range(1, total + 1):
                if self.persist:
                    self.persist()
                try:
                    pixmap = self.render_composite(page_number)
                except Exception as e:
                    raise ExportError(f"Failed to render page {page_number}: {e}") from e

                width, height = self.page_size
                out_page = output.new_page(width=width, height=height)
                out_page.insert_image(out_page.rect, pixmap=pixmap)

                if progress:
                    progress(page_number, total)
            return output.tobytes(garbage=4, deflate=True)
        finally:
            output.close()

    def _export_annotated(self, progress: Optional[ProgressCallback]) -> bytes:
        if self.persist:
            self.persist()

        output = fitz.open(stream=self.document.to_bytes(), filetype="pdf")
        try:
            total = output.page_count
            for page_number in range(1, total + 1):
                page = output[page_number - 1]
                try:
                    for obj in self.store.load_page(page_number):
                        add_native_annotation(page, obj)
                except Exception as e:
                    raise ExportError(
                        f"Failed to annotate page {page_number}: {e}") from e
                if self.rotation:
                    page.set_rotation((page.rotation + self.rotation) % 360)

                if progress:
                    progress(page_number, total)
            return output.tobytes(garbage=4, deflate=True)
        finally:
            output.close()
