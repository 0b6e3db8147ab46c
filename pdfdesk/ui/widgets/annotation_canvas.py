"""
Graphics scene showing one page and its annotation objects.
"""
import logging
from typing import Callable, List, Optional, Sequence

from PyQt5.QtCore import QPointF, QRectF, Qt, pyqtSignal
from PyQt5.QtGui import QBrush, QColor, QPainterPath, QPen, QPixmap, QTextCursor, QTransform
from PyQt5.QtWidgets import (
    QGraphicsEllipseItem, QGraphicsItem, QGraphicsPathItem, QGraphicsPixmapItem,
    QGraphicsRectItem, QGraphicsScene, QGraphicsSceneMouseEvent, QGraphicsTextItem
)

from ...core.annotations import (AnnotationObject, CircleAnnotation, FreehandAnnotation,
                                 RectangleAnnotation, TextAnnotation)
from ...core.annotations.models import Color, Point

logger = logging.getLogger(__name__)

RESIZE_STEP = 1.1
MIN_EXTENT = 4.0
PREVIEW_ALPHA = 150


def _qcolor(color: Color, alpha: int = 255) -> QColor:
    return QColor(color[0], color[1], color[2], alpha)


def _rgb(qcolor: QColor) -> Color:
    return (qcolor.red(), qcolor.green(), qcolor.blue())


def _stroke_pen(color: Color, width: float, alpha: int = 255) -> QPen:
    pen = QPen(_qcolor(color, alpha), width)
    pen.setCapStyle(Qt.RoundCap)
    pen.setJoinStyle(Qt.RoundJoin)
    return pen


def _path_from_points(points: Sequence[Point]) -> QPainterPath:
    path = QPainterPath()
    if not points:
        return path
    path.moveTo(points[0][0], points[0][1])
    for x, y in points[1:]:
        path.lineTo(x, y)
    return path


class TextObjectItem(QGraphicsTextItem):
    """Text annotation; double-click to edit, editing ends when focus leaves."""

    def __init__(self, obj: TextAnnotation):
        super().__init__(obj.content)
        self.document().setDocumentMargin(0)
        self.setDefaultTextColor(_qcolor(obj.color))
        self.set_font_size(obj.font_size)
        self.setPos(QPointF(*obj.position))

    def set_font_size(self, size: float) -> None:
        self.font_size = max(1.0, float(size))
        font = self.font()
        font.setPixelSize(max(1, int(round(self.font_size))))
        self.setFont(font)

    def start_editing(self) -> None:
        self.setTextInteractionFlags(Qt.TextEditorInteraction)
        self.setFocus(Qt.OtherFocusReason)
        cursor = self.textCursor()
        cursor.select(QTextCursor.Document)
        self.setTextCursor(cursor)

    def is_editing(self) -> bool:
        return bool(self.textInteractionFlags() & Qt.TextEditorInteraction)

    def mouseDoubleClickEvent(self, event):
        self.start_editing()
        super().mouseDoubleClickEvent(event)

    def focusOutEvent(self, event):
        self.setTextInteractionFlags(Qt.NoTextInteraction)
        cursor = self.textCursor()
        cursor.clearSelection()
        self.setTextCursor(cursor)
        super().focusOutEvent(event)

    def to_object(self) -> TextAnnotation:
        pos = self.pos()
        return TextAnnotation(position=(pos.x(), pos.y()),
                              content=self.toPlainText(),
                              color=_rgb(self.defaultTextColor()),
                              font_size=self.font_size)


class RectangleObjectItem(QGraphicsRectItem):

    def __init__(self, obj: RectangleAnnotation):
        width, height = obj.size
        super().__init__(0, 0, width, height)
        self.setPen(_stroke_pen(obj.stroke_color, obj.stroke_width))
        self.setBrush(QBrush(Qt.NoBrush))
        self.setPos(QPointF(*obj.position))

    def resize(self, factor: float) -> None:
        rect = self.rect()
        self.setRect(0, 0, max(MIN_EXTENT, rect.width() * factor),
                     max(MIN_EXTENT, rect.height() * factor))

    def to_object(self) -> RectangleAnnotation:
        pos, rect, pen = self.pos(), self.rect(), self.pen()
        return RectangleAnnotation(position=(pos.x(), pos.y()),
                                   size=(rect.width(), rect.height()),
                                   stroke_color=_rgb(pen.color()),
                                   stroke_width=pen.widthF())


class CircleObjectItem(QGraphicsEllipseItem):

    def __init__(self, obj: CircleAnnotation):
        diameter = obj.radius * 2
        super().__init__(0, 0, diameter, diameter)
        self.setPen(_stroke_pen(obj.stroke_color, obj.stroke_width))
        self.setBrush(QBrush(Qt.NoBrush))
        self.setPos(QPointF(*obj.position))

    def resize(self, factor: float) -> None:
        diameter = max(MIN_EXTENT, self.rect().width() * factor)
        self.setRect(0, 0, diameter, diameter)

    def to_object(self) -> CircleAnnotation:
        pos, pen = self.pos(), self.pen()
        return CircleAnnotation(position=(pos.x(), pos.y()),
                                radius=self.rect().width() / 2,
                                stroke_color=_rgb(pen.color()),
                                stroke_width=pen.widthF())


class FreehandObjectItem(QGraphicsPathItem):
    """Stroke drawn in scene coordinates; moving it changes pos() only."""

    def __init__(self, obj: FreehandAnnotation):
        super().__init__(_path_from_points(obj.points))
        self.setPen(_stroke_pen(obj.stroke_color, obj.stroke_width))

    def resize(self, factor: float) -> None:
        path = self.path()
        origin = path.boundingRect().topLeft()
        transform = QTransform()
        transform.translate(origin.x(), origin.y())
        transform.scale(factor, factor)
        transform.translate(-origin.x(), -origin.y())
        self.setPath(transform.map(path))

    def to_object(self) -> FreehandAnnotation:
        offset, path, pen = self.pos(), self.path(), self.pen()
        points = []
        for i in range(path.elementCount()):
            element = path.elementAt(i)
            points.append((element.x + offset.x(), element.y + offset.y()))
        return FreehandAnnotation(points=points,
                                  stroke_color=_rgb(pen.color()),
                                  stroke_width=pen.widthF())


def create_item(obj: AnnotationObject) -> QGraphicsItem:
    """Build the graphics item for an annotation object."""
    if isinstance(obj, TextAnnotation):
        item = TextObjectItem(obj)
        item.setFlag(QGraphicsItem.ItemIsFocusable, True)
    elif isinstance(obj, RectangleAnnotation):
        item = RectangleObjectItem(obj)
    elif isinstance(obj, CircleAnnotation):
        item = CircleObjectItem(obj)
    elif isinstance(obj, FreehandAnnotation):
        item = FreehandObjectItem(obj)
    else:
        raise TypeError(f"Unsupported annotation object: {obj!r}")

    item.setFlag(QGraphicsItem.ItemIsSelectable, True)
    item.setFlag(QGraphicsItem.ItemIsMovable, True)
    return item


class AnnotationCanvas(QGraphicsScene):
    """
    Drawing surface for the current page.

    Scene coordinates are PDF points on the unrotated page at zoom 1.0; the
    view applies zoom and rotation. Annotation items are kept in creation
    order, which is also their stacking order.

    Keyboard: Delete/Backspace removes the selected objects, +/- resizes them.
    """

    # Signals
    objects_changed = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._items: List[QGraphicsItem] = []
        self._background: Optional[QGraphicsPixmapItem] = None

        self._free_drawing = False
        self._brush_color: Color = (255, 0, 0)
        self._brush_width = 2.0
        self._stroke_handler: Optional[Callable[[List[Point]], None]] = None

        self._stroke_points: List[Point] = []
        self._preview: Optional[QGraphicsPathItem] = None

    # Page background

    def set_page_pixmap(self, pixmap: QPixmap, render_zoom: float) -> None:
        """
        Show a rendered page behind the annotations.

        Args:
            pixmap: Page rendered at render_zoom
            render_zoom: Scale the pixmap was rendered at
        """
        if self._background is not None:
            self.removeItem(self._background)
        self._background = QGraphicsPixmapItem(pixmap)
        self._background.setTransformationMode(Qt.SmoothTransformation)
        self._background.setScale(1.0 / render_zoom)
        self._background.setZValue(-1)
        self.addItem(self._background)
        self.setSceneRect(QRectF(0, 0, pixmap.width() / render_zoom,
                                 pixmap.height() / render_zoom))

    def clear_page(self) -> None:
        """Remove the page background and every annotation."""
        self.clear()
        if self._background is not None:
            self.removeItem(self._background)
            self._background = None

    # Surface interface

    def get_objects(self) -> List[AnnotationObject]:
        return [item.to_object() for item in self._items]

    def set_objects(self, objects: Sequence[AnnotationObject]) -> None:
        self.clear()
        for obj in objects:
            self.add_object(obj)

    def add_object(self, obj: AnnotationObject, select: bool = False) -> None:
        item = create_item(obj)
        item.setZValue(len(self._items))
        self.addItem(item)
        self._items.append(item)

        if select:
            self.clearSelection()
            item.setSelected(True)
            if isinstance(item, TextObjectItem):
                item.start_editing()

    def clear(self) -> None:
        """Remove all annotation items; the page background stays."""
        self._cancel_stroke()
        for item in self._items:
            self.removeItem(item)
        self._items = []

    def delete_selected(self) -> int:
        selected = [item for item in self._items if item.isSelected()]
        for item in selected:
            self.removeItem(item)
            self._items.remove(item)
        return len(selected)

    def recolor_selected(self, color: Color) -> int:
        """
        Give the selected objects a new stroke or text color.

        Returns:
            Number of objects recolored
        """
        count = 0
        for item in self._items:
            if not item.isSelected():
                continue
            if isinstance(item, TextObjectItem):
                item.setDefaultTextColor(_qcolor(color))
            else:
                pen = item.pen()
                pen.setColor(_qcolor(color))
                item.setPen(pen)
            count += 1
        return count

    def set_free_drawing(self, enabled: bool, color: Color, width: float) -> None:
        self._free_drawing = enabled
        self._brush_color = tuple(color)
        self._brush_width = width
        if not enabled:
            self._cancel_stroke()
        else:
            self.clearSelection()
        for item in self._items:
            item.setFlag(QGraphicsItem.ItemIsMovable, not enabled)

    def set_stroke_handler(self, handler: Optional[Callable[[List[Point]], None]]) -> None:
        self._stroke_handler = handler

    @property
    def free_drawing(self) -> bool:
        return self._free_drawing

    def resize_selected(self, factor: float) -> int:
        """
        Scale the selected objects.

        Returns:
            Number of objects resized
        """
        count = 0
        for item in self._items:
            if not item.isSelected():
                continue
            if isinstance(item, TextObjectItem):
                item.set_font_size(item.font_size * factor)
            else:
                item.resize(factor)
            count += 1
        return count

    # Mouse handling

    def mousePressEvent(self, event: QGraphicsSceneMouseEvent):
        if self._free_drawing and event.button() == Qt.LeftButton:
            self._start_stroke(event.scenePos())
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QGraphicsSceneMouseEvent):
        if self._preview is not None:
            self._continue_stroke(event.scenePos())
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QGraphicsSceneMouseEvent):
        if self._preview is not None and event.button() == Qt.LeftButton:
            self._finish_stroke(event.scenePos())
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def keyPressEvent(self, event):
        focus = self.focusItem()
        if isinstance(focus, TextObjectItem) and focus.is_editing():
            super().keyPressEvent(event)
            return

        key = event.key()
        if key in (Qt.Key_Delete, Qt.Key_Backspace):
            if self.delete_selected():
                self.objects_changed.emit()
            event.accept()
        elif key in (Qt.Key_Plus, Qt.Key_Equal):
            if self.resize_selected(RESIZE_STEP):
                self.objects_changed.emit()
            event.accept()
        elif key == Qt.Key_Minus:
            if self.resize_selected(1.0 / RESIZE_STEP):
                self.objects_changed.emit()
            event.accept()
        else:
            super().keyPressEvent(event)

    # Drawing methods

    def _start_stroke(self, pos: QPointF) -> None:
        self._stroke_points = [(pos.x(), pos.y())]
        self._preview = QGraphicsPathItem()
        self._preview.setPen(_stroke_pen(self._brush_color, self._brush_width, PREVIEW_ALPHA))
        self._preview.setZValue(len(self._items) + 1)
        self.addItem(self._preview)

    def _continue_stroke(self, pos: QPointF) -> None:
        self._stroke_points.append((pos.x(), pos.y()))
        self._preview.setPath(_path_from_points(self._stroke_points))

    def _finish_stroke(self, pos: QPointF) -> None:
        self._stroke_points.append((pos.x(), pos.y()))
        points = self._stroke_points
        self._cancel_stroke()

        if self._stroke_handler is not None and len(points) >= 2:
            self._stroke_handler(points)
            self.objects_changed.emit()

    def _cancel_stroke(self) -> None:
        if self._preview is not None:
            self.removeItem(self._preview)
            self._preview = None
        self._stroke_points = []
