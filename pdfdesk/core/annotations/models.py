"""
Annotation objects drawn over PDF pages.

Every annotation is one of four dataclasses (text, rectangle, circle,
freehand stroke). Coordinates are PDF points on the unrotated page at
zoom 1.0, with a top-left origin.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Tuple, Union

from ..errors import AnnotationSchemaError

SCHEMA_VERSION = 1

Color = Tuple[int, int, int]
Point = Tuple[float, float]


class AnnotationKind(Enum):
    TEXT = "text"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    FREEHAND = "freehand"


def parse_color(value) -> Color:
    """
    Normalize a color to an RGB tuple.

    Args:
        value: '#rrggbb' string, or a sequence of three 0-255 integers

    Returns:
        RGB tuple
    """
    if isinstance(value, str):
        text = value.strip().lstrip('#')
        if len(text) == 3:
            text = ''.join(ch * 2 for ch in text)
        if len(text) != 6:
            raise ValueError(f"Invalid color: {value!r}")
        try:
            return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
        except ValueError:
            raise ValueError(f"Invalid color: {value!r}") from None

    rgb = tuple(int(c) for c in value)
    if len(rgb) != 3 or any(c < 0 or c > 255 for c in rgb):
        raise ValueError(f"Invalid color: {value!r}")
    return rgb


def color_to_hex(color: Color) -> str:
    return '#{:02x}{:02x}{:02x}'.format(*color)


def _point(data) -> Point:
    return (float(data[0]), float(data[1]))


@dataclass
class TextAnnotation:
    """Editable text placed at a top-left anchor."""
    kind: ClassVar[AnnotationKind] = AnnotationKind.TEXT

    position: Point
    content: str
    color: Color
    font_size: float = 16.0

    def bounds(self) -> Tuple[float, float, float, float]:
        # Approximation; the exact extent depends on the font.
        lines = self.content.split('\n') or ['']
        width = max(len(line) for line in lines) * self.font_size * 0.55
        height = len(lines) * self.font_size * 1.2
        x, y = self.position
        return (x, y, x + width, y + height)

    def translate(self, dx: float, dy: float) -> None:
        self.position = (self.position[0] + dx, self.position[1] + dy)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'position': list(self.position),
            'content': self.content,
            'color': list(self.color),
            'font_size': self.font_size,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'TextAnnotation':
        return TextAnnotation(
            position=_point(data['position']),
            content=str(data['content']),
            color=parse_color(data['color']),
            font_size=float(data.get('font_size', 16.0)),
        )


@dataclass
class RectangleAnnotation:
    """Outlined rectangle with a transparent fill."""
    kind: ClassVar[AnnotationKind] = AnnotationKind.RECTANGLE

    position: Point
    size: Tuple[float, float]
    stroke_color: Color
    stroke_width: float = 2.0

    def bounds(self) -> Tuple[float, float, float, float]:
        x, y = self.position
        return (x, y, x + self.size[0], y + self.size[1])

    def translate(self, dx: float, dy: float) -> None:
        self.position = (self.position[0] + dx, self.position[1] + dy)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'position': list(self.position),
            'size': list(self.size),
            'stroke_color': list(self.stroke_color),
            'stroke_width': self.stroke_width,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'RectangleAnnotation':
        return RectangleAnnotation(
            position=_point(data['position']),
            size=_point(data['size']),
            stroke_color=parse_color(data['stroke_color']),
            stroke_width=float(data.get('stroke_width', 2.0)),
        )


@dataclass
class CircleAnnotation:
    """Outlined circle; position is the top-left of its bounding box."""
    kind: ClassVar[AnnotationKind] = AnnotationKind.CIRCLE

    position: Point
    radius: float
    stroke_color: Color
    stroke_width: float = 2.0

    @property
    def center(self) -> Point:
        return (self.position[0] + self.radius, self.position[1] + self.radius)

    def bounds(self) -> Tuple[float, float, float, float]:
        x, y = self.position
        return (x, y, x + 2 * self.radius, y + 2 * self.radius)

    def translate(self, dx: float, dy: float) -> None:
        self.position = (self.position[0] + dx, self.position[1] + dy)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'position': list(self.position),
            'radius': self.radius,
            'stroke_color': list(self.stroke_color),
            'stroke_width': self.stroke_width,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'CircleAnnotation':
        return CircleAnnotation(
            position=_point(data['position']),
            radius=float(data['radius']),
            stroke_color=parse_color(data['stroke_color']),
            stroke_width=float(data.get('stroke_width', 2.0)),
        )


@dataclass
class FreehandAnnotation:
    """A single pen stroke."""
    kind: ClassVar[AnnotationKind] = AnnotationKind.FREEHAND

    points: List[Point] = field(default_factory=list)
    stroke_color: Color = (255, 0, 0)
    stroke_width: float = 2.0

    def bounds(self) -> Tuple[float, float, float, float]:
        if not self.points:
            return (0.0, 0.0, 0.0, 0.0)
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        return (min(xs), min(ys), max(xs), max(ys))

    def translate(self, dx: float, dy: float) -> None:
        self.points = [(x + dx, y + dy) for x, y in self.points]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'points': [[x, y] for x, y in self.points],
            'stroke_color': list(self.stroke_color),
            'stroke_width': self.stroke_width,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'FreehandAnnotation':
        return FreehandAnnotation(
            points=[_point(p) for p in data.get('points', [])],
            stroke_color=parse_color(data['stroke_color']),
            stroke_width=float(data.get('stroke_width', 2.0)),
        )


AnnotationObject = Union[TextAnnotation, RectangleAnnotation,
                         CircleAnnotation, FreehandAnnotation]

_CLASSES_BY_KIND = {
    AnnotationKind.TEXT: TextAnnotation,
    AnnotationKind.RECTANGLE: RectangleAnnotation,
    AnnotationKind.CIRCLE: CircleAnnotation,
    AnnotationKind.FREEHAND: FreehandAnnotation,
}


def annotation_from_dict(data: Dict[str, Any]) -> AnnotationObject:
    """
    Rebuild an annotation object from its serialized form.

    Raises:
        AnnotationSchemaError: if the kind is unknown or fields are missing
    """
    try:
        kind = AnnotationKind(data['kind'])
    except (KeyError, TypeError, ValueError):
        raise AnnotationSchemaError(f"Unknown annotation kind in {data!r}") from None

    try:
        return _CLASSES_BY_KIND[kind].from_dict(data)
    except (KeyError, TypeError, ValueError, IndexError) as e:
        raise AnnotationSchemaError(f"Malformed {kind.value} annotation: {e}") from e
