"""
Annotation system for PDF pages.
"""
from .models import (
    SCHEMA_VERSION,
    AnnotationKind,
    AnnotationObject,
    CircleAnnotation,
    FreehandAnnotation,
    RectangleAnnotation,
    TextAnnotation,
    annotation_from_dict,
    color_to_hex,
    parse_color,
)
from .persistence import AnnotationPersistence
from .store import PageAnnotationStore
from .surface import AnnotationSurface

__all__ = [
    'SCHEMA_VERSION',
    'AnnotationKind',
    'AnnotationObject',
    'TextAnnotation',
    'RectangleAnnotation',
    'CircleAnnotation',
    'FreehandAnnotation',
    'annotation_from_dict',
    'color_to_hex',
    'parse_color',
    'AnnotationPersistence',
    'PageAnnotationStore',
    'AnnotationSurface',
]
