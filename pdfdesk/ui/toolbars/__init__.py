"""
Toolbar components for annotating pages.
"""
from .annotation_toolbar import AnnotationToolbar

__all__ = ['AnnotationToolbar']
