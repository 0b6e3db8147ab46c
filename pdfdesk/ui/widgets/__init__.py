"""
Custom widgets for PDF viewing and interaction.
"""
from .annotation_canvas import AnnotationCanvas
from .file_drop import FileDropArea
from .pdf_viewer import PDFPageView

__all__ = ['AnnotationCanvas', 'FileDropArea', 'PDFPageView']
