"""
Document loading, rendering and export.
"""
from .loading import DocumentLoadTracker, PendingLoad
from .pdf_document import PDFDocument
from .pdf_exporter import A4_SIZE, ExportMode, ExportPipeline

__all__ = [
    'DocumentLoadTracker',
    'PendingLoad',
    'PDFDocument',
    'A4_SIZE',
    'ExportMode',
    'ExportPipeline',
]
