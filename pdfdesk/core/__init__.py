"""
Core business logic for PDFDesk.
"""
from .errors import (
    AnnotationSchemaError,
    DocumentLoadError,
    ExportError,
    FileValidationError,
    PDFDeskError,
    ProcessingError,
)
from .files import FileSelection, SelectedFile, format_file_size
from .notices import Notice, NoticeLevel

__all__ = [
    "PDFDeskError",
    "FileValidationError",
    "ProcessingError",
    "ExportError",
    "DocumentLoadError",
    "AnnotationSchemaError",
    "FileSelection",
    "SelectedFile",
    "format_file_size",
    "Notice",
    "NoticeLevel",
]
