"""
Error types raised by the PDFDesk core.
"""


class PDFDeskError(Exception):
    """Base class for all PDFDesk errors."""


class FileValidationError(PDFDeskError):
    """A selected file does not match the accepted file types."""

    def __init__(self, message: str, rejected=None):
        super().__init__(message)
        self.rejected = list(rejected or [])


class ProcessingError(PDFDeskError):
    """A remote processing call failed or returned an unusable response."""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class ExportError(PDFDeskError):
    """Exporting the annotated document failed."""


class DocumentLoadError(PDFDeskError):
    """A PDF document could not be opened."""


class AnnotationSchemaError(PDFDeskError):
    """Serialized annotation data does not match the known schema."""
