"""
PDF document loading and rendering.
"""
import logging
from typing import Optional, Tuple

import fitz  # PyMuPDF

from ..errors import DocumentLoadError

logger = logging.getLogger(__name__)


class PDFDocument:
    """
    An open PDF addressed by 1-based page numbers.

    Wraps a PyMuPDF document; rendering and export go through here so the
    rest of the application never touches 0-based page indices.
    """

    def __init__(self, doc: fitz.Document, file_path: Optional[str] = None):
        self.doc: Optional[fitz.Document] = doc
        self.file_path = file_path

    @classmethod
    def open(cls, file_path: str) -> 'PDFDocument':
        """
        Open a PDF file.

        Args:
            file_path: Path to the PDF file

        Returns:
            The opened document

        Raises:
            DocumentLoadError: if the file cannot be opened as a PDF
        """
        try:
            doc = fitz.open(file_path)
        except Exception as e:
            raise DocumentLoadError(f"Error loading PDF: {e}") from e
        return cls._checked(doc, file_path)

    @classmethod
    def from_bytes(cls, data: bytes, name: Optional[str] = None) -> 'PDFDocument':
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise DocumentLoadError(f"Error loading PDF: {e}") from e
        return cls._checked(doc, name)

    @classmethod
    def _checked(cls, doc: fitz.Document, file_path: Optional[str]) -> 'PDFDocument':
        if not doc.is_pdf:
            doc.close()
            raise DocumentLoadError(f"Not a PDF document: {file_path}")
        if doc.needs_pass:
            doc.close()
            raise DocumentLoadError(f"Document is password protected: {file_path}")
        logger.info("Opened %s (%d pages)", file_path or "<memory>", doc.page_count)
        return cls(doc, file_path)

    @property
    def page_count(self) -> int:
        return self.doc.page_count if self.doc else 0

    def is_open(self) -> bool:
        return self.doc is not None

    def close(self) -> None:
        """Close the underlying document."""
        if self.doc:
            self.doc.close()
            self.doc = None

    def get_page(self, page_number: int) -> fitz.Page:
        """
        Get a page by 1-based number.

        Raises:
            IndexError: if the page number is out of range
        """
        if not self.doc or not (1 <= page_number <= self.page_count):
            raise IndexError(f"Page {page_number} out of range 1..{self.page_count}")
        return self.doc.load_page(page_number - 1)

    def page_size(self, page_number: int) -> Tuple[float, float]:
        """
        Get the size of a page in points, as displayed.

        Args:
            page_number: 1-based page number

        Returns:
            Tuple of (width, height)
        """
        rect = self.get_page(page_number).rect
        return rect.width, rect.height

    def render_page(self, page_number: int, zoom: float = 1.0,
                    rotation: int = 0, alpha: bool = False) -> fitz.Pixmap:
        """
        Render a page to a pixmap.

        Args:
            page_number: 1-based page number
            zoom: Scale factor (1.0 = 72 dpi)
            rotation: Extra clockwise rotation in degrees
            alpha: Whether to keep a transparent background

        Returns:
            Rendered pixmap
        """
        page = self.get_page(page_number)
        matrix = fitz.Matrix(zoom, zoom).prerotate(rotation)
        return page.get_pixmap(matrix=matrix, alpha=alpha)

    def to_bytes(self) -> bytes:
        return self.doc.tobytes() if self.doc else b''
