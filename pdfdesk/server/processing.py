"""
PDF transformations behind the processing functions.

All functions take and return bytes so they can be used without touching
the file system. Input that cannot be parsed raises ProcessingError with
status code 400.
"""
import logging
import os
from typing import List, Sequence, Tuple

import fitz  # PyMuPDF

from ..core.errors import ProcessingError

logger = logging.getLogger(__name__)

A4_MAX = (595.0, 842.0)
FOOTER_ORIGIN = (24.0, 16.0)  # from the bottom-left corner
FOOTER_FONT_SIZE = 10


def _open_pdf(data: bytes, name: str = "document") -> fitz.Document:
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise ProcessingError(f"{name} is not a valid PDF: {e}", status_code=400) from e
    if doc.needs_pass:
        doc.close()
        raise ProcessingError(f"{name} is password protected", status_code=400)
    if doc.page_count == 0:
        doc.close()
        raise ProcessingError(f"{name} has no pages", status_code=400)
    return doc


def compression_ratio(original_size: int, compressed_size: int) -> str:
    """Percentage saved, e.g. '30%'."""
    if original_size <= 0:
        return "0%"
    saved = max(0.0, 1.0 - compressed_size / original_size)
    return f"{round(saved * 100)}%"


def compress_pdf(data: bytes, name: str = "document.pdf") -> bytes:
    """
    Rewrite a PDF with unused objects removed and streams deflated.

    Returns:
        The smaller of the rewritten and the original document
    """
    doc = _open_pdf(data, name)
    try:
        compressed = doc.tobytes(garbage=4, deflate=True, deflate_images=True,
                                 deflate_fonts=True, clean=True)
    finally:
        doc.close()

    if len(compressed) >= len(data):
        logger.debug("Rewriting %s saved nothing; keeping the original", name)
        return data
    return compressed


def merge_pdfs(documents: Sequence[Tuple[str, bytes]]) -> bytes:
    """
    Concatenate PDFs in the given order.

    Args:
        documents: (file name, content) pairs; at least two

    Returns:
        The merged document
    """
    if len(documents) < 2:
        raise ProcessingError("At least 2 PDF files required for merging", status_code=400)

    merged = fitz.open()
    try:
        for name, data in documents:
            source = _open_pdf(data, name)
            try:
                merged.insert_pdf(source)
            finally:
                source.close()
        return merged.tobytes(garbage=3, deflate=True)
    finally:
        merged.close()


def _page_label(first: int, last: int) -> str:
    return str(first) if first == last else f"{first}-{last}"


def split_pdf(data: bytes, pages_per_file: int = 1,
              name: str = "document.pdf") -> List[Tuple[str, str, bytes]]:
    """
    Split a PDF into chunks of consecutive pages.

    Args:
        data: Source document
        pages_per_file: Pages in each output document
        name: Source file name, used for output names

    Returns:
        (file name, page label, content) per chunk, e.g.
        ('report_pages_1-2.pdf', '1-2', b'...')
    """
    if pages_per_file < 1:
        raise ProcessingError("pagesPerFile must be at least 1", status_code=400)

    stem = os.path.splitext(os.path.basename(name))[0] or "document"
    source = _open_pdf(data, name)
    parts = []
    try:
        for start in range(0, source.page_count, pages_per_file):
            end = min(start + pages_per_file, source.page_count) - 1
            label = _page_label(start + 1, end + 1)
            part = fitz.open()
            try:
                part.insert_pdf(source, from_page=start, to_page=end)
                parts.append((f"{stem}_pages_{label}.pdf", label,
                              part.tobytes(garbage=3, deflate=True)))
            finally:
                part.close()
    finally:
        source.close()

    logger.debug("Split %s into %d part(s)", name, len(parts))
    return parts


def images_to_pdf(images: Sequence[Tuple[str, bytes]]) -> bytes:
    """
    Build a PDF with one page per image.

    Images larger than A4 are scaled down to fit; smaller images keep
    their size. Each page carries the image's file name as a footer.

    Args:
        images: (file name, content) pairs

    Returns:
        The generated document
    """
    if not images:
        raise ProcessingError("No images provided", status_code=400)

    output = fitz.open()
    try:
        for name, data in images:
            try:
                pixmap = fitz.Pixmap(data)
            except Exception as e:
                raise ProcessingError(f"{name} is not a supported image: {e}",
                                      status_code=400) from e

            max_w, max_h = A4_MAX
            scale = min(1.0, max_w / pixmap.width, max_h / pixmap.height)
            width, height = pixmap.width * scale, pixmap.height * scale

            page = output.new_page(width=width, height=height)
            if data[:3] == b'\xff\xd8\xff':
                # JPEG data is embedded as is
                page.insert_image(page.rect, stream=data)
            else:
                page.insert_image(page.rect, pixmap=pixmap)

            x, y = FOOTER_ORIGIN
            page.insert_text(fitz.Point(x, height - y), name or "image",
                             fontsize=FOOTER_FONT_SIZE, fontname="helv")
        return output.tobytes(garbage=3, deflate=True)
    finally:
        output.close()
