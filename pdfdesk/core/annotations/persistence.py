"""
Saving and loading annotation sidecar files.
"""
import json
import logging
import os
from typing import Optional, Tuple

from ..errors import AnnotationSchemaError
from .store import PageAnnotationStore

logger = logging.getLogger(__name__)

SIDECAR_SUFFIX = '.annotations.json'


class AnnotationPersistence:
    """Writes a PageAnnotationStore to JSON and reads it back."""

    @staticmethod
    def default_path(pdf_path: str) -> str:
        """
        Get the suggested sidecar path for a PDF.

        Args:
            pdf_path: Path to the PDF file

        Returns:
            Path next to the PDF, e.g. 'report.pdf' -> 'report.annotations.json'
        """
        base, _ = os.path.splitext(pdf_path)
        return base + SIDECAR_SUFFIX

    def save_to_json(self, store: PageAnnotationStore, file_path: str,
                     pdf_name: Optional[str] = None) -> bool:
        """
        Save annotations to a JSON file.

        Args:
            store: Annotations to save
            file_path: Destination JSON path
            pdf_name: Name of the annotated PDF, recorded for reference

        Returns:
            True if save was successful, False otherwise
        """
        data = store.to_dict()
        data['pdf_name'] = pdf_name

        try:
            directory = os.path.dirname(file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            logger.info("Saved %d annotation(s) to %s",
                        store.annotation_count(), file_path)
            return True
        except OSError as e:
            logger.error("Failed to save annotations to %s: %s", file_path, e)
            return False

    def load_from_json(self, file_path: str,
                       pdf_name: Optional[str] = None) -> Tuple[Optional[PageAnnotationStore], bool]:
        """
        Load annotations from a JSON file.

        Args:
            file_path: Path of the JSON file
            pdf_name: Name of the open PDF; a mismatch is logged, not fatal

        Returns:
            Tuple of (store or None, success flag)
        """
        if not os.path.exists(file_path):
            return None, False

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            store = PageAnnotationStore.from_dict(data)
        except (OSError, ValueError, AnnotationSchemaError) as e:
            logger.error("Failed to load annotations from %s: %s", file_path, e)
            return None, False

        stored_name = data.get('pdf_name')
        if pdf_name and stored_name and stored_name != pdf_name:
            logger.warning("Annotation file %s was saved for %s, not %s",
                           file_path, stored_name, pdf_name)

        return store, True
