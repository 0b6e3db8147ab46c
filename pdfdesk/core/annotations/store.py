"""
Per-page annotation storage for one open document.
"""
import copy
import logging
from typing import Any, Dict, Iterable, List

from ..errors import AnnotationSchemaError
from .models import SCHEMA_VERSION, AnnotationObject, annotation_from_dict

logger = logging.getLogger(__name__)


class PageAnnotationStore:
    """
    Maps 1-based page numbers to ordered annotation lists.

    List order is z-order. Pages that were never saved have no entry and
    read back as an empty list. Objects are copied on the way in and on
    the way out, so callers can keep mutating what they hold.
    """

    def __init__(self):
        self._pages: Dict[int, List[AnnotationObject]] = {}

    def save_current_page(self, page_index: int,
                          objects: Iterable[AnnotationObject]) -> None:
        """
        Replace the annotations stored for a page.

        Args:
            page_index: 1-based page number
            objects: Annotations in z-order
        """
        self._pages[page_index] = [copy.deepcopy(obj) for obj in objects]
        logger.debug("Saved %d annotation(s) for page %d",
                     len(self._pages[page_index]), page_index)

    def load_page(self, page_index: int) -> List[AnnotationObject]:
        """
        Get a copy of the annotations stored for a page.

        Args:
            page_index: 1-based page number

        Returns:
            Annotations in z-order, or an empty list
        """
        return [copy.deepcopy(obj) for obj in self._pages.get(page_index, [])]

    def has_page(self, page_index: int) -> bool:
        return page_index in self._pages

    def visited_pages(self) -> List[int]:
        """Pages that have an entry, in ascending order."""
        return sorted(self._pages)

    def annotation_count(self) -> int:
        return sum(len(objects) for objects in self._pages.values())

    def clear(self) -> None:
        self._pages.clear()

    def replace_with(self, other: 'PageAnnotationStore') -> None:
        """Drop all pages and take over the pages of another store."""
        self._pages = {page: other.load_page(page) for page in other.visited_pages()}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the versioned annotation schema."""
        return {
            'version': SCHEMA_VERSION,
            'pages': {
                str(page): [obj.to_dict() for obj in objects]
                for page, objects in sorted(self._pages.items())
            },
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'PageAnnotationStore':
        """
        Rebuild a store from its serialized form.

        Raises:
            AnnotationSchemaError: on an unknown version or malformed data
        """
        version = data.get('version') if isinstance(data, dict) else None
        if isinstance(version, bool) or version != SCHEMA_VERSION:
            raise AnnotationSchemaError(
                f"Unsupported annotation schema version: {version!r}")

        pages = data.get('pages', {})
        if not isinstance(pages, dict):
            raise AnnotationSchemaError("'pages' must be an object keyed by page number")

        store = PageAnnotationStore()
        for page_key, objects in pages.items():
            try:
                page = int(page_key)
            except ValueError:
                raise AnnotationSchemaError(f"Invalid page key: {page_key!r}") from None
            if page < 1:
                raise AnnotationSchemaError(f"Invalid page number: {page}")
            if not isinstance(objects, list):
                raise AnnotationSchemaError(f"Annotations of page {page} must be a list")
            store._pages[page] = [annotation_from_dict(obj) for obj in objects]
        return store
