"""
Local file store for processing results.
"""
import logging
import os
import time
from pathlib import Path

from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class LocalStorage:
    """Writes result files into one directory under unique names."""

    def __init__(self, root):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def save(self, prefix: str, file_name: str, data: bytes) -> str:
        """
        Store a result.

        Args:
            prefix: Name prefix, e.g. 'merged'
            file_name: Suggested file name; made safe before use
            data: File content

        Returns:
            The stored file's name
        """
        safe_name = secure_filename(file_name) or "document.pdf"
        stored_name = f"{prefix}_{int(time.time() * 1000)}_{safe_name}"
        counter = 1
        while (self.root / stored_name).exists():
            stem, ext = os.path.splitext(stored_name)
            stored_name = f"{stem}_{counter}{ext}"
            counter += 1

        with open(self.root / stored_name, 'wb') as f:
            f.write(data)
        logger.info("Stored %s (%d bytes)", stored_name, len(data))
        return stored_name

    def path(self, stored_name: str) -> Path:
        return self.root / secure_filename(stored_name)

    def exists(self, stored_name: str) -> bool:
        return bool(secure_filename(stored_name)) and self.path(stored_name).is_file()
