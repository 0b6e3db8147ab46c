"""
File selection and accept-pattern validation.
"""
import logging
import math
import mimetypes
import os
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .errors import FileValidationError

logger = logging.getLogger(__name__)

# Leading bytes of the formats the tools accept
_SIGNATURES = (
    (b'%PDF-', 'application/pdf'),
    (b'\x89PNG\r\n\x1a\n', 'image/png'),
    (b'\xff\xd8\xff', 'image/jpeg'),
    (b'GIF87a', 'image/gif'),
    (b'GIF89a', 'image/gif'),
    (b'BM', 'image/bmp'),
)


def sniff_mime_type(path: str) -> Optional[str]:
    """
    Guess a file's MIME type from its first bytes.

    Args:
        path: Path to the file

    Returns:
        MIME type, or None if the content is not recognized
    """
    try:
        with open(path, 'rb') as f:
            head = f.read(16)
    except OSError:
        return None

    for signature, mime in _SIGNATURES:
        if head.startswith(signature):
            return mime
    if head[:4] == b'RIFF' and head[8:12] == b'WEBP':
        return 'image/webp'
    return None


def format_file_size(num_bytes: int) -> str:
    """Human readable size, e.g. 1536 -> '1.5 KB'."""
    if num_bytes <= 0:
        return '0 Bytes'
    units = ['Bytes', 'KB', 'MB', 'GB']
    i = min(int(math.floor(math.log(num_bytes, 1024))), len(units) - 1)
    value = round(num_bytes / (1024 ** i), 2)
    return f"{value:g} {units[i]}"


@dataclass(frozen=True)
class SelectedFile:
    """A file accepted by a FileSelection."""
    path: str
    name: str
    size: int
    mime_type: str

    @property
    def display_size(self) -> str:
        return format_file_size(self.size)


class AcceptPattern:
    """
    Parsed accept string such as '.pdf' or '.jpg,.png,image/*'.

    Entries starting with a dot are extensions; entries containing a slash
    are MIME types, where 'type/*' matches any subtype.
    """

    def __init__(self, accept: str):
        self.raw = accept
        self.extensions: Tuple[str, ...] = ()
        self.mime_types: Tuple[str, ...] = ()

        extensions, mime_types = [], []
        for entry in accept.split(','):
            entry = entry.strip().lower()
            if not entry:
                continue
            if entry.startswith('.'):
                extensions.append(entry)
                guessed = mimetypes.types_map.get(entry)
                if guessed:
                    mime_types.append(guessed)
            elif '/' in entry:
                mime_types.append(entry)
            else:
                extensions.append('.' + entry)
        self.extensions = tuple(extensions)
        self.mime_types = tuple(mime_types)

    def matches_extension(self, name: str) -> bool:
        return os.path.splitext(name)[1].lower() in self.extensions

    def matches_mime(self, mime: Optional[str]) -> bool:
        if not mime:
            return False
        mime = mime.lower()
        for pattern in self.mime_types:
            if pattern.endswith('/*'):
                if mime.startswith(pattern[:-1]):
                    return True
            elif mime == pattern:
                return True
        return False

    def __repr__(self):
        return f"AcceptPattern({self.raw!r})"


class FileSelection:
    """
    Holds the files picked for one upload area.

    In single mode each selection replaces the previous one; in multiple
    mode new files are appended. A selection containing any file that does
    not match the accept pattern is rejected as a whole and leaves the
    current selection unchanged.
    """

    def __init__(self, accept: str = '.pdf', multiple: bool = False):
        self.accept = AcceptPattern(accept)
        self.multiple = multiple
        self._files: List[SelectedFile] = []

    @property
    def files(self) -> List[SelectedFile]:
        return list(self._files)

    def is_empty(self) -> bool:
        return not self._files

    def matches(self, path: str, declared_mime: Optional[str] = None) -> bool:
        """
        Check a single file against the accept pattern.

        Args:
            path: Path to the file
            declared_mime: MIME type reported by the source (e.g. a drop event)

        Returns:
            True if the extension or the declared/sniffed MIME type is accepted
        """
        name = os.path.basename(path)
        if self.accept.matches_extension(name):
            return True
        if self.accept.matches_mime(declared_mime):
            return True
        return self.accept.matches_mime(sniff_mime_type(path))

    def select(self, paths: Iterable[str]) -> List[SelectedFile]:
        """
        Validate and add files to the selection.

        Args:
            paths: Paths of the chosen files

        Returns:
            The files added by this call

        Raises:
            FileValidationError: if no file was given or any file is rejected
        """
        paths = list(paths)
        if not paths:
            raise FileValidationError("No files selected.")

        rejected = [p for p in paths if not os.path.isfile(p) or not self.matches(p)]
        if rejected:
            names = ', '.join(os.path.basename(p) for p in rejected)
            logger.info("Rejected %s (accepts %s)", names, self.accept.raw)
            raise FileValidationError(
                f"Unsupported file type: {names}. Accepted: {self.accept.raw}",
                rejected=rejected,
            )

        if not self.multiple:
            paths = paths[:1]

        added = [self._describe(p) for p in paths]
        if self.multiple:
            self._files.extend(added)
        else:
            self._files = added
        return added

    def remove(self, index: int) -> None:
        if 0 <= index < len(self._files):
            del self._files[index]

    def clear(self) -> None:
        self._files.clear()

    def _describe(self, path: str) -> SelectedFile:
        name = os.path.basename(path)
        mime = (mimetypes.guess_type(name)[0]
                or sniff_mime_type(path)
                or 'application/octet-stream')
        return SelectedFile(path=path, name=name,
                            size=os.path.getsize(path), mime_type=mime)
