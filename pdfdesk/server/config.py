"""
Processing service configuration, read from environment variables.
"""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from ..utils.paths import get_cache_dir

DEFAULT_PORT = 8080


@dataclass(frozen=True)
class ServiceConfig:
    storage_dir: str
    public_url: Optional[str] = None  # None = derive from the request host
    api_key: Optional[str] = None
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ServiceConfig':
        """
        Read PDFDESK_STORAGE_DIR, PDFDESK_PUBLIC_URL, PDFDESK_API_KEY and PORT.

        Raises:
            ValueError: if PORT is not a number
        """
        environ = os.environ if environ is None else environ
        storage_dir = environ.get('PDFDESK_STORAGE_DIR') or str(get_cache_dir() / "results")
        public_url = environ.get('PDFDESK_PUBLIC_URL') or None
        port = int(environ.get('PORT') or DEFAULT_PORT)
        return cls(
            storage_dir=storage_dir,
            public_url=public_url.rstrip('/') if public_url else None,
            api_key=environ.get('PDFDESK_API_KEY') or None,
            port=port,
        )
