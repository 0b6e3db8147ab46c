"""
HTTP client for the document processing service.
"""
import logging
import os
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..errors import ProcessingError

logger = logging.getLogger(__name__)

FUNCTIONS_PATH = '/functions/v1'
RESULT_FIELDS = ('downloadUrl', 'splitFiles', 'compressionRatio')


@dataclass(frozen=True)
class SplitFile:
    """One output document of a split."""
    file_name: str
    pages: str
    download_url: str


@dataclass
class ProcessingResult:
    """Successful response of a processing function."""
    payload: Dict[str, Any]
    download_url: Optional[str] = None
    split_files: List[SplitFile] = field(default_factory=list)
    compression_ratio: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'ProcessingResult':
        """
        Build a result from decoded response JSON.

        Raises:
            ProcessingError: if the payload reports failure or carries no result
        """
        if not payload.get('success'):
            raise ProcessingError(payload.get('error') or 'Processing failed')

        if not any(payload.get(key) for key in RESULT_FIELDS):
            raise ProcessingError('The service returned no result.')

        split_files = []
        for entry in payload.get('splitFiles') or []:
            try:
                split_files.append(SplitFile(
                    file_name=str(entry['fileName']),
                    pages=str(entry.get('pages', '')),
                    download_url=str(entry['downloadUrl']),
                ))
            except (KeyError, TypeError) as e:
                raise ProcessingError(f'Malformed split result: {entry!r}') from e

        return cls(
            payload=payload,
            download_url=payload.get('downloadUrl'),
            split_files=split_files,
            compression_ratio=payload.get('compressionRatio'),
        )

    def get(self, key: str, default=None):
        """Access any other field of the response, e.g. 'filesMerged'."""
        return self.payload.get(key, default)

    @property
    def download_urls(self) -> List[str]:
        urls = [self.download_url] if self.download_url else []
        urls.extend(f.download_url for f in self.split_files)
        return urls


class ProcessingClient:
    """
    Calls processing functions at {base_url}/functions/v1/{endpoint}.

    There is no retry: every failure is raised to the caller as a
    ProcessingError.
    """

    def __init__(self, base_url: str, api_key: Optional[str] = None,
                 access_token: Optional[str] = None,
                 timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        """
        Args:
            base_url: Root URL of the service
            api_key: Sent as the 'apikey' header when set
            access_token: Sent as a bearer token when set
            timeout: Request timeout in seconds; None waits indefinitely
            session: Session to use, mainly for tests
        """
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.access_token = access_token
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config) -> 'ProcessingClient':
        return cls(config.functions_url, api_key=config.api_key,
                   access_token=config.access_token,
                   timeout=config.request_timeout)

    def endpoint_url(self, endpoint: str) -> str:
        return f"{self.base_url}{FUNCTIONS_PATH}/{endpoint}"

    def headers(self) -> Dict[str, str]:
        headers = {}
        if self.access_token:
            headers['Authorization'] = f'Bearer {self.access_token}'
        if self.api_key:
            headers['apikey'] = self.api_key
        return headers

    def call(self, endpoint: str, paths: Sequence[str], multiple: bool = False,
             data: Optional[Dict[str, str]] = None) -> ProcessingResult:
        """
        Upload files to a processing function.

        Args:
            endpoint: Function name, e.g. 'merge-pdf'
            paths: Files to upload, in order
            multiple: Upload under the 'files' key instead of 'file'
            data: Extra form fields

        Returns:
            The parsed result

        Raises:
            ProcessingError: on network errors, non-2xx responses, invalid
                JSON or a response without a result
        """
        if not paths:
            raise ProcessingError('No files to upload.')

        url = self.endpoint_url(endpoint)
        field_name = 'files' if multiple else 'file'
        if not multiple:
            paths = paths[:1]

        logger.info("Calling %s with %d file(s)", endpoint, len(paths))
        try:
            with ExitStack() as stack:
                files = [
                    (field_name, (os.path.basename(p), stack.enter_context(open(p, 'rb'))))
                    for p in paths
                ]
                response = self.session.post(url, files=files, data=data or {},
                                             headers=self.headers(),
                                             timeout=self.timeout)
        except OSError as e:
            raise ProcessingError(f'Could not read input file: {e}') from e
        except requests.exceptions.RequestException as e:
            logger.error("Request to %s failed: %s", url, e)
            raise ProcessingError(f'Could not reach the processing service: {e}') from e

        return self._parse(response)

    def download(self, url: str, destination: str, chunk_size: int = 64 * 1024) -> str:
        """
        Save a result file to disk.

        Args:
            url: Download URL returned by a processing function
            destination: Target file path

        Returns:
            The destination path

        Raises:
            ProcessingError: if the download fails
        """
        try:
            with self.session.get(url, stream=True, headers=self.headers(),
                                  timeout=self.timeout) as response:
                response.raise_for_status()
                with open(destination, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=chunk_size):
                        if chunk:
                            f.write(chunk)
        except requests.exceptions.RequestException as e:
            raise ProcessingError(f'Download failed: {e}') from e
        except OSError as e:
            raise ProcessingError(f'Could not write {destination}: {e}') from e

        logger.info("Downloaded %s to %s", url, destination)
        return destination

    def _parse(self, response: requests.Response) -> ProcessingResult:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.ok:
            message = None
            if isinstance(payload, dict):
                message = payload.get('error')
            raise ProcessingError(
                message or f'Service responded with HTTP {response.status_code}',
                status_code=response.status_code,
            )

        if not isinstance(payload, dict):
            raise ProcessingError('The service returned an invalid response.',
                                  status_code=response.status_code)

        return ProcessingResult.from_payload(payload)
