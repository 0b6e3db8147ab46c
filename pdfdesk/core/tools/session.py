"""
Per-dialog state for running one processing tool.
"""
import logging
from typing import Dict, List, Optional

from ..errors import FileValidationError, ProcessingError
from ..files import FileSelection, SelectedFile
from ..notices import Notice, NoticeCallback, NoticeLevel, ignore_notice
from .catalog import ToolSpec
from .client import ProcessingClient, ProcessingResult

logger = logging.getLogger(__name__)


class ToolSession:
    """
    Holds the selected files, the in-flight flag and the last outcome of
    one tool dialog.

    Only one request may be outstanding at a time. The in-flight flag is
    cleared whenever a request settles, whether it succeeded or not.
    Outcomes are reported as notices through the given callback.
    """

    def __init__(self, tool: ToolSpec, client: ProcessingClient,
                 notify: NoticeCallback = ignore_notice):
        self.tool = tool
        self.client = client
        self.notify = notify
        self.selection = FileSelection(accept=tool.accept, multiple=tool.multiple)
        self.is_processing = False
        self.result: Optional[ProcessingResult] = None
        self.error: Optional[str] = None

    @property
    def files(self) -> List[SelectedFile]:
        return self.selection.files

    def select_files(self, paths: List[str]) -> bool:
        """
        Add files to the selection.

        Returns:
            True if the files were accepted. Rejected files produce an
            error notice and leave the selection unchanged.
        """
        try:
            self.selection.select(paths)
        except FileValidationError as e:
            self.notify(Notice("Invalid file type", str(e), NoticeLevel.ERROR))
            return False
        return True

    def remove_file(self, index: int) -> None:
        self.selection.remove(index)

    def can_submit(self) -> bool:
        return not self.is_processing and not self.selection.is_empty()

    def begin(self) -> List[str]:
        """
        Mark a request as started.

        Returns:
            Paths to upload

        Raises:
            ProcessingError: if a request is already in flight or no files
                are selected
        """
        if self.is_processing:
            raise ProcessingError("A request is already in progress.")
        if self.selection.is_empty():
            raise ProcessingError("Select a file first.")

        self.is_processing = True
        self.result = None
        self.error = None
        return [f.path for f in self.selection.files]

    def finish(self, result: Optional[ProcessingResult] = None,
               error: Optional[str] = None) -> None:
        """Settle the request started by begin()."""
        self.is_processing = False
        if error is not None:
            self.result = None
            self.error = error
            logger.warning("%s failed: %s", self.tool.endpoint, error)
            self.notify(Notice(f"{self.tool.title} failed", error, NoticeLevel.ERROR))
            return

        self.result = result
        self.error = None
        self.notify(Notice(f"{self.tool.title} complete",
                           "Your file is ready to download.", NoticeLevel.SUCCESS))

    def run_request(self, paths: List[str],
                    data: Optional[Dict[str, str]] = None) -> ProcessingResult:
        """Perform the HTTP call; safe to run on a worker thread."""
        return self.client.call(self.tool.endpoint, paths,
                                multiple=self.tool.multiple, data=data)

    def submit(self, data: Optional[Dict[str, str]] = None) -> Optional[ProcessingResult]:
        """
        Run the tool synchronously.

        Args:
            data: Extra form fields, e.g. {'pagesPerFile': '2'}

        Returns:
            The result, or None if the request failed or could not start
        """
        try:
            paths = self.begin()
        except ProcessingError as e:
            self.notify(Notice(self.tool.title, str(e), NoticeLevel.ERROR))
            return None

        try:
            result = self.run_request(paths, data)
        except ProcessingError as e:
            self.finish(error=str(e))
            return None
        except Exception as e:
            self.finish(error=f"Unexpected error: {e}")
            raise

        self.finish(result=result)
        return result
