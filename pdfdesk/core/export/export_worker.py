# core/export/export_worker.py

import logging

from PyQt5.QtCore import QThread, pyqtSignal

from ..document.pdf_exporter import ExportMode, ExportPipeline
from ..errors import ExportError

logger = logging.getLogger(__name__)


class ExportWorker(QThread):
    """Worker thread for exporting the annotated PDF without freezing the UI."""

    # Signals
    finished = pyqtSignal(bool, str)  # success, message
    progress = pyqtSignal(str)  # status message
    page_progress = pyqtSignal(int, int)  # current, total pages

    def __init__(self, pipeline: ExportPipeline, output_pdf: str,
                 mode: ExportMode = ExportMode.RASTER):
        super().__init__()
        self.pipeline = pipeline
        self.output_pdf = output_pdf
        self.mode = mode

    def run(self):
        """Execute the export in a background thread."""
        self.progress.emit("Exporting pages...")
        try:
            self.pipeline.export_to_file(self.output_pdf, self.mode,
                                         progress=self._on_page_progress)
        except ExportError as e:
            logger.error("Export to %s failed: %s", self.output_pdf, e)
            self.finished.emit(False, "There was an error exporting the PDF.")
            return
        except Exception as e:
            logger.exception("Unexpected error exporting to %s", self.output_pdf)
            self.finished.emit(False, f"Error during export: {e}")
            return

        self.finished.emit(True, "Your edited PDF has been saved.")

    def _on_page_progress(self, current, total):
        """Handle page-level progress updates."""
        self.page_progress.emit(current, total)
