from PyQt5.QtCore import QThread, pyqtSignal

from ..errors import DocumentLoadError
from .loading import PendingLoad
from .pdf_document import PDFDocument


class DocumentLoadWorker(QThread):
    """Worker thread that opens a PDF without freezing the UI."""

    # Signals
    loaded = pyqtSignal(object, object)  # PendingLoad, PDFDocument
    failed = pyqtSignal(object, str)  # PendingLoad, message

    def __init__(self, load: PendingLoad, file_path: str):
        super().__init__()
        self.load = load
        self.file_path = file_path

    def run(self):
        try:
            document = PDFDocument.open(self.file_path)
        except DocumentLoadError as e:
            if not self.load.cancelled:
                self.failed.emit(self.load, str(e))
            return

        if self.load.cancelled:
            # Superseded while opening; nobody will take ownership
            document.close()
            return
        self.loaded.emit(self.load, document)
