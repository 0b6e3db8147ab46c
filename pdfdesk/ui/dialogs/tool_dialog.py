"""
Dialog for running one processing tool.
"""
import logging
import os
from typing import List

import pyperclip
from PyQt5.QtCore import Qt, QThread, pyqtSignal
from PyQt5.QtWidgets import (
    QDialog, QFileDialog, QHBoxLayout, QLabel, QListWidget, QListWidgetItem,
    QPushButton, QSpinBox, QVBoxLayout, QWidget
)

from ...core.errors import ProcessingError
from ...core.notices import Notice, NoticeLevel
from ...core.tools import ProcessingClient, ProcessingResult, ToolSession, ToolSpec
from ...utils.notice_manager import notice_manager
from ..widgets.file_drop import FileDropArea

logger = logging.getLogger(__name__)

SUBMIT_BUTTON_STYLE = """
    QPushButton {
        background-color: #4a9eff;
        color: white;
        border: none;
        border-radius: 4px;
        padding: 8px 12px;
        font-weight: bold;
    }
    QPushButton:hover {
        background-color: #3a8eef;
    }
    QPushButton:disabled {
        background-color: #555555;
    }
"""


class ProcessingWorker(QThread):
    """Worker thread running a processing request or download."""

    # Signals
    succeeded = pyqtSignal(object)  # return value of the call
    failed = pyqtSignal(str)

    def __init__(self, func, *args, **kwargs):
        super().__init__()
        self.func = func
        self.args = args
        self.kwargs = kwargs

    def run(self):
        try:
            result = self.func(*self.args, **self.kwargs)
        except ProcessingError as e:
            self.failed.emit(str(e))
            return
        except Exception as e:
            logger.exception("Background task failed")
            self.failed.emit(f"Unexpected error: {e}")
            return
        self.succeeded.emit(result)


class ToolDialog(QDialog):
    """Select files, run a tool and fetch its results."""

    def __init__(self, tool: ToolSpec, client: ProcessingClient, parent=None):
        super().__init__(parent)
        self.tool = tool
        self.client = client
        self.session = ToolSession(tool, client, notify=self._show_notice)
        self._workers: List[ProcessingWorker] = []

        self.setWindowTitle(tool.title)
        self.setMinimumWidth(480)
        self.setup_ui()
        self._refresh()

    def setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(10)

        description = QLabel(self.tool.description, self)
        description.setWordWrap(True)
        description.setStyleSheet("color: #8899AA;")
        layout.addWidget(description)

        self.drop_area = FileDropArea(self.tool.accept, self.tool.multiple, self)
        self.drop_area.files_chosen.connect(self._on_files_chosen)
        layout.addWidget(self.drop_area)

        self.file_list = QListWidget(self)
        self.file_list.setMaximumHeight(120)
        layout.addWidget(self.file_list)

        self.remove_button = QPushButton("Remove selected file", self)
        self.remove_button.clicked.connect(self._remove_selected_file)
        layout.addWidget(self.remove_button, alignment=Qt.AlignRight)

        self.pages_spinbox = None
        if self.tool.endpoint == 'split-pdf':
            pages_layout = QHBoxLayout()
            pages_layout.addWidget(QLabel("Pages per file:", self))
            self.pages_spinbox = QSpinBox(self)
            self.pages_spinbox.setMinimum(1)
            self.pages_spinbox.setMaximum(9999)
            self.pages_spinbox.setValue(1)
            pages_layout.addWidget(self.pages_spinbox)
            pages_layout.addStretch()
            layout.addLayout(pages_layout)

        self.submit_button = QPushButton(self.tool.action_label, self)
        self.submit_button.setStyleSheet(SUBMIT_BUTTON_STYLE)
        self.submit_button.clicked.connect(self.submit)
        layout.addWidget(self.submit_button)

        self.status_label = QLabel("", self)
        self.status_label.setStyleSheet("color: #8899AA;")
        layout.addWidget(self.status_label)

        self.results_widget = QWidget(self)
        self.results_layout = QVBoxLayout(self.results_widget)
        self.results_layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.results_widget)

    # Files

    def _on_files_chosen(self, paths):
        if self.session.select_files(paths):
            self._refresh()

    def _remove_selected_file(self):
        row = self.file_list.currentRow()
        if row >= 0:
            self.session.remove_file(row)
            self._refresh()

    def _refresh(self):
        self.file_list.clear()
        for selected in self.session.files:
            QListWidgetItem(f"{selected.name}  ({selected.display_size})", self.file_list)
        self.remove_button.setEnabled(bool(self.session.files) and not self.session.is_processing)
        self.submit_button.setEnabled(self.session.can_submit())
        self.submit_button.setText("Processing..." if self.session.is_processing
                                   else self.tool.action_label)

    # Processing

    def submit(self):
        if not self.session.can_submit():
            return
        try:
            paths = self.session.begin()
        except ProcessingError as e:
            self._show_notice(Notice(self.tool.title, str(e), NoticeLevel.ERROR))
            return

        data = {}
        if self.pages_spinbox is not None:
            data['pagesPerFile'] = str(self.pages_spinbox.value())

        self._clear_results()
        self.status_label.setText("Uploading and processing...")
        self._refresh()

        self.run_in_background(self.session.run_request, paths, data,
                               on_success=self._on_succeeded, on_failure=self._on_failed)

    def _on_succeeded(self, result: ProcessingResult):
        self.session.finish(result=result)
        self.status_label.setText(self._summary(result))
        self._show_results(result)
        self._refresh()

    def _on_failed(self, message: str):
        self.session.finish(error=message)
        self.status_label.setText("Processing failed.")
        self._refresh()

    @staticmethod
    def _summary(result: ProcessingResult) -> str:
        if result.compression_ratio:
            return (f"Compressed by {result.compression_ratio} "
                    f"({result.get('originalSize')} -> {result.get('compressedSize')} bytes)")
        if result.split_files:
            return f"Split into {len(result.split_files)} file(s)."
        if result.get('filesMerged'):
            return f"Merged {result.get('filesMerged')} files."
        if result.get('imagesProcessed'):
            return f"Converted {result.get('imagesProcessed')} image(s)."
        return "Done."

    # Results

    def _clear_results(self):
        while self.results_layout.count():
            item = self.results_layout.takeAt(0)
            if item.widget() is not None:
                item.widget().deleteLater()

    def _show_results(self, result: ProcessingResult):
        if result.split_files:
            entries = [(f"{f.file_name} (pages {f.pages})", f.download_url)
                       for f in result.split_files]
        elif result.download_url:
            entries = [(result.get('fileName') or os.path.basename(result.download_url),
                        result.download_url)]
        else:
            entries = []

        for label, url in entries:
            row = QHBoxLayout()
            row.addWidget(QLabel(label, self.results_widget), 1)

            copy_button = QPushButton("Copy link", self.results_widget)
            copy_button.clicked.connect(lambda _checked, u=url: self._copy_link(u))
            row.addWidget(copy_button)

            save_button = QPushButton("Save...", self.results_widget)
            save_button.clicked.connect(lambda _checked, u=url, n=label: self._save_result(u, n))
            row.addWidget(save_button)

            container = QWidget(self.results_widget)
            container.setLayout(row)
            self.results_layout.addWidget(container)

    def _copy_link(self, url: str):
        try:
            pyperclip.copy(url)
        except pyperclip.PyperclipException as e:
            logger.warning("Clipboard unavailable: %s", e)
            self._show_notice(Notice("Copy failed", "No clipboard is available.", NoticeLevel.ERROR))
            return
        self.status_label.setText("Link copied to clipboard.")

    def _save_result(self, url: str, label: str):
        suggested = label.split(' (pages')[0]
        if not suggested.lower().endswith('.pdf'):
            suggested += '.pdf'
        path, _ = QFileDialog.getSaveFileName(self, "Save Result", suggested,
                                              "PDF Files (*.pdf)")
        if not path:
            return

        self.status_label.setText("Downloading...")
        self.run_in_background(self.client.download, url, path,
                               on_success=lambda dest: self.status_label.setText(f"Saved to {dest}"),
                               on_failure=self._on_download_failed)

    def _on_download_failed(self, message: str):
        self.status_label.setText("Download failed.")
        self._show_notice(Notice("Download failed", message, NoticeLevel.ERROR))

    def run_in_background(self, func, *args, on_success=None, on_failure=None) -> ProcessingWorker:
        """
        Run func(*args) on a worker thread.

        The worker is kept until its thread has finished, so several
        requests and downloads may run at once.
        """
        worker = ProcessingWorker(func, *args)
        if on_success is not None:
            worker.succeeded.connect(on_success)
        if on_failure is not None:
            worker.failed.connect(on_failure)
        worker.finished.connect(lambda w=worker: self._release_worker(w))
        self._workers.append(worker)
        worker.start()
        return worker

    def _release_worker(self, worker: ProcessingWorker):
        if worker in self._workers:
            self._workers.remove(worker)
        worker.deleteLater()

    def _show_notice(self, notice: Notice):
        notice_manager.show(self, notice)

    def closeEvent(self, event):
        for worker in list(self._workers):
            worker.wait()
        super().closeEvent(event)
