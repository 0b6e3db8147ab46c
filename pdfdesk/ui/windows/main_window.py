import logging
import os
from typing import List, Optional

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QIntValidator, QKeySequence
from PyQt5.QtWidgets import (
    QAction, QFileDialog, QFrame, QHBoxLayout, QLabel, QLineEdit, QMainWindow,
    QProgressDialog, QSizePolicy, QSpacerItem, QToolButton, QVBoxLayout, QWidget
)

from ...controllers import (NEXT, PREV, ZOOM_IN, ZOOM_OUT, AnnotationCanvasController,
                            Tool, ViewerNavigation, ViewerState)
from ...core.annotations import AnnotationPersistence, PageAnnotationStore
from ...core.document import DocumentLoadTracker, ExportMode, ExportPipeline, PDFDocument
from ...core.document.load_worker import DocumentLoadWorker
from ...core.export import ExportWorker
from ...core.files import FileSelection
from ...core.notices import Notice, NoticeLevel
from ...core.tools import PROCESSING_TOOLS, ProcessingClient, ToolSpec
from ...utils.config import AppConfig
from ...utils.notice_manager import notice_manager
from ..dialogs.tool_dialog import ToolDialog
from ..toolbars.annotation_toolbar import AnnotationToolbar
from ..widgets.annotation_canvas import AnnotationCanvas
from ..widgets.pdf_viewer import PDFPageView

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, config: Optional[AppConfig] = None, file_path=None):
        super().__init__()
        self.setWindowTitle("PDFDesk")

        self.config = config or AppConfig()
        self.client = ProcessingClient.from_config(self.config)

        self.document: Optional[PDFDocument] = None
        self.store = PageAnnotationStore()
        self.state = ViewerState()
        self.annotations = AnnotationCanvasController(self.store, self.state)
        self.navigation = ViewerNavigation(self.state, self.annotations)
        self.persistence = AnnotationPersistence()
        self.pdf_filter = FileSelection(accept='.pdf')

        self.load_tracker = DocumentLoadTracker()
        self._load_workers: List[DocumentLoadWorker] = []
        self.export_worker: Optional[ExportWorker] = None
        self.tool_dialogs = {}

        self.canvas = AnnotationCanvas(self)
        self.setup_ui()
        self.setup_menus()
        self.connect_signals()
        self._update_controls()

        if file_path:
            self.load_pdf(file_path)

    def create_button(self, text, tooltip, parent=None):
        """Helper to create flat text buttons for the top bar."""
        btn = QToolButton(parent)
        btn.setText(text)
        btn.setToolTip(tooltip)
        btn.setFixedHeight(30)
        btn.setAutoRaise(True)
        return btn

    def _separator(self):
        separator = QFrame()
        separator.setFrameShape(QFrame.VLine)
        separator.setFrameShadow(QFrame.Sunken)
        separator.setStyleSheet("background-color: #555555; max-width: 1px;")
        return separator

    def setup_ui(self):
        # TOP BAR
        self.top_frame = QFrame()
        self.top_frame.setObjectName("TopFrame")
        self.top_layout = QHBoxLayout(self.top_frame)
        self.top_layout.setContentsMargins(10, 8, 10, 8)
        self.top_layout.setSpacing(8)

        self.open_button = self.create_button("Open", "Open PDF (Ctrl+O)", self.top_frame)
        self.open_button.clicked.connect(self.open_pdf)
        self.top_layout.addWidget(self.open_button)

        self.export_button = self.create_button("Export", "Export edited PDF (Ctrl+E)", self.top_frame)
        self.export_button.clicked.connect(lambda: self.export_pdf(ExportMode.RASTER))
        self.top_layout.addWidget(self.export_button)

        self.top_layout.addWidget(self._separator())

        self.file_name_label = QLabel("No PDF Loaded", self.top_frame)
        self.file_name_label.setStyleSheet("font-weight: bold; color: #8899AA;")
        self.top_layout.addWidget(self.file_name_label)

        self.top_layout.addSpacerItem(QSpacerItem(40, 20, QSizePolicy.Expanding, QSizePolicy.Minimum))

        # Page controls
        self.prev_button = self.create_button("<", "Previous page (PgUp)", self.top_frame)
        self.prev_button.clicked.connect(lambda: self.navigation.go_to_page(PREV))
        self.top_layout.addWidget(self.prev_button)

        self.page_edit = QLineEdit("1", self.top_frame)
        self.page_edit.setObjectName("page_input")
        self.page_edit.setFixedWidth(50)
        self.page_edit.setAlignment(Qt.AlignCenter)
        self.page_edit.returnPressed.connect(self.page_number_changed)
        self.top_layout.addWidget(self.page_edit)

        self.total_page_label = QLabel("/ 0", self.top_frame)
        self.top_layout.addWidget(self.total_page_label)

        self.next_button = self.create_button(">", "Next page (PgDown)", self.top_frame)
        self.next_button.clicked.connect(lambda: self.navigation.go_to_page(NEXT))
        self.top_layout.addWidget(self.next_button)

        self.top_layout.addWidget(self._separator())

        # Zoom and rotation
        self.zoom_out_button = self.create_button("-", "Zoom out (Ctrl+-)", self.top_frame)
        self.zoom_out_button.clicked.connect(lambda: self.navigation.set_zoom(ZOOM_OUT))
        self.top_layout.addWidget(self.zoom_out_button)

        self.zoom_label = QLabel("100%", self.top_frame)
        self.zoom_label.setFixedWidth(50)
        self.zoom_label.setAlignment(Qt.AlignCenter)
        self.top_layout.addWidget(self.zoom_label)

        self.zoom_in_button = self.create_button("+", "Zoom in (Ctrl++)", self.top_frame)
        self.zoom_in_button.clicked.connect(lambda: self.navigation.set_zoom(ZOOM_IN))
        self.top_layout.addWidget(self.zoom_in_button)

        self.rotate_button = self.create_button("Rotate", "Rotate 90° clockwise (Ctrl+R)", self.top_frame)
        self.rotate_button.clicked.connect(self.navigation.rotate)
        self.top_layout.addWidget(self.rotate_button)

        self.top_layout.addSpacerItem(QSpacerItem(40, 20, QSizePolicy.Expanding, QSizePolicy.Minimum))

        # ANNOTATION TOOLBAR
        self.annotation_toolbar = AnnotationToolbar(self)

        # PAGE DISPLAY AREA
        self.page_view = PDFPageView(self.canvas, self)

        main_layout = QVBoxLayout()
        main_layout.setSpacing(0)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.addWidget(self.top_frame)
        main_layout.addWidget(self.annotation_toolbar)
        main_layout.addWidget(self.page_view)

        container = QWidget()
        container.setLayout(main_layout)
        self.setCentralWidget(container)

        self.statusBar().showMessage("Open a PDF to start annotating.")

    def setup_menus(self):
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        self.open_action = self._add_action(file_menu, "&Open PDF...", self.open_pdf, QKeySequence.Open)
        self.close_action = self._add_action(file_menu, "&Close PDF", self.close_pdf, QKeySequence.Close)
        file_menu.addSeparator()
        self.export_action = self._add_action(
            file_menu, "&Export Edited PDF...", lambda: self.export_pdf(ExportMode.RASTER), "Ctrl+E")
        self.export_annotated_action = self._add_action(
            file_menu, "Export with &Native Annotations...",
            lambda: self.export_pdf(ExportMode.ANNOTATED), "Ctrl+Shift+E")
        file_menu.addSeparator()
        self.save_annotations_action = self._add_action(
            file_menu, "&Save Annotations...", self.save_annotations, QKeySequence.Save)
        self.load_annotations_action = self._add_action(
            file_menu, "&Load Annotations...", self.load_annotations, "Ctrl+L")
        file_menu.addSeparator()
        self._add_action(file_menu, "E&xit", self.close, QKeySequence.Quit)

        view_menu = menu_bar.addMenu("&View")
        self._add_action(view_menu, "Previous Page", lambda: self.navigation.go_to_page(PREV), "PgUp")
        self._add_action(view_menu, "Next Page", lambda: self.navigation.go_to_page(NEXT), "PgDown")
        view_menu.addSeparator()
        self._add_action(view_menu, "Zoom In", lambda: self.navigation.set_zoom(ZOOM_IN), QKeySequence.ZoomIn)
        self._add_action(view_menu, "Zoom Out", lambda: self.navigation.set_zoom(ZOOM_OUT), QKeySequence.ZoomOut)
        self._add_action(view_menu, "Rotate", self.navigation.rotate, "Ctrl+R")

        tools_menu = menu_bar.addMenu("&Tools")
        for tool in PROCESSING_TOOLS:
            self._add_action(tools_menu, f"{tool.title}...",
                             lambda _checked=False, t=tool: self.open_tool_dialog(t))

    def _add_action(self, menu, text, slot, shortcut=None):
        action = QAction(text, self)
        if shortcut is not None:
            action.setShortcut(QKeySequence(shortcut))
        action.triggered.connect(slot)
        menu.addAction(action)
        return action

    def connect_signals(self):
        self.navigation.page_changed.connect(self._on_page_changed)
        self.navigation.zoom_changed.connect(self._on_view_changed)
        self.navigation.rotation_changed.connect(self._on_view_changed)

        self.annotation_toolbar.tool_requested.connect(self._on_tool_requested)
        self.annotation_toolbar.color_requested.connect(self.annotations.set_color)
        self.annotation_toolbar.delete_requested.connect(self.annotations.delete_selected)
        self.annotations.tool_changed.connect(self._on_tool_changed)
        self.annotations.color_changed.connect(self.annotation_toolbar.set_color)

    # Document loading

    def open_pdf(self):
        file_path, _ = QFileDialog.getOpenFileName(self, "Open PDF", "", "PDF Files (*.pdf)")
        if file_path:
            self.load_pdf(file_path)

    def load_pdf(self, file_path):
        """Start loading a PDF in the background; a newer load supersedes this one."""
        if not os.path.isfile(file_path) or not self.pdf_filter.matches(file_path):
            self.show_notice(Notice("Invalid File", "Please select a valid PDF file.",
                                    NoticeLevel.ERROR))
            return

        load = self.load_tracker.begin(file_path)
        self.statusBar().showMessage(f"Loading {os.path.basename(file_path)}...")

        worker = DocumentLoadWorker(load, file_path)
        worker.loaded.connect(self._on_document_loaded)
        worker.failed.connect(self._on_document_failed)
        worker.finished.connect(lambda w=worker: self._release_worker(w))
        self._load_workers.append(worker)
        worker.start()

    def _release_worker(self, worker):
        if worker in self._load_workers:
            self._load_workers.remove(worker)
        worker.deleteLater()

    def _on_document_loaded(self, load, document: PDFDocument):
        if not self.load_tracker.accept(load):
            document.close()
            return

        self._close_document()
        self.document = document
        self.navigation.reset(0)
        self.navigation.set_page_count(document.page_count)

        self.page_view.set_document(document)
        self.annotations.bind_surface(self.canvas)
        self.annotations.load_page(1)
        self.page_view.set_view(self.state.zoom, self.state.rotation)
        self.page_view.show_page(1)

        name = os.path.basename(document.file_path or "document.pdf")
        self.file_name_label.setText(name)
        self.total_page_label.setText(f"/ {document.page_count}")
        self.page_edit.setValidator(QIntValidator(1, document.page_count, self))
        self._update_controls()

        self.show_notice(Notice("PDF Loaded",
                                f'File "{name}" is ready for viewing & annotations.',
                                NoticeLevel.SUCCESS))

    def _on_document_failed(self, load, message: str):
        if not self.load_tracker.accept(load):
            return
        self.statusBar().clearMessage()
        self.show_notice(Notice("Could not open PDF", message, NoticeLevel.ERROR))

    def close_pdf(self):
        """Closes the current PDF and resets the viewer."""
        self.load_tracker.cancel()
        if self.document is None:
            return
        self._close_document()
        self.navigation.reset(0)
        self.annotations.unbind_surface()
        self.page_view.set_document(None)

        self.file_name_label.setText("No PDF Loaded")
        self.total_page_label.setText("/ 0")
        self.page_edit.setText("1")
        self._update_controls()

    def _close_document(self):
        if self.document is not None:
            self.document.close()
            self.document = None

    # Navigation

    def page_number_changed(self):
        try:
            page_num = int(self.page_edit.text())
        except ValueError:
            page_num = 0
        if not self.navigation.jump_to_page(page_num):
            self.page_edit.setText(str(self.state.current_page))

    def _on_page_changed(self, page_number: int):
        self.page_view.show_page(page_number)
        self._update_controls()

    def _on_view_changed(self, _value=None):
        self.page_view.set_view(self.state.zoom, self.state.rotation)
        self._update_controls()

    def _update_controls(self):
        has_document = self.document is not None and self.state.page_count > 0
        if not self.page_edit.hasFocus():
            self.page_edit.setText(str(self.state.current_page))
        self.zoom_label.setText(f"{self.navigation.get_zoom_percent()}%")

        self.prev_button.setEnabled(has_document and self.state.current_page > 1)
        self.next_button.setEnabled(has_document and self.state.current_page < self.state.page_count)
        for widget in (self.page_edit, self.zoom_in_button, self.zoom_out_button,
                       self.rotate_button, self.export_button, self.annotation_toolbar):
            widget.setEnabled(has_document)
        for action in (self.close_action, self.export_action, self.export_annotated_action,
                       self.save_annotations_action, self.load_annotations_action):
            action.setEnabled(has_document)

        status = self.navigation.describe()
        if status:
            self.statusBar().showMessage(f"{status}  |  Zoom {self.navigation.get_zoom_percent()}%"
                                         f"  |  Rotation {self.state.rotation}°")

    # Annotation tools

    def _on_tool_requested(self, tool: Tool):
        self.annotations.select_tool(tool)
        if tool is Tool.ERASER and self.document is not None:
            self.show_notice(Notice("Annotations Cleared",
                                    "All annotations removed from current page"))

    def _on_tool_changed(self, tool: Tool):
        self.annotation_toolbar.set_active_tool(tool)
        self.page_view.set_free_drawing_cursor(tool is Tool.FREEHAND)
        if tool in (Tool.TEXT, Tool.RECTANGLE, Tool.CIRCLE):
            self.page_view.setFocus()

    def save_annotations(self):
        if self.document is None:
            return
        self.navigation.persist_current()

        default_path = AnnotationPersistence.default_path(self.document.file_path or "document.pdf")
        path, _ = QFileDialog.getSaveFileName(self, "Save Annotations", default_path,
                                              "Annotation Files (*.json)")
        if not path:
            return

        pdf_name = os.path.basename(self.document.file_path or "")
        if self.persistence.save_to_json(self.store, path, pdf_name):
            self.show_notice(Notice("Annotations Saved",
                                    f"Saved {self.store.annotation_count()} annotation(s)."))
        else:
            self.show_notice(Notice("Save Failed", "The annotations could not be saved.",
                                    NoticeLevel.ERROR))

    def load_annotations(self):
        if self.document is None:
            return
        default_path = AnnotationPersistence.default_path(self.document.file_path or "document.pdf")
        path, _ = QFileDialog.getOpenFileName(self, "Load Annotations", default_path,
                                              "Annotation Files (*.json)")
        if not path:
            return

        pdf_name = os.path.basename(self.document.file_path or "")
        loaded, ok = self.persistence.load_from_json(path, pdf_name)
        if not ok:
            self.show_notice(Notice("Load Failed", "The annotation file could not be read.",
                                    NoticeLevel.ERROR))
            return

        self.store.replace_with(loaded)
        self.annotations.load_page(self.state.current_page)
        self.show_notice(Notice("Annotations Loaded",
                                f"Loaded {self.store.annotation_count()} annotation(s)."))

    # Export

    def export_pdf(self, mode: ExportMode = ExportMode.RASTER):
        """Export the edited document using a background thread."""
        if self.document is None:
            self.show_notice(Notice("No PDF", "Upload a PDF first."))
            return
        if self.export_worker is not None:
            return

        stem = os.path.splitext(os.path.basename(self.document.file_path or "document.pdf"))[0]
        default_dir = os.path.dirname(self.document.file_path or "")
        output_path, _ = QFileDialog.getSaveFileName(
            self,
            "Export Edited PDF",
            os.path.join(default_dir, f"edited-{stem}.pdf"),
            "PDF Files (*.pdf)"
        )
        if not output_path:
            return

        # Snapshot the visible page on the UI thread; the worker only reads the store
        self.navigation.persist_current()
        pipeline = ExportPipeline(self.document, self.store, rotation=self.state.rotation)

        progress = QProgressDialog("Preparing export...", None, 0, 100, self)
        progress.setWindowTitle("Exporting PDF")
        progress.setWindowModality(Qt.WindowModal)
        progress.setMinimumDuration(0)
        progress.setCancelButton(None)
        progress.setAutoClose(False)
        progress.setAutoReset(False)
        progress.show()

        self.export_worker = ExportWorker(pipeline, output_path, mode)

        def on_progress(message):
            progress.setLabelText(message)

        def on_page_progress(current, total):
            if total > 0:
                progress.setValue(int((current / total) * 100))
                progress.setLabelText(f"Exporting page {current}/{total}")

        def on_finished(success, message):
            progress.close()
            if success:
                self.show_notice(Notice("PDF Exported", message, NoticeLevel.SUCCESS))
            else:
                self.show_notice(Notice("Export Failed", message, NoticeLevel.ERROR))
            self.export_worker.deleteLater()
            self.export_worker = None

        self.export_worker.progress.connect(on_progress)
        self.export_worker.page_progress.connect(on_page_progress)
        self.export_worker.finished.connect(on_finished)
        self.export_worker.start()

    # Processing tools

    def open_tool_dialog(self, tool: ToolSpec):
        dialog = self.tool_dialogs.get(tool.endpoint)
        if dialog is None:
            dialog = ToolDialog(tool, self.client, self)
            self.tool_dialogs[tool.endpoint] = dialog
        dialog.show()
        dialog.raise_()
        dialog.activateWindow()

    def show_notice(self, notice: Notice):
        notice_manager.show(self, notice)

    def closeEvent(self, event):
        if self.export_worker is not None and self.export_worker.isRunning():
            self.export_worker.wait()
        self.load_tracker.cancel()
        for worker in list(self._load_workers):
            worker.wait()
        self._close_document()
        event.accept()
