"""
Drop area for choosing input files by drag-and-drop or a file picker.
"""
from typing import List

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtWidgets import QFileDialog, QFrame, QLabel, QPushButton, QVBoxLayout

from ...core.files import AcceptPattern


def file_dialog_filter(accept: AcceptPattern, label: str = "Supported files") -> str:
    """Qt name filter for an accept pattern, e.g. 'Supported files (*.pdf)'."""
    patterns = ' '.join(f"*{ext}" for ext in accept.extensions)
    if not patterns:
        return "All files (*)"
    return f"{label} ({patterns});;All files (*)"


class FileDropArea(QFrame):
    """Accepts local files dropped onto it or picked with the Browse button."""

    # Signals
    files_chosen = pyqtSignal(list)  # list of paths

    def __init__(self, accept: str = '.pdf', multiple: bool = False, parent=None):
        super().__init__(parent)
        self.setObjectName("FileDropArea")
        self.accept = AcceptPattern(accept)
        self.multiple = multiple
        self.setAcceptDrops(True)
        self.setup_ui()

    def setup_ui(self):
        self.setMinimumHeight(140)
        self._set_highlight(False)

        layout = QVBoxLayout(self)
        layout.setAlignment(Qt.AlignCenter)
        layout.setSpacing(8)

        noun = "files" if self.multiple else "a file"
        self.prompt_label = QLabel(f"Drop {noun} here", self)
        self.prompt_label.setAlignment(Qt.AlignCenter)
        self.prompt_label.setStyleSheet("font-weight: bold; color: #B5B5C5;")
        layout.addWidget(self.prompt_label)

        hint = ', '.join(self.accept.extensions) or 'any file'
        self.hint_label = QLabel(f"Accepted: {hint}", self)
        self.hint_label.setAlignment(Qt.AlignCenter)
        self.hint_label.setStyleSheet("color: #8899AA; font-size: 11px;")
        layout.addWidget(self.hint_label)

        self.browse_button = QPushButton("Browse...", self)
        self.browse_button.clicked.connect(self.browse)
        layout.addWidget(self.browse_button, alignment=Qt.AlignCenter)

    def browse(self):
        name_filter = file_dialog_filter(self.accept)
        if self.multiple:
            paths, _ = QFileDialog.getOpenFileNames(self, "Choose Files", "", name_filter)
        else:
            path, _ = QFileDialog.getOpenFileName(self, "Choose File", "", name_filter)
            paths = [path] if path else []
        if paths:
            self.files_chosen.emit(paths)

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            self._set_highlight(True)
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragLeaveEvent(self, event):
        self._set_highlight(False)
        super().dragLeaveEvent(event)

    def dropEvent(self, event):
        self._set_highlight(False)
        paths = self._local_paths(event.mimeData().urls())
        if not paths:
            event.ignore()
            return
        event.acceptProposedAction()
        self.files_chosen.emit(paths)

    @staticmethod
    def _local_paths(urls) -> List[str]:
        return [url.toLocalFile() for url in urls if url.isLocalFile()]

    def _set_highlight(self, active: bool):
        border = "#4a9eff" if active else "#555555"
        self.setStyleSheet(f"""
            QFrame#FileDropArea {{
                border: 2px dashed {border};
                border-radius: 8px;
            }}
        """)
