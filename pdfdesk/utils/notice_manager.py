"""
Notice manager for showing user notices as message boxes.
"""
import logging
from typing import Optional, Set

from PyQt5.QtWidgets import QCheckBox, QMessageBox, QWidget

from ..core.notices import Notice, NoticeLevel

logger = logging.getLogger(__name__)

_ICONS = {
    NoticeLevel.INFO: QMessageBox.Information,
    NoticeLevel.SUCCESS: QMessageBox.Information,
    NoticeLevel.ERROR: QMessageBox.Warning,
}


class NoticeManager:
    """
    Shows notices in message boxes.

    Informational notices can be silenced for the rest of the session with
    a "Don't show again" checkbox; error notices are always shown.
    Singleton pattern to keep that state across the application.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._initialized = True
        self._suppressed: Set[str] = set()
        self.last_notice: Optional[Notice] = None

    def should_show(self, notice: Notice) -> bool:
        if notice.is_error:
            return True
        return notice.title not in self._suppressed

    def suppress(self, title: str) -> None:
        """Stop showing informational notices with this title this session."""
        self._suppressed.add(title)

    def reset_all(self) -> None:
        self._suppressed.clear()

    def show(self, parent: Optional[QWidget], notice: Notice) -> None:
        """
        Show a notice.

        Args:
            parent: Parent widget
            notice: Notice to show
        """
        self.last_notice = notice
        log = logger.warning if notice.is_error else logger.info
        log("%s: %s", notice.title, notice.description)

        if not self.should_show(notice):
            return

        msg_box = QMessageBox(parent)
        msg_box.setIcon(_ICONS[notice.level])
        msg_box.setWindowTitle(notice.title)
        msg_box.setText(notice.description)
        msg_box.setStandardButtons(QMessageBox.Ok)

        dont_show_checkbox = None
        if not notice.is_error:
            dont_show_checkbox = QCheckBox("Don't show again this session")
            msg_box.setCheckBox(dont_show_checkbox)

        msg_box.exec_()

        if dont_show_checkbox and dont_show_checkbox.isChecked():
            self.suppress(notice.title)


# Global instance for easy access
notice_manager = NoticeManager()
