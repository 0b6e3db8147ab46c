import pytest

from pdfdesk.core.notices import Notice, NoticeLevel
from pdfdesk.utils.notice_manager import NoticeManager, notice_manager


@pytest.fixture(autouse=True)
def reset_manager():
    notice_manager.reset_all()
    yield
    notice_manager.reset_all()


def test_singleton():
    assert NoticeManager() is notice_manager


def test_suppressed_info_notice_is_hidden():
    notice = Notice("PDF Loaded", "ready", NoticeLevel.SUCCESS)
    assert notice_manager.should_show(notice)
    notice_manager.suppress("PDF Loaded")
    assert not notice_manager.should_show(notice)


def test_errors_are_never_suppressed():
    notice_manager.suppress("Export Failed")
    assert notice_manager.should_show(Notice("Export Failed", "boom", NoticeLevel.ERROR))


def test_suppressed_notice_does_not_open_dialog(qapp, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("dialog shown")
    monkeypatch.setattr("pdfdesk.utils.notice_manager.QMessageBox", fail)

    notice_manager.suppress("Annotations Cleared")
    notice = Notice("Annotations Cleared", "All annotations removed from current page")
    notice_manager.show(None, notice)

    assert notice_manager.last_notice is notice
