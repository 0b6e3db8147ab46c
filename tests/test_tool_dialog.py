import gc
import threading
from unittest import mock

import pytest

from pdfdesk.core.tools import ProcessingClient, get_tool
from pdfdesk.ui.dialogs.tool_dialog import ProcessingWorker, ToolDialog


@pytest.fixture
def notices(monkeypatch):
    manager = mock.Mock()
    monkeypatch.setattr("pdfdesk.ui.dialogs.tool_dialog.notice_manager", manager)
    return manager


@pytest.fixture
def client():
    return mock.Mock(spec=ProcessingClient)


@pytest.fixture
def dialog(qapp, client, notices):
    dialog = ToolDialog(get_tool("compress-pdf"), client)
    yield dialog
    dialog.close()


def wait_for(workers, qapp):
    for worker in workers:
        assert worker.wait(5000)
    qapp.processEvents()


class TestProcessingWorker:

    def test_reports_unexpected_errors_as_failures(self, qapp):
        def encode_header():
            return "ключ".encode("latin-1")

        worker = ProcessingWorker(encode_header)
        failures, results = [], []
        worker.failed.connect(failures.append)
        worker.succeeded.connect(results.append)

        worker.run()

        assert results == []
        assert len(failures) == 1
        assert failures[0].startswith("Unexpected error")

    def test_passes_arguments(self, qapp):
        worker = ProcessingWorker(lambda a, b: a + b, 2, 3)
        results = []
        worker.succeeded.connect(results.append)
        worker.run()
        assert results == [5]


class TestToolDialog:

    def test_overlapping_background_tasks_are_all_kept(self, dialog, qapp):
        release = threading.Event()
        first = dialog.run_in_background(release.wait, 5)
        second = dialog.run_in_background(release.wait, 5)
        gc.collect()

        assert dialog._workers == [first, second]
        assert first.isRunning() and second.isRunning()

        release.set()
        wait_for([first, second], qapp)

    def test_unexpected_client_error_settles_request(self, dialog, client, qapp, sample_pdf):
        client.call.side_effect = UnicodeEncodeError("latin-1", "ключ", 0, 4,
                                                     "ordinal not in range(256)")
        assert dialog.session.select_files([sample_pdf])

        dialog.submit()
        wait_for(list(dialog._workers), qapp)

        assert not dialog.session.is_processing
        assert dialog.session.error.startswith("Unexpected error")
        assert dialog.submit_button.isEnabled()
        assert dialog.status_label.text() == "Processing failed."
