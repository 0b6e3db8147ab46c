import pytest

from pdfdesk.core.document import DocumentLoadTracker, PDFDocument
from pdfdesk.core.document.load_worker import DocumentLoadWorker
from pdfdesk.core.errors import DocumentLoadError
from tests.conftest import build_pdf


class TestDocumentLoadTracker:

    def test_new_load_supersedes_previous(self):
        tracker = DocumentLoadTracker()
        first = tracker.begin("a.pdf")
        second = tracker.begin("b.pdf")

        assert first.cancelled
        assert not tracker.accept(first)
        assert tracker.accept(second)

    def test_result_is_accepted_once(self):
        tracker = DocumentLoadTracker()
        load = tracker.begin()
        assert tracker.accept(load)
        assert not tracker.accept(load)

    def test_settled_load_is_not_cancelled_by_next(self):
        tracker = DocumentLoadTracker()
        first = tracker.begin()
        tracker.accept(first)
        tracker.begin()
        assert not first.cancelled

    def test_cancel(self):
        tracker = DocumentLoadTracker()
        load = tracker.begin()
        tracker.cancel()
        assert not tracker.accept(load)


class TestPDFDocument:

    def test_open(self, sample_pdf):
        document = PDFDocument.open(sample_pdf)
        try:
            assert document.page_count == 3
            assert document.page_size(1) == (595, 842)
        finally:
            document.close()
        assert not document.is_open()
        assert document.page_count == 0

    def test_open_garbage(self, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"this is not a pdf")
        with pytest.raises(DocumentLoadError):
            PDFDocument.open(str(path))

    def test_open_missing(self, tmp_path):
        with pytest.raises(DocumentLoadError):
            PDFDocument.open(str(tmp_path / "missing.pdf"))

    @pytest.mark.parametrize("page", [0, 4])
    def test_page_out_of_range(self, sample_pdf, page):
        document = PDFDocument.open(sample_pdf)
        with pytest.raises(IndexError):
            document.get_page(page)
        document.close()

    def test_render_page(self):
        document = PDFDocument.from_bytes(build_pdf(1, width=200, height=100))
        pix = document.render_page(1, zoom=2.0)
        assert (pix.width, pix.height) == (400, 200)

        rotated = document.render_page(1, rotation=90)
        assert (rotated.width, rotated.height) == (100, 200)
        document.close()


class TestDocumentLoadWorker:

    def test_emits_loaded_document(self, qapp, sample_pdf):
        tracker = DocumentLoadTracker()
        load = tracker.begin(sample_pdf)
        worker = DocumentLoadWorker(load, sample_pdf)
        loaded = []
        worker.loaded.connect(lambda l, doc: loaded.append((l, doc)))

        worker.run()

        assert len(loaded) == 1
        assert loaded[0][0] is load
        assert loaded[0][1].page_count == 3
        loaded[0][1].close()

    def test_superseded_load_delivers_nothing(self, qapp, sample_pdf):
        tracker = DocumentLoadTracker()
        load = tracker.begin(sample_pdf)
        tracker.begin("other.pdf")
        worker = DocumentLoadWorker(load, sample_pdf)
        results = []
        worker.loaded.connect(lambda *args: results.append(args))
        worker.failed.connect(lambda *args: results.append(args))

        worker.run()

        assert results == []

    def test_failure(self, qapp, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"garbage")
        load = DocumentLoadTracker().begin(str(path))
        worker = DocumentLoadWorker(load, str(path))
        messages = []
        worker.failed.connect(lambda l, message: messages.append(message))

        worker.run()

        assert len(messages) == 1
        assert "Error loading PDF" in messages[0]
