from unittest import mock

import pytest

from pdfdesk.core.errors import ProcessingError
from pdfdesk.core.notices import NoticeLevel
from pdfdesk.core.tools import ProcessingClient, ProcessingResult, ToolSession, get_tool


@pytest.fixture
def client():
    return mock.Mock(spec=ProcessingClient)


@pytest.fixture
def notices():
    return []


def make_session(endpoint, client, notices):
    return ToolSession(get_tool(endpoint), client, notify=notices.append)


def test_non_pdf_is_rejected_without_calling_service(client, notices, tmp_path):
    image = tmp_path / "photo.jpg"
    image.write_bytes(b"\xff\xd8\xff\xe0 not really a jpeg")
    session = make_session("compress-pdf", client, notices)

    assert not session.select_files([str(image)])
    assert session.submit() is None

    client.call.assert_not_called()
    assert notices[0].title == "Invalid file type"
    assert notices[0].level is NoticeLevel.ERROR
    assert not session.is_processing


def test_failed_request_clears_in_flight_flag(client, notices, sample_pdf):
    client.call.side_effect = ProcessingError("Invalid PDF structure")
    session = make_session("compress-pdf", client, notices)
    session.select_files([sample_pdf])

    assert session.submit() is None

    assert not session.is_processing
    assert session.error == "Invalid PDF structure"
    assert session.result is None
    assert notices[-1].title == "Compress PDF failed"
    assert notices[-1].is_error
    assert session.can_submit()


def test_successful_request_stores_result(client, notices, make_pdf):
    result = ProcessingResult.from_payload({"success": True, "downloadUrl": "u",
                                            "filesMerged": 2})
    client.call.return_value = result
    session = make_session("merge-pdf", client, notices)
    first, second = make_pdf(1, name="a.pdf"), make_pdf(2, name="b.pdf")
    session.select_files([first])
    session.select_files([second])

    assert session.submit() is result

    client.call.assert_called_once_with("merge-pdf", [first, second], multiple=True, data=None)
    assert session.result is result
    assert session.error is None
    assert notices[-1].level is NoticeLevel.SUCCESS
    assert notices[-1].description == "Your file is ready to download."


def test_only_one_request_in_flight(client, notices, sample_pdf):
    session = make_session("split-pdf", client, notices)
    session.select_files([sample_pdf])

    assert session.begin() == [sample_pdf]
    assert not session.can_submit()
    with pytest.raises(ProcessingError):
        session.begin()

    session.finish(error="timeout")
    assert not session.is_processing


def test_begin_without_files(client, notices):
    session = make_session("image-to-pdf", client, notices)
    with pytest.raises(ProcessingError):
        session.begin()
    assert not session.is_processing


def test_split_passes_form_fields(client, notices, sample_pdf):
    session = make_session("split-pdf", client, notices)
    session.select_files([sample_pdf])
    session.submit({"pagesPerFile": "2"})
    client.call.assert_called_once_with("split-pdf", [sample_pdf], multiple=False,
                                        data={"pagesPerFile": "2"})


def test_images_are_accepted_for_image_tool(client, notices, make_png):
    session = make_session("image-to-pdf", client, notices)
    assert session.select_files([make_png("a.png"), make_png("b.png")])
    assert [f.name for f in session.files] == ["a.png", "b.png"]
    session.remove_file(0)
    assert [f.name for f in session.files] == ["b.png"]


def test_unexpected_error_still_clears_in_flight_flag(client, notices, sample_pdf):
    client.call.side_effect = UnicodeEncodeError("latin-1", "к", 0, 1, "ordinal not in range")
    session = make_session("compress-pdf", client, notices)
    session.select_files([sample_pdf])

    with pytest.raises(UnicodeEncodeError):
        session.submit()

    assert not session.is_processing
    assert session.error.startswith("Unexpected error")
    assert notices[-1].is_error
