from unittest import mock

import pytest
import requests

from pdfdesk.core.errors import ProcessingError
from pdfdesk.core.tools import ProcessingClient, ProcessingResult, get_tool
from pdfdesk.utils.config import AppConfig


def make_response(payload=None, status_code=200, invalid_json=False):
    response = mock.Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if invalid_json:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    return ProcessingClient("https://example.test/", api_key="anon",
                            access_token="token", session=session)


class TestCall:

    def test_single_file_is_sent_as_file(self, client, session, sample_pdf):
        session.post.return_value = make_response({
            "success": True, "downloadUrl": "https://example.test/storage/x.pdf",
            "compressionRatio": "25%"})

        result = client.call("compress-pdf", [sample_pdf], data={"quality": "high"})

        url = session.post.call_args[0][0]
        kwargs = session.post.call_args[1]
        assert url == "https://example.test/functions/v1/compress-pdf"
        assert [key for key, _ in kwargs["files"]] == ["file"]
        assert kwargs["files"][0][1][0] == "sample.pdf"
        assert kwargs["data"] == {"quality": "high"}
        assert kwargs["headers"] == {"Authorization": "Bearer token", "apikey": "anon"}
        assert kwargs["timeout"] is None
        assert result.compression_ratio == "25%"

    def test_multiple_files_keep_order(self, client, session, make_pdf):
        first, second = make_pdf(1, name="a.pdf"), make_pdf(1, name="b.pdf")
        session.post.return_value = make_response({
            "success": True, "downloadUrl": "u", "filesMerged": 2})

        result = client.call("merge-pdf", [first, second], multiple=True)

        files = session.post.call_args[1]["files"]
        assert [(key, value[0]) for key, value in files] == [("files", "a.pdf"),
                                                             ("files", "b.pdf")]
        assert result.get("filesMerged") == 2

    def test_split_files_are_parsed(self, client, session, sample_pdf):
        session.post.return_value = make_response({"success": True, "splitFiles": [
            {"fileName": "s_pages_1.pdf", "pages": "1", "downloadUrl": "u1"},
            {"fileName": "s_pages_2.pdf", "pages": "2", "downloadUrl": "u2"},
        ]})

        result = client.call("split-pdf", [sample_pdf])

        assert [f.pages for f in result.split_files] == ["1", "2"]
        assert result.download_urls == ["u1", "u2"]

    def test_failure_payload(self, client, session, sample_pdf):
        session.post.return_value = make_response({"success": False, "error": "Bad PDF"})
        with pytest.raises(ProcessingError, match="Bad PDF"):
            client.call("compress-pdf", [sample_pdf])

    def test_http_error_uses_error_field(self, client, session, sample_pdf):
        session.post.return_value = make_response(
            {"success": False, "error": "At least 2 PDF files required for merging"}, 400)
        with pytest.raises(ProcessingError) as exc_info:
            client.call("merge-pdf", [sample_pdf], multiple=True)
        assert exc_info.value.status_code == 400
        assert "At least 2" in str(exc_info.value)

    def test_http_error_without_json(self, client, session, sample_pdf):
        session.post.return_value = make_response(status_code=502, invalid_json=True)
        with pytest.raises(ProcessingError, match="HTTP 502"):
            client.call("compress-pdf", [sample_pdf])

    def test_invalid_json(self, client, session, sample_pdf):
        session.post.return_value = make_response(invalid_json=True)
        with pytest.raises(ProcessingError, match="invalid response"):
            client.call("compress-pdf", [sample_pdf])

    def test_success_without_result(self, client, session, sample_pdf):
        session.post.return_value = make_response({"success": True, "fileName": "x.pdf"})
        with pytest.raises(ProcessingError, match="no result"):
            client.call("compress-pdf", [sample_pdf])

    def test_network_error(self, client, session, sample_pdf):
        session.post.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(ProcessingError, match="Could not reach"):
            client.call("compress-pdf", [sample_pdf])

    def test_unreadable_file(self, client, session, tmp_path):
        with pytest.raises(ProcessingError, match="Could not read"):
            client.call("compress-pdf", [str(tmp_path / "missing.pdf")])
        session.post.assert_not_called()

    def test_no_files(self, client, session):
        with pytest.raises(ProcessingError):
            client.call("compress-pdf", [])


def test_download(client, session, tmp_path):
    response = mock.MagicMock()
    response.__enter__.return_value = response
    response.iter_content.return_value = [b"%PDF", b"", b"-1.7"]
    session.get.return_value = response
    destination = str(tmp_path / "result.pdf")

    assert client.download("https://example.test/storage/r.pdf", destination) == destination

    with open(destination, "rb") as f:
        assert f.read() == b"%PDF-1.7"


def test_download_http_error(client, session, tmp_path):
    response = mock.MagicMock()
    response.__enter__.return_value = response
    response.raise_for_status.side_effect = requests.exceptions.HTTPError("404")
    session.get.return_value = response

    with pytest.raises(ProcessingError, match="Download failed"):
        client.download("u", str(tmp_path / "r.pdf"))


def test_headers_are_optional():
    assert ProcessingClient("http://localhost").headers() == {}


def test_from_config():
    config = AppConfig(functions_url="http://svc:9000/", api_key="k", request_timeout=30.0)
    client = ProcessingClient.from_config(config)
    assert client.endpoint_url("split-pdf") == "http://svc:9000/functions/v1/split-pdf"
    assert client.timeout == 30.0


def test_result_requires_success_flag():
    with pytest.raises(ProcessingError, match="Processing failed"):
        ProcessingResult.from_payload({"downloadUrl": "u"})


def test_upload_field_follows_multiplicity():
    assert get_tool("merge-pdf").upload_field == "files"
    assert get_tool("split-pdf").upload_field == "file"
    with pytest.raises(KeyError):
        get_tool("ocr-pdf")
