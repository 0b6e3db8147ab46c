import io

import fitz  # PyMuPDF
import pytest

from pdfdesk.core.errors import ProcessingError
from pdfdesk.server import LocalStorage, ServiceConfig, create_app
from pdfdesk.server.processing import compression_ratio, split_pdf
from tests.conftest import build_pdf, build_png


@pytest.fixture
def config(tmp_path):
    return ServiceConfig(storage_dir=str(tmp_path / "results"))


@pytest.fixture
def client(config):
    app = create_app(config)
    app.config["TESTING"] = True
    return app.test_client()


def upload(data, name):
    return (io.BytesIO(data), name)


def post(client, name, **form):
    return client.post(f"/functions/v1/{name}", data=form,
                       content_type="multipart/form-data")


def fetch_pdf(client, download_url):
    path = download_url.split("http://localhost", 1)[1]
    response = client.get(path)
    assert response.status_code == 200
    return fitz.open(stream=response.data, filetype="pdf")


def test_preflight_request(client):
    response = client.options("/functions/v1/merge-pdf")
    assert response.status_code == 200
    assert response.data == b"ok"
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert "apikey" in response.headers["Access-Control-Allow-Headers"]


def test_compress(client):
    original = build_pdf(3)
    response = post(client, "compress-pdf", file=upload(original, "report.pdf"))

    body = response.get_json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["originalSize"] == len(original)
    assert body["compressedSize"] <= len(original)
    assert body["compressionRatio"].endswith("%")
    assert body["fileName"].startswith("compressed_")
    assert fetch_pdf(client, body["downloadUrl"]).page_count == 3


def test_compress_rejects_invalid_pdf(client):
    response = post(client, "compress-pdf", file=upload(b"not a pdf", "broken.pdf"))
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_merge_keeps_order(client):
    first, second = build_pdf(2, width=300), build_pdf(3, width=400)
    response = post(client, "merge-pdf",
                    files=[upload(first, "a.pdf"), upload(second, "b.pdf")])

    body = response.get_json()
    assert body["filesMerged"] == 2
    assert body["totalSize"] == len(first) + len(second)

    merged = fetch_pdf(client, body["downloadUrl"])
    assert merged.page_count == 5
    assert [page.rect.width for page in merged] == [300, 300, 400, 400, 400]


def test_merge_needs_two_files(client):
    response = post(client, "merge-pdf", files=[upload(build_pdf(1), "a.pdf")])
    assert response.status_code == 400
    assert response.get_json()["error"] == "At least 2 PDF files required for merging"


def test_split_into_chunks(client):
    response = post(client, "split-pdf", file=upload(build_pdf(5), "report.pdf"),
                    pagesPerFile="2")

    split_files = response.get_json()["splitFiles"]
    assert [f["pages"] for f in split_files] == ["1-2", "3-4", "5"]
    assert split_files[0]["fileName"] == "report_pages_1-2.pdf"
    assert fetch_pdf(client, split_files[2]["downloadUrl"]).page_count == 1


def test_split_rejects_bad_page_count(client):
    response = post(client, "split-pdf", file=upload(build_pdf(2), "a.pdf"),
                    pagesPerFile="two")
    assert response.status_code == 400


def test_image_to_pdf(client):
    response = post(client, "image-to-pdf", files=[
        upload(build_png(1200, 1000), "large.png"),
        upload(build_png(40, 30), "small.png"),
    ])

    body = response.get_json()
    assert body["imagesProcessed"] == 2

    pdf = fetch_pdf(client, body["downloadUrl"])
    large, small = pdf[0], pdf[1]
    assert large.rect.width == pytest.approx(595, abs=0.5)
    assert large.rect.height <= 842
    # small images are not scaled up
    assert (small.rect.width, small.rect.height) == (40, 30)
    assert "large.png" in large.get_text()


def test_image_to_pdf_rejects_garbage(client):
    response = post(client, "image-to-pdf", files=[upload(b"nope", "x.png")])
    assert response.status_code == 400


def test_unknown_function(client):
    assert post(client, "ocr-pdf").status_code == 404


def test_api_key_is_enforced(tmp_path):
    app = create_app(ServiceConfig(storage_dir=str(tmp_path), api_key="secret"))
    client = app.test_client()
    pdf = build_pdf(1)

    denied = post(client, "compress-pdf", file=upload(pdf, "a.pdf"))
    assert denied.status_code == 401

    allowed = client.post("/functions/v1/compress-pdf",
                          data={"file": upload(pdf, "a.pdf")},
                          headers={"apikey": "secret"},
                          content_type="multipart/form-data")
    assert allowed.status_code == 200


def test_public_url_is_used(tmp_path):
    app = create_app(ServiceConfig(storage_dir=str(tmp_path),
                                   public_url="https://files.test"))
    response = post(app.test_client(), "compress-pdf", file=upload(build_pdf(1), "a.pdf"))
    assert response.get_json()["downloadUrl"].startswith("https://files.test/storage/")


def test_missing_download(client):
    assert client.get("/storage/nothing-here.pdf").status_code == 404


def test_storage_names_are_unique(tmp_path):
    storage = LocalStorage(tmp_path)
    first = storage.save("merged", "../merged.pdf", b"a")
    second = storage.save("merged", "../merged.pdf", b"b")
    assert first != second
    assert storage.path(first).read_bytes() == b"a"
    assert ".." not in first


def test_compression_ratio():
    assert compression_ratio(1000, 700) == "30%"
    assert compression_ratio(1000, 1200) == "0%"
    assert compression_ratio(0, 0) == "0%"


def test_split_pdf_validates_chunk_size():
    with pytest.raises(ProcessingError) as exc_info:
        split_pdf(build_pdf(2), pages_per_file=0)
    assert exc_info.value.status_code == 400
