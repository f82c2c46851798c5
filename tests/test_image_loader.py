import base64
from io import BytesIO

import pytest

from parking_ocr.errors import ReadError
from parking_ocr.images.loader import data_url_mime_type, decode_data_url, load_image


class FakeUpload:
    """Mimics the Streamlit UploadedFile attributes the loader relies on."""

    def __init__(self, name: str, type: str, content: bytes):
        self.name = name
        self.type = type
        self._content = content

    def getvalue(self) -> bytes:
        return self._content


def test_load_bytes_sniffs_png(png_bytes) -> None:
    url = load_image(png_bytes)

    assert url.startswith("data:image/png;base64,")
    assert decode_data_url(url) == ("image/png", png_bytes)


def test_load_bytes_sniffs_jpeg(jpeg_bytes) -> None:
    assert data_url_mime_type(load_image(jpeg_bytes)) == "image/jpeg"


def test_load_keeps_exact_bytes(jpeg_bytes) -> None:
    url = load_image(jpeg_bytes)

    assert url.split(",", 1)[1] == base64.b64encode(jpeg_bytes).decode("ascii")


def test_load_path_uses_file_name(tmp_path, jpeg_bytes) -> None:
    path = tmp_path / "receipt.jpg"
    path.write_bytes(jpeg_bytes)

    assert data_url_mime_type(load_image(path)) == "image/jpeg"


def test_load_upload_prefers_declared_type(png_bytes) -> None:
    upload = FakeUpload("scan.bin", "image/png", png_bytes)

    assert decode_data_url(load_image(upload)) == ("image/png", png_bytes)


def test_explicit_mime_type_wins(png_bytes) -> None:
    assert data_url_mime_type(load_image(png_bytes, mime_type="image/webp")) == "image/webp"


def test_load_plain_file_object(png_bytes) -> None:
    assert data_url_mime_type(load_image(BytesIO(png_bytes))) == "image/png"


def test_non_image_content_raises_read_error() -> None:
    with pytest.raises(ReadError, match="not a readable image"):
        load_image(b"not an image")


def test_declared_type_does_not_excuse_undecodable_bytes() -> None:
    upload = FakeUpload("bad.jpg", "image/jpeg", b"not really a jpeg")

    with pytest.raises(ReadError):
        load_image(upload)


def test_truncated_png_raises_read_error(png_bytes) -> None:
    with pytest.raises(ReadError):
        load_image(png_bytes[:20])


def test_missing_file_raises_read_error(tmp_path) -> None:
    with pytest.raises(ReadError):
        load_image(tmp_path / "missing.png")


def test_closed_stream_raises_read_error(png_bytes) -> None:
    stream = BytesIO(png_bytes)
    stream.close()

    with pytest.raises(ReadError):
        load_image(stream)


def test_oversized_file_raises_read_error(png_bytes) -> None:
    with pytest.raises(ReadError, match="limit"):
        load_image(png_bytes, max_bytes=10)


@pytest.mark.parametrize("value", ["", "hello", "data:image/png,plain", "data:image/png;base64,@@@"])
def test_decode_rejects_malformed_urls(value) -> None:
    with pytest.raises(ReadError):
        decode_data_url(value)


def test_mime_type_of_malformed_url_is_generic() -> None:
    assert data_url_mime_type("hello") == "application/octet-stream"
